from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from datetime import date
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger("meditracker.config")

DEFAULT_CONFIG_PATH = Path("config") / "meditracker.yaml"


@dataclass
class TrackerCfg:
    data_dir: str = "data"
    save_file: str = "meditracker.json"
    log_level: str = "WARNING"
    show_progress: Optional[bool] = None
    today: Optional[str] = None


def _env_flag(value: str) -> Optional[bool]:
    if value == "1":
        return True
    if value == "0":
        return False
    return None


def load_config(path: Path | str | None = None) -> TrackerCfg:
    """Build a TrackerCfg from an optional YAML file plus MEDITRACKER_* env vars.

    With no `path`, config/meditracker.yaml is read when it exists. Env vars
    win over the file.
    """
    cfg = TrackerCfg()
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if path is not None or cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as fh:
            try:
                data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Config file {cfg_path} is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {cfg_path} must contain a mapping")
        known = {f.name for f in fields(TrackerCfg)}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key '{key}' in {cfg_path}")
                continue
            setattr(cfg, key, value)

    if os.getenv("MEDITRACKER_DATA_DIR"):
        cfg.data_dir = os.environ["MEDITRACKER_DATA_DIR"]
    if os.getenv("MEDITRACKER_SAVE_FILE"):
        cfg.save_file = os.environ["MEDITRACKER_SAVE_FILE"]
    if os.getenv("MEDITRACKER_LOG_LEVEL"):
        cfg.log_level = os.environ["MEDITRACKER_LOG_LEVEL"]
    if os.getenv("MEDITRACKER_TQDM") is not None:
        cfg.show_progress = _env_flag(os.environ["MEDITRACKER_TQDM"])
    if os.getenv("MEDITRACKER_TODAY"):
        cfg.today = os.environ["MEDITRACKER_TODAY"]

    if cfg.today is not None:
        cfg.today = str(cfg.today)
        try:
            date.fromisoformat(cfg.today)
        except ValueError:
            raise ValueError(f"today must be a date in YYYY-MM-DD, got '{cfg.today}'") from None
    return cfg
