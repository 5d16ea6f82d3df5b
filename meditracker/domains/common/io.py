from __future__ import annotations
from pathlib import Path


def save_file_path(data_dir: str | Path, save_file: str) -> Path:
    """Return the save file location under `data_dir`.

    A `save_file` that is already absolute is used as is, so a config file
    can point anywhere on disk.
    """
    p = Path(save_file)
    if p.is_absolute():
        return p
    return Path(data_dir) / p


def export_path(data_dir: str | Path, name: str = "medications.csv") -> Path:
    p = Path(data_dir) / "exports"
    p.mkdir(parents=True, exist_ok=True)
    return p / name
