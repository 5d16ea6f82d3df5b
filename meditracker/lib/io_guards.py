"""Atomic-write helpers for the save file and CSV exports.

Purpose
-------
A save interrupted half-way must never leave a truncated save file behind.
Writers go to a temporary file in the target directory and are moved into
place with a rename; the previous file is copied to <stem>_prev<suffix>
first so one generation can always be recovered by hand.

Callers should use `write_text()` (JSON save file) or `write_csv()`
(exports); `write_csv` also accepts `dry_run` and only prints what it would do.
"""
from __future__ import annotations

from pathlib import Path
import shutil
import tempfile

import pandas as pd


def _compute_backup_path(p: Path) -> Path:
    """Backup path for a target path `p`: <stem>_prev<suffix>."""
    return p.with_name(p.stem + "_prev" + p.suffix)


def _backup_existing(p: Path) -> None:
    if p.exists():
        shutil.copy2(p, _compute_backup_path(p))


def write_text(path: Path, text: str) -> None:
    """Atomically write `text` to `path`, backing up an existing file first."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    _backup_existing(p)
    with tempfile.NamedTemporaryFile(
        "w", delete=False, dir=str(p.parent), prefix=p.name + ".tmp.", encoding="utf-8"
    ) as tf:
        tmp = Path(tf.name)
        tf.write(text)
    tmp.replace(p)


def atomic_backup_write(df: pd.DataFrame, path: Path, dry_run: bool = False) -> None:
    """Atomically write `df` as CSV to `path`, backing up an existing file first."""
    p = Path(path)
    if dry_run:
        print(f"DRY RUN: would ensure dir {p.parent}")
        if p.exists():
            print(f"DRY RUN: would backup existing {p} -> {_compute_backup_path(p)}")
        print(f"DRY RUN: would write DataFrame ({len(df)} rows) -> {p}")
        return

    p.parent.mkdir(parents=True, exist_ok=True)
    _backup_existing(p)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=str(p.parent), prefix=p.name + ".tmp.") as tf:
        tmp = Path(tf.name)
        df.to_csv(tmp, index=False)
    tmp.replace(p)


def write_csv(df: pd.DataFrame, path: Path, *, dry_run: bool = False) -> None:
    """Convenience wrapper that writes CSV with atomic backup semantics."""
    atomic_backup_write(df=df, path=Path(path), dry_run=dry_run)
