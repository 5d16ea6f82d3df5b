"""
Progress bar utilities using tqdm.

Bulk loads of the save file wrap their entries with `track()` so large
catalogs show progress on an interactive terminal and stay silent in CI,
tests and pipes.
"""

from typing import Iterable, Optional
import os
import sys

from tqdm import tqdm


def should_show_progress(explicit: Optional[bool] = None) -> bool:
    """Determine if progress bars should be shown.

    An explicit setting wins, then MEDITRACKER_TQDM=1/0, then CI (off),
    then whether stdout is a TTY.
    """
    if explicit is not None:
        return bool(explicit)
    if os.getenv("MEDITRACKER_TQDM") == "1":
        return True
    if os.getenv("MEDITRACKER_TQDM") == "0":
        return False
    if os.getenv("CI"):
        return False
    try:
        return bool(sys.stdout.isatty())
    except (AttributeError, ValueError):
        return False


def track(iterable: Iterable, desc: str = "Loading", enabled: Optional[bool] = None, unit: str = "rec"):
    """Wrap `iterable` in a tqdm bar when progress is enabled, else return it as is."""
    if not should_show_progress(enabled):
        return iterable
    total = len(iterable) if hasattr(iterable, "__len__") else None
    return tqdm(
        iterable,
        total=total,
        desc=desc,
        unit=unit,
        leave=False,
        file=sys.stdout,
        ncols=100,
        bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]',
    )
