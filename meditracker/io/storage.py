"""JSON save file gateway for the medication catalog and today's doses.

Layout (every value is written as a string so the loader always sees the
same raw mappings it tolerates on bulk load):

    {
      "medications": [{"name": ..., "quantity": ..., ...}],
      "dailyMedications": {"date": "YYYY-MM-DD", "records": [{"name": ..., ...}]}
    }

Saves are synchronous and atomic (temp file + rename, previous file kept as
<stem>_prev.json). I/O failures surface as FileReadWriteError; the in-memory
change that triggered the save is not rolled back.
"""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..domains.common.clock import Clock
from ..domains.common.errors import FileReadWriteError
from ..lib.io_guards import write_text

logger = logging.getLogger("meditracker.storage")

MEDICATIONS_KEY = "medications"
DAILY_KEY = "dailyMedications"
DATE_KEY = "date"
RECORDS_KEY = "records"


@dataclass
class SavedState:
    medications: List[Dict[str, object]] = field(default_factory=list)
    daily: List[Dict[str, object]] = field(default_factory=list)
    daily_date: Optional[str] = None


class JsonFileGateway:
    def __init__(self, path: Path | str, clock: Clock):
        self.path = Path(path)
        self.clock = clock
        self.medications = None
        self.daily = None
        self._suspended = 0

    def attach(self, medications, daily) -> None:
        self.medications = medications
        self.daily = daily

    @contextmanager
    def loading(self):
        """Suppress saves while stores are being repopulated from disk."""
        self._suspended += 1
        try:
            yield self
        finally:
            self._suspended -= 1

    def _payload(self) -> dict:
        meds = [m.to_fields() for m in self.medications] if self.medications is not None else []
        daily = [r.to_fields() for r in self.daily] if self.daily is not None else []
        built_for = getattr(self.daily, "built_for", None) or self.clock.today()
        return {
            MEDICATIONS_KEY: meds,
            DAILY_KEY: {DATE_KEY: built_for.isoformat(), RECORDS_KEY: daily},
        }

    def save_all(self) -> None:
        if self._suspended:
            return
        text = json.dumps(self._payload(), indent=2, ensure_ascii=False)
        try:
            write_text(self.path, text)
        except OSError as e:
            raise FileReadWriteError(f"Unable to write save file {self.path}: {e}") from e
        logger.debug(f"Saved tracker data -> {self.path}")

    def load_all(self) -> SavedState:
        if not self.path.exists():
            logger.info(f"No save file at {self.path}; starting empty")
            return SavedState()
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as e:
            raise FileReadWriteError(f"Unable to read save file {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise FileReadWriteError(f"Save file {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise FileReadWriteError(f"Save file {self.path} has an unexpected layout")

        meds = _mappings(data.get(MEDICATIONS_KEY), MEDICATIONS_KEY)
        daily_block = data.get(DAILY_KEY) or {}
        if not isinstance(daily_block, dict):
            logger.warning(f"Ignoring malformed '{DAILY_KEY}' block in {self.path}")
            daily_block = {}
        daily = _mappings(daily_block.get(RECORDS_KEY), DAILY_KEY)
        date = daily_block.get(DATE_KEY)
        logger.info(f"Read {len(meds)} medications and {len(daily)} daily doses from {self.path}")
        return SavedState(medications=meds, daily=daily, daily_date=str(date) if date else None)


def _mappings(value, label: str) -> List[Dict[str, object]]:
    """Keep only the dict entries of a saved list, warning about the rest."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Expected a list under '{label}', got {type(value).__name__}; ignoring")
        return []
    out = []
    for entry in value:
        if isinstance(entry, dict):
            out.append(entry)
        else:
            logger.warning(f"Skipping malformed '{label}' entry: {entry!r}")
    return out
