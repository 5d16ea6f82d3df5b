"""Daily intake domain: today's scheduled doses and their taken state.

Each DailyIntakeRecord names a medication in the catalog (by name, never by
object reference) together with the dosage and the period it belongs to.
Positions are 1-based within a period, e.g. `take(2, Period.EVENING)` is the
second evening dose.

State machine per record:
    NOT_TAKEN --take()--> TAKEN     (only if the linked quantity suffices)
    TAKEN --untake()--> NOT_TAKEN   (always, the quantity goes back up)
Repeating a transition raises MedicationUnchangedError.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from ..common import fields as F
from ..common.errors import IndexOutOfRangeError, MedicationUnchangedError
from ..common.period import DOSING_PERIODS, Period
from ..meds.medication import MedicationRecord, MedicationStore
from ...utils.progress import track

logger = logging.getLogger("meditracker.daily")


@dataclass
class DailyIntakeRecord:
    medication_name: str
    dosage: Decimal = Decimal("0")
    period: Period = Period.NONE
    taken: bool = False

    def take(self) -> None:
        if self.taken:
            raise MedicationUnchangedError(f"{self.medication_name} has already been taken!")
        self.taken = True

    def untake(self) -> None:
        if not self.taken:
            raise MedicationUnchangedError(f"{self.medication_name} has not been taken yet!")
        self.taken = False

    def to_fields(self) -> Dict[str, str]:
        return {
            F.NAME: self.medication_name,
            F.DOSAGE: str(self.dosage),
            F.PERIOD: self.period.value,
            F.TAKEN: "true" if self.taken else "false",
        }

    @classmethod
    def from_fields(cls, raw: Mapping[str, object]) -> "DailyIntakeRecord":
        for key in raw:
            if key not in F.INTAKE_KEYS:
                logger.warning(f"Ignoring unrecognised daily medication field '{key}'")
        period = Period.parse(raw.get(F.PERIOD))
        if period is Period.UNKNOWN:
            logger.warning(f"Unrecognised period '{raw.get(F.PERIOD)}'. Using {Period.UNKNOWN.value}")
        name = raw.get(F.NAME)
        return cls(
            medication_name="" if name is None else str(name),
            dosage=F.to_decimal(raw.get(F.DOSAGE), F.DOSAGE),
            period=period,
            taken=F.to_bool(raw.get(F.TAKEN, False), F.TAKEN),
        )


class DailyIntakeStore:
    """Ordered list of today's doses; quantity changes go through MedicationStore."""

    def __init__(self, medications: MedicationStore, gateway=None, show_progress: Optional[bool] = None):
        self.medications = medications
        self.gateway = gateway
        self.show_progress = show_progress
        self._records: List[DailyIntakeRecord] = []
        # the day this list was built for; saved with it instead of the current date
        self.built_for: Optional[date] = None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DailyIntakeRecord]:
        return iter(self._records)

    @property
    def records(self) -> tuple:
        return tuple(self._records)

    def clear(self) -> None:
        self._records.clear()

    def _save(self) -> None:
        if self.gateway is not None:
            self.gateway.save_all()

    def add(self, record: DailyIntakeRecord) -> None:
        self._records.append(record)
        self._save()

    def by_period(self, period: Period) -> List[DailyIntakeRecord]:
        return [r for r in self._records if r.period is period]

    def get_by_position(self, index: int, period: Period) -> DailyIntakeRecord:
        subset = self.by_period(period)
        if index < 1 or index > len(subset):
            raise IndexOutOfRangeError(index, len(subset))
        return subset[index - 1]

    # ------------------------------------------------------------------
    # take / untake
    # ------------------------------------------------------------------
    def take(self, index: int, period: Period) -> DailyIntakeRecord:
        record = self.get_by_position(index, period)
        if record.taken:
            raise MedicationUnchangedError(f"{record.medication_name} has already been taken!")
        # raises before the flag is touched if the medication is gone or short
        self.medications.decrease_quantity(record.medication_name, record.period, record.dosage)
        record.take()
        logger.info(f"Took {record.medication_name} ({record.period.value})")
        self._save()
        return record

    def untake(self, index: int, period: Period) -> DailyIntakeRecord:
        record = self.get_by_position(index, period)
        if not record.taken:
            raise MedicationUnchangedError(f"{record.medication_name} has not been taken yet!")
        self.medications.increase_quantity(record.medication_name, record.period, record.dosage)
        record.untake()
        logger.info(f"Untook {record.medication_name} ({record.period.value})")
        self._save()
        return record

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    @staticmethod
    def records_for(medication: MedicationRecord) -> List[DailyIntakeRecord]:
        """One record per period with a positive dosage, or a single NONE record."""
        out = [
            DailyIntakeRecord(medication.name, medication.dosage_for(p), p)
            for p in DOSING_PERIODS
            if medication.dosage_for(p) > 0
        ]
        if not out:
            out.append(DailyIntakeRecord(medication.name, Decimal("0"), Period.NONE))
        return out

    def schedule(self, medication: MedicationRecord) -> List[DailyIntakeRecord]:
        added = self.records_for(medication)
        self._records.extend(added)
        self._save()
        return added

    def rebuild(self, today: date) -> int:
        """Replace the list with fresh, untaken doses for every medication due on `today`."""
        self.clear()
        self.built_for = today
        day_of_year = today.timetuple().tm_yday
        for medication in self.medications:
            if medication.is_due(day_of_year):
                self._records.extend(self.records_for(medication))
        logger.info(f"Rebuilt daily list for {today.isoformat()}: {len(self)} doses")
        self._save()
        return len(self)

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------
    def load_records(self, entries: Iterable[Mapping[str, object]], built_for: Optional[date] = None) -> int:
        self.clear()
        self.built_for = built_for
        for raw in track(list(entries), desc="daily", enabled=self.show_progress):
            self._records.append(DailyIntakeRecord.from_fields(raw))
        logger.info(f"Loaded {len(self)} daily doses")
        return len(self)
