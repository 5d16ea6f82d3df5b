"""Medication domain: the medication catalog and its inventory rules.

The catalog keeps medications in insertion order so users can address them by
their 1-based list position. Names are unique case-insensitively. Every
mutation triggers a synchronous save through the persistence gateway and
quantity changes are reported through the presenter.

Rules enforced here:
1. NO DUPLICATES: a name that matches an existing one (ignoring case) is rejected
2. NO EXPIRED STOCK: expiry-date must parse as YYYY-MM-DD and not be before today
3. NO NEGATIVE QUANTITY: a decrease is checked before anything is changed
4. EMPTY SEARCH IS AN ERROR: find_* either yields matches or raises
"""
from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from ..common import fields as F
from ..common.clock import Clock
from ..common.errors import (
    DuplicateMedicationError,
    FileReadWriteError,
    IndexOutOfRangeError,
    InsufficientQuantityError,
    InvalidDosageError,
    InvalidExpiryError,
    MediTrackerError,
    MedicationNotFoundError,
)
from ..common.period import Period
from ...utils.progress import track

logger = logging.getLogger("meditracker.meds")

EXPIRY_FORMAT = "%Y-%m-%d"
EXPIRY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
ZERO = Decimal("0")


@dataclass
class MedicationRecord:
    name: str = ""
    quantity: Decimal = ZERO
    dosage_morning: Decimal = ZERO
    dosage_afternoon: Decimal = ZERO
    dosage_evening: Decimal = ZERO
    expiry_date: str = ""
    remarks: str = ""
    repeat: int = 1
    day_added: int = 0

    def dosage_for(self, period: Period) -> Decimal:
        """Per-period dosage; NONE and UNKNOWN contribute nothing."""
        if period is Period.MORNING:
            return self.dosage_morning
        if period is Period.AFTERNOON:
            return self.dosage_afternoon
        if period is Period.EVENING:
            return self.dosage_evening
        return ZERO

    def expiry_year(self) -> int:
        return int(self.expiry_date.split("-", 1)[0])

    def is_due(self, day_of_year: int) -> bool:
        """True when the medication is scheduled on `day_of_year` (every `repeat` days from day_added)."""
        if self.repeat < 1:
            return False
        return (day_of_year - self.day_added) % self.repeat == 0

    def to_fields(self) -> Dict[str, str]:
        return {
            F.NAME: self.name,
            F.QUANTITY: str(self.quantity),
            F.DOSAGE_MORNING: str(self.dosage_morning),
            F.DOSAGE_AFTERNOON: str(self.dosage_afternoon),
            F.DOSAGE_EVENING: str(self.dosage_evening),
            F.EXPIRY_DATE: self.expiry_date,
            F.REMARKS: self.remarks,
            F.REPEAT: str(self.repeat),
            F.DAY_ADDED: str(self.day_added),
        }

    @classmethod
    def from_fields(cls, raw: Mapping[str, object]) -> "MedicationRecord":
        """Rebuild a record from a saved mapping.

        Missing or malformed numeric fields become -1.0 (or -1) with a
        warning; unknown keys are ignored with a warning.
        """
        for key in raw:
            if key not in F.MEDICATION_KEYS:
                logger.warning(f"Ignoring unrecognised medication field '{key}'")

        def text(key: str) -> str:
            value = raw.get(key)
            return "" if value is None else str(value)

        return cls(
            name=text(F.NAME),
            quantity=F.to_decimal(raw.get(F.QUANTITY), F.QUANTITY),
            dosage_morning=F.to_decimal(raw.get(F.DOSAGE_MORNING), F.DOSAGE_MORNING),
            dosage_afternoon=F.to_decimal(raw.get(F.DOSAGE_AFTERNOON), F.DOSAGE_AFTERNOON),
            dosage_evening=F.to_decimal(raw.get(F.DOSAGE_EVENING), F.DOSAGE_EVENING),
            expiry_date=text(F.EXPIRY_DATE),
            remarks=text(F.REMARKS),
            repeat=F.to_int(raw.get(F.REPEAT), F.REPEAT),
            day_added=F.to_int(raw.get(F.DAY_ADDED), F.DAY_ADDED),
        )


class Matches:
    """Non-empty, lazy, single-pass result of a catalog search.

    Only built through `Matches.require()`, which raises
    MedicationNotFoundError instead of ever producing an empty result.
    """

    def __init__(self, first: MedicationRecord, rest: Iterator[MedicationRecord]):
        self.first = first
        self._rest = rest
        self._consumed = False

    @classmethod
    def require(cls, candidates: Iterable[MedicationRecord]) -> "Matches":
        it = iter(candidates)
        first = next(it, None)
        if first is None:
            raise MedicationNotFoundError()
        return cls(first, it)

    def __iter__(self) -> Iterator[MedicationRecord]:
        if self._consumed:
            raise RuntimeError("Matches can only be iterated once")
        self._consumed = True
        return itertools.chain((self.first,), self._rest)

    def __bool__(self) -> bool:
        return True


class Direction(str, Enum):
    INCREASE = "increased"
    DECREASE = "decreased"


class MedicationStore:
    """Ordered catalog of MedicationRecord, owned by one Tracker."""

    def __init__(self, clock: Clock, presenter=None, gateway=None, show_progress: Optional[bool] = None):
        self.clock = clock
        self.presenter = presenter
        self.gateway = gateway
        self.show_progress = show_progress
        self._medications: List[MedicationRecord] = []

    # ------------------------------------------------------------------
    # Collection basics
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._medications)

    def __iter__(self) -> Iterator[MedicationRecord]:
        return iter(self._medications)

    @property
    def records(self) -> tuple:
        return tuple(self._medications)

    def clear(self) -> None:
        self._medications.clear()

    def _save(self) -> None:
        if self.gateway is not None:
            self.gateway.save_all()

    # ------------------------------------------------------------------
    # Add / remove
    # ------------------------------------------------------------------
    def add(self, medication: MedicationRecord) -> None:
        self._check_duplicate(medication.name)
        self._check_expiry(medication.expiry_date)
        self._medications.append(medication)
        logger.info(f"Added medication '{medication.name}' (total {len(self)})")
        self._save()

    def _check_duplicate(self, name: str) -> None:
        key = name.lower()
        for medication in self._medications:
            if medication.name.lower() == key:
                raise DuplicateMedicationError(name)

    def _check_expiry(self, expiry_date: str) -> None:
        # strptime alone accepts 2027-1-5; month and day must be zero padded
        if not isinstance(expiry_date, str) or not EXPIRY_PATTERN.fullmatch(expiry_date):
            raise InvalidExpiryError("Please enter a valid expiry date in yyyy-MM-dd!")
        try:
            parsed = datetime.strptime(expiry_date, EXPIRY_FORMAT).date()
        except ValueError:
            raise InvalidExpiryError("Please enter a valid expiry date in yyyy-MM-dd!") from None
        if parsed < self.clock.today():
            raise InvalidExpiryError("You are not allowed to enter expired medications!")

    def remove_by_position(self, index: int) -> MedicationRecord:
        self._check_position(index)
        removed = self._medications.pop(index - 1)
        logger.info(f"Removed medication '{removed.name}'")
        self._save()
        return removed

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def _check_position(self, index: int) -> None:
        if index < 1 or index > len(self._medications):
            raise IndexOutOfRangeError(index, len(self._medications))

    def get_by_position(self, index: int) -> MedicationRecord:
        self._check_position(index)
        return self._medications[index - 1]

    def get_by_name(self, name: str) -> MedicationRecord:
        for medication in self._medications:
            if medication.name == name:
                return medication
        raise MedicationNotFoundError(f"No medication named '{name}' found!")

    def _find(self, predicate: Callable[[MedicationRecord], bool]) -> Matches:
        return Matches.require(m for m in self._medications if predicate(m))

    def find_by_quantity_at_most(self, threshold: Decimal) -> Matches:
        return self._find(lambda m: m.quantity <= threshold)

    def find_by_name_contains(self, text: str) -> Matches:
        needle = text.lower()
        return self._find(lambda m: needle in m.name.lower())

    def find_by_expiry_year_at_most(self, year: int) -> Matches:
        return self._find(lambda m: m.expiry_year() <= year)

    def find_by_remarks_contains(self, text: str) -> Matches:
        needle = text.lower()
        return self._find(lambda m: needle in m.remarks.lower())

    # ------------------------------------------------------------------
    # Quantity
    # ------------------------------------------------------------------
    def adjust_quantity(
        self,
        name: str,
        period: Period,
        direction: Direction,
        dosage: Optional[Decimal] = None,
    ) -> MedicationRecord:
        """Apply one dose for `period` to the named medication.

        `dosage` overrides the medication's own dosage for the period (daily
        intake records carry their own). A negative dosage (the -1.0 placeholder
        of a corrupt save) raises InvalidDosageError and a decrease below zero
        raises InsufficientQuantityError, both before anything is changed.
        """
        medication = self.get_by_name(name)
        if dosage is None:
            dosage = medication.dosage_for(period)
        if dosage < 0:
            raise InvalidDosageError(dosage)
        old_quantity = medication.quantity
        if direction is Direction.DECREASE:
            new_quantity = old_quantity - dosage
            if new_quantity < 0:
                raise InsufficientQuantityError(dosage, old_quantity)
        else:
            new_quantity = old_quantity + dosage

        if self.presenter is not None:
            self.presenter.show_info(
                f"Medication quantity {direction.value}: {old_quantity:.1f} -> {new_quantity:.1f}"
            )
        medication.quantity = new_quantity
        self._save()
        return medication

    def increase_quantity(self, name: str, period: Period, dosage: Optional[Decimal] = None) -> MedicationRecord:
        return self.adjust_quantity(name, period, Direction.INCREASE, dosage)

    def decrease_quantity(self, name: str, period: Period, dosage: Optional[Decimal] = None) -> MedicationRecord:
        return self.adjust_quantity(name, period, Direction.DECREASE, dosage)

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------
    def load_records(self, entries: Iterable[Mapping[str, object]]) -> int:
        """Replace the catalog with records rebuilt from saved mappings.

        Each record goes through `add`; one that fails validation is skipped
        and reported, the rest of the batch still loads. Returns the number
        of records loaded.
        """
        self.clear()
        entries = list(entries)
        for raw in track(entries, desc="medications", enabled=self.show_progress):
            medication = MedicationRecord.from_fields(raw)
            try:
                self.add(medication)
            except FileReadWriteError:
                raise
            except MediTrackerError as e:
                logger.warning(f"Skipping saved medication '{medication.name}': {e}")
                if self.presenter is not None:
                    self.presenter.show_error(e)
        logger.info(f"Loaded {len(self)}/{len(entries)} medications")
        return len(self)

    def new_record(self, **kwargs) -> MedicationRecord:
        """Build a record stamped with today's day-of-year."""
        kwargs.setdefault("day_added", self.clock.day_of_year())
        return MedicationRecord(**kwargs)
