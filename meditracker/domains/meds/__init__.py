"""Medication domain: the catalog of medications on hand.

Usage:
    from meditracker.domains.meds import MedicationRecord, MedicationStore
    store = MedicationStore(clock)
    store.add(MedicationRecord(name="Aspirin", quantity=Decimal("30"), expiry_date="2027-01-01"))
"""

from .medication import (
    Direction,
    Matches,
    MedicationRecord,
    MedicationStore,
)

__all__ = [
    "Direction",
    "Matches",
    "MedicationRecord",
    "MedicationStore",
]
