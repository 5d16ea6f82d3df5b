from __future__ import annotations

from decimal import Decimal


# ---------------- Exceptions ----------------
class MediTrackerError(RuntimeError):
    """Base class for every recoverable tracker error."""


class DuplicateMedicationError(MediTrackerError):
    def __init__(self, name: str):
        super().__init__(f"Medication already exists in the list: {name}")
        self.name = name


class InvalidExpiryError(MediTrackerError):
    pass


class MedicationNotFoundError(MediTrackerError):
    def __init__(self, message: str = "No medication found!"):
        super().__init__(message)


class IndexOutOfRangeError(MediTrackerError, IndexError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Invalid index {index}: expected a number between 1 and {size}")
        self.index = index
        self.size = size


class InsufficientQuantityError(MediTrackerError):
    """Raised when a dose would drive the medication quantity below zero."""

    def __init__(self, dosage: Decimal, quantity: Decimal):
        super().__init__(
            f"Insufficient quantity: dosage {dosage:.1f} exceeds remaining quantity {quantity:.1f}"
        )
        self.dosage = dosage
        self.quantity = quantity


class InvalidDosageError(MediTrackerError):
    def __init__(self, dosage: Decimal):
        super().__init__(f"Invalid dosage {dosage:.1f}: a dosage cannot be negative")
        self.dosage = dosage


class MedicationUnchangedError(MediTrackerError):
    pass


class FileReadWriteError(MediTrackerError):
    pass
