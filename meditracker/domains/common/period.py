"""Time-of-day buckets used to schedule doses."""
from __future__ import annotations

from enum import Enum


class Period(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    NONE = "NONE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value) -> "Period":
        """Map a saved or user supplied value to a Period; anything unrecognised is UNKNOWN."""
        if isinstance(value, Period):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


# periods that carry a per-medication dosage, in display order
DOSING_PERIODS = (Period.MORNING, Period.AFTERNOON, Period.EVENING)
