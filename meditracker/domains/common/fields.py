"""Save-file field keys and tolerant converters for bulk loads.

Every value in the save file is read back as a raw string (or whatever JSON
produced). Converters never raise: corrupt or missing numbers are replaced by
a placeholder and a warning is logged so one bad field cannot abort a load.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

logger = logging.getLogger("meditracker.fields")

NAME = "name"
QUANTITY = "quantity"
DOSAGE_MORNING = "dosage-morning"
DOSAGE_AFTERNOON = "dosage-afternoon"
DOSAGE_EVENING = "dosage-evening"
EXPIRY_DATE = "expiry-date"
REMARKS = "remarks"
REPEAT = "repeat"
DAY_ADDED = "day-added"

MEDICATION_KEYS = (
    NAME,
    QUANTITY,
    DOSAGE_MORNING,
    DOSAGE_AFTERNOON,
    DOSAGE_EVENING,
    EXPIRY_DATE,
    REMARKS,
    REPEAT,
    DAY_ADDED,
)

# daily intake entries reuse "name"
DOSAGE = "dosage"
PERIOD = "period"
TAKEN = "taken"

INTAKE_KEYS = (NAME, DOSAGE, PERIOD, TAKEN)

PLACEHOLDER = Decimal("-1.0")


def to_decimal(value, key: str = "") -> Decimal:
    """Convert a raw value to Decimal; placeholder -1.0 on missing/corrupt data."""
    if value is None:
        logger.warning(f"Missing value for '{key}'. Using placeholder value {PLACEHOLDER}")
        return PLACEHOLDER
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        logger.warning(
            f"Possibly corrupt data. Unable to parse '{value}' for '{key}' into a number. "
            f"Using placeholder value {PLACEHOLDER}"
        )
        return PLACEHOLDER
    if not parsed.is_finite():
        logger.warning(f"Non-finite value '{value}' for '{key}'. Using placeholder value {PLACEHOLDER}")
        return PLACEHOLDER
    return parsed


def to_int(value, key: str = "") -> int:
    return int(to_decimal(value, key))


def to_bool(value, key: str = "") -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no", ""):
        return False
    logger.warning(f"Possibly corrupt data. Unable to parse '{value}' for '{key}' as a flag. Using False")
    return False
