"""Daily intake domain: doses scheduled for today, grouped by period."""

from .intake import DailyIntakeRecord, DailyIntakeStore

__all__ = ["DailyIntakeRecord", "DailyIntakeStore"]
