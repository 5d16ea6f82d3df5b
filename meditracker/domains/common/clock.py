from __future__ import annotations

from datetime import date


class Clock:
    """Source of the current date. Subclass or use FixedClock to pin it."""

    def today(self) -> date:
        return date.today()

    def day_of_year(self) -> int:
        return self.today().timetuple().tm_yday


class FixedClock(Clock):
    def __init__(self, today: date):
        self._today = today

    def today(self) -> date:
        return self._today

    def set(self, today: date) -> None:
        self._today = today


def clock_from_override(override: str | None) -> Clock:
    """Return a FixedClock for an ISO date override, else the system clock."""
    if not override:
        return Clock()
    return FixedClock(date.fromisoformat(override))
