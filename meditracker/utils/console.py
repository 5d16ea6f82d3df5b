"""
Console presentation for the tracker.

The stores never format text for display; they hand records, messages and
errors to a presenter. `Presenter` is the contract (every method is a no-op),
`ConsolePresenter` prints to a stream and renders lists as pandas tables.
"""
from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO

import pandas as pd

MEDICATION_COLUMNS = [
    "Name",
    "Quantity",
    "Morning",
    "Afternoon",
    "Evening",
    "Expiry",
    "Remarks",
    "Repeat",
]


class Presenter:
    """Contract for rendering tracker output."""

    def show_record(self, record, position: Optional[int] = None) -> None:
        return None

    def show_records(self, records: Iterable) -> None:
        return None

    def show_intake(self, by_period: dict) -> None:
        return None

    def show_info(self, message: str) -> None:
        return None

    def show_error(self, error: Exception) -> None:
        return None


def medications_frame(records: Iterable) -> pd.DataFrame:
    rows = [
        [
            m.name,
            f"{m.quantity:.1f}",
            f"{m.dosage_morning:.1f}",
            f"{m.dosage_afternoon:.1f}",
            f"{m.dosage_evening:.1f}",
            m.expiry_date,
            m.remarks,
            m.repeat,
        ]
        for m in records
    ]
    df = pd.DataFrame(rows, columns=MEDICATION_COLUMNS)
    df.index = range(1, len(df) + 1)
    return df


class ConsolePresenter(Presenter):
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _print(self, text: str) -> None:
        print(text, file=self.stream or sys.stdout)

    def show_record(self, record, position: Optional[int] = None) -> None:
        header = f"Medication {position}" if position is not None else "Medication"
        self._print(header)
        df = medications_frame([record])
        self._print(df.T.to_string(header=False))

    def show_records(self, records: Iterable) -> None:
        df = medications_frame(records)
        if df.empty:
            self._print("You have no medications in the list.")
            return
        self._print(f"You have {len(df)} medication(s) listed below.")
        self._print(df.to_string())

    def show_intake(self, by_period: dict) -> None:
        """Render today's doses; `by_period` maps a Period to its ordered records."""
        shown = False
        for period, records in by_period.items():
            if not records:
                continue
            shown = True
            self._print(f"{period.value.title()}:")
            df = pd.DataFrame(
                [["[X]" if r.taken else "[ ]", r.medication_name, f"{r.dosage:.1f}"] for r in records],
                columns=["Taken", "Name", "Dosage"],
            )
            df.index = range(1, len(df) + 1)
            self._print(df.to_string())
        if not shown:
            self._print("No medications scheduled for today.")

    def show_info(self, message: str) -> None:
        self._print(f"[info] {message}")

    def show_error(self, error: Exception) -> None:
        self._print(f"[error] {error}")
