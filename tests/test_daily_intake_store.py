import json
from datetime import date
from decimal import Decimal

import pytest

from meditracker.domains.common.errors import (
    IndexOutOfRangeError,
    InsufficientQuantityError,
    InvalidDosageError,
    MedicationNotFoundError,
    MedicationUnchangedError,
)
from meditracker.domains.common.period import Period
from meditracker.domains.daily.intake import DailyIntakeRecord


def test_take_then_untake_restores_quantity(medications, daily, make_medication):
    medication = make_medication(quantity="60", morning="10")
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))

    record = daily.take(1, Period.MORNING)
    assert record.taken
    assert medication.quantity == Decimal("50")

    record = daily.untake(1, Period.MORNING)
    assert not record.taken
    assert medication.quantity == Decimal("60")


@pytest.mark.parametrize("quantity, dosage", [("60", "10"), ("1", "0.1"), ("7.3", "7.3"), ("100", "33.333")])
def test_round_trip_is_exact(medications, daily, make_medication, quantity, dosage):
    medication = make_medication(quantity=quantity, evening=dosage)
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal(dosage), Period.EVENING))

    daily.take(1, Period.EVENING)
    daily.untake(1, Period.EVENING)
    assert medication.quantity == Decimal(quantity)


def test_take_twice_is_rejected(medications, daily, make_medication):
    medication = make_medication()
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))
    daily.take(1, Period.MORNING)

    with pytest.raises(MedicationUnchangedError):
        daily.take(1, Period.MORNING)
    assert medication.quantity == Decimal("50")


def test_untake_when_not_taken_is_rejected(medications, daily, make_medication):
    medication = make_medication()
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))

    with pytest.raises(MedicationUnchangedError):
        daily.untake(1, Period.MORNING)
    assert medication.quantity == Decimal("60")


def test_take_with_insufficient_quantity(medications, daily, make_medication):
    medication = make_medication(quantity="5", morning="10")
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))

    with pytest.raises(InsufficientQuantityError):
        daily.take(1, Period.MORNING)
    assert medication.quantity == Decimal("5")
    assert not daily.get_by_position(1, Period.MORNING).taken


def test_take_uses_the_record_dosage(medications, daily, make_medication):
    medication = make_medication(quantity="20", morning="10")
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("2"), Period.MORNING))

    daily.take(1, Period.MORNING)
    assert medication.quantity == Decimal("18")


def test_take_dangling_reference(medications, daily, make_medication):
    medications.add(make_medication())
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))
    medications.remove_by_position(1)

    with pytest.raises(MedicationNotFoundError):
        daily.take(1, Period.MORNING)
    assert not daily.get_by_position(1, Period.MORNING).taken


def test_positions_are_per_period(daily):
    daily.add(DailyIntakeRecord("A", Decimal("1"), Period.MORNING))
    daily.add(DailyIntakeRecord("B", Decimal("1"), Period.EVENING))
    daily.add(DailyIntakeRecord("C", Decimal("1"), Period.MORNING))

    assert daily.get_by_position(2, Period.MORNING).medication_name == "C"
    assert daily.get_by_position(1, Period.EVENING).medication_name == "B"
    with pytest.raises(IndexOutOfRangeError):
        daily.get_by_position(2, Period.EVENING)
    with pytest.raises(IndexOutOfRangeError):
        daily.get_by_position(1, Period.AFTERNOON)


def test_duplicates_allowed(daily):
    daily.add(DailyIntakeRecord("A", Decimal("1"), Period.MORNING))
    daily.add(DailyIntakeRecord("A", Decimal("1"), Period.MORNING))
    assert len(daily.by_period(Period.MORNING)) == 2


def test_take_is_saved(medications, daily, make_medication, save_path):
    medications.add(make_medication())
    daily.add(DailyIntakeRecord("TestMedication", Decimal("10"), Period.MORNING))
    daily.take(1, Period.MORNING)

    data = json.loads(save_path.read_text(encoding="utf-8"))
    assert data["medications"][0]["quantity"] == "50"
    assert data["dailyMedications"]["date"] == "2026-10-19"
    assert data["dailyMedications"]["records"][0]["taken"] == "true"


def test_schedule_one_record_per_dosed_period(daily, make_medication):
    added = daily.schedule(make_medication(morning="500", afternoon="250", evening="0"))

    assert [(r.period, r.dosage) for r in added] == [
        (Period.MORNING, Decimal("500")),
        (Period.AFTERNOON, Decimal("250")),
    ]
    assert daily.by_period(Period.EVENING) == []


def test_schedule_without_dosage_uses_none_period(daily, make_medication):
    added = daily.schedule(make_medication(morning="0"))

    assert len(added) == 1
    assert added[0].period is Period.NONE
    assert added[0].dosage == Decimal("0")


def test_rebuild_only_schedules_due_medications(medications, daily, make_medication):
    medications.add(make_medication(name="Daily", day_added=290, repeat=1))
    medications.add(make_medication(name="EveryOther", day_added=290, repeat=2))
    medications.add(make_medication(name="EveryThird", day_added=290, repeat=3))

    daily.rebuild(date(2026, 10, 19))
    assert [r.medication_name for r in daily] == ["Daily", "EveryOther"]

    daily.rebuild(date(2026, 10, 20))
    assert [r.medication_name for r in daily] == ["Daily", "EveryThird"]


def test_rebuild_resets_taken(medications, daily, make_medication):
    medications.add(make_medication())
    daily.rebuild(date(2026, 10, 19))
    daily.take(1, Period.MORNING)

    daily.rebuild(date(2026, 10, 20))
    assert not daily.get_by_position(1, Period.MORNING).taken


def test_untake_with_corrupt_dosage_is_rejected(medications, daily, make_medication):
    medication = make_medication(quantity="0.5")
    medications.add(medication)
    # an unreadable dosage loads as the -1.0 placeholder
    daily.load_records([{"name": "TestMedication", "dosage": "??", "period": "MORNING", "taken": "true"}])

    with pytest.raises(InvalidDosageError):
        daily.untake(1, Period.MORNING)
    assert medication.quantity == Decimal("0.5")
    assert daily.get_by_position(1, Period.MORNING).taken


def test_take_with_negative_dosage_leaves_stock(medications, daily, make_medication):
    medication = make_medication(quantity="5")
    medications.add(medication)
    daily.add(DailyIntakeRecord("TestMedication", Decimal("-1.0"), Period.MORNING))

    with pytest.raises(InvalidDosageError):
        daily.take(1, Period.MORNING)
    assert medication.quantity == Decimal("5")
    assert not daily.get_by_position(1, Period.MORNING).taken


def test_save_keeps_the_date_the_list_was_built_for(medications, daily, make_medication, clock, save_path):
    medications.add(make_medication())
    daily.rebuild(date(2026, 10, 19))

    # a session still open after midnight
    clock.set(date(2026, 10, 20))
    daily.take(1, Period.MORNING)

    data = json.loads(save_path.read_text(encoding="utf-8"))
    assert data["dailyMedications"]["date"] == "2026-10-19"
    assert data["dailyMedications"]["records"][0]["taken"] == "true"
