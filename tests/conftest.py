import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so tests can import local modules
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from meditracker.domains.common.clock import FixedClock
from meditracker.domains.daily.intake import DailyIntakeStore
from meditracker.domains.meds.medication import MedicationRecord, MedicationStore
from meditracker.io.storage import JsonFileGateway
from meditracker.utils.console import Presenter

TODAY = date(2026, 10, 19)


class RecordingPresenter(Presenter):
    def __init__(self):
        self.infos = []
        self.errors = []
        self.shown = []

    def show_record(self, record, position=None):
        self.shown.append(record)

    def show_records(self, records):
        self.shown.extend(records)

    def show_info(self, message):
        self.infos.append(message)

    def show_error(self, error):
        self.errors.append(error)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    # keep developer settings out of the tests
    for var in ("MEDITRACKER_DATA_DIR", "MEDITRACKER_SAVE_FILE", "MEDITRACKER_LOG_LEVEL", "MEDITRACKER_TODAY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("MEDITRACKER_TQDM", "0")
    yield


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def save_path(tmp_path):
    return tmp_path / "meditracker.json"


@pytest.fixture
def gateway(save_path, clock):
    return JsonFileGateway(save_path, clock)


@pytest.fixture
def medications(clock, presenter, gateway):
    return MedicationStore(clock, presenter, gateway, show_progress=False)


@pytest.fixture
def daily(medications, gateway):
    store = DailyIntakeStore(medications, gateway, show_progress=False)
    gateway.attach(medications, store)
    return store


@pytest.fixture
def make_medication():
    def _make(name="TestMedication", quantity="60", morning="10", afternoon="0", evening="0",
              expiry="2027-07-01", remarks="cause_dizziness", repeat=1, day_added=292):
        return MedicationRecord(
            name=name,
            quantity=Decimal(quantity),
            dosage_morning=Decimal(morning),
            dosage_afternoon=Decimal(afternoon),
            dosage_evening=Decimal(evening),
            expiry_date=expiry,
            remarks=remarks,
            repeat=repeat,
            day_added=day_added,
        )
    return _make
