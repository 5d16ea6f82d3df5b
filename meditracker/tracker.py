"""Process wiring: one clock, presenter, gateway and pair of stores.

`open_tracker()` builds everything once at start-up and loads the save file.
Command handlers receive the resulting Tracker explicitly; nothing is kept
in module-level state.

Load rules:
- medications are bulk loaded through MedicationStore.add (bad entries skipped)
- the saved daily list is reused only when it was saved for today; otherwise
  today's list is rebuilt from the catalog and written back
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .domains.common.clock import Clock, clock_from_override
from .domains.common.io import save_file_path
from .domains.config import TrackerCfg
from .domains.daily.intake import DailyIntakeStore
from .domains.meds.medication import MedicationRecord, MedicationStore
from .io.storage import JsonFileGateway
from .utils.console import ConsolePresenter, Presenter

logger = logging.getLogger("meditracker.tracker")


@dataclass
class Tracker:
    cfg: TrackerCfg
    clock: Clock
    presenter: Presenter
    gateway: JsonFileGateway
    medications: MedicationStore
    daily: DailyIntakeStore

    def load(self) -> None:
        state = self.gateway.load_all()
        today = self.clock.today().isoformat()
        with self.gateway.loading():
            self.medications.load_records(state.medications)
            if state.daily_date == today:
                self.daily.load_records(state.daily, built_for=self.clock.today())
                stale = False
            else:
                self.daily.rebuild(self.clock.today())
                stale = state.daily_date is not None
        if stale:
            logger.info(f"Daily list was saved for {state.daily_date}; rebuilt for {today}")
            self.gateway.save_all()

    def add_medication(self, medication: MedicationRecord) -> None:
        """Add to the catalog and, when it is due today, to today's list."""
        self.medications.add(medication)
        if medication.is_due(self.clock.day_of_year()):
            self.daily.schedule(medication)


def open_tracker(
    cfg: TrackerCfg,
    presenter: Optional[Presenter] = None,
    clock: Optional[Clock] = None,
) -> Tracker:
    clock = clock or clock_from_override(cfg.today)
    presenter = presenter or ConsolePresenter()
    gateway = JsonFileGateway(save_file_path(cfg.data_dir, cfg.save_file), clock)
    medications = MedicationStore(clock, presenter, gateway, show_progress=cfg.show_progress)
    daily = DailyIntakeStore(medications, gateway, show_progress=cfg.show_progress)
    gateway.attach(medications, daily)

    tracker = Tracker(cfg, clock, presenter, gateway, medications, daily)
    tracker.load()
    return tracker
