"""MediTracker: personal medication inventory and daily intake tracking.

Subpackages:
    domains.meds: medication catalog (MedicationRecord, MedicationStore)
    domains.daily: daily intake schedule (DailyIntakeRecord, DailyIntakeStore)
    io.storage: JSON save file gateway
    cli.tracker_runner: command line entrypoint
"""

__version__ = "0.4.0"
