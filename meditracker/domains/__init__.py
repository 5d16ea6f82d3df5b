"""Domain packages: medication catalog (meds) and daily intake (daily)."""
