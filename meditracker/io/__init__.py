"""Persistence: JSON save file gateway."""
