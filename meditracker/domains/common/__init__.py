"""Helpers shared by the meds and daily domains."""
