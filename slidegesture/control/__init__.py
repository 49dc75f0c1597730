"""Debouncing, keyboard simulation and presentation control."""
