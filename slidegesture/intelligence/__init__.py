"""Calibration profile persistence."""
