"""Per-user gesture calibration."""
