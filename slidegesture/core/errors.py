"""
Exception hierarchy for the gesture core.

Nothing on the per-frame path lets these escape: malformed hands are
dropped at the frame boundary and the pipeline yields no event. They are
raised only from explicit control surfaces (calibration, profile storage)
where the caller decides what to do.
"""


class GestureCoreError(Exception):
    """Base class for all gesture core errors."""


class MalformedHandError(GestureCoreError):
    """A hand did not carry exactly 21 landmarks."""

    def __init__(self, count: int):
        super().__init__(f"expected 21 landmarks, got {count}")
        self.count = count


class CalibrationError(GestureCoreError):
    """Calibration control surface used out of order."""


class ProfileError(GestureCoreError):
    """A calibration profile could not be serialized or restored."""
