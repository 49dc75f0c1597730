"""
Keyboard stand-in for the camera, for testing without a webcam.

Key presses map straight to gestures with full confidence. They skip the
extractor and classifier but still go through the debouncer.
"""

import logging
from typing import Dict, Optional

from slidegesture.core.types import GestureEvent, GestureType

logger = logging.getLogger(__name__)

DEFAULT_BINDINGS: Dict[str, GestureType] = {
    "arrowleft": GestureType.SWIPE_LEFT,
    "arrowright": GestureType.SWIPE_RIGHT,
    "o": GestureType.OPEN_PALM,
    "c": GestureType.CLOSED_FIST,
    "p": GestureType.POINTING,
    "t": GestureType.THUMB_UP,
}

# cv2.waitKeyEx codes for the arrow keys (GTK/X11, Windows, macOS)
_CV2_ARROW_CODES = {
    65361: "arrowleft", 65363: "arrowright",
    2424832: "arrowleft", 2555904: "arrowright",
    63234: "arrowleft", 63235: "arrowright",
}


class KeyboardSimulator:
    """Maps key names to manual gesture triggers on a pipeline."""

    def __init__(self, pipeline, bindings: Optional[Dict[str, str]] = None):
        self._pipeline = pipeline
        self._bindings = dict(DEFAULT_BINDINGS)
        for key, gesture in (bindings or {}).items():
            gesture_type = gesture if isinstance(gesture, GestureType) else GestureType.from_string(gesture)
            if gesture_type == GestureType.NONE:
                logger.warning("Ignoring keyboard binding %r -> %r", key, gesture)
                continue
            self._bindings[key.lower()] = gesture_type

    def gesture_for(self, key: str) -> Optional[GestureType]:
        """Gesture bound to a key name, case-insensitive."""
        if not key:
            return None
        return self._bindings.get(key.lower())

    def press(self, key: str, now: Optional[float] = None) -> Optional[GestureEvent]:
        """Simulate a key press; returns the emitted event, if any."""
        gesture = self.gesture_for(key)
        if gesture is None:
            return None
        logger.debug("Keyboard gesture triggered: %s", gesture.value)
        return self._pipeline.trigger(gesture, source="keyboard", now=now)

    @staticmethod
    def key_name(code: int) -> Optional[str]:
        """Key name for a cv2.waitKeyEx code, or None."""
        if code is None or code < 0:
            return None
        if code in _CV2_ARROW_CODES:
            return _CV2_ARROW_CODES[code]
        low = code & 0xFF
        if 32 <= low < 127:
            return chr(low).lower()
        return None

    def press_cv2(self, code: int, now: Optional[float] = None) -> Optional[GestureEvent]:
        name = self.key_name(code)
        return self.press(name, now=now) if name else None

    @property
    def bindings(self) -> Dict[str, GestureType]:
        return dict(self._bindings)
