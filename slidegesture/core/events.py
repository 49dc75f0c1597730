"""
Lightweight event bus for decoupled inter-module communication.

The pipeline, calibration collector and presentation controller publish
here; the CLI subscribes.

Usage:
    bus = EventBus()
    bus.subscribe(Events.GESTURE_DETECTED, my_handler)
    bus.emit(Events.GESTURE_DETECTED, gesture=GestureType.THUMB_UP, confidence=0.9)
"""

import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe bus.

    One bus per application; main.py builds it and hands it to the
    modules that publish. Listeners run on the emitting thread, highest
    priority first.
    """

    def __init__(self):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._lock = threading.Lock()

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register `callback(**kwargs)` for an event."""
        with self._lock:
            listeners = self._listeners[event_name]
            listeners.append((priority, callback))
            listeners.sort(key=lambda entry: -entry[0])

    def unsubscribe(self, event_name: str, callback: Callable):
        with self._lock:
            self._listeners[event_name] = [
                entry for entry in self._listeners[event_name] if entry[1] is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        """Call every listener of an event.

        A failing listener is logged and skipped so it never breaks the
        frame loop that emitted the event.
        """
        with self._lock:
            listeners = list(self._listeners.get(event_name, ()))

        for _, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Listener %s failed on '%s': %s",
                             getattr(callback, "__name__", repr(callback)), event_name, e)


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Pipeline events
    HAND_DETECTED = "hand_detected"
    HAND_LOST = "hand_lost"
    GESTURE_CANDIDATE = "gesture_candidate"
    GESTURE_DETECTED = "gesture_detected"
    GESTURE_SUPPRESSED = "gesture_suppressed"

    # Presentation events
    SLIDE_CHANGED = "slide_changed"
    MEDIA_STATE_CHANGED = "media_state_changed"
    POINTER_MOVED = "pointer_moved"

    # Calibration events
    CALIBRATION_STARTED = "calibration_started"
    CALIBRATION_STEP_COMPLETE = "calibration_step_complete"
    CALIBRATION_TIMEOUT = "calibration_timeout"
    CALIBRATION_COMPLETE = "calibration_complete"
    CALIBRATION_CANCELLED = "calibration_cancelled"

    # Lifecycle
    PIPELINE_ENABLED = "pipeline_enabled"
    PIPELINE_DISABLED = "pipeline_disabled"
    SYSTEM_SHUTDOWN = "system_shutdown"
