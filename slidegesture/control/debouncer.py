"""
Time-window debouncer for gesture candidates.

Two states: Idle and Cooldown. Each candidate is evaluated once:

    - NONE or confidence below threshold      -> dropped
    - inside debounce_ms of the last emission -> suppressed
    - same type as the last emission and inside
      debounce_ms * same_gesture_factor       -> suppressed
    - otherwise                               -> emitted, state updated

The transition itself is the pure function evaluate(); Debouncer owns the
DebounceState and the clock.
"""

import time
import logging
from typing import Optional, Tuple

from slidegesture.core.types import DebounceState, GestureEvent, GestureType

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 800
DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_SAME_GESTURE_FACTOR = 1.5
DEFAULT_DISPLAY_MS = 1500

# Verdicts returned alongside the new state
EMITTED = "emitted"
DROPPED = "dropped"
SUPPRESSED = "suppressed"
SUPPRESSED_SAME = "suppressed_same"


def evaluate(state: DebounceState, gesture: GestureType, confidence: float, now_ms: float,
             debounce_ms: float = DEFAULT_DEBOUNCE_MS,
             confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
             same_gesture_factor: float = DEFAULT_SAME_GESTURE_FACTOR,
             source: str = "landmarks",
             ) -> Tuple[DebounceState, Optional[GestureEvent], str]:
    """Evaluate one candidate against the debounce state.

    Returns (new_state, event_or_None, verdict). The state is only
    replaced on emission.
    """
    if gesture is None or gesture == GestureType.NONE or confidence < confidence_threshold:
        return state, None, DROPPED

    if state.last_gesture_time is not None:
        elapsed = now_ms - state.last_gesture_time
        if elapsed < debounce_ms:
            return state, None, SUPPRESSED
        if gesture == state.last_gesture_type and elapsed < debounce_ms * same_gesture_factor:
            return state, None, SUPPRESSED_SAME

    event = GestureEvent(gesture, confidence, now_ms, source)
    return DebounceState(now_ms, gesture), event, EMITTED


class Debouncer:
    """Owns the debounce state and applies evaluate() to each candidate."""

    def __init__(self, config: dict = None, clock=None):
        config = config or {}
        self._debounce_ms = config.get("debounce_ms", DEFAULT_DEBOUNCE_MS)
        self._confidence_threshold = config.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD)
        self._same_gesture_factor = config.get("same_gesture_factor", DEFAULT_SAME_GESTURE_FACTOR)
        self._display_ms = config.get("display_ms", DEFAULT_DISPLAY_MS)
        self._clock = clock or (lambda: time.monotonic() * 1000)

        self._state = DebounceState()
        self._last_event: Optional[GestureEvent] = None
        self._last_verdict: Optional[str] = None
        self._emitted_count = 0
        self._suppressed_count = 0

    def submit(self, gesture: GestureType, confidence: float, now: Optional[float] = None,
               source: str = "landmarks") -> Optional[GestureEvent]:
        """Evaluate a candidate; returns the event if it was accepted.

        Args:
            gesture: candidate gesture
            confidence: candidate confidence in [0, 1]
            now: timestamp in ms; defaults to the debouncer clock
            source: "landmarks", "keyboard" or "motion"
        """
        now = self._clock() if now is None else now
        self._state, event, verdict = evaluate(
            self._state, gesture, confidence, now,
            debounce_ms=self._debounce_ms,
            confidence_threshold=self._confidence_threshold,
            same_gesture_factor=self._same_gesture_factor,
            source=source,
        )
        self._last_verdict = verdict

        if event is not None:
            self._last_event = event
            self._emitted_count += 1
            logger.debug("Gesture accepted: %s (%.2f, %s)", gesture.value, confidence, source)
        elif verdict != DROPPED:
            self._suppressed_count += 1
            logger.debug("Gesture %s %s (%.0fms since %s)",
                         gesture.value, verdict,
                         now - self._state.last_gesture_time,
                         self._state.last_gesture_type.value)
        return event

    def current_gesture(self, now: Optional[float] = None) -> Optional[GestureType]:
        """Gesture to display, cleared display_ms after it was emitted.

        Presentation only; has no effect on what gets emitted.
        """
        if self._last_event is None:
            return None
        now = self._clock() if now is None else now
        if now - self._last_event.timestamp >= self._display_ms:
            return None
        return self._last_event.gesture

    def in_cooldown(self, now: Optional[float] = None) -> bool:
        if self._state.last_gesture_time is None:
            return False
        now = self._clock() if now is None else now
        return now - self._state.last_gesture_time < self._debounce_ms

    @property
    def state(self) -> DebounceState:
        return self._state

    @property
    def last_event(self) -> Optional[GestureEvent]:
        return self._last_event

    @property
    def last_verdict(self) -> Optional[str]:
        return self._last_verdict

    @property
    def emitted_count(self) -> int:
        return self._emitted_count

    @property
    def suppressed_count(self) -> int:
        return self._suppressed_count

    @property
    def debounce_ms(self) -> float:
        return self._debounce_ms

    def reset(self):
        """Clear all state."""
        self._state = DebounceState()
        self._last_event = None
        self._last_verdict = None
        self._emitted_count = 0
        self._suppressed_count = 0
