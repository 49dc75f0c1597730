"""
Core pipeline orchestrator for the gesture recognition system.

Architecture:
    hand-tracking frame -> LandmarkExtractor -> GestureClassifier -> Debouncer -> on_gesture
    raw pixels          -> MotionSwipeTracker ----------------------> Debouncer -> on_gesture
    key press / manual  --------------------------------------------> Debouncer -> on_gesture

Every path is synchronous and finishes before the next frame callback.
Disabling the pipeline just stops new frames from being processed.
"""

import time
import logging
from contextlib import nullcontext
from typing import Callable, Optional

from slidegesture.core.events import EventBus, Events
from slidegesture.control.debouncer import DROPPED
from slidegesture.core.types import Frame, GestureEvent, GestureType
from slidegesture.detection.landmark_extractor import extract_features
from slidegesture.recognition.gesture_classifier import MANUAL_CONFIDENCE
from slidegesture.utils.logger import GestureLogger

logger = logging.getLogger(__name__)


class PipelineResult:
    """Result of a single pipeline call."""

    __slots__ = (
        "hand_detected", "hand_count", "candidate", "candidate_confidence",
        "event", "verdict", "latency_ms", "source", "timestamp",
    )

    def __init__(self, source: str = "landmarks"):
        self.hand_detected = False
        self.hand_count = 0
        self.candidate = GestureType.NONE
        self.candidate_confidence = 0.0
        self.event: Optional[GestureEvent] = None
        self.verdict = None
        self.latency_ms = 0.0
        self.source = source
        self.timestamp = time.time()


class GesturePipeline:
    """Composable gesture pipeline with a single event output.

    Args:
        classifier: GestureClassifier
        debouncer: Debouncer
        on_gesture: callback(gesture_type, confidence) for accepted events
        motion_tracker: optional MotionSwipeTracker for the pixel path
        event_bus: optional EventBus, receives GESTURE_DETECTED etc.
        performance_monitor: optional PerformanceMonitor
    """

    def __init__(
        self,
        classifier,
        debouncer,
        on_gesture: Optional[Callable[[GestureType, float], None]] = None,
        motion_tracker=None,
        event_bus: Optional[EventBus] = None,
        performance_monitor=None,
        gesture_logger: Optional[GestureLogger] = None,
        config: dict = None,
    ):
        self._classifier = classifier
        self._debouncer = debouncer
        self._on_gesture = on_gesture
        self._motion_tracker = motion_tracker
        self._bus = event_bus
        self._perf = performance_monitor
        self._gesture_logger = gesture_logger or GestureLogger()

        config = config or {}
        self._enabled = config.get("enabled", True)

        self._hand_present = False
        self._last_result: Optional[PipelineResult] = None

    # =========================================================================
    # Enable / disable
    # =========================================================================

    def enable(self):
        self._enabled = True
        logger.info("Gesture pipeline enabled")
        self._emit(Events.PIPELINE_ENABLED)

    def disable(self):
        self._enabled = False
        self._hand_present = False
        logger.info("Gesture pipeline disabled")
        self._emit(Events.PIPELINE_DISABLED)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # =========================================================================
    # Entry points
    # =========================================================================

    def process(self, frame: Frame, now: Optional[float] = None) -> Optional[GestureEvent]:
        """Landmark path: classify the primary hand and debounce.

        A frame without a valid hand classifies as NONE and yields nothing.
        """
        if not self._enabled:
            return None

        start = time.perf_counter()
        result = PipelineResult("landmarks")
        hand = frame.primary_hand if frame is not None else None
        result.hand_detected = hand is not None
        result.hand_count = len(frame.hands) if frame is not None else 0
        self._track_presence(result.hand_detected, hand)

        if hand is not None:
            with self._measure("extraction"):
                features = extract_features(hand)
            with self._measure("classification"):
                classification = self._classifier.classify(features)
            result.candidate = classification.gesture
            result.candidate_confidence = classification.confidence

            if not classification.is_none:
                self._emit(Events.GESTURE_CANDIDATE, gesture=classification.gesture,
                           confidence=classification.confidence)

        return self._finish(result, start, now)

    def process_landmarks(self, hands, handedness=None, scores=None,
                          now: Optional[float] = None) -> Optional[GestureEvent]:
        """Convenience for raw per-hand landmark lists from a tracker callback."""
        if not self._enabled:
            return None
        return self.process(Frame.from_landmark_lists(hands, handedness, scores), now=now)

    def process_pixels(self, image, now: Optional[float] = None) -> Optional[GestureEvent]:
        """Motion path: brightness-centroid swipe detection on raw pixels."""
        if not self._enabled or self._motion_tracker is None:
            return None

        start = time.perf_counter()
        result = PipelineResult("motion")
        with self._measure("motion"):
            swipe = self._motion_tracker.update(image)
        if swipe is not None:
            result.candidate = swipe
            result.candidate_confidence = MANUAL_CONFIDENCE
        return self._finish(result, start, now)

    def trigger(self, gesture: GestureType, confidence: float = MANUAL_CONFIDENCE,
                source: str = "keyboard", now: Optional[float] = None) -> Optional[GestureEvent]:
        """Manual path: bypasses extraction and classification, still debounced."""
        if not self._enabled:
            return None

        start = time.perf_counter()
        result = PipelineResult(source)
        result.candidate = gesture
        result.candidate_confidence = confidence
        return self._finish(result, start, now)

    # =========================================================================
    # Internals
    # =========================================================================

    def _finish(self, result: PipelineResult, start: float,
                now: Optional[float]) -> Optional[GestureEvent]:
        event = None
        if result.candidate != GestureType.NONE:
            with self._measure("debounce"):
                event = self._debouncer.submit(result.candidate, result.candidate_confidence,
                                               now=now, source=result.source)
            result.verdict = self._debouncer.last_verdict
            if event is None and result.verdict != DROPPED:
                self._emit(Events.GESTURE_SUPPRESSED, gesture=result.candidate,
                           verdict=result.verdict)

        result.event = event
        result.latency_ms = (time.perf_counter() - start) * 1000
        self._last_result = result

        if self._perf is not None:
            self._perf.tick()

        if event is not None:
            self._dispatch(event, result.latency_ms)
        return event

    def _dispatch(self, event: GestureEvent, latency_ms: float):
        self._gesture_logger.log_gesture(event.gesture.value, event.confidence,
                                         event.action, latency_ms, event.source)
        self._emit(Events.GESTURE_DETECTED, gesture=event.gesture,
                   confidence=event.confidence, event=event)
        if self._on_gesture is None:
            return
        try:
            self._on_gesture(event.gesture, event.confidence)
        except Exception as e:
            logger.error("Gesture callback failed for %s: %s", event.gesture.value, e)

    def _track_presence(self, present: bool, hand):
        if present and not self._hand_present:
            self._emit(Events.HAND_DETECTED, hand=hand)
        elif not present and self._hand_present:
            self._emit(Events.HAND_LOST)
        self._hand_present = present

    def _measure(self, stage: str):
        if self._perf is not None:
            return self._perf.measure(stage)
        return nullcontext()

    def _emit(self, event_name: str, **kwargs):
        if self._bus is not None:
            self._bus.emit(event_name, **kwargs)

    # =========================================================================
    # State
    # =========================================================================

    def set_callback(self, on_gesture: Optional[Callable[[GestureType, float], None]]):
        self._on_gesture = on_gesture

    @property
    def last_result(self) -> Optional[PipelineResult]:
        return self._last_result

    @property
    def classifier(self):
        return self._classifier

    @property
    def debouncer(self):
        return self._debouncer

    @property
    def gesture_logger(self) -> GestureLogger:
        return self._gesture_logger

    def current_gesture(self) -> Optional[GestureType]:
        """Gesture to show in the UI (cleared after the display window)."""
        return self._debouncer.current_gesture()
