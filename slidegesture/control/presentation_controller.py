"""
Presentation-side consumer of accepted gestures.

Maps each gesture to a slideshow action:
    SWIPE_LEFT / SWIPE_RIGHT -> previous / next slide (bounded)
    OPEN_PALM / CLOSED_FIST  -> play / pause media
    POINTING                 -> activate the laser pointer
    THUMB_UP                 -> acknowledge
"""

import time
import logging
from collections import deque
from typing import Optional, Tuple

from slidegesture.core.events import Events
from slidegesture.core.types import GESTURE_ACTION_MAP, GestureType
from slidegesture.detection.landmark_extractor import LandmarkExtractor

logger = logging.getLogger(__name__)


class SlideDeck:
    """Slide index bounded to [0, slide_count - 1]."""

    def __init__(self, slide_count: int, start: int = 0):
        if slide_count < 1:
            raise ValueError("a deck needs at least one slide")
        self._count = slide_count
        self._index = max(0, min(start, slide_count - 1))

    def next(self) -> bool:
        if self._index >= self._count - 1:
            return False
        self._index += 1
        return True

    def previous(self) -> bool:
        if self._index <= 0:
            return False
        self._index -= 1
        return True

    @property
    def index(self) -> int:
        return self._index

    @property
    def count(self) -> int:
        return self._count


class PresentationController:
    """Applies gesture events to a SlideDeck, media state and pointer."""

    def __init__(self, deck: SlideDeck, event_bus=None, log_size: int = 10):
        self._deck = deck
        self._bus = event_bus
        self._playing = False
        self._pointer_active = False
        self._pointer_position: Tuple[float, float] = (0.5, 0.5)
        self._acknowledged = 0
        self._gesture_log = deque(maxlen=log_size)

    def handle(self, gesture: GestureType, confidence: float = 1.0) -> Optional[str]:
        """on_gesture callback; returns the action taken, if any."""
        action = GESTURE_ACTION_MAP.get(gesture)
        if action is None:
            logger.debug("No action for gesture %s", gesture)
            return None

        self._gesture_log.append({
            "gesture": gesture,
            "confidence": confidence,
            "slide": self._deck.index,
            "timestamp": time.time(),
        })

        if action in ("next_slide", "previous_slide"):
            moved = self._deck.next() if action == "next_slide" else self._deck.previous()
            if moved:
                logger.info("Slide %d of %d", self._deck.index + 1, self._deck.count)
                self._emit(Events.SLIDE_CHANGED, index=self._deck.index, count=self._deck.count)
            else:
                logger.info("Already at %s slide", "last" if action == "next_slide" else "first")
        elif action in ("play", "pause"):
            playing = action == "play"
            if playing != self._playing:
                self._playing = playing
                self._emit(Events.MEDIA_STATE_CHANGED, playing=playing)
            logger.info("Media %s", "playing" if playing else "paused")
        elif action == "pointer":
            self._pointer_active = True
            logger.info("Laser pointer activated")
        elif action == "acknowledge":
            self._acknowledged += 1
            logger.info("Thumbs up acknowledged")
        return action

    def update_pointer(self, hand) -> Optional[Tuple[float, float]]:
        """Move the pointer to the index fingertip while it is active."""
        if not self._pointer_active or hand is None:
            return None
        self._pointer_position = LandmarkExtractor.get_pointer_position(hand)
        self._emit(Events.POINTER_MOVED, position=self._pointer_position)
        return self._pointer_position

    def deactivate_pointer(self, **kwargs):
        """Turn the pointer off; also used as a HAND_LOST listener."""
        if self._pointer_active:
            self._pointer_active = False
            logger.info("Laser pointer deactivated")

    def _emit(self, event_name: str, **kwargs):
        if self._bus is not None:
            self._bus.emit(event_name, **kwargs)

    @property
    def deck(self) -> SlideDeck:
        return self._deck

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def pointer_active(self) -> bool:
        return self._pointer_active

    @property
    def pointer_position(self) -> Tuple[float, float]:
        return self._pointer_position

    @property
    def acknowledged(self) -> int:
        return self._acknowledged

    @property
    def gesture_log(self) -> list:
        return list(self._gesture_log)
