"""
Shared domain types for the gesture-controlled slideshow.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

import time
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Dict, List, NamedTuple, Sequence, Tuple

import numpy as np

from slidegesture.core.errors import CalibrationError, MalformedHandError, ProfileError

logger = logging.getLogger(__name__)

HAND_LANDMARK_COUNT = 21


# =============================================================================
# Landmarks & Hands
# =============================================================================

class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


def _to_landmark(point) -> Landmark:
    """Coerce a tuple, dict or .x/.y/.z object into a Landmark."""
    if isinstance(point, Landmark):
        return point
    if isinstance(point, dict):
        return Landmark(float(point["x"]), float(point["y"]), float(point.get("z", 0.0)))
    if hasattr(point, "x") and hasattr(point, "y"):
        return Landmark(float(point.x), float(point.y), float(getattr(point, "z", 0.0)))
    x, y, *rest = point
    return Landmark(float(x), float(y), float(rest[0]) if rest else 0.0)


class Hand:
    """Exactly 21 landmarks for one detected hand.

    A hand is either fully present or it is not a Hand at all: the
    constructor raises MalformedHandError on any other landmark count.
    """

    __slots__ = ("landmarks", "handedness", "confidence")

    def __init__(self, landmarks: Sequence[Landmark], handedness: str = "unknown",
                 confidence: float = 1.0):
        if len(landmarks) != HAND_LANDMARK_COUNT:
            raise MalformedHandError(len(landmarks))
        self.landmarks: Tuple[Landmark, ...] = tuple(landmarks)
        self.handedness = handedness
        self.confidence = confidence

    @classmethod
    def from_points(cls, points, handedness: str = "unknown",
                    confidence: float = 1.0) -> "Hand":
        """Build a Hand from raw (x, y, z) triples, dicts or landmark objects."""
        return cls([_to_landmark(p) for p in points], handedness, confidence)

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    def __getitem__(self, index) -> Landmark:
        return self.landmarks[index]

    def __len__(self) -> int:
        return len(self.landmarks)

    def __iter__(self):
        return iter(self.landmarks)

    @property
    def palm_center(self) -> Tuple[float, float]:
        """Calculate palm center from wrist and finger MCPs."""
        points = [self.get(i) for i in (
            LandmarkIndex.WRIST, LandmarkIndex.INDEX_MCP, LandmarkIndex.MIDDLE_MCP,
            LandmarkIndex.RING_MCP, LandmarkIndex.PINKY_MCP,
        )]
        return (
            sum(p.x for p in points) / len(points),
            sum(p.y for p in points) / len(points),
        )

    def to_numpy(self) -> np.ndarray:
        """Landmarks as a (21, 3) float32 array."""
        return np.array(self.landmarks, dtype=np.float32)

    def __repr__(self):
        return f"Hand({self.handedness}, conf={self.confidence:.2f})"


@dataclass
class Frame:
    """Zero or more hands observed at one sampling instant."""
    hands: List[Hand] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_landmark_lists(cls, hand_points: Sequence, handedness: Optional[Sequence[str]] = None,
                            scores: Optional[Sequence[float]] = None,
                            timestamp: Optional[float] = None) -> "Frame":
        """Build a frame from raw per-hand point lists.

        Hands with the wrong landmark count or unreadable points are
        dropped here, so a malformed hand is indistinguishable from no
        detection downstream.
        """
        hands = []
        for i, points in enumerate(hand_points or []):
            label = handedness[i] if handedness and i < len(handedness) else "unknown"
            score = scores[i] if scores and i < len(scores) else 1.0
            try:
                hands.append(Hand.from_points(points, label, score))
            except (MalformedHandError, TypeError, ValueError, KeyError):
                logger.debug("Dropping malformed hand %d", i)
                continue
        return cls(hands=hands, timestamp=timestamp if timestamp is not None else time.time())

    @property
    def primary_hand(self) -> Optional[Hand]:
        return self.hands[0] if self.hands else None

    @property
    def has_hand(self) -> bool:
        return bool(self.hands)


# =============================================================================
# Features
# =============================================================================

FINGERS = ("thumb", "index", "middle", "ring", "pinky")
CURL_FINGERS = ("index", "middle", "ring", "pinky")


@dataclass(frozen=True)
class FeatureVector:
    """Per-hand heuristic scalars derived from one frame.

    extension = wrist.y - tip.y  (positive: tip above the wrist)
    curl      = tip.y - pip.y    (positive: tip dropped below its PIP joint)
    """
    thumb_extension: float
    index_extension: float
    middle_extension: float
    ring_extension: float
    pinky_extension: float
    index_curl: float = 0.0
    middle_curl: float = 0.0
    ring_curl: float = 0.0
    pinky_curl: float = 0.0

    @property
    def extensions(self) -> Dict[str, float]:
        return {f: getattr(self, f"{f}_extension") for f in FINGERS}

    @property
    def curls(self) -> Dict[str, float]:
        return {f: getattr(self, f"{f}_curl") for f in CURL_FINGERS}


# =============================================================================
# Gesture Types
# =============================================================================

class GestureType(Enum):
    """All gesture types the core can emit."""
    NONE = "none"
    SWIPE_LEFT = "swipe_left"
    SWIPE_RIGHT = "swipe_right"
    OPEN_PALM = "open_palm"
    CLOSED_FIST = "closed_fist"
    POINTING = "pointing"
    THUMB_UP = "thumb_up"

    @classmethod
    def from_string(cls, name: str) -> 'GestureType':
        """Convert a gesture name ("THUMB_UP" or "thumb_up") to GestureType, safely."""
        if not name:
            return cls.NONE
        try:
            return cls(str(name).lower())
        except ValueError:
            return cls.NONE

    @property
    def is_dynamic(self) -> bool:
        return self in (GestureType.SWIPE_LEFT, GestureType.SWIPE_RIGHT)


class CalibrationGesture(Enum):
    """Poses sampled during calibration. PINKY_UP is calibration-only."""
    THUMB_UP = "thumb_up"
    PINKY_UP = "pinky_up"
    OPEN_PALM = "open_palm"
    CLOSED_FIST = "closed_fist"
    POINTING = "pointing"


CALIBRATION_SEQUENCE: Tuple[CalibrationGesture, ...] = (
    CalibrationGesture.THUMB_UP,
    CalibrationGesture.PINKY_UP,
    CalibrationGesture.OPEN_PALM,
    CalibrationGesture.CLOSED_FIST,
    CalibrationGesture.POINTING,
)


# =============================================================================
# Gesture ↔ Action Mapping
# =============================================================================

GESTURE_ACTION_MAP: Dict[GestureType, str] = {
    GestureType.SWIPE_LEFT: "previous_slide",
    GestureType.SWIPE_RIGHT: "next_slide",
    GestureType.OPEN_PALM: "play",
    GestureType.CLOSED_FIST: "pause",
    GestureType.POINTING: "pointer",
    GestureType.THUMB_UP: "acknowledge",
}


# =============================================================================
# Data Containers
# =============================================================================

class ClassificationResult:
    """Candidate label produced by the classifier for one frame."""

    __slots__ = ("gesture", "confidence", "features")

    def __init__(self, gesture: GestureType, confidence: float,
                 features: Optional[FeatureVector] = None):
        self.gesture = gesture
        self.confidence = confidence
        self.features = features

    def __repr__(self):
        return f"ClassificationResult({self.gesture.value}, conf={self.confidence:.2f})"

    @property
    def is_none(self) -> bool:
        return self.gesture == GestureType.NONE


class GestureEvent:
    """A gesture accepted by the debouncer.

    Uses __slots__ since one is built per accepted candidate.
    timestamp is in milliseconds, on the same clock the debouncer used.
    """

    __slots__ = ("gesture", "confidence", "timestamp", "source")

    def __init__(self, gesture: GestureType, confidence: float, timestamp: float,
                 source: str = "landmarks"):
        self.gesture = gesture
        self.confidence = max(0.0, min(1.0, float(confidence)))
        self.timestamp = timestamp
        self.source = source

    def __repr__(self):
        return (f"GestureEvent({self.gesture.value}, conf={self.confidence:.2f}, "
                f"t={self.timestamp:.0f}ms, src={self.source})")

    @property
    def action(self) -> Optional[str]:
        return GESTURE_ACTION_MAP.get(self.gesture)


@dataclass(frozen=True)
class DebounceState:
    """Last accepted emission. Owned by the debouncer, replaced on every emit."""
    last_gesture_time: Optional[float] = None
    last_gesture_type: GestureType = GestureType.NONE


# =============================================================================
# Calibration Profile
# =============================================================================

class GestureStats:
    """Running means of named features for one calibration step."""

    __slots__ = ("means", "sample_count")

    def __init__(self):
        self.means: Dict[str, float] = {}
        self.sample_count = 0

    def add(self, values: Dict[str, float]):
        """Fold one sample in: new = (old * n + sample) / (n + 1)."""
        n = self.sample_count
        for name, value in values.items():
            old = self.means.get(name, 0.0)
            self.means[name] = (old * n + float(value)) / (n + 1)
        self.sample_count = n + 1

    def mean(self, name: str) -> Optional[float]:
        if self.sample_count == 0:
            return None
        return self.means.get(name)

    def to_dict(self) -> dict:
        return {"means": dict(self.means), "sample_count": self.sample_count}

    @classmethod
    def from_dict(cls, data: dict) -> "GestureStats":
        stats = cls()
        stats.means = {k: float(v) for k, v in data.get("means", {}).items()}
        stats.sample_count = int(data.get("sample_count", 0))
        return stats


class CalibrationProfile:
    """Per-user, per-gesture baseline feature values.

    Mutated sample-by-sample while calibrating, then frozen and handed to
    the classifier. A frozen profile rejects further samples.
    """

    def __init__(self, user_id: str = "default"):
        self.user_id = user_id
        self.created_at = time.time()
        self.steps: Dict[CalibrationGesture, GestureStats] = {
            step: GestureStats() for step in CALIBRATION_SEQUENCE
        }
        self._frozen = False

    def add_sample(self, step: CalibrationGesture, values: Dict[str, float]):
        if self._frozen:
            raise CalibrationError("profile is frozen")
        self.steps[step].add(values)

    def reset_step(self, step: CalibrationGesture):
        if self._frozen:
            raise CalibrationError("profile is frozen")
        self.steps[step] = GestureStats()

    def mean(self, step: CalibrationGesture, feature: str) -> Optional[float]:
        return self.steps[step].mean(feature)

    def sample_count(self, step: CalibrationGesture) -> int:
        return self.steps[step].sample_count

    def has(self, step: CalibrationGesture) -> bool:
        return self.steps[step].sample_count > 0

    def freeze(self) -> "CalibrationProfile":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "created_at": self.created_at,
            "steps": {step.value: stats.to_dict() for step, stats in self.steps.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalibrationProfile":
        try:
            profile = cls(data.get("user_id", "default"))
            profile.created_at = data.get("created_at", time.time())
            for name, stats in data.get("steps", {}).items():
                profile.steps[CalibrationGesture(name)] = GestureStats.from_dict(stats)
        except (AttributeError, TypeError, ValueError) as e:
            raise ProfileError(f"invalid profile data: {e}") from e
        return profile.freeze()

    def __repr__(self):
        counts = ", ".join(f"{s.value}={st.sample_count}" for s, st in self.steps.items())
        return f"CalibrationProfile({self.user_id}: {counts})"
