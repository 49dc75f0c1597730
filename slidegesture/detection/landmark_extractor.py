"""
21-point hand landmark feature extraction.

Features are deliberately simple linear heuristics on the y axis of a
mirrored, upright camera frame:

    extension = wrist.y - tip.y   (> 0: fingertip above the wrist)
    curl      = tip.y - pip.y     (> 0: fingertip dropped below its PIP joint)

They are not normalised for hand size or camera distance.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from slidegesture.core.errors import MalformedHandError
from slidegesture.core.types import FeatureVector, Hand, HAND_LANDMARK_COUNT

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_TIP = 20

FINGER_TIPS = {
    "thumb": THUMB_TIP,
    "index": INDEX_TIP,
    "middle": MIDDLE_TIP,
    "ring": RING_TIP,
    "pinky": PINKY_TIP,
}

# (TIP, PIP) pairs for curl; the thumb has no curl feature
FINGER_CURL_JOINTS = {
    "index": (INDEX_TIP, INDEX_PIP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP),
    "ring": (RING_TIP, RING_PIP),
    "pinky": (PINKY_TIP, PINKY_PIP),
}


def as_hand(hand) -> Optional[Hand]:
    """Coerce raw landmark input into a Hand, or None if it is not one."""
    if hand is None:
        return None
    if isinstance(hand, Hand):
        return hand
    try:
        return Hand.from_points(hand)
    except (MalformedHandError, TypeError, ValueError, KeyError):
        return None


def extract_features(hand) -> Optional[FeatureVector]:
    """Derive the per-finger extension and curl scalars for one hand.

    Pure: no state, same input gives the same FeatureVector. Returns None
    for anything that is not a full 21-landmark hand.
    """
    hand = as_hand(hand)
    if hand is None or len(hand) != HAND_LANDMARK_COUNT:
        return None

    wrist_y = hand[WRIST].y
    ext = {name: wrist_y - hand[tip].y for name, tip in FINGER_TIPS.items()}
    curl = {name: hand[tip].y - hand[pip].y for name, (tip, pip) in FINGER_CURL_JOINTS.items()}

    return FeatureVector(
        thumb_extension=ext["thumb"],
        index_extension=ext["index"],
        middle_extension=ext["middle"],
        ring_extension=ext["ring"],
        pinky_extension=ext["pinky"],
        index_curl=curl["index"],
        middle_curl=curl["middle"],
        ring_curl=curl["ring"],
        pinky_curl=curl["pinky"],
    )


class LandmarkExtractor:
    """Feature extraction plus the geometric helpers the UI layer needs."""

    def __init__(self, frame_width: int = 640, frame_height: int = 480):
        self._frame_width = frame_width
        self._frame_height = frame_height

    def to_pixel_coords(self, hand: Hand) -> np.ndarray:
        """Normalized landmarks to a (21, 2) array of pixel x, y."""
        landmarks = hand.to_numpy()
        pixels = np.zeros((HAND_LANDMARK_COUNT, 2), dtype=np.int32)
        pixels[:, 0] = (landmarks[:, 0] * self._frame_width).astype(np.int32)
        pixels[:, 1] = (landmarks[:, 1] * self._frame_height).astype(np.int32)
        return pixels

    def get_bounding_box(self, hand: Hand, padding: float = 0.1) -> tuple:
        """Bounding box around the hand as (x, y, w, h) in pixels."""
        pixels = self.to_pixel_coords(hand)
        x_min, y_min = pixels.min(axis=0)
        x_max, y_max = pixels.max(axis=0)

        w = int(x_max - x_min)
        h = int(y_max - y_min)
        pad_x = int(w * padding)
        pad_y = int(h * padding)

        return (
            max(0, int(x_min) - pad_x),
            max(0, int(y_min) - pad_y),
            w + 2 * pad_x,
            h + 2 * pad_y,
        )

    @staticmethod
    def get_pointer_position(hand: Hand, mirror: bool = True) -> Tuple[float, float]:
        """Laser pointer position from the index fingertip, normalized.

        The preview is mirrored, so x is flipped by default.
        """
        tip = hand[INDEX_TIP]
        return (1.0 - tip.x if mirror else tip.x, tip.y)
