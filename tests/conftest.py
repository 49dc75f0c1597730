"""
Shared fixtures for the gesture core tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from slidegesture.core.types import Hand, Landmark
from slidegesture.utils.config import Config

WRIST_Y = 0.6

# (MCP, PIP, DIP, TIP) offsets above the wrist
_FINGER_UP = (0.10, 0.18, 0.23, 0.28)
_FINGER_DOWN = (0.10, 0.15, 0.08, -0.02)
_FINGER_X = {"index": 0.45, "middle": 0.50, "ring": 0.55, "pinky": 0.60}


def create_mock_hand(finger_states: dict = None, handedness: str = "Right",
                     extensions: dict = None) -> Hand:
    """
    Create a mock hand for testing.

    Args:
        finger_states: finger -> "up" or "down" (default "down")
        extensions: finger -> exact tip height above the wrist, overrides
            the tip of that finger only

    Returns:
        Hand with 21 landmarks, upright in a normalized frame
    """
    finger_states = finger_states or {}
    extensions = extensions or {}
    base_x = 0.5

    points = [Landmark(base_x, WRIST_Y, 0.0)]

    thumb_up = finger_states.get("thumb", "down") == "up"
    thumb_offsets = (0.04, 0.08, 0.14, 0.20) if thumb_up else (0.02, 0.03, 0.0, -0.03)
    for i, off in enumerate(thumb_offsets):
        if i == 3 and "thumb" in extensions:
            off = extensions["thumb"]
        points.append(Landmark(base_x - 0.08 - 0.02 * i, WRIST_Y - off, 0.0))

    for finger, x in _FINGER_X.items():
        offsets = _FINGER_UP if finger_states.get(finger, "down") == "up" else _FINGER_DOWN
        for i, off in enumerate(offsets):
            if i == 3 and finger in extensions:
                off = extensions[finger]
            points.append(Landmark(x, WRIST_Y - off, 0.0))

    return Hand(points, handedness=handedness, confidence=0.95)


POSES = {
    "thumb_up": {"thumb": "up"},
    "pinky_up": {"pinky": "up"},
    "pointing": {"index": "up"},
    "open_palm": {f: "up" for f in ("thumb", "index", "middle", "ring", "pinky")},
    "closed_fist": {},
    "victory": {"index": "up", "middle": "up"},
}


@pytest.fixture
def mock_hand():
    """Factory fixture: mock_hand("open_palm") or mock_hand({...})."""
    def _make(pose="closed_fist", **kwargs):
        states = POSES[pose] if isinstance(pose, str) else pose
        return create_mock_hand(states, **kwargs)
    return _make


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fresh_config():
    """A reset Config singleton, reset again afterwards."""
    Config.reset()
    yield Config()
    Config.reset()
