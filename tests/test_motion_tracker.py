"""
Tests for Brightness-Centroid Swipe Detection
==============================================
"""

import numpy as np
import pytest

from slidegesture.core.types import GestureType
from slidegesture.recognition.motion_tracker import MotionSwipeTracker

WIDTH, HEIGHT = 400, 100


def bright_block(x0: int, x1: int, channels: int = 3) -> np.ndarray:
    """Dark frame with a bright vertical band between x0 and x1."""
    image = np.zeros((HEIGHT, WIDTH, channels), dtype=np.uint8)
    image[:, x0:x1, :3] = 255
    if channels == 4:
        image[:, :, 3] = 255
    return image


LEFT = bright_block(0, 80)      # sampled x = 0, 40   -> centroid 20
RIGHT = bright_block(200, 280)  # sampled x = 200, 240 -> centroid 220


class TestMotionSwipeTracker:
    """Test suite for MotionSwipeTracker."""

    @pytest.fixture
    def tracker(self):
        return MotionSwipeTracker()

    def test_centroid(self, tracker):
        assert tracker.centroid(LEFT) == pytest.approx(20.0)
        assert tracker.centroid(RIGHT) == pytest.approx(220.0)

    def test_dark_frame_has_no_centroid(self, tracker):
        assert tracker.centroid(np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)) is None

    def test_too_few_bright_pixels(self, tracker):
        image = np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)
        image[:4, 0:10] = 255  # four sampled pixels
        assert tracker.centroid(image) is None

    def test_brightness_must_exceed_threshold(self, tracker):
        image = np.full((HEIGHT, WIDTH, 3), 100, dtype=np.uint8)
        assert tracker.centroid(image) is None

    def test_first_frame_never_swipes(self, tracker):
        assert tracker.update(RIGHT) is None
        assert tracker.last_centroid == pytest.approx(220.0)

    def test_swipe_right(self, tracker):
        tracker.update(LEFT)
        assert tracker.update(RIGHT) == GestureType.SWIPE_RIGHT
        assert tracker.cooling_down

    def test_swipe_left(self, tracker):
        tracker.update(RIGHT)
        assert tracker.update(LEFT) == GestureType.SWIPE_LEFT

    def test_small_move_ignored(self, tracker):
        tracker.update(bright_block(0, 80))
        assert tracker.update(bright_block(40, 120)) is None

    def test_cooldown(self, tracker):
        tracker.update(LEFT)
        tracker.update(RIGHT)

        for _ in range(20):
            assert tracker.update(LEFT) is None
        assert not tracker.cooling_down
        assert tracker.update(RIGHT) == GestureType.SWIPE_RIGHT

    def test_dark_frame_keeps_last_centroid(self, tracker):
        tracker.update(LEFT)
        assert tracker.update(np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)) is None
        assert tracker.update(RIGHT) == GestureType.SWIPE_RIGHT

    def test_mirror(self):
        tracker = MotionSwipeTracker({"mirror": True})
        tracker.update(LEFT)
        assert tracker.update(RIGHT) == GestureType.SWIPE_LEFT

    def test_rgba_buffer(self, tracker):
        tracker.update_buffer(bright_block(0, 80, channels=4).tobytes(), WIDTH)
        assert tracker.update_buffer(bright_block(200, 280, channels=4).tobytes(), WIDTH) \
            == GestureType.SWIPE_RIGHT

    def test_buffer_size_mismatch(self, tracker):
        assert tracker.update_buffer(b"\x00" * 10, WIDTH) is None

    def test_reset(self, tracker):
        tracker.update(LEFT)
        tracker.update(RIGHT)
        tracker.reset()

        assert tracker.last_centroid is None
        assert not tracker.cooling_down
