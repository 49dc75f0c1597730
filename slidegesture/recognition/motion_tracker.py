"""
Landmark-free swipe detection from frame brightness.

The mean x of bright pixels is used as a crude hand-position proxy; a
large enough jump of that centroid between frames is a swipe. Works on
raw RGB/RGBA pixels so it needs no hand-tracking model at all.
"""

import logging
from typing import Optional

import numpy as np

from slidegesture.core.types import GestureType

logger = logging.getLogger(__name__)


class MotionSwipeTracker:
    """Brightness-centroid swipe detector with a frame-count cooldown."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._stride = max(1, int(config.get("stride", 40)))
        self._brightness_threshold = config.get("brightness_threshold", 100)
        self._min_bright_pixels = config.get("min_bright_pixels", 10)
        self._swipe_threshold_px = config.get("swipe_threshold_px", 50)
        self._cooldown_frames = config.get("cooldown_frames", 20)
        self._mirror = config.get("mirror", False)

        self._last_x: Optional[float] = None
        self._cooldown = 0

    def centroid(self, image: np.ndarray) -> Optional[float]:
        """Mean x of sampled bright pixels, or None if too few are bright.

        Pixels are sampled every `stride` pixels in row-major order, the
        same walk as stepping through a flat RGBA buffer.
        """
        if image is None or image.ndim != 3 or image.shape[2] < 3:
            return None
        width = image.shape[1]
        flat = image.reshape(-1, image.shape[2])[::self._stride, :3].astype(np.float32)
        brightness = flat.sum(axis=1) / 3.0
        bright = np.flatnonzero(brightness > self._brightness_threshold)
        if bright.size < self._min_bright_pixels:
            return None
        xs = (bright * self._stride) % width
        return float(xs.mean())

    def update(self, image: np.ndarray) -> Optional[GestureType]:
        """Feed one frame; returns SWIPE_LEFT/SWIPE_RIGHT or None."""
        x = self.centroid(image)
        if x is None:
            return None

        last_x = self._last_x
        self._last_x = x

        if self._cooldown > 0:
            self._cooldown -= 1
            return None

        if last_x is None:
            return None

        delta = x - last_x
        if abs(delta) <= self._swipe_threshold_px:
            return None

        self._cooldown = self._cooldown_frames
        moving_right = delta > 0
        if self._mirror:
            moving_right = not moving_right
        gesture = GestureType.SWIPE_RIGHT if moving_right else GestureType.SWIPE_LEFT
        logger.debug("Motion swipe %s (dx=%.1fpx)", gesture.value, delta)
        return gesture

    def update_buffer(self, data, width: int) -> Optional[GestureType]:
        """Feed a flat RGBA byte buffer of the given pixel width."""
        pixels = np.frombuffer(bytes(data), dtype=np.uint8) if not isinstance(data, np.ndarray) \
            else data.astype(np.uint8, copy=False).ravel()
        if width <= 0 or pixels.size % (width * 4):
            return None
        return self.update(pixels.reshape(-1, width, 4))

    def reset(self):
        self._last_x = None
        self._cooldown = 0

    @property
    def cooling_down(self) -> bool:
        return self._cooldown > 0

    @property
    def last_centroid(self) -> Optional[float]:
        return self._last_x
