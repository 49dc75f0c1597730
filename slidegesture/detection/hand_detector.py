"""
MediaPipe Hands wrapper producing Frames for the gesture pipeline.

This is the boundary with the external hand-tracking model: everything
downstream only sees Frame / Hand objects.
"""

import time
import logging
import numpy as np
import mediapipe as mp

from slidegesture.core.types import Frame

logger = logging.getLogger(__name__)


class HandDetector:
    """MediaPipe Hands wrapper tuned for a live webcam preview."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._model_complexity = config.get("model_complexity", 0)
        self._max_hands = config.get("max_num_hands", 2)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._mp_hands = mp.solutions.hands
        self._mp_drawing = mp.solutions.drawing_utils
        self._mp_drawing_styles = mp.solutions.drawing_styles

        self._hands = None
        self._initialized = False

    def initialize(self):
        """Initialize MediaPipe Hands solution."""
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            model_complexity=self._model_complexity,
            max_num_hands=self._max_hands,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._initialized = True
        logger.info(
            "MediaPipe Hands initialized (complexity=%d, max_hands=%d, "
            "detect_conf=%.2f, track_conf=%.2f)",
            self._model_complexity, self._max_hands,
            self._min_detect_conf, self._min_track_conf,
        )

    def process(self, rgb_frame: np.ndarray):
        """Run MediaPipe on an RGB frame and return its raw results."""
        if not self._initialized:
            self.initialize()

        # Set frame as non-writable for performance
        rgb_frame.flags.writeable = False
        results = self._hands.process(rgb_frame)
        rgb_frame.flags.writeable = True
        return results

    @staticmethod
    def to_frame(results, timestamp: float = None) -> Frame:
        """Convert MediaPipe results into a Frame of validated hands."""
        timestamp = time.time() if timestamp is None else timestamp
        if results is None or not results.multi_hand_landmarks:
            return Frame(hands=[], timestamp=timestamp)

        points, labels, scores = [], [], []
        for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
            points.append(hand_landmarks.landmark)
            handedness = results.multi_handedness[i] if results.multi_handedness else None
            if handedness is not None and handedness.classification:
                labels.append(handedness.classification[0].label)
                scores.append(handedness.classification[0].score)
            else:
                labels.append("unknown")
                scores.append(1.0)
        return Frame.from_landmark_lists(points, labels, scores, timestamp)

    def detect(self, rgb_frame: np.ndarray) -> Frame:
        """Detect hands in an RGB frame."""
        return self.to_frame(self.process(rgb_frame))

    def draw_landmarks(self, frame: np.ndarray, results):
        """Draw hand landmarks and connections on a BGR frame."""
        if results and results.multi_hand_landmarks:
            for hand_landmarks in results.multi_hand_landmarks:
                self._mp_drawing.draw_landmarks(
                    frame,
                    hand_landmarks,
                    self._mp_hands.HAND_CONNECTIONS,
                    self._mp_drawing_styles.get_default_hand_landmarks_style(),
                    self._mp_drawing_styles.get_default_hand_connections_style(),
                )
        return frame

    def close(self):
        """Release MediaPipe resources."""
        if self._hands:
            self._hands.close()
            self._initialized = False
            logger.info("MediaPipe Hands closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
