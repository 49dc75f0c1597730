"""
Rule-based static gesture classifier.

Rules are evaluated in a fixed priority order, most specific first, and
the first match wins:

    THUMB_UP    thumb extended, index and middle below the wrist line
    POINTING    index extended, middle/ring/pinky below the wrist line
    OPEN_PALM   all five fingers extended
    CLOSED_FIST all four non-thumb fingers curled
    NONE        otherwise

Swipes are motion gestures and never come out of this classifier.

Default thresholds come from gestures.yaml; a CalibrationProfile replaces
a rule's threshold with the user's baseline scaled by calibration_ratio.
"""

import logging
from typing import Dict, Optional

from slidegesture.core.types import (
    CalibrationGesture, CalibrationProfile, ClassificationResult, FeatureVector,
    GestureType, CURL_FINGERS, FINGERS,
)
from slidegesture.detection.landmark_extractor import extract_features

logger = logging.getLogger(__name__)

LANDMARK_CONFIDENCE = 0.9
MANUAL_CONFIDENCE = 1.0

_DEFAULT_RULES = {
    "thumb_up": 0.1,
    "pointing": 0.05,
    "open_palm": 0.0,
    "closed_fist": 0.0,
    "below_wrist": 0.0,
}


def _default_thresholds(rules: dict) -> Dict[str, dict]:
    open_palm = rules["open_palm"]
    closed_fist = rules["closed_fist"]
    return {
        "thumb_up": {"thumb": float(rules["thumb_up"])},
        "pointing": {"index": float(rules["pointing"])},
        "open_palm": {
            f: float(open_palm.get(f, 0.0) if isinstance(open_palm, dict) else open_palm)
            for f in FINGERS
        },
        "closed_fist": {
            f: float(closed_fist.get(f, 0.0) if isinstance(closed_fist, dict) else closed_fist)
            for f in CURL_FINGERS
        },
    }


class GestureClassifier:
    """Classifies FeatureVectors into static gestures with a confidence."""

    def __init__(self, config: dict = None, gesture_rules: dict = None,
                 profile: Optional[CalibrationProfile] = None):
        """Initialize the classifier.

        Args:
            config: recognition section from config.yaml
            gesture_rules: thresholds section from gestures.yaml
            profile: optional frozen calibration profile
        """
        config = config or {}
        self._rules = {**_DEFAULT_RULES, **(gesture_rules or {})}
        self._below_wrist = float(self._rules["below_wrist"])
        self._calibration_ratio = config.get("calibration_ratio", 0.8)
        self._confidence_mode = config.get("confidence_mode", "fixed")
        self._margin_scale = config.get("margin_scale", 0.1)

        self._thresholds = _default_thresholds(self._rules)
        self._profile = None
        if profile is not None:
            self.set_profile(profile)

    # =========================================================================
    # Calibration
    # =========================================================================

    def set_profile(self, profile: CalibrationProfile):
        """Override default thresholds with calibrated baselines."""
        self._profile = profile
        self._thresholds = _default_thresholds(self._rules)

        self._calibrate("thumb_up", "thumb", profile, CalibrationGesture.THUMB_UP, "thumb_extension")
        self._calibrate("pointing", "index", profile, CalibrationGesture.POINTING, "index_extension")
        for finger in CURL_FINGERS:
            self._calibrate("open_palm", finger, profile,
                            CalibrationGesture.OPEN_PALM, f"{finger}_extension")
            self._calibrate("closed_fist", finger, profile,
                            CalibrationGesture.CLOSED_FIST, f"{finger}_curl")

        logger.info("Calibration profile '%s' applied: %s", profile.user_id, self._thresholds)

    def _calibrate(self, rule: str, finger: str, profile: CalibrationProfile,
                   step: CalibrationGesture, feature: str):
        mean = profile.mean(step, feature)
        if mean is None:
            return
        if mean <= 0:
            logger.warning("Ignoring non-positive baseline %s.%s=%.3f, keeping default %.3f",
                           step.value, feature, mean, self._thresholds[rule][finger])
            return
        self._thresholds[rule][finger] = mean * self._calibration_ratio

    def clear_profile(self):
        """Return to the default thresholds."""
        self._profile = None
        self._thresholds = _default_thresholds(self._rules)

    @property
    def profile(self) -> Optional[CalibrationProfile]:
        return self._profile

    @property
    def thresholds(self) -> Dict[str, dict]:
        """Effective thresholds per rule."""
        return {rule: dict(values) for rule, values in self._thresholds.items()}

    # =========================================================================
    # Classification
    # =========================================================================

    def classify_hand(self, hand) -> ClassificationResult:
        """Extract features and classify. No hand means NONE."""
        features = extract_features(hand)
        if features is None:
            return ClassificationResult(GestureType.NONE, 0.0)
        return self.classify(features)

    def classify(self, features: Optional[FeatureVector]) -> ClassificationResult:
        """Apply the rules in priority order."""
        if features is None:
            return ClassificationResult(GestureType.NONE, 0.0)

        for gesture, rule in (
            (GestureType.THUMB_UP, self._thumb_up_margins),
            (GestureType.POINTING, self._pointing_margins),
            (GestureType.OPEN_PALM, self._open_palm_margins),
            (GestureType.CLOSED_FIST, self._closed_fist_margins),
        ):
            margins = rule(features)
            if all(m > 0 for m in margins):
                return ClassificationResult(gesture, self._confidence(margins), features)

        return ClassificationResult(GestureType.NONE, 0.0, features)

    # Each rule returns its margins; the rule matches when every margin is positive.

    def _thumb_up_margins(self, f: FeatureVector) -> list:
        return [
            f.thumb_extension - self._thresholds["thumb_up"]["thumb"],
            self._below_wrist - f.index_extension,
            self._below_wrist - f.middle_extension,
        ]

    def _pointing_margins(self, f: FeatureVector) -> list:
        return [
            f.index_extension - self._thresholds["pointing"]["index"],
            self._below_wrist - f.middle_extension,
            self._below_wrist - f.ring_extension,
            self._below_wrist - f.pinky_extension,
        ]

    def _open_palm_margins(self, f: FeatureVector) -> list:
        thresholds = self._thresholds["open_palm"]
        return [value - thresholds[finger] for finger, value in f.extensions.items()]

    def _closed_fist_margins(self, f: FeatureVector) -> list:
        thresholds = self._thresholds["closed_fist"]
        return [value - thresholds[finger] for finger, value in f.curls.items()]

    def _confidence(self, margins: list) -> float:
        if self._confidence_mode != "margin":
            return LANDMARK_CONFIDENCE
        margin = min(margins)
        score = 0.5 + 0.5 * min(1.0, margin / max(self._margin_scale, 1e-6))
        return max(0.0, min(1.0, score))
