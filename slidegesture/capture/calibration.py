"""
Interactive per-user hand calibration.

Walks the user through a fixed sequence of poses and collects
`samples_needed` landmark samples for each, folding pose-specific features
into running means. The finished CalibrationProfile replaces the
classifier's default thresholds.

Per-step status:
    IDLE -> COLLECTING -> SUCCESS
                       -> ERROR   (timeout_s elapsed before enough samples)

Sample folding happens synchronously inside sample(); the timeout
watchdog only ever flips status, never touches accumulated samples.
"""

import time
import logging
from enum import Enum
from typing import Callable, Dict, Optional

from slidegesture.core.errors import CalibrationError
from slidegesture.core.events import Events
from slidegesture.core.types import (
    CALIBRATION_SEQUENCE, CalibrationGesture, CalibrationProfile, Frame, Hand,
)
from slidegesture.detection.landmark_extractor import (
    WRIST, THUMB_TIP, PINKY_TIP, as_hand, extract_features,
)

logger = logging.getLogger(__name__)


class CalibrationStatus(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    SUCCESS = "success"
    ERROR = "error"


STEP_INSTRUCTIONS = {
    CalibrationGesture.THUMB_UP: "Hold your thumb up and keep the other fingers down.",
    CalibrationGesture.PINKY_UP: "Extend only your pinky finger upward.",
    CalibrationGesture.OPEN_PALM: "Extend all your fingers like a high five.",
    CalibrationGesture.CLOSED_FIST: "Make a fist by curling all your fingers.",
    CalibrationGesture.POINTING: "Extend only your index finger.",
}


def step_features(step: CalibrationGesture, hand: Hand) -> Dict[str, float]:
    """Features sampled for a calibration step."""
    features = extract_features(hand)
    wrist_y = hand[WRIST].y
    if step == CalibrationGesture.THUMB_UP:
        return {
            "thumb_extension": features.thumb_extension,
            "thumb_tip_y": hand[THUMB_TIP].y,
            "wrist_y": wrist_y,
        }
    if step == CalibrationGesture.PINKY_UP:
        return {
            "pinky_extension": features.pinky_extension,
            "pinky_tip_y": hand[PINKY_TIP].y,
            "wrist_y": wrist_y,
        }
    if step == CalibrationGesture.OPEN_PALM:
        return {
            "index_extension": features.index_extension,
            "middle_extension": features.middle_extension,
            "ring_extension": features.ring_extension,
            "pinky_extension": features.pinky_extension,
        }
    if step == CalibrationGesture.CLOSED_FIST:
        return {f"{name}_curl": value for name, value in features.curls.items()}
    return {"index_extension": features.index_extension}


class CalibrationCollector:
    """Step-by-step sample collector producing a CalibrationProfile."""

    def __init__(self, config: dict = None, user_id: str = "default",
                 on_complete: Optional[Callable[[CalibrationProfile], None]] = None,
                 event_bus=None, clock=time.monotonic):
        config = config or {}
        self._samples_needed = config.get("samples_needed", 10)
        self._timeout_s = config.get("timeout_s", 10.0)
        self._user_id = user_id
        self._on_complete = on_complete
        self._bus = event_bus
        self._clock = clock

        self._profile = CalibrationProfile(user_id)
        self._step_index = 0
        self._statuses = {step: CalibrationStatus.IDLE for step in CALIBRATION_SEQUENCE}
        self._collect_start: Optional[float] = None

    # =========================================================================
    # Control surface
    # =========================================================================

    def start(self, step: Optional[CalibrationGesture] = None):
        """Begin collecting samples for the current (or given) step."""
        if self._profile.frozen:
            raise CalibrationError("calibration already finished")
        if step is not None:
            self._step_index = CALIBRATION_SEQUENCE.index(step)
        step = self.current_step

        self._profile.reset_step(step)
        self._statuses[step] = CalibrationStatus.COLLECTING
        self._collect_start = self._clock()
        logger.info("Calibration step '%s' collecting (%d samples, %.0fs timeout)",
                    step.value, self._samples_needed, self._timeout_s)
        self._emit(Events.CALIBRATION_STARTED, step=step)

    def sample(self, frame) -> bool:
        """Fold one frame into the current step. Returns True if accepted.

        Frames are ignored unless the step is collecting and a full hand
        is present.
        """
        if self.status != CalibrationStatus.COLLECTING:
            return False
        if self.check_timeout():
            return False

        hand = frame.primary_hand if isinstance(frame, Frame) else as_hand(frame)
        if hand is None:
            return False

        step = self.current_step
        self._profile.add_sample(step, step_features(step, hand))

        if self._profile.sample_count(step) >= self._samples_needed:
            self._statuses[step] = CalibrationStatus.SUCCESS
            self._collect_start = None
            logger.info("Calibration step '%s' complete: %s",
                        step.value, self._profile.steps[step].means)
            self._emit(Events.CALIBRATION_STEP_COMPLETE, step=step,
                       means=dict(self._profile.steps[step].means))
        return True

    def check_timeout(self, now: Optional[float] = None) -> bool:
        """Flip a collecting step to ERROR once timeout_s has elapsed."""
        if self.status != CalibrationStatus.COLLECTING or self._collect_start is None:
            return False
        now = self._clock() if now is None else now
        if now - self._collect_start < self._timeout_s:
            return False

        step = self.current_step
        self._statuses[step] = CalibrationStatus.ERROR
        self._collect_start = None
        logger.warning("Calibration step '%s' timed out with %d/%d samples",
                       step.value, self._profile.sample_count(step), self._samples_needed)
        self._emit(Events.CALIBRATION_TIMEOUT, step=step,
                   samples=self._profile.sample_count(step))
        return True

    def stop(self):
        """Abort collection of the current step without keeping its samples."""
        if self.status == CalibrationStatus.COLLECTING:
            self.reset()

    def reset(self, step: Optional[CalibrationGesture] = None):
        """Clear a step's samples and return it to IDLE."""
        step = step or self.current_step
        self._profile.reset_step(step)
        self._statuses[step] = CalibrationStatus.IDLE
        if step == self.current_step:
            self._collect_start = None

    def next(self) -> Optional[CalibrationProfile]:
        """Advance to the next step; from the last step, finish.

        Returns the finished profile when leaving the final step.
        """
        if self.status != CalibrationStatus.SUCCESS:
            raise CalibrationError(f"step '{self.current_step.value}' is not calibrated")
        if self._step_index < len(CALIBRATION_SEQUENCE) - 1:
            self._step_index += 1
            self._collect_start = None
            return None
        return self.finish()

    def back(self):
        """Go to the previous step, abandoning any collection in progress."""
        if self.status == CalibrationStatus.COLLECTING:
            self.reset()
        if self._step_index > 0:
            self._step_index -= 1
        self._collect_start = None

    def finish(self) -> CalibrationProfile:
        """Freeze the profile and hand it to the on_complete callback."""
        missing = [s.value for s in CALIBRATION_SEQUENCE
                   if self._statuses[s] != CalibrationStatus.SUCCESS]
        if missing:
            raise CalibrationError(f"steps not calibrated: {', '.join(missing)}")

        profile = self._profile.freeze()
        logger.info("Calibration finished for user '%s'", profile.user_id)
        self._emit(Events.CALIBRATION_COMPLETE, profile=profile)
        if self._on_complete is not None:
            self._on_complete(profile)
        return profile

    def cancel(self):
        """Discard all progress."""
        self._profile = CalibrationProfile(self._user_id)
        self._statuses = {step: CalibrationStatus.IDLE for step in CALIBRATION_SEQUENCE}
        self._step_index = 0
        self._collect_start = None
        logger.info("Calibration cancelled")
        self._emit(Events.CALIBRATION_CANCELLED)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def current_step(self) -> CalibrationGesture:
        return CALIBRATION_SEQUENCE[self._step_index]

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def status(self) -> CalibrationStatus:
        return self._statuses[self.current_step]

    @property
    def instruction(self) -> str:
        return STEP_INSTRUCTIONS[self.current_step]

    @property
    def samples_needed(self) -> int:
        return self._samples_needed

    @property
    def samples_collected(self) -> int:
        return self._profile.sample_count(self.current_step)

    @property
    def step_progress(self) -> float:
        return min(1.0, self.samples_collected / self._samples_needed)

    @property
    def overall_progress(self) -> float:
        done = sum(1 for s in CALIBRATION_SEQUENCE if self._statuses[s] == CalibrationStatus.SUCCESS)
        partial = self.step_progress if self.status == CalibrationStatus.COLLECTING else 0.0
        return (done + partial) / len(CALIBRATION_SEQUENCE)

    @property
    def is_finished(self) -> bool:
        return self._profile.frozen

    @property
    def profile(self) -> CalibrationProfile:
        return self._profile

    def _emit(self, event_name: str, **kwargs):
        if self._bus is not None:
            self._bus.emit(event_name, **kwargs)
