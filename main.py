#!/usr/bin/env python3
"""
Slide Gesture Control
Main application entry point.

Usage:
    python main.py                      # Landmark gestures via MediaPipe
    python main.py --mode motion        # Brightness-centroid swipes only
    python main.py --mode demo          # No camera, keys only
    python main.py --calibrate          # Run hand calibration first
    python main.py --profile alice      # Load a saved calibration profile

Keys: arrows / o / c / p / t simulate gestures, k starts calibration,
q quits.
"""

import sys
import os
import signal
import argparse
import logging

import cv2
import numpy as np

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from slidegesture.capture.calibration import CalibrationCollector, CalibrationStatus
from slidegesture.control.debouncer import Debouncer
from slidegesture.control.keyboard import KeyboardSimulator
from slidegesture.control.presentation_controller import PresentationController, SlideDeck
from slidegesture.core.errors import CalibrationError
from slidegesture.core.events import EventBus, Events
from slidegesture.core.pipeline import GesturePipeline
from slidegesture.intelligence.user_profiler import ProfileStore
from slidegesture.recognition.gesture_classifier import GestureClassifier
from slidegesture.recognition.motion_tracker import MotionSwipeTracker
from slidegesture.utils.config import Config
from slidegesture.utils.logger import setup_logging
from slidegesture.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)

WINDOW_NAME = "Slide Gesture Control"


class SlideGestureApp:
    """Wires camera frames, the gesture pipeline and the presentation together."""

    def __init__(self, config: Config, mode: str = "control", user_id: str = "default"):
        self._config = config
        self._mode = mode
        self._user_id = user_id
        self._running = False

        self._bus = EventBus()
        self._perf = PerformanceMonitor(
            window_size=config.get("performance.metrics_window", 60),
            max_fps=config.get("performance.max_fps"),
        )

        self._classifier = GestureClassifier(config.recognition, gesture_rules=config.thresholds)
        self._debouncer = Debouncer(config.debouncing)
        self._motion = MotionSwipeTracker(config.motion) if mode == "motion" else None

        self._presentation = PresentationController(
            SlideDeck(config.get("presentation.slides", 5)), event_bus=self._bus,
        )
        self._pipeline = GesturePipeline(
            classifier=self._classifier,
            debouncer=self._debouncer,
            on_gesture=self._presentation.handle,
            motion_tracker=self._motion,
            event_bus=self._bus,
            performance_monitor=self._perf,
        )
        self._keyboard = KeyboardSimulator(self._pipeline, config.keyboard)

        self._profiles = ProfileStore(config.profiles)
        self._calibration = None

        self._detector = None
        if mode in ("control", "calibrate"):
            from slidegesture.detection.hand_detector import HandDetector
            self._detector = HandDetector(config.mediapipe)

        self._bus.subscribe(Events.CALIBRATION_COMPLETE, self._on_calibration_complete)
        self._bus.subscribe(Events.CALIBRATION_TIMEOUT, self._on_calibration_timeout)
        self._bus.subscribe(Events.HAND_LOST, self._presentation.deactivate_pointer)

        logger.info("SlideGestureApp initialized (mode=%s)", mode)

    # =========================================================================
    # Calibration
    # =========================================================================

    def load_profile(self):
        profile = self._profiles.load(self._user_id)
        if profile is not None:
            self._classifier.set_profile(profile)

    def start_calibration(self):
        if self._detector is None:
            logger.warning("Calibration needs hand tracking (use --mode control)")
            return
        self._pipeline.disable()
        self._calibration = CalibrationCollector(
            self._config.calibration, user_id=self._user_id,
            on_complete=self._classifier.set_profile, event_bus=self._bus,
        )
        logger.info("=== HAND CALIBRATION === %s (press space to sample)",
                    self._calibration.instruction)

    def _advance_calibration(self):
        """Space bar: start, retry or move on, depending on step status."""
        cal = self._calibration
        status = cal.status
        if status in (CalibrationStatus.IDLE, CalibrationStatus.ERROR):
            cal.start()
        elif status == CalibrationStatus.SUCCESS:
            try:
                cal.next()
            except CalibrationError as e:
                logger.warning("Calibration: %s", e)
                return
            if not cal.is_finished:
                logger.info("Next pose: %s", cal.instruction)

    def _on_calibration_complete(self, profile=None, **kwargs):
        self._profiles.save(profile)
        self._calibration = None
        self._pipeline.enable()

    def _on_calibration_timeout(self, step=None, samples=0, **kwargs):
        logger.warning("Not enough samples for %s (%d); press space to retry",
                       step.value if step else "?", samples)

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(self, calibrate: bool = False) -> bool:
        cam_cfg = self._config.camera
        cap = None
        if self._mode != "demo":
            cap = cv2.VideoCapture(cam_cfg.get("device_id", 0))
            if not cap.isOpened():
                logger.error("Failed to open camera %s", cam_cfg.get("device_id", 0))
                return False
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, cam_cfg.get("width", 640))
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cam_cfg.get("height", 480))

        self.load_profile()
        if calibrate or self._mode == "calibrate":
            self.start_calibration()

        self._running = True
        try:
            while self._running:
                frame = self._read(cap, cam_cfg.get("mirror", True))
                self._handle_key(cv2.waitKeyEx(1))
                if frame is not None:
                    cv2.imshow(WINDOW_NAME, self._overlay(frame))
        finally:
            self._shutdown(cap)
        return True

    def _read(self, cap, mirror: bool):
        if cap is None:
            return self._blank()
        ok, bgr = cap.read()
        if not ok:
            return None
        if mirror:
            bgr = cv2.flip(bgr, 1)

        if self._motion is not None:
            self._pipeline.process_pixels(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB))
        elif self._detector is not None:
            results = self._detector.process(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB))
            frame = self._detector.to_frame(results)
            if self._calibration is not None:
                self._calibration.sample(frame)
                self._calibration.check_timeout()
            else:
                self._pipeline.process(frame)
                self._presentation.update_pointer(frame.primary_hand)
            self._detector.draw_landmarks(bgr, results)
        return bgr

    @staticmethod
    def _blank():
        return np.zeros((240, 480, 3), dtype=np.uint8)

    def _handle_key(self, code: int):
        name = KeyboardSimulator.key_name(code)
        if name is None:
            return
        if name == "q":
            self._running = False
        elif name == "k":
            self.start_calibration()
        elif name == " " and self._calibration is not None:
            self._advance_calibration()
        elif name == "x" and self._calibration is not None:
            self._calibration.cancel()
            self._calibration = None
            self._pipeline.enable()
        else:
            self._keyboard.press(name)

    def _overlay(self, frame):
        deck = self._presentation.deck
        lines = [f"Slide {deck.index + 1}/{deck.count}  "
                 f"{'playing' if self._presentation.is_playing else 'paused'}  "
                 f"FPS {self._perf.fps:.0f}"]
        gesture = self._pipeline.current_gesture()
        if gesture is not None:
            lines.append(f"Gesture: {gesture.value}")
        if self._calibration is not None:
            cal = self._calibration
            lines.append(f"Calibrate {cal.current_step.value}: {cal.status.value} "
                         f"{cal.samples_collected}/{cal.samples_needed}")
        for i, text in enumerate(lines):
            cv2.putText(frame, text, (10, 25 + 25 * i), cv2.FONT_HERSHEY_SIMPLEX,
                        0.6, (0, 255, 0), 2)
        return frame

    def _shutdown(self, cap):
        logger.info("Shutting down...")
        self._running = False
        self._bus.emit(Events.SYSTEM_SHUTDOWN)
        if cap is not None:
            cap.release()
        if self._detector is not None:
            self._detector.close()
        cv2.destroyAllWindows()
        self._perf.print_report()
        logger.info("Gestures emitted: %d, suppressed: %d",
                    self._debouncer.emitted_count, self._debouncer.suppressed_count)

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def parse_args():
    parser = argparse.ArgumentParser(description="Slide Gesture Control")
    parser.add_argument(
        "--mode", choices=["control", "demo", "motion", "calibrate"],
        default="control", help="Operating mode"
    )
    parser.add_argument("--calibrate", action="store_true",
                        help="Run hand calibration before starting")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--gestures", type=str, default=None, help="Path to gestures.yaml")
    parser.add_argument("--camera", type=int, default=None, help="Camera device ID")
    parser.add_argument("--profile", type=str, default="default",
                        help="Calibration profile (user id)")
    parser.add_argument("--slides", type=int, default=None, help="Number of slides")
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config()
    config.load(config_path=args.config, gestures_path=args.gestures)

    overrides = {}
    if args.camera is not None:
        overrides["camera"] = {"device_id": args.camera}
    if args.slides is not None:
        overrides["presentation"] = {"slides": args.slides}
    config.update(overrides)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  SLIDE GESTURE CONTROL  v%s", config.get("system.version", "1.0.0"))
    logger.info("  Mode: %s", args.mode)
    logger.info("=" * 60)

    app = SlideGestureApp(config, mode=args.mode, user_id=args.profile)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    ok = app.run(calibrate=args.calibrate)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
