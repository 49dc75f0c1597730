"""
Frame-rate and per-stage latency tracking for the gesture pipeline.
"""

import time
import threading
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)

PIPELINE_STAGES = ("extraction", "classification", "debounce", "motion")


class PerformanceMonitor:
    """Tracks FPS and per-stage latency over a rolling window."""

    def __init__(self, window_size=60, max_fps=None, clock=time.perf_counter):
        self._window_size = window_size
        self._max_fps = max_fps
        self._clock = clock
        self._lock = threading.Lock()

        self._frame_stamps = deque(maxlen=window_size)
        self._stage_times = {name: deque(maxlen=window_size) for name in PIPELINE_STAGES}

        self._frame_count = 0
        self._start_time = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Context manager to measure a pipeline stage's duration."""
        start = self._clock()
        try:
            yield
        finally:
            elapsed_ms = (self._clock() - start) * 1000
            with self._lock:
                if stage_name not in self._stage_times:
                    self._stage_times[stage_name] = deque(maxlen=self._window_size)
                self._stage_times[stage_name].append(elapsed_ms)

    def tick(self):
        """Call once per processed frame."""
        with self._lock:
            self._frame_stamps.append(self._clock())
            self._frame_count += 1

    @property
    def fps(self) -> float:
        """Frames per second across the window, optionally capped."""
        with self._lock:
            if len(self._frame_stamps) < 2:
                return 0.0
            span = self._frame_stamps[-1] - self._frame_stamps[0]
            if span <= 0:
                return 0.0
            fps = (len(self._frame_stamps) - 1) / span
        if self._max_fps:
            fps = min(fps, float(self._max_fps))
        return fps

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def get_stage_latency(self, stage_name: str) -> float:
        """Average latency for a stage in ms."""
        with self._lock:
            times = self._stage_times.get(stage_name)
            if not times:
                return 0.0
            return sum(times) / len(times)

    def get_report(self) -> dict:
        """Snapshot of frame rate and stage latencies."""
        with self._lock:
            stages = list(self._stage_times)
        return {
            "fps": round(self.fps, 1),
            "total_frames": self._frame_count,
            "uptime_seconds": round(time.time() - self._start_time, 1),
            "latencies_ms": {name: round(self.get_stage_latency(name), 3) for name in stages},
        }

    def print_report(self):
        report = self.get_report()
        logger.info("=" * 50)
        logger.info("PIPELINE PERFORMANCE")
        logger.info("FPS:          %.1f", report["fps"])
        logger.info("Total Frames: %d", report["total_frames"])
        logger.info("Uptime:       %.1fs", report["uptime_seconds"])
        for stage, latency in report["latencies_ms"].items():
            logger.info("  %-16s %7.3f ms", stage, latency)
        logger.info("=" * 50)

    def reset(self):
        with self._lock:
            self._frame_stamps.clear()
            for times in self._stage_times.values():
                times.clear()
            self._frame_count = 0
            self._start_time = time.time()
