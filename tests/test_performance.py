"""
Tests for Performance Module
=============================
"""

import pytest

from slidegesture.utils.performance_monitor import PerformanceMonitor


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor."""

    @pytest.fixture
    def clock(self, fake_clock):
        return fake_clock

    def test_fps(self, clock):
        monitor = PerformanceMonitor(clock=clock)
        for _ in range(11):
            monitor.tick()
            clock.advance(0.02)

        assert monitor.fps == pytest.approx(50.0)
        assert monitor.frame_count == 11

    def test_fps_capped(self, clock):
        monitor = PerformanceMonitor(max_fps=30, clock=clock)
        for _ in range(5):
            monitor.tick()
            clock.advance(0.01)
        assert monitor.fps == 30.0

    def test_stage_latency(self, clock):
        monitor = PerformanceMonitor(clock=clock)
        with monitor.measure("classification"):
            clock.advance(0.004)

        assert monitor.get_stage_latency("classification") == pytest.approx(4.0)
        assert monitor.get_stage_latency("debounce") == 0.0

    def test_report_and_reset(self, clock):
        monitor = PerformanceMonitor(clock=clock)
        monitor.tick()
        with monitor.measure("custom"):
            clock.advance(0.001)

        report = monitor.get_report()
        assert report["total_frames"] == 1
        assert "custom" in report["latencies_ms"]

        monitor.reset()
        assert monitor.frame_count == 0
        assert monitor.fps == 0.0
