"""
Tests for the Gesture Debouncer
================================
"""

import random

import pytest

from slidegesture.control.debouncer import (
    DROPPED, EMITTED, SUPPRESSED, SUPPRESSED_SAME, Debouncer, evaluate,
)
from slidegesture.core.types import DebounceState, GestureType

STATIC_AND_SWIPES = [g for g in GestureType if g != GestureType.NONE]


class TestEvaluate:
    """Test suite for the pure transition function."""

    def test_first_candidate_emits(self):
        state, event, verdict = evaluate(DebounceState(), GestureType.OPEN_PALM, 0.9, 0)

        assert verdict == EMITTED
        assert event.gesture == GestureType.OPEN_PALM
        assert event.timestamp == 0
        assert state == DebounceState(0, GestureType.OPEN_PALM)

    def test_none_dropped(self):
        start = DebounceState()
        state, event, verdict = evaluate(start, GestureType.NONE, 1.0, 0)
        assert (state, event, verdict) == (start, None, DROPPED)

    def test_low_confidence_dropped(self):
        state, event, verdict = evaluate(DebounceState(), GestureType.THUMB_UP, 0.69, 0)
        assert event is None
        assert verdict == DROPPED

    def test_threshold_is_inclusive(self):
        _, event, _ = evaluate(DebounceState(), GestureType.THUMB_UP, 0.7, 0)
        assert event is not None

    def test_state_unchanged_when_suppressed(self):
        start = DebounceState(1000, GestureType.POINTING)
        state, event, verdict = evaluate(start, GestureType.OPEN_PALM, 0.9, 1500)
        assert state is start
        assert event is None
        assert verdict == SUPPRESSED

    def test_source_carried(self):
        _, event, _ = evaluate(DebounceState(), GestureType.SWIPE_LEFT, 1.0, 0, source="keyboard")
        assert event.source == "keyboard"


class TestDebouncer:
    """Test suite for the stateful Debouncer."""

    @pytest.fixture
    def debouncer(self):
        return Debouncer()

    def test_swipe_sequence(self, debouncer):
        # 0 emits, 500 inside the window, 1100 inside the same-type window, 1300 clear
        results = [
            debouncer.submit(GestureType.SWIPE_LEFT, 1.0, now=t) is not None
            for t in (0, 500, 1100, 1300)
        ]
        assert results == [True, False, False, True]

    def test_same_type_verdicts(self, debouncer):
        debouncer.submit(GestureType.SWIPE_LEFT, 1.0, now=0)

        debouncer.submit(GestureType.SWIPE_LEFT, 1.0, now=500)
        assert debouncer.last_verdict == SUPPRESSED
        debouncer.submit(GestureType.SWIPE_LEFT, 1.0, now=1100)
        assert debouncer.last_verdict == SUPPRESSED_SAME

    def test_different_type_after_debounce(self, debouncer):
        debouncer.submit(GestureType.SWIPE_LEFT, 1.0, now=0)
        event = debouncer.submit(GestureType.OPEN_PALM, 0.9, now=900)

        assert event is not None
        assert debouncer.state == DebounceState(900, GestureType.OPEN_PALM)

    def test_same_type_boundary(self, debouncer):
        debouncer.submit(GestureType.THUMB_UP, 0.9, now=0)
        assert debouncer.submit(GestureType.THUMB_UP, 0.9, now=1199) is None
        assert debouncer.submit(GestureType.THUMB_UP, 0.9, now=1200) is not None

    def test_counts(self, debouncer):
        debouncer.submit(GestureType.POINTING, 0.9, now=0)
        debouncer.submit(GestureType.POINTING, 0.9, now=100)
        debouncer.submit(GestureType.POINTING, 0.1, now=200)
        debouncer.submit(GestureType.NONE, 1.0, now=300)

        assert debouncer.emitted_count == 1
        assert debouncer.suppressed_count == 1

    def test_config_overrides(self):
        debouncer = Debouncer({"debounce_ms": 100, "same_gesture_factor": 1.0,
                               "confidence_threshold": 0.5})
        debouncer.submit(GestureType.OPEN_PALM, 0.6, now=0)
        assert debouncer.submit(GestureType.OPEN_PALM, 0.6, now=100) is not None

    def test_clock_used_when_now_missing(self):
        ticks = iter([0, 200, 2000])
        debouncer = Debouncer(clock=lambda: next(ticks))

        assert debouncer.submit(GestureType.CLOSED_FIST, 0.9) is not None
        assert debouncer.submit(GestureType.OPEN_PALM, 0.9) is None
        assert debouncer.submit(GestureType.OPEN_PALM, 0.9) is not None

    def test_display_window(self, debouncer):
        debouncer.submit(GestureType.POINTING, 0.9, now=1000)

        assert debouncer.current_gesture(now=2000) == GestureType.POINTING
        assert debouncer.current_gesture(now=2500) is None

    def test_in_cooldown(self, debouncer):
        assert not debouncer.in_cooldown(now=0)
        debouncer.submit(GestureType.POINTING, 0.9, now=0)
        assert debouncer.in_cooldown(now=799)
        assert not debouncer.in_cooldown(now=800)

    def test_reset(self, debouncer):
        debouncer.submit(GestureType.POINTING, 0.9, now=0)
        debouncer.reset()

        assert debouncer.state == DebounceState()
        assert debouncer.submit(GestureType.POINTING, 0.9, now=10) is not None


class TestDebounceInvariants:
    """Properties that hold for any candidate stream."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_streams(self, seed):
        rng = random.Random(seed)
        debouncer = Debouncer()
        now = 0.0
        emitted = []

        for _ in range(500):
            now += rng.uniform(0, 400)
            gesture = rng.choice(list(GestureType))
            confidence = rng.random()
            event = debouncer.submit(gesture, confidence, now=now)
            if event is not None:
                emitted.append(event)

        for event in emitted:
            assert event.gesture != GestureType.NONE
            assert event.confidence >= 0.7

        for prev, cur in zip(emitted, emitted[1:]):
            gap = cur.timestamp - prev.timestamp
            assert gap >= 800
            if cur.gesture == prev.gesture:
                assert gap >= 1200
