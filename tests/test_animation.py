# tests/test_animation.py
"""
Number Animation Unit Tests

Tests for easing curves, frame delivery, cancellation and the
threshold / cancel-then-replace behaviour of AnimatedValue.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from metrics_hub.animation import (
    EASINGS,
    AnimatedValue,
    AnimationScheduler,
    ease_in_out_quad,
    ease_out_back,
    ease_out_expo,
    linear,
)


@pytest.fixture()
def scheduler(timers):
    return AnimationScheduler(timers)


class TestEasing:
    """이징 함수 양 끝점 검증"""

    @pytest.mark.parametrize("easing", list(EASINGS.values()))
    def test_endpoints(self, easing):
        assert easing(0) == pytest.approx(0, abs=1e-3)
        assert easing(1) == pytest.approx(1)

    def test_ease_out_expo_exact_one(self):
        assert ease_out_expo(1) == 1.0

    def test_ease_in_out_quad_midpoint(self):
        assert ease_in_out_quad(0.5) == pytest.approx(0.5)

    def test_ease_out_back_overshoots(self):
        assert max(ease_out_back(p / 100) for p in range(101)) > 1

    def test_linear(self):
        assert linear(0.25) == 0.25


class TestAnimate:
    """프레임 콜백 검증"""

    def test_lands_exactly_on_end(self, scheduler, timers):
        frames = []
        handle = scheduler.animate(0, 100, frames.append, duration=0.1)
        timers.run_until_idle()

        assert frames[-1] == 100
        assert frames.count(100) == 1
        assert all(a < b for a, b in zip(frames, frames[1:]))
        assert handle.finished
        assert not handle.active

    def test_intermediate_values_rounded(self, scheduler, timers):
        frames = []
        scheduler.animate(0, 1, frames.append, duration=1.0, easing=linear, precision=2)
        timers.advance(0.1)

        assert frames
        assert all(round(v, 2) == v for v in frames)

    def test_zero_duration_delivers_end(self, scheduler, timers):
        frames = []
        scheduler.animate(5, 10, frames.append, duration=0)
        timers.run_until_idle()
        assert frames == [10]

    def test_cancel_stops_callbacks(self, scheduler, timers):
        """취소 후 콜백 없음"""
        frames = []
        handle = scheduler.animate(0, 100, frames.append, duration=1.0)
        timers.advance(0.1)
        seen = len(frames)

        handle.cancel()
        timers.run_until_idle()

        assert len(frames) == seen
        assert handle.cancelled
        assert 100 not in frames

    def test_cancel_from_callback(self, scheduler, timers):
        frames = []
        holder = {}

        def on_frame(value):
            frames.append(value)
            holder["handle"].cancel()

        holder["handle"] = scheduler.animate(0, 100, on_frame, duration=1.0)
        timers.run_until_idle()
        assert len(frames) == 1

    def test_failing_callback_ends_animation(self, scheduler, timers, caplog):
        """콜백 예외 → 애니메이션 종료, 더 이상 활성 아님"""
        calls = []

        def broken(value):
            calls.append(value)
            raise RuntimeError("render failed")

        with caplog.at_level(logging.ERROR, logger="metrics_hub.animation"):
            handle = scheduler.animate(0, 100, broken, duration=1.0)
            timers.run_until_idle()

        assert len(calls) == 1
        assert handle.cancelled
        assert not handle.active
        assert "Animation frame callback failed" in caplog.text

    def test_percentage_clamped(self, scheduler, timers):
        frames = []
        scheduler.animate_percentage(-20, 150, frames.append, duration=0.1)
        timers.run_until_idle()

        assert frames[-1] == 100
        assert all(0 <= v <= 100 for v in frames)


class TestAnimatedValue:
    """임계값 / 취소 후 교체 검증"""

    def test_small_change_ignored(self, scheduler):
        value = AnimatedValue(scheduler, initial=10.0)
        assert value.update(10.05) is False
        assert value.update(10.1) is False
        assert not value.animating

    def test_animates_to_target(self, scheduler, timers):
        value = AnimatedValue(scheduler)
        assert value.update(500, duration=0.1) is True
        assert value.animating
        timers.run_until_idle()

        assert value.display_value == 500
        assert value.last_value == 500
        assert not value.animating

    def test_new_target_replaces_in_flight(self, scheduler, timers):
        """진행 중 애니메이션 취소 후 현재 표시값에서 재시작"""
        value = AnimatedValue(scheduler)
        value.update(100, duration=1.0)
        first = value.in_flight
        timers.advance(0.2)
        midway = value.display_value
        assert 0 < midway < 100

        value.update(0, duration=0.5)
        assert first.cancelled

        timers.advance(1 / 60)
        assert value.display_value < midway

        timers.run_until_idle()
        assert value.display_value == 0
        assert value.last_value == 0

    def test_percentage_value(self, scheduler, timers):
        value = AnimatedValue(scheduler, percentage=True)
        value.update(160)
        timers.run_until_idle()
        assert value.display_value == 100

    def test_dispose_cancels(self, scheduler, timers):
        value = AnimatedValue(scheduler)
        value.update(100)
        value.dispose()
        timers.run_until_idle()

        assert value.display_value == 0
        assert value.in_flight is None

    def test_failing_frame_clears_animating(self, scheduler, timers):
        value = AnimatedValue(scheduler)

        def broken(_value):
            raise RuntimeError("render failed")

        value._on_frame = broken
        value.update(100, duration=1.0)
        timers.run_until_idle()

        assert not value.animating
        assert value.update(200, duration=0.1) is True
