# metrics_hub/animation.py
"""
Traffic Metrics Hub - Number Animation

Drives a displayed number toward a new target, one callback per
rendering frame, until it lands exactly on the target.

Each AnimatedValue owns at most one in-flight animation: starting a new
one cancels the previous handle first, so two animations never race on
the same display value.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from .config import (
    ANIMATION_DURATION,
    ANIMATION_PRECISION,
    CHANGE_THRESHOLD,
    PERCENTAGE_DURATION,
    PERCENTAGE_PRECISION,
)
from .scheduling import TimerHandle, Timers

logger = logging.getLogger(__name__)

EasingFunction = Callable[[float], float]
FrameCallback = Callable[[float], None]


# ==========================================================
# Easing Curves
# ==========================================================
def linear(progress: float) -> float:
    return progress


def ease_out_expo(progress: float) -> float:
    return 1.0 if progress == 1 else 1 - math.pow(2, -10 * progress)


def ease_in_out_quad(progress: float) -> float:
    if progress < 0.5:
        return 2 * progress * progress
    return 1 - math.pow(-2 * progress + 2, 2) / 2


def ease_out_back(progress: float) -> float:
    """Overshoots past 1 before settling; emphasizes large jumps."""
    c1 = 1.70158
    c3 = c1 + 1
    return 1 + c3 * math.pow(progress - 1, 3) + c1 * math.pow(progress - 1, 2)


EASINGS: dict[str, EasingFunction] = {
    "linear": linear,
    "ease_out_expo": ease_out_expo,
    "ease_in_out_quad": ease_in_out_quad,
    "ease_out_back": ease_out_back,
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ==========================================================
# Scheduler
# ==========================================================
class AnimationHandle:
    """One running animation. cancel() stops further frame callbacks."""

    def __init__(self) -> None:
        self._frame: Optional[TimerHandle] = None
        self.cancelled = False
        self.finished = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    def cancel(self) -> None:
        if not self.active:
            return
        self.cancelled = True
        if self._frame is not None:
            self._frame.cancel()
            self._frame = None


class AnimationScheduler:
    """
    Per-frame numeric interpolation.

    Usage:
        scheduler = AnimationScheduler(timers)
        handle = scheduler.animate(0, 100, on_frame, duration=0.1)
    """

    def __init__(
        self,
        timers: Timers,
        default_duration: float = ANIMATION_DURATION,
        default_precision: int = ANIMATION_PRECISION,
    ):
        self._timers = timers
        self.default_duration = default_duration
        self.default_precision = default_precision

    def animate(
        self,
        start: float,
        end: float,
        on_frame: FrameCallback,
        *,
        duration: Optional[float] = None,
        easing: EasingFunction = ease_out_expo,
        precision: Optional[int] = None,
    ) -> AnimationHandle:
        """
        Animate from `start` to `end`.

        Each frame: progress = clamp(elapsed / duration, 0, 1), eased,
        interpolated and rounded to `precision` decimals. The final frame
        delivers `end` exactly.
        """
        duration = self.default_duration if duration is None else duration
        precision = self.default_precision if precision is None else precision
        start_time = self._timers.now()
        handle = AnimationHandle()

        def frame(frame_time: float) -> None:
            handle._frame = None
            if not handle.active:
                return

            elapsed = frame_time - start_time
            progress = 1.0 if duration <= 0 else _clamp(elapsed / duration, 0.0, 1.0)

            if progress < 1:
                current = start + (end - start) * easing(progress)
                try:
                    on_frame(round(current, precision))
                except Exception:
                    # A broken consumer ends the animation instead of leaving it active
                    handle.cancelled = True
                    logger.exception("Animation frame callback failed, animation stopped")
                    return
                # on_frame may have cancelled this animation
                if handle.active:
                    handle._frame = self._timers.request_frame(frame)
            else:
                handle.finished = True
                on_frame(end)

        handle._frame = self._timers.request_frame(frame)
        return handle

    def animate_percentage(
        self,
        start: float,
        end: float,
        on_frame: FrameCallback,
        *,
        duration: Optional[float] = None,
        easing: EasingFunction = ease_out_expo,
        precision: Optional[int] = None,
    ) -> AnimationHandle:
        """Percentages: endpoints clamped to [0, 100], faster and coarser."""
        return self.animate(
            _clamp(start, 0.0, 100.0),
            _clamp(end, 0.0, 100.0),
            on_frame,
            duration=PERCENTAGE_DURATION if duration is None else duration,
            easing=easing,
            precision=PERCENTAGE_PRECISION if precision is None else precision,
        )


# ==========================================================
# Per-field State
# ==========================================================
class AnimatedValue:
    """
    Animation state of one displayed number.

    last_value is the most recent target; display_value is what the
    presentation layer reads each frame. Targets within `threshold` of
    last_value are ignored.
    """

    def __init__(
        self,
        scheduler: AnimationScheduler,
        percentage: bool = False,
        threshold: float = CHANGE_THRESHOLD,
        initial: float = 0.0,
    ):
        self._scheduler = scheduler
        self.percentage = percentage
        self.threshold = threshold
        self.last_value = initial
        self.display_value = initial
        self.in_flight: Optional[AnimationHandle] = None

    @property
    def animating(self) -> bool:
        return self.in_flight is not None and self.in_flight.active

    def _on_frame(self, value: float) -> None:
        self.display_value = value

    def update(
        self,
        target: float,
        *,
        duration: Optional[float] = None,
        easing: EasingFunction = ease_out_expo,
        precision: Optional[int] = None,
    ) -> bool:
        """
        Animate toward `target` if it differs meaningfully.

        Returns:
            True if an animation was started.
        """
        if abs(self.last_value - target) <= self.threshold:
            return False

        self.cancel()
        animate = self._scheduler.animate_percentage if self.percentage else self._scheduler.animate
        self.in_flight = animate(
            self.display_value,
            target,
            self._on_frame,
            duration=duration,
            easing=easing,
            precision=precision,
        )
        self.last_value = target
        return True

    def cancel(self) -> None:
        if self.in_flight is not None:
            self.in_flight.cancel()
            self.in_flight = None

    def dispose(self) -> None:
        self.cancel()
