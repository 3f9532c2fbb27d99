"""
Rotation Animation
==================
A cancellable, eased 360 degree sweep of the Y rotation.

Progress is derived from wall-clock time, not frame count, so the sweep takes
`DEFAULT_DURATION / speed` seconds at any frame rate.
"""
from __future__ import annotations

from typing import Callable, Optional
import logging
import math
import time

from circlematrix.config import ANIMATION
from circlematrix.controller.morph import ShapeMorphController
from circlematrix.controller.scheduler import FrameHandle, FrameScheduler

logger = logging.getLogger(__name__)


def ease_in_out_cubic(progress: float) -> float:
    if progress < 0.5:
        return 4 * progress ** 3
    return 1 - (-2 * progress + 2) ** 3 / 2


class RotationAnimationDriver:
    """
    Start/stop toggle over one continuous sweep from the current rotation to +2*pi.

    Every frame the interpolated angle is fed to the morph controller first and
    then committed through `on_frame`.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        read_rotation: Callable[[], float],
        read_speed: Callable[[], float],
        on_frame: Callable[[float], None],
        morph: Optional[ShapeMorphController] = None,
        on_finished: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        base_duration: float = ANIMATION["DEFAULT_DURATION"]
    ) -> None:
        self.scheduler = scheduler
        self.read_rotation = read_rotation
        self.read_speed = read_speed
        self.on_frame = on_frame
        self.morph = morph
        self.on_finished = on_finished
        self.clock = clock
        self.base_duration = base_duration

        self.is_animating = False
        self.start_rotation = 0.0
        self.target_rotation = 0.0
        self.duration = base_duration
        self.start_time = 0.0
        self._frame_handle: Optional[FrameHandle] = None

    def toggle(self) -> bool:
        """Start a sweep, or cancel the running one. Returns the new animating flag."""
        if self.is_animating:
            self.cancel()
            return False
        self._start()
        return self.is_animating

    def cancel(self) -> None:
        """Stop immediately, leaving the rotation at its current interpolated value."""
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None
        if self.is_animating:
            logger.info("Rotation animation cancelled.")
        self.is_animating = False

    def _start(self) -> None:
        speed = self.read_speed()
        self.start_rotation = self.read_rotation()
        self.target_rotation = self.start_rotation + 2 * math.pi
        self.duration = self.base_duration / speed
        self.start_time = self.clock()
        self.is_animating = True
        if self.morph is not None:
            self.morph.begin_sweep()
        logger.info(f"Rotation animation started ({self.duration:.2f} s).")
        self._tick()

    def _tick(self) -> None:
        self._frame_handle = None
        if not self.is_animating:
            return

        elapsed = self.clock() - self.start_time
        progress = min(elapsed / self.duration, 1.0) if self.duration > 0 else 1.0
        eased = ease_in_out_cubic(progress)
        angle = self.start_rotation + (self.target_rotation - self.start_rotation) * eased

        try:
            if self.morph is not None:
                self.morph.observe(angle)
            self.on_frame(angle)
        except Exception:
            # a failed frame ends the sweep
            self.is_animating = False
            logger.error("Rotation animation aborted by a failing frame.")
            if self.on_finished is not None:
                self.on_finished()
            raise

        if progress < 1.0:
            self._frame_handle = self.scheduler.request_frame(self._tick)
        else:
            self.is_animating = False
            logger.info("Rotation animation finished.")
            if self.on_finished is not None:
                self.on_finished()
