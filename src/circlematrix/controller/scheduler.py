"""
Frame Scheduling
================
Single-threaded, cooperative per-frame callbacks.

A scheduler hands out a handle for every requested frame; the owner keeps it and
cancels it on teardown so that no orphaned callback can touch disposed state.
"""
from __future__ import annotations

from itertools import count
from typing import Callable, Dict, Hashable, Protocol
import logging

logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]
FrameHandle = Hashable


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> FrameHandle: ...

    def cancel_frame(self, handle: FrameHandle) -> None: ...


class ManualFrameScheduler:
    """
    Scheduler for headless use and tests: callbacks run only when `step()` is called.
    Callbacks requested while a frame runs are deferred to the next step.
    """

    def __init__(self) -> None:
        self._ids = count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self.frames_run = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: FrameHandle) -> None:
        self._pending.pop(handle, None)

    def step(self) -> int:
        """
        Run every callback pending at call time. Returns how many ran.
        A callback cancelled by an earlier one in the same step is skipped.
        """
        ran = 0
        for handle in list(self._pending):
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback()
            ran += 1
        self.frames_run += 1
        return ran

    def run_until_idle(self, max_frames: int = 10_000) -> int:
        """Step until nothing is pending. Returns the number of frames stepped."""
        frames = 0
        while self._pending:
            if frames >= max_frames:
                raise RuntimeError(f"Scheduler still busy after {max_frames} frames.")
            self.step()
            frames += 1
        return frames
