"""
Qt Frame Scheduler
==================
`FrameScheduler` on the Qt event loop: every requested frame is a single-shot
QTimer, so cancelling a frame is stopping its timer.
"""
from __future__ import annotations

from itertools import count
from typing import Dict, Optional, Tuple
import logging

from PySide6.QtCore import QObject, QTimer

from circlematrix.config import RENDER
from circlematrix.controller.scheduler import FrameCallback

logger = logging.getLogger(__name__)


class QtFrameScheduler(QObject):
    def __init__(self, interval_ms: int = RENDER["FRAME_INTERVAL_MS"], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.interval_ms = interval_ms
        self._ids = count(1)
        self._timers: Dict[int, Tuple[QTimer, FrameCallback]] = {}

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(self.interval_ms)
        timer.timeout.connect(lambda: self._fire(handle))
        self._timers[handle] = (timer, callback)
        timer.start()
        return handle

    def cancel_frame(self, handle: int) -> None:
        entry = self._timers.pop(handle, None)
        if entry is None:
            return
        timer, _ = entry
        timer.stop()
        timer.deleteLater()

    def cancel_all(self) -> None:
        for handle in list(self._timers):
            self.cancel_frame(handle)

    def _fire(self, handle: int) -> None:
        entry = self._timers.pop(handle, None)
        if entry is None:
            return
        timer, callback = entry
        timer.deleteLater()
        try:
            callback()
        except Exception:
            # the failed frame is dropped; its owner has already stopped itself
            logger.exception("Frame callback failed.")
