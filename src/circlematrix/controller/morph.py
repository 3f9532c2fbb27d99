"""
Shape Morphing
==============
Small state machine that flips the dominant shape kind (disc <-> quad) when the
animated rotation angle passes pi/2 or 3*pi/2.

It only decides *when* to morph; the geometry swap itself is delegated to a
callback so the controller can be driven by synthetic angle sequences.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence
import logging
import math

from circlematrix.config import ANIMATION
from circlematrix.model.settings import ShapeKind

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi

SwapCallback = Callable[[ShapeKind, ShapeKind], None]


def normalize_angle(angle: float) -> float:
    """Map any angle into [0, 2*pi)."""
    normalized = angle % TWO_PI
    # a tiny negative input can round up to exactly 2*pi
    return 0.0 if normalized >= TWO_PI else normalized


class ShapeMorphController:
    """
    Tracks the dominant shape kind and the angle of the last trigger (watermark).

    A trigger fires when the normalized angle is within `threshold` of a boundary
    angle and more than `2 * threshold` away from the watermark.
    """

    def __init__(
        self,
        dominant: ShapeKind,
        on_swap: Optional[SwapCallback] = None,
        threshold: float = ANIMATION["SHAPE_CHANGE_THRESHOLD"],
        boundaries: Sequence[float] = ANIMATION["SHAPE_CHANGE_ANGLES"]
    ) -> None:
        self.dominant = dominant
        self.on_swap = on_swap
        self.threshold = threshold
        self.boundaries = tuple(boundaries)
        self.last_trigger_angle = 0.0
        self.trigger_count = 0
        self._previous_angle: Optional[float] = None

    def reset(self, dominant: ShapeKind) -> None:
        """Called after the grid is regenerated with a (possibly new) shape kind."""
        self.dominant = dominant
        self._previous_angle = None

    def begin_sweep(self) -> None:
        """Forget the previous frame's angle; the watermark is kept."""
        self._previous_angle = None

    def observe(self, angle: float) -> Optional[ShapeKind]:
        """
        Feed one animated angle (raw, not normalized).

        Boundaries jumped over since the previous frame of the sweep are evaluated
        first, so a low frame rate cannot skip a trigger.

        Returns:
            The new dominant kind if a morph fired, else None.
        """
        result = None
        if self._previous_angle is not None:
            for crossed in self._crossed_boundaries(self._previous_angle, angle):
                result = self._evaluate(crossed) or result
        result = self._evaluate(angle) or result
        self._previous_angle = angle
        return result

    def _crossed_boundaries(self, start: float, end: float) -> list[float]:
        """Raw boundary angles strictly after `start` and up to `end`, in sweep order."""
        lo, hi = min(start, end), max(start, end)
        crossed = []
        for base in self.boundaries:
            k = math.floor((lo - base) / TWO_PI) + 1
            candidate = base + k * TWO_PI
            while candidate <= hi:
                if candidate > lo:
                    crossed.append(candidate)
                candidate += TWO_PI
        crossed.sort(reverse=end < start)
        return crossed

    def _evaluate(self, angle: float) -> Optional[ShapeKind]:
        normalized = normalize_angle(angle)
        near_boundary = any(abs(normalized - b) < self.threshold for b in self.boundaries)
        if not near_boundary:
            return None
        if abs(normalized - self.last_trigger_angle) <= 2 * self.threshold:
            return None

        old_kind = self.dominant
        new_kind = old_kind.opposite
        logger.debug(f"Shape morph {old_kind} -> {new_kind} at {normalized:.3f} rad.")
        if self.on_swap is not None:
            self.on_swap(old_kind, new_kind)
        self.dominant = new_kind
        self.last_trigger_angle = normalized
        self.trigger_count += 1
        return new_kind
