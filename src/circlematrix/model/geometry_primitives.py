"""
Geometric Primitives for the shape grid.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import math

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector3:
    """
    An immutable vector (or point) in 3D space.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def is_close(self, other: Vector3, tol: float = 1e-9) -> bool:
        return (
            math.isclose(self.x, other.x, abs_tol=tol)
            and math.isclose(self.y, other.y, abs_tol=tol)
            and math.isclose(self.z, other.z, abs_tol=tol)
        )

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Pose:
    """Final placement of a grid unit: position plus Euler rotation (radians, XYZ order)."""
    position: Vector3
    rotation: Vector3
