"""
Shape Geometry
==============
Render-agnostic triangle meshes for the fill and the border (stroke) of a unit.

Every builder returns a `ShapeGeometry` with an (N, 3) point array and an (M, 3)
triangle index array in the unit's local frame (centred on the origin, in the
XY plane). The render adapter converts these into its own mesh type.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING

import numpy as np

from circlematrix.config import RENDER
from circlematrix.model.layout import scaled_width
from circlematrix.model.settings import GridConfig, ShapeKind

if TYPE_CHECKING:
    import numpy.typing as npt

_geometry_ids = count(1)


@dataclass(eq=False)
class ShapeGeometry:
    kind: ShapeKind
    width: float
    height: float
    points: npt.NDArray[np.float64]
    faces: npt.NDArray[np.int64]
    id: int = field(default_factory=lambda: next(_geometry_ids))

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])


def ellipse_outline(a: float, b: float, n_segments: int) -> npt.NDArray[np.float64]:
    """Open (N, 2) outline of an ellipse with semi-axes a (x) and b (y), CCW."""
    theta = np.linspace(0.0, 2.0 * np.pi, n_segments, endpoint=False)
    return np.c_[a * np.cos(theta), b * np.sin(theta)]


def rectangle_outline(width: float, height: float) -> npt.NDArray[np.float64]:
    """Open (4, 2) outline of an origin-centred rectangle, CCW."""
    hw, hh = width / 2, height / 2
    return np.array([[-hw, -hh], [hw, -hh], [hw, hh], [-hw, hh]])


def _lift(outline: npt.NDArray[np.float64], z: float) -> npt.NDArray[np.float64]:
    return np.c_[outline, np.full(len(outline), z)]


def fan_mesh(outline: npt.NDArray[np.float64], z: float = 0.0) -> tuple[np.ndarray, np.ndarray]:
    """Triangle fan from the centre to a closed convex outline."""
    n = len(outline)
    points = np.vstack((np.array([[0.0, 0.0, z]]), _lift(outline, z)))
    i = np.arange(n)
    faces = np.c_[np.zeros(n, dtype=np.int64), i + 1, (i + 1) % n + 1]
    return points, faces


def band_mesh(
    outer: npt.NDArray[np.float64],
    inner: npt.NDArray[np.float64],
    z: float = 0.0
) -> tuple[np.ndarray, np.ndarray]:
    """Triangulated band between two outlines with the same vertex count."""
    n = len(outer)
    points = np.vstack((_lift(outer, z), _lift(inner, z)))
    i = np.arange(n)
    j = (i + 1) % n
    faces = np.vstack((
        np.c_[i, j, j + n],
        np.c_[i, j + n, i + n],
    ))
    return points, faces.astype(np.int64)


def border_width(width: float, height: float, border_thickness: float) -> float:
    """Absolute border width. A thickness in (0, 0.5) always leaves a hole."""
    return border_thickness * min(width, height)


def shape_extent(grid: GridConfig, kind: ShapeKind, column_index: int) -> tuple[float, float]:
    """(width, height) of a unit, with the column width progression applied once."""
    if kind == ShapeKind.DISC:
        base_width, height = 2 * grid.circle_radius, 2 * grid.circle_radius
    else:
        base_width, height = grid.rect_width, grid.rect_height
    width = scaled_width(
        base_width,
        column_index,
        grid.cols,
        grid.width_scale_factor,
        grid.width_scaling_enabled,
    )
    return width, height


def fill_geometry(kind: ShapeKind, width: float, height: float) -> ShapeGeometry:
    if kind == ShapeKind.DISC:
        outline = ellipse_outline(width / 2, height / 2, RENDER["CIRCLE_SEGMENTS"])
    else:
        outline = rectangle_outline(width, height)
    points, faces = fan_mesh(outline)
    return ShapeGeometry(kind, width, height, points, faces)


def stroke_geometry(kind: ShapeKind, width: float, height: float, border_thickness: float) -> ShapeGeometry:
    inset = 2 * border_width(width, height, border_thickness)
    if kind == ShapeKind.DISC:
        segments = RENDER["CIRCLE_SEGMENTS"]
        outer = ellipse_outline(width / 2, height / 2, segments)
        inner = ellipse_outline((width - inset) / 2, (height - inset) / 2, segments)
    else:
        outer = rectangle_outline(width, height)
        inner = rectangle_outline(width - inset, height - inset)
    # Slightly in front of the fill to avoid z-fighting
    points, faces = band_mesh(outer, inner, z=RENDER["Z_FIGHTING_OFFSET"])
    return ShapeGeometry(kind, width, height, points, faces)


def build_unit_geometry(
    grid: GridConfig,
    kind: ShapeKind,
    column_index: int
) -> tuple[ShapeGeometry, ShapeGeometry]:
    """Fill and stroke geometry of one unit, both built from the same scaled width."""
    width, height = shape_extent(grid, kind, column_index)
    return (
        fill_geometry(kind, width, height),
        stroke_geometry(kind, width, height, grid.border_thickness),
    )
