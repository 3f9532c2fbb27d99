"""
Grid Layout
===========
Generates the static, origin-centred position grid and the per-column width
progression of elongated shapes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from circlematrix.model.geometry_primitives import Vector3
from circlematrix.model.settings import GridConfig, ShapeKind


@dataclass(eq=False)
class GridUnit:
    """
    One shape instance of the grid.

    `baseline`, `row_index` and `column_index` never change after generation.
    `graphics` is a non-owning reference to the render-side resources, managed
    by the scene controller.
    """
    baseline: Vector3
    row_index: int
    column_index: int
    current_shape_kind: ShapeKind
    color_group: int = 0
    graphics: Any = field(default=None, repr=False)


def generate_grid(config: GridConfig) -> List[GridUnit]:
    """
    Lay out rows x cols units in row-major order, centred on the origin.

    The config is assumed valid (rows, cols >= 1 and positive spacing);
    see `Settings.validate`.
    """
    total_width = (config.cols - 1) * config.col_spacing
    total_height = (config.rows - 1) * config.row_spacing

    units: List[GridUnit] = []
    for row in range(config.rows):
        for col in range(config.cols):
            x = col * config.col_spacing - total_width / 2
            y = row * config.row_spacing - total_height / 2
            units.append(GridUnit(
                baseline=Vector3(x, y, 0.0),
                row_index=row,
                column_index=col,
                current_shape_kind=config.shape_kind,
            ))
    return units


def scaled_width(
    base_width: float,
    column_index: int,
    total_columns: int,
    scale_factor: float,
    enabled: bool
) -> float:
    """
    Linear width ramp from `base_width` at column 0 to `base_width * scale_factor`
    at the last column. A single column keeps the base width.
    """
    if not enabled or total_columns <= 1:
        return base_width
    t = column_index / (total_columns - 1)
    return base_width * (1 + (scale_factor - 1) * t)
