"""
Transform Pipeline
==================
Computes the final pose of a grid unit from its immutable baseline position.

The pose is always recomputed from the baseline, never from a previous pose:
repeated edits cannot accumulate floating-point drift, and setting a parameter
back to its original value restores the original pose exactly.

Order of operations:
1. Cylindrical wrap around the configured axis (scaled by curvature).
2. Object translation.
3. Axis rotations; the wrap axis keeps the wrap angle plus the manual rotation.
"""
from __future__ import annotations

from typing import TYPE_CHECKING
import math

import numpy as np

from circlematrix.model.geometry_primitives import Pose, Vector3
from circlematrix.model.settings import CylinderAxis, GridConfig, TransformState

if TYPE_CHECKING:
    import numpy.typing as npt


def wrap_angle(offset: float, span: float, curvature: float) -> float:
    """Angle on the cylinder for a coordinate `offset` along a grid of extent `span`."""
    return (offset / span) * 2 * math.pi * curvature


def cylindrical_wrap(
    baseline: Vector3,
    transform: TransformState,
    grid: GridConfig
) -> tuple[Vector3, float]:
    """
    Bend the flat grid around a cylinder.

    Returns:
        (wrapped position, wrap angle around the cylinder axis)
    """
    curvature = transform.cylinder_curvature
    radius = transform.cylinder_radius

    if transform.cylinder_axis == CylinderAxis.Y:
        along, across = baseline.x, baseline.y
        span = grid.cols * grid.col_spacing
    else:
        along, across = baseline.y, baseline.x
        span = grid.rows * grid.row_spacing

    angle = wrap_angle(along, span, curvature)
    new_along = math.sin(angle) * radius * curvature + along * (1 - curvature)
    new_z = (math.cos(angle) * radius - radius) * curvature

    if transform.cylinder_axis == CylinderAxis.Y:
        return Vector3(new_along, across, new_z), angle
    return Vector3(across, new_along, new_z), angle


def compute_pose(
    baseline: Vector3,
    transform: TransformState,
    grid: GridConfig
) -> Pose:
    """Pure function: baseline position + transform state -> final pose."""
    wrapped, angle = cylindrical_wrap(baseline, transform, grid)
    position = wrapped + transform.object_position

    if transform.cylinder_axis == CylinderAxis.Y:
        rotation = Vector3(transform.rotation_x, angle + transform.rotation_y, transform.rotation_z)
    else:
        rotation = Vector3(angle + transform.rotation_x, transform.rotation_y, transform.rotation_z)

    return Pose(position=position, rotation=rotation)


# ------------------------------------------------------------------------------
# Matrices (consumed by the render adapter)
# ------------------------------------------------------------------------------
def euler_to_matrix(rotation: Vector3) -> npt.NDArray[np.float64]:
    """3x3 rotation matrix for intrinsic XYZ Euler angles (R = Rx @ Ry @ Rz)."""
    cx, sx = math.cos(rotation.x), math.sin(rotation.x)
    cy, sy = math.cos(rotation.y), math.sin(rotation.y)
    cz, sz = math.cos(rotation.z), math.sin(rotation.z)

    rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


def pose_matrix(position: Vector3, rotation: Vector3) -> npt.NDArray[np.float64]:
    """4x4 homogeneous matrix: rotate about the local origin, then translate."""
    matrix = np.eye(4)
    matrix[:3, :3] = euler_to_matrix(rotation)
    matrix[:3, 3] = position.to_array()
    return matrix
