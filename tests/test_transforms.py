import math

import numpy as np
import pytest

from circlematrix.model.geometry_primitives import Vector3
from circlematrix.model.layout import generate_grid
from circlematrix.model.settings import CylinderAxis, GridConfig, TransformState
from circlematrix.model.transforms import compute_pose, cylindrical_wrap, euler_to_matrix, pose_matrix

GRID = GridConfig(rows=3, cols=12, row_spacing=2.0, col_spacing=2.0)


def test_zero_curvature_is_identity():
    transform = TransformState(cylinder_curvature=0.0)
    for unit in generate_grid(GRID):
        pose = compute_pose(unit.baseline, transform, GRID)
        assert pose.position.is_close(unit.baseline)
        assert pose.rotation.is_close(Vector3())


def test_repeated_recompute_does_not_drift():
    transform = TransformState(cylinder_curvature=0.6, rotation_x=0.3)
    baseline = Vector3(5.0, -2.0, 0.0)
    first = compute_pose(baseline, transform, GRID)
    for _ in range(1000):
        pose = compute_pose(baseline, transform, GRID)
    assert pose == first


def test_restoring_parameters_restores_pose_exactly():
    baseline = Vector3(-7.0, 2.0, 0.0)
    original = compute_pose(baseline, TransformState(), GRID)
    compute_pose(baseline, TransformState(cylinder_curvature=0.8, rotation_z=1.0), GRID)
    assert compute_pose(baseline, TransformState(), GRID) == original


def test_full_curvature_on_y_axis():
    transform = TransformState(cylinder_axis=CylinderAxis.Y, cylinder_curvature=1.0, cylinder_radius=8.0)
    span = GRID.cols * GRID.col_spacing
    baseline = Vector3(span / 4, 1.0, 0.0)
    wrapped, angle = cylindrical_wrap(baseline, transform, GRID)
    assert angle == pytest.approx(math.pi / 2)
    assert wrapped.x == pytest.approx(8.0)
    assert wrapped.y == 1.0
    assert wrapped.z == pytest.approx(-8.0)


def test_wrap_angle_is_added_to_manual_rotation_on_wrap_axis():
    transform = TransformState(cylinder_curvature=1.0, rotation_x=0.1, rotation_y=0.2, rotation_z=0.3)
    baseline = Vector3(GRID.cols * GRID.col_spacing / 4, 0.0, 0.0)
    pose = compute_pose(baseline, transform, GRID)
    assert pose.rotation.x == pytest.approx(0.1)
    assert pose.rotation.y == pytest.approx(math.pi / 2 + 0.2)
    assert pose.rotation.z == pytest.approx(0.3)


def test_x_axis_wraps_rows():
    transform = TransformState(cylinder_axis=CylinderAxis.X, cylinder_curvature=1.0, cylinder_radius=4.0)
    span = GRID.rows * GRID.row_spacing
    baseline = Vector3(3.0, span / 4, 0.0)
    pose = compute_pose(baseline, transform, GRID)
    assert pose.position.x == 3.0
    assert pose.position.y == pytest.approx(4.0)
    assert pose.position.z == pytest.approx(-4.0)
    assert pose.rotation.x == pytest.approx(math.pi / 2)
    assert pose.rotation.y == 0.0


def test_object_position_is_added_after_wrap():
    offset = Vector3(1.0, 2.0, 3.0)
    baseline = Vector3(4.0, 0.0, 0.0)
    plain = compute_pose(baseline, TransformState(cylinder_curvature=0.5), GRID)
    moved = compute_pose(baseline, TransformState(cylinder_curvature=0.5, object_position=offset), GRID)
    assert moved.position.is_close(plain.position + offset)
    assert moved.rotation == plain.rotation


def test_euler_matrix_is_a_rotation():
    matrix = euler_to_matrix(Vector3(0.3, -1.2, 2.0))
    assert np.allclose(matrix @ matrix.T, np.eye(3))
    assert np.linalg.det(matrix) == pytest.approx(1.0)


def test_pose_matrix_rotates_then_translates():
    matrix = pose_matrix(Vector3(1.0, 2.0, 3.0), Vector3(0.0, 0.0, math.pi / 2))
    point = matrix @ np.array([1.0, 0.0, 0.0, 1.0])
    assert np.allclose(point[:3], [1.0, 3.0, 3.0])
