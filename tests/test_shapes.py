import numpy as np
import pytest

from circlematrix.config import RENDER
from circlematrix.model.settings import GridConfig, ShapeKind
from circlematrix.model.shapes import build_unit_geometry, fill_geometry, shape_extent, stroke_geometry


def test_disc_fill_is_a_fan():
    geo = fill_geometry(ShapeKind.DISC, 2.0, 2.0)
    segments = RENDER["CIRCLE_SEGMENTS"]
    assert geo.n_points == segments + 1
    assert geo.n_faces == segments
    radii = np.linalg.norm(geo.points[1:, :2], axis=1)
    assert np.allclose(radii, 1.0)


def test_quad_fill_spans_width_and_height():
    geo = fill_geometry(ShapeKind.QUAD, 1.6, 1.2)
    assert geo.points[:, 0].max() - geo.points[:, 0].min() == pytest.approx(1.6)
    assert geo.points[:, 1].max() - geo.points[:, 1].min() == pytest.approx(1.2)


def test_stroke_is_lifted_and_leaves_a_hole():
    geo = stroke_geometry(ShapeKind.QUAD, 2.0, 1.0, border_thickness=0.1)
    assert np.allclose(geo.points[:, 2], RENDER["Z_FIGHTING_OFFSET"])
    inner = geo.points[4:]
    # inset is twice the border: 2 * 0.1 * min(2, 1)
    assert inner[:, 0].max() == pytest.approx((2.0 - 0.2) / 2)
    assert inner[:, 1].max() == pytest.approx((1.0 - 0.2) / 2)


def test_width_scaling_applies_once_to_fill_and_stroke():
    grid = GridConfig(cols=3, shape_kind=ShapeKind.DISC, circle_radius=0.5,
                      width_scaling_enabled=True, width_scale_factor=2.0)
    assert shape_extent(grid, ShapeKind.DISC, 2) == (pytest.approx(2.0), 1.0)
    fill, stroke = build_unit_geometry(grid, ShapeKind.DISC, 2)
    assert fill.width == stroke.width == pytest.approx(2.0)
    assert fill.points[:, 0].max() == pytest.approx(1.0)


def test_geometries_get_unique_ids():
    fill, stroke = build_unit_geometry(GridConfig(), ShapeKind.QUAD, 0)
    again, _ = build_unit_geometry(GridConfig(), ShapeKind.QUAD, 0)
    assert len({fill.id, stroke.id, again.id}) == 3
