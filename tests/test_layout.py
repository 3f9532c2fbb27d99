import pytest

from circlematrix.model.layout import generate_grid, scaled_width
from circlematrix.model.settings import GridConfig, ShapeKind


def test_grid_has_rows_times_cols_units_in_row_major_order():
    units = generate_grid(GridConfig(rows=3, cols=4))
    assert len(units) == 12
    assert [(u.row_index, u.column_index) for u in units[:5]] == [(0, 0), (0, 1), (0, 2), (0, 3), (1, 0)]


def test_two_by_two_grid_positions():
    units = generate_grid(GridConfig(rows=2, cols=2, row_spacing=2.0, col_spacing=2.0))
    assert [u.baseline.as_tuple() for u in units] == [
        (-1.0, -1.0, 0.0), (1.0, -1.0, 0.0), (-1.0, 1.0, 0.0), (1.0, 1.0, 0.0)
    ]


def test_grid_is_centred_on_origin():
    units = generate_grid(GridConfig(rows=5, cols=7, row_spacing=1.5, col_spacing=0.7))
    assert sum(u.baseline.x for u in units) == pytest.approx(0.0, abs=1e-9)
    assert sum(u.baseline.y for u in units) == pytest.approx(0.0, abs=1e-9)
    assert all(u.baseline.z == 0.0 for u in units)


def test_single_unit_sits_at_origin():
    (unit,) = generate_grid(GridConfig(rows=1, cols=1))
    assert unit.baseline.as_tuple() == (0.0, 0.0, 0.0)


def test_units_start_with_configured_shape_kind():
    units = generate_grid(GridConfig(rows=2, cols=2, shape_kind=ShapeKind.QUAD))
    assert {u.current_shape_kind for u in units} == {ShapeKind.QUAD}


class TestScaledWidth:
    def test_ramp_endpoints_and_midpoint(self):
        assert scaled_width(1.0, 0, 5, 3.0, True) == pytest.approx(1.0)
        assert scaled_width(1.0, 2, 5, 3.0, True) == pytest.approx(2.0)
        assert scaled_width(1.0, 4, 5, 3.0, True) == pytest.approx(3.0)

    def test_disabled_returns_base_width(self):
        assert scaled_width(1.6, 4, 5, 3.0, False) == 1.6

    @pytest.mark.parametrize("column", range(6))
    def test_unit_factor_keeps_base_width_when_enabled(self, column):
        assert scaled_width(1.6, column, 6, 1.0, True) == pytest.approx(1.6)

    def test_single_column_keeps_base_width(self):
        assert scaled_width(1.6, 0, 1, 3.0, True) == 1.6

    def test_monotonic_in_column(self):
        widths = [scaled_width(1.0, c, 10, 2.0, True) for c in range(10)]
        assert widths == sorted(widths)
