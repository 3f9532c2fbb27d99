import logging

import pytest

from circlematrix.model.colors import SeededRandom, assign_color_groups, classify, resolve_materials
from circlematrix.model.layout import generate_grid
from circlematrix.model.settings import RGBA, ColorGroupConfig, GridConfig


def _groups(units):
    return [u.color_group for u in units]


def test_lcg_known_values():
    rng = SeededRandom(0)
    assert rng.next() == pytest.approx(49297 / 233280)
    assert rng.state == 49297
    assert SeededRandom(1).next() == pytest.approx(58598 / 233280)


def test_lcg_output_in_unit_interval():
    values = [v for _, v in zip(range(1000), SeededRandom(987654))]
    assert all(0.0 <= v < 1.0 for v in values)


def test_classify_uses_cumulative_probabilities():
    probs = [0.5, 0.25, 0.25]
    assert classify(0.0, probs) == 0
    assert classify(0.49, probs) == 0
    assert classify(0.5, probs) == 1
    assert classify(0.74, probs) == 1
    assert classify(0.75, probs) == 2


def test_same_seed_gives_identical_assignment():
    config = GridConfig(rows=4, cols=9)
    a, b = generate_grid(config), generate_grid(config)
    assert assign_color_groups(a, (1, 2, 3), 4242) == 4242
    assign_color_groups(b, (1, 2, 3), 4242)
    assert _groups(a) == _groups(b)


def test_different_seeds_differ():
    config = GridConfig(rows=4, cols=9)
    a, b = generate_grid(config), generate_grid(config)
    assign_color_groups(a, (1, 1, 1), 1)
    assign_color_groups(b, (1, 1, 1), 2)
    assert _groups(a) != _groups(b)


def test_zero_frequency_group_is_never_used():
    units = generate_grid(GridConfig(rows=6, cols=10))
    assign_color_groups(units, (1, 0, 1), 7)
    assert 1 not in _groups(units)


def test_missing_seed_is_substituted_and_reported(caplog):
    units = generate_grid(GridConfig(rows=2, cols=2))
    with caplog.at_level(logging.WARNING, logger="circlematrix"):
        seed = assign_color_groups(units, (1, 1, 1), None)
    assert isinstance(seed, int)
    assert "random seed" in caplog.text


class TestResolveMaterials:
    groups = (
        ColorGroupConfig(fill=RGBA(10, 20, 30, 0.5), stroke=RGBA(1, 2, 3, 1.0)),
        ColorGroupConfig(fill=RGBA(40, 50, 60, 1.0), stroke=RGBA(4, 5, 6, 1.0), sync_colors=True),
        ColorGroupConfig(fill=RGBA(70, 80, 90, 1.0)),
    )

    def test_fill_and_stroke(self):
        fill, stroke = resolve_materials(self.groups, 0)
        assert fill.color == (10, 20, 30)
        assert fill.opacity == 0.5
        assert fill.transparent
        assert stroke.color == (1, 2, 3)
        assert not stroke.transparent

    def test_sync_colors_mirrors_fill(self):
        fill, stroke = resolve_materials(self.groups, 1)
        assert stroke == fill

    def test_unknown_index_falls_back_to_first_group(self):
        assert resolve_materials(self.groups, 7) == resolve_materials(self.groups, 0)
