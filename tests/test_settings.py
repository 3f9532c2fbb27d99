import math

import pytest

from circlematrix.model.settings import CylinderAxis, Settings, SettingsError, ShapeKind
from circlematrix.model.state import ProjectState


def test_record_round_trip():
    settings = Settings().updated(rows=5, shapeType="rectangle", cylinderAxis="x", rotationZ=0.25)
    assert Settings.from_record(settings.to_record()) == settings


def test_record_keys_are_converted():
    settings = Settings.from_record({"rows": 4, "shapeType": "rectangle", "cylinderAxis": "x",
                                     "fill2": {"r": 1, "g": 2, "b": 3, "a": 0.5}})
    assert settings.grid.rows == 4
    assert settings.grid.shape_kind is ShapeKind.QUAD
    assert settings.transform.cylinder_axis is CylinderAxis.X
    assert settings.color_groups[1].fill.rgb == (1, 2, 3)


def test_missing_keys_fall_back_to_defaults():
    assert Settings.from_record({}) == Settings()


def test_unknown_key_is_rejected():
    with pytest.raises(SettingsError, match="Unknown settings key"):
        Settings.from_record({"rows": 3, "sparkles": True})


def test_camera_keys_are_dropped():
    settings = Settings.from_record({"cameraPositionX": 1.0, "cameraControlType": "orbit"})
    assert settings == Settings()
    assert "cameraPositionX" not in settings.to_record()


@pytest.mark.parametrize("changes", [
    {"rows": 0},
    {"colSpacing": 0.0},
    {"borderThickness": 0.5},
    {"cylinderCurvature": 1.5},
    {"frequency1": 0, "frequency2": 0, "frequency3": 0},
    {"frequency2": -1},
    {"backgroundColor": "blue"},
    {"animationSpeed": 0.0},
    {"shapeType": "triangle"},
    {"rows": "many"},
])
def test_invalid_values_are_rejected(changes):
    with pytest.raises(SettingsError):
        Settings().updated(**changes)


@pytest.mark.parametrize("key, value", [
    ("rowSpacing", math.inf),
    ("colSpacing", math.inf),
    ("cylinderRadius", math.inf),
    ("rotationY", math.nan),
    ("objectPositionX", math.nan),
    ("objectPositionZ", -math.inf),
    ("frequency1", math.nan),
])
def test_non_finite_numbers_are_rejected(key, value):
    with pytest.raises(SettingsError, match="finite"):
        Settings().updated(**{key: value})


def test_project_state_record_carries_seed():
    state = ProjectState(color_seed=77)
    record = state.to_record()
    assert record["colorSeed"] == 77

    other = ProjectState(color_seed=1)
    other.apply_record(record)
    assert other.color_seed == 77
    assert other.settings == state.settings


def test_rejected_record_leaves_state_untouched():
    state = ProjectState(color_seed=5)
    before = state.settings
    with pytest.raises(SettingsError):
        state.apply_record({"rows": -1})
    assert state.settings is before
    assert state.color_seed == 5


def test_non_integer_seed_is_rejected():
    with pytest.raises(SettingsError):
        ProjectState().apply_record({"colorSeed": "abc"})
