"""
Settings (Typed Configuration)
==============================
Strongly-typed, immutable configuration of the shape grid.

Why is this file needed?
------------------------
1. Snapshots: Every change produces a new `Settings` value (`dataclasses.replace`),
   so the pure functions of the core never observe shared mutable state.
2. Boundary: The flat, JSON-compatible settings record used for saving, sharing
   and restoring projects is converted here. Unknown keys are rejected at this
   boundary, camera/view keys are dropped, missing keys take the defaults.
3. Validation: Invalid configurations are rejected here so the core can assume
   well-formed input.

Classes:
    ShapeKind, CylinderAxis: Enumerations.
    RGBA: Colour with alpha.
    GridConfig, TransformState, ColorGroupConfig: Configuration groups.
    Settings: The complete snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Dict, Mapping
import logging
import math
import re

from circlematrix.config import ANIMATION
from circlematrix.model.geometry_primitives import Vector3

logger = logging.getLogger(__name__)


class SettingsError(ValueError):
    """Raised when a settings record or snapshot is invalid."""


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class ShapeKind(StrEnum):
    DISC = "circle"
    QUAD = "rectangle"

    @property
    def opposite(self) -> ShapeKind:
        return ShapeKind.QUAD if self is ShapeKind.DISC else ShapeKind.DISC


class CylinderAxis(StrEnum):
    X = "x"
    Y = "y"


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class RGBA:
    r: int
    g: int
    b: int
    a: float = 1.0

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_dict(self) -> Dict[str, Any]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}


@dataclass(frozen=True)
class GridConfig:
    rows: int = 3
    cols: int = 12
    row_spacing: float = 2.0
    col_spacing: float = 2.0
    shape_kind: ShapeKind = ShapeKind.DISC
    circle_radius: float = 0.8
    rect_width: float = 1.6
    rect_height: float = 1.2
    width_scaling_enabled: bool = False
    width_scale_factor: float = 2.0
    border_thickness: float = 0.15


@dataclass(frozen=True)
class TransformState:
    cylinder_axis: CylinderAxis = CylinderAxis.Y
    cylinder_curvature: float = 0.0
    cylinder_radius: float = 8.0
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    object_position: Vector3 = field(default_factory=Vector3)


@dataclass(frozen=True)
class ColorGroupConfig:
    fill: RGBA
    stroke: RGBA = field(default_factory=lambda: RGBA(0, 0, 0, 1.0))
    frequency: float = 1.0
    sync_colors: bool = False


def _default_color_groups() -> tuple[ColorGroupConfig, ColorGroupConfig, ColorGroupConfig]:
    return (
        ColorGroupConfig(fill=RGBA(0, 122, 255, 0.8)),
        ColorGroupConfig(fill=RGBA(52, 199, 89, 0.8)),
        ColorGroupConfig(fill=RGBA(175, 82, 222, 0.8)),
    )


@dataclass(frozen=True)
class Settings:
    """
    Complete, immutable configuration snapshot.
    The colour seed is carried next to it by `ProjectState`.
    """
    grid: GridConfig = field(default_factory=GridConfig)
    transform: TransformState = field(default_factory=TransformState)
    color_groups: tuple[ColorGroupConfig, ...] = field(default_factory=_default_color_groups)
    background_color: str = "#f5f7fa"
    animation_speed: float = ANIMATION["DEFAULT_SPEED"]

    @property
    def frequencies(self) -> tuple[float, float, float]:
        f0, f1, f2 = (group.frequency for group in self.color_groups)
        return (f0, f1, f2)

    def validate(self) -> Settings:
        """Raise SettingsError if the snapshot cannot be fed to the core. Returns self."""
        g, t = self.grid, self.transform
        numbers = {
            "rowSpacing": g.row_spacing, "colSpacing": g.col_spacing,
            "circleRadius": g.circle_radius, "rectangleWidth": g.rect_width,
            "rectangleHeight": g.rect_height, "widthScaleFactor": g.width_scale_factor,
            "cylinderRadius": t.cylinder_radius,
            "rotationX": t.rotation_x, "rotationY": t.rotation_y, "rotationZ": t.rotation_z,
            "objectPositionX": t.object_position.x, "objectPositionY": t.object_position.y,
            "objectPositionZ": t.object_position.z,
        }
        numbers.update({f"frequency{i}": group.frequency for i, group in enumerate(self.color_groups, start=1)})
        for key, value in numbers.items():
            if not math.isfinite(value):
                raise SettingsError(f"'{key}' must be a finite number, got {value}.")

        if g.rows < 1 or g.cols < 1:
            raise SettingsError(f"Grid needs at least one row and column, got {g.rows}x{g.cols}.")
        if g.row_spacing <= 0 or g.col_spacing <= 0:
            raise SettingsError("Row and column spacing must be positive.")
        if g.circle_radius <= 0 or g.rect_width <= 0 or g.rect_height <= 0:
            raise SettingsError("Shape dimensions must be positive.")
        if g.width_scale_factor < 1.0:
            raise SettingsError(f"Width scale factor must be >= 1, got {g.width_scale_factor}.")
        if not 0.0 < g.border_thickness < 0.5:
            raise SettingsError(f"Border thickness must lie in (0, 0.5), got {g.border_thickness}.")

        if not 0.0 <= t.cylinder_curvature <= 1.0:
            raise SettingsError(f"Cylinder curvature must lie in [0, 1], got {t.cylinder_curvature}.")
        if t.cylinder_radius <= 0:
            raise SettingsError("Cylinder radius must be positive.")

        if len(self.color_groups) != 3:
            raise SettingsError(f"Exactly 3 colour groups are required, got {len(self.color_groups)}.")
        for i, group in enumerate(self.color_groups, start=1):
            if group.frequency < 0:
                raise SettingsError(f"Frequency of colour group {i} must not be negative.")
            for color in (group.fill, group.stroke):
                if not all(0 <= c <= 255 for c in color.rgb) or not 0.0 <= color.a <= 1.0:
                    raise SettingsError(f"Colour {color} of group {i} is out of range.")
        if sum(self.frequencies) <= 0:
            raise SettingsError("At least one colour group needs a positive frequency.")

        if not _HEX_COLOR.fullmatch(self.background_color):
            raise SettingsError(f"Background colour '{self.background_color}' is not a #rrggbb value.")
        if not ANIMATION["MIN_SPEED"] <= self.animation_speed <= ANIMATION["MAX_SPEED"]:
            raise SettingsError(f"Animation speed {self.animation_speed} is out of range.")
        return self

    # --- Record boundary ---

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the JSON-compatible settings record (without colorSeed)."""
        g, t = self.grid, self.transform
        record: Dict[str, Any] = {
            "rows": g.rows,
            "cols": g.cols,
            "rowSpacing": g.row_spacing,
            "colSpacing": g.col_spacing,
            "shapeType": str(g.shape_kind),
            "circleRadius": g.circle_radius,
            "rectangleWidth": g.rect_width,
            "rectangleHeight": g.rect_height,
            "enableWidthScaling": g.width_scaling_enabled,
            "widthScaleFactor": g.width_scale_factor,
            "borderThickness": g.border_thickness,
            "cylinderAxis": str(t.cylinder_axis),
            "cylinderCurvature": t.cylinder_curvature,
            "cylinderRadius": t.cylinder_radius,
            "objectPositionX": t.object_position.x,
            "objectPositionY": t.object_position.y,
            "objectPositionZ": t.object_position.z,
            "rotationX": t.rotation_x,
            "rotationY": t.rotation_y,
            "rotationZ": t.rotation_z,
            "backgroundColor": self.background_color,
            "animationSpeed": self.animation_speed,
        }
        for i, group in enumerate(self.color_groups, start=1):
            record[f"frequency{i}"] = group.frequency
            record[f"syncColors{i}"] = group.sync_colors
            record[f"fill{i}"] = group.fill.to_dict()
            record[f"stroke{i}"] = group.stroke.to_dict()
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any], base: Settings | None = None) -> Settings:
        """
        Build a validated snapshot from a (possibly partial) settings record.

        Args:
            record: Flat key/value mapping. `colorSeed` is ignored here (see ProjectState).
            base: Snapshot supplying the values of missing keys. Defaults to `Settings()`.
        """
        values = (base or cls()).to_record()
        for key, value in record.items():
            if key in VIEW_KEYS or key == SEED_KEY:
                if key in VIEW_KEYS:
                    logger.debug(f"Dropping view-state key '{key}' from settings record.")
                continue
            if key not in values:
                raise SettingsError(f"Unknown settings key '{key}'.")
            values[key] = value

        try:
            grid = GridConfig(
                rows=_as_int(values, "rows"),
                cols=_as_int(values, "cols"),
                row_spacing=_as_float(values, "rowSpacing"),
                col_spacing=_as_float(values, "colSpacing"),
                shape_kind=_as_enum(values, "shapeType", ShapeKind),
                circle_radius=_as_float(values, "circleRadius"),
                rect_width=_as_float(values, "rectangleWidth"),
                rect_height=_as_float(values, "rectangleHeight"),
                width_scaling_enabled=_as_bool(values, "enableWidthScaling"),
                width_scale_factor=_as_float(values, "widthScaleFactor"),
                border_thickness=_as_float(values, "borderThickness"),
            )
            transform = TransformState(
                cylinder_axis=_as_enum(values, "cylinderAxis", CylinderAxis),
                cylinder_curvature=_as_float(values, "cylinderCurvature"),
                cylinder_radius=_as_float(values, "cylinderRadius"),
                rotation_x=_as_float(values, "rotationX"),
                rotation_y=_as_float(values, "rotationY"),
                rotation_z=_as_float(values, "rotationZ"),
                object_position=Vector3(
                    _as_float(values, "objectPositionX"),
                    _as_float(values, "objectPositionY"),
                    _as_float(values, "objectPositionZ"),
                ),
            )
            groups = tuple(
                ColorGroupConfig(
                    fill=_as_rgba(values, f"fill{i}"),
                    stroke=_as_rgba(values, f"stroke{i}"),
                    frequency=_as_float(values, f"frequency{i}"),
                    sync_colors=_as_bool(values, f"syncColors{i}"),
                )
                for i in (1, 2, 3)
            )
            background = values["backgroundColor"]
            if not isinstance(background, str):
                raise SettingsError(f"'backgroundColor' must be a string, got {background!r}.")
        except (TypeError, KeyError) as e:
            raise SettingsError(f"Malformed settings record: {e}") from e

        return cls(
            grid=grid,
            transform=transform,
            color_groups=groups,
            background_color=background,
            animation_speed=_as_float(values, "animationSpeed"),
        ).validate()

    def updated(self, **changes: Any) -> Settings:
        """Return a new snapshot with record-keyed changes applied, e.g. `updated(rows=4)`."""
        return Settings.from_record(changes, base=self)

    def with_rotation_y(self, angle: float) -> Settings:
        return replace(self, transform=replace(self.transform, rotation_y=angle))

    def with_shape_kind(self, kind: ShapeKind) -> Settings:
        return replace(self, grid=replace(self.grid, shape_kind=kind))


# Keys that describe camera/view state. Never written, dropped when read.
VIEW_KEYS: frozenset[str] = frozenset({
    "cameraPositionX", "cameraPositionY", "cameraPositionZ", "cameraControlType",
})
SEED_KEY = "colorSeed"

_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


# ------------------------------------------------------------------------------
# Record value coercion
# ------------------------------------------------------------------------------
def _as_float(values: Mapping[str, Any], key: str) -> float:
    value = values[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"'{key}' must be a number, got {value!r}.")
    return float(value)


def _as_int(values: Mapping[str, Any], key: str) -> int:
    value = values[key]
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"'{key}' must be an integer, got {value!r}.")
    return value


def _as_bool(values: Mapping[str, Any], key: str) -> bool:
    value = values[key]
    if not isinstance(value, bool):
        raise SettingsError(f"'{key}' must be a boolean, got {value!r}.")
    return value


def _as_enum(values: Mapping[str, Any], key: str, enum_cls: type[StrEnum]) -> Any:
    try:
        return enum_cls(values[key])
    except ValueError as e:
        raise SettingsError(f"'{key}' has invalid value {values[key]!r}.") from e


def _as_rgba(values: Mapping[str, Any], key: str) -> RGBA:
    value = values[key]
    if isinstance(value, RGBA):
        return value
    if not isinstance(value, Mapping) or set(value) - {"r", "g", "b", "a"}:
        raise SettingsError(f"'{key}' must be an {{r, g, b, a}} object, got {value!r}.")
    return RGBA(
        r=_as_int(value, "r"),
        g=_as_int(value, "g"),
        b=_as_int(value, "b"),
        a=_as_float(value, "a") if "a" in value else 1.0,
    )
