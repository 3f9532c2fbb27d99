"""
Scene Controller
================
Owns the grid units and their render-side resources and keeps them in sync with
the project settings.

What a settings change rebuilds:
    structural (grid config, colour frequencies)  -> regenerate every unit
    transform                                      -> recompute poses from baselines
    colours                                        -> refresh materials, once per frame
    background                                     -> adapter background only
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional
import logging
import time

from circlematrix.controller.animation import RotationAnimationDriver
from circlematrix.controller.morph import ShapeMorphController
from circlematrix.controller.render import MeshHandle, RenderAdapter, ResourceReleaseError
from circlematrix.controller.scheduler import FrameHandle, FrameScheduler
from circlematrix.model.colors import MaterialSpec, assign_color_groups, resolve_materials
from circlematrix.model.layout import GridUnit, generate_grid
from circlematrix.model.settings import Settings, ShapeKind
from circlematrix.model.shapes import ShapeGeometry, build_unit_geometry
from circlematrix.model.state import ProjectState
from circlematrix.model.transforms import compute_pose

logger = logging.getLogger(__name__)


@dataclass
class UnitGraphics:
    """Render resources of one unit. Geometry and materials are owned exclusively by it."""
    fill_handle: MeshHandle
    stroke_handle: MeshHandle
    fill_geometry: ShapeGeometry
    stroke_geometry: ShapeGeometry
    fill_material: MaterialSpec
    stroke_material: MaterialSpec

    @property
    def handles(self) -> tuple[MeshHandle, MeshHandle]:
        return (self.fill_handle, self.stroke_handle)


def is_structural_change(old: Settings, new: Settings) -> bool:
    return old.grid != new.grid or old.frequencies != new.frequencies


class SceneController:
    def __init__(
        self,
        adapter: RenderAdapter,
        scheduler: FrameScheduler,
        state: Optional[ProjectState] = None,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.adapter = adapter
        self.scheduler = scheduler
        self.state = state if state is not None else ProjectState()
        self.units: List[GridUnit] = []
        self.generation = 0

        self.on_settings_changed: Optional[Callable[[Settings], None]] = None

        self.morph = ShapeMorphController(
            dominant=self.settings.grid.shape_kind,
            on_swap=self._swap_shapes,
        )
        self.animation = RotationAnimationDriver(
            scheduler=scheduler,
            read_rotation=lambda: self.settings.transform.rotation_y,
            read_speed=lambda: self.settings.animation_speed,
            on_frame=self._on_animation_frame,
            morph=self.morph,
            clock=clock,
        )
        self._color_refresh_handle: Optional[FrameHandle] = None

    @property
    def settings(self) -> Settings:
        return self.state.settings

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def build(self) -> None:
        """(Re)generate every unit from the current settings and colour seed."""
        self._dispose_units()
        settings = self.settings

        units = generate_grid(settings.grid)
        assign_color_groups(units, settings.frequencies, self.state.color_seed)
        for unit in units:
            unit.graphics = self._create_graphics(unit, settings)
            self._apply_pose(unit, settings)

        self.units = units
        self.generation += 1
        self.morph.reset(settings.grid.shape_kind)
        self.adapter.set_background(settings.background_color)
        self.adapter.render()
        logger.info(
            f"Generated {len(units)} units ({settings.grid.rows}x{settings.grid.cols}, "
            f"seed {self.state.color_seed})."
        )

    def apply_settings(self, new: Settings) -> None:
        """Switch to a new settings snapshot, rebuilding only what the change requires."""
        new.validate()
        old = self.settings
        if new == old:
            return
        self.state.settings = new

        if is_structural_change(old, new) or not self.units:
            self.build()
        else:
            if old.transform != new.transform:
                self.update_poses()
            if old.color_groups != new.color_groups:
                self.schedule_color_refresh()
            if old.background_color != new.background_color:
                self.adapter.set_background(new.background_color)
            self.adapter.render()
        self._notify()

    def update(self, **changes: Any) -> None:
        """Apply record-keyed changes, e.g. `update(rotationX=0.5, cylinderCurvature=1.0)`."""
        self.apply_settings(self.settings.updated(**changes))

    def load_record(self, record: Mapping[str, Any]) -> None:
        """Apply a saved/shared record: re-seed the colours first, then regenerate."""
        self.animation.cancel()
        self.state.apply_record(record)
        self.reload()

    def reload(self) -> None:
        """Regenerate after `state` was replaced from outside (project load, reset)."""
        self.animation.cancel()
        self.build()
        self._notify()

    def regenerate_colors(self) -> int:
        seed = self.state.regenerate_seed()
        self.build()
        return seed

    def reset(self) -> None:
        self.animation.cancel()
        self.state.reset()
        self.reload()

    def toggle_rotation_animation(self) -> bool:
        return self.animation.toggle()

    def update_poses(self) -> None:
        settings = self.settings
        for unit in self.units:
            self._apply_pose(unit, settings)

    def schedule_color_refresh(self) -> None:
        """Coalesce colour edits into one material refresh on the next frame."""
        if self._color_refresh_handle is not None:
            return
        self._color_refresh_handle = self.scheduler.request_frame(self._on_color_refresh_frame)

    def refresh_materials(self) -> None:
        groups = self.settings.color_groups
        for unit in self.units:
            graphics: UnitGraphics = unit.graphics
            fill, stroke = resolve_materials(groups, unit.color_group)
            self.adapter.set_material(graphics.fill_handle, fill)
            self.adapter.set_material(graphics.stroke_handle, stroke)
            self._release(self.adapter.dispose_material, graphics.fill_material)
            self._release(self.adapter.dispose_material, graphics.stroke_material)
            graphics.fill_material, graphics.stroke_material = fill, stroke
        self.adapter.render()

    def dispose(self) -> None:
        """Cancel every pending frame callback and release every render resource."""
        self.animation.cancel()
        if self._color_refresh_handle is not None:
            self.scheduler.cancel_frame(self._color_refresh_handle)
            self._color_refresh_handle = None
        self._dispose_units()
        logger.info("Scene disposed.")

    # ------------------------------------------------------------------------------
    # Frame callbacks
    # ------------------------------------------------------------------------------

    def _on_animation_frame(self, angle: float) -> None:
        self.state.settings = self.settings.with_rotation_y(angle)
        self.update_poses()
        self.adapter.render()
        self._notify()

    def _on_color_refresh_frame(self) -> None:
        self._color_refresh_handle = None
        self.refresh_materials()

    def _swap_shapes(self, old_kind: ShapeKind, new_kind: ShapeKind) -> None:
        """Replace fill/stroke geometry of every unit currently showing `old_kind`."""
        grid = self.settings.grid
        swapped = 0
        for unit in self.units:
            if unit.current_shape_kind != old_kind:
                continue
            graphics: UnitGraphics = unit.graphics
            fill, stroke = build_unit_geometry(grid, new_kind, unit.column_index)
            self.adapter.set_geometry(graphics.fill_handle, fill)
            self.adapter.set_geometry(graphics.stroke_handle, stroke)
            self._release(self.adapter.dispose_geometry, graphics.fill_geometry)
            self._release(self.adapter.dispose_geometry, graphics.stroke_geometry)
            graphics.fill_geometry, graphics.stroke_geometry = fill, stroke
            unit.current_shape_kind = new_kind
            swapped += 1

        # committed without a rebuild; the units already show the new kind
        self.state.settings = self.settings.with_shape_kind(new_kind)
        logger.info(f"Morphed {swapped} units from {old_kind} to {new_kind}.")

    # ------------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------------

    def _create_graphics(self, unit: GridUnit, settings: Settings) -> UnitGraphics:
        fill_geo, stroke_geo = build_unit_geometry(settings.grid, unit.current_shape_kind, unit.column_index)
        fill_mat, stroke_mat = resolve_materials(settings.color_groups, unit.color_group)
        graphics = UnitGraphics(
            fill_handle=self.adapter.create_mesh(fill_geo, fill_mat),
            stroke_handle=self.adapter.create_mesh(stroke_geo, stroke_mat),
            fill_geometry=fill_geo,
            stroke_geometry=stroke_geo,
            fill_material=fill_mat,
            stroke_material=stroke_mat,
        )
        for handle in graphics.handles:
            self.adapter.add_to_scene(handle)
        return graphics

    def _apply_pose(self, unit: GridUnit, settings: Settings) -> None:
        pose = compute_pose(unit.baseline, settings.transform, settings.grid)
        for handle in unit.graphics.handles:
            self.adapter.set_position(handle, *pose.position.as_tuple())
            self.adapter.set_rotation(handle, *pose.rotation.as_tuple())

    def _dispose_units(self) -> None:
        """Release all geometry, materials and meshes before the unit list is dropped."""
        for unit in self.units:
            graphics: Optional[UnitGraphics] = unit.graphics
            if graphics is None:
                continue
            for handle in graphics.handles:
                self._release(self.adapter.remove_from_scene, handle)
            self._release(self.adapter.dispose_geometry, graphics.fill_geometry)
            self._release(self.adapter.dispose_geometry, graphics.stroke_geometry)
            self._release(self.adapter.dispose_material, graphics.fill_material)
            self._release(self.adapter.dispose_material, graphics.stroke_material)
            for handle in graphics.handles:
                self._release(self.adapter.dispose_mesh, handle)
            unit.graphics = None
        self.units = []

    @staticmethod
    def _release(release: Callable[[Any], None], resource: Any) -> None:
        try:
            release(resource)
        except ResourceReleaseError as e:
            logger.warning(f"Could not release render resource {resource!r}: {e}")

    def _notify(self) -> None:
        if self.on_settings_changed is not None:
            self.on_settings_changed(self.settings)
