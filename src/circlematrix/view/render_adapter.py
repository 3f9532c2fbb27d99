"""
PyVista Render Adapter
======================
Implements the scene controller's `RenderAdapter` protocol on a pyvista Plotter
(either a pyvistaqt QtInteractor or an off-screen `pv.Plotter`).

Each mesh handle maps to one `pv.Actor`. Poses are applied through
`actor.user_matrix` so the Euler order matches `model.transforms.euler_to_matrix`.
"""
from __future__ import annotations

from itertools import count
from typing import Dict, Set, Tuple
import logging

import numpy as np
import pyvista as pv

from circlematrix.config import RENDER
from circlematrix.controller.render import ResourceReleaseError
from circlematrix.model.colors import MaterialSpec
from circlematrix.model.geometry_primitives import Vector3
from circlematrix.model.shapes import ShapeGeometry
from circlematrix.model.transforms import pose_matrix

logger = logging.getLogger(__name__)


def to_polydata(geometry: ShapeGeometry) -> pv.PolyData:
    """Convert an (N, 3) point / (M, 3) triangle geometry into pyvista's padded face format."""
    n_faces = geometry.faces.shape[0]
    faces = np.hstack((np.full((n_faces, 1), 3, dtype=np.int64), geometry.faces)).ravel()
    return pv.PolyData(geometry.points.astype(np.float64), faces=faces)


def configure_camera(plotter: pv.Plotter) -> None:
    """Perspective camera at the default position, looking at the origin."""
    plotter.camera.position = RENDER["DEFAULT_CAMERA_POSITION"]
    plotter.camera.focal_point = (0.0, 0.0, 0.0)
    plotter.camera.up = (0.0, 1.0, 0.0)
    plotter.camera.view_angle = RENDER["DEFAULT_FOV"]


class PyVistaRenderAdapter:
    def __init__(self, plotter: pv.Plotter) -> None:
        self.plotter = plotter
        self._ids = count(1)

        # --- Resource registries ---
        self._actors: Dict[int, pv.Actor] = {}
        self._poses: Dict[int, Tuple[Vector3, Vector3]] = {}
        self._polydata: Dict[int, pv.PolyData] = {}  # keyed by ShapeGeometry.id
        self._materials: Dict[int, MaterialSpec] = {}  # keyed by id(material)
        self._in_scene: Set[int] = set()

    @property
    def live_counts(self) -> Dict[str, int]:
        return {
            "meshes": len(self._actors),
            "geometries": len(self._polydata),
            "materials": len(self._materials),
            "in_scene": len(self._in_scene),
        }

    # --- Meshes ---

    def create_mesh(self, geometry: ShapeGeometry, material: MaterialSpec) -> int:
        mapper = pv.DataSetMapper(self._register_geometry(geometry))
        actor = pv.Actor(mapper=mapper)
        self._register_material(material)
        self._style(actor, material)

        handle = next(self._ids)
        self._actors[handle] = actor
        self._poses[handle] = (Vector3(), Vector3())
        return handle

    def set_geometry(self, handle: int, geometry: ShapeGeometry) -> None:
        actor = self._actor(handle)
        actor.mapper.dataset = self._register_geometry(geometry)

    def set_material(self, handle: int, material: MaterialSpec) -> None:
        self._register_material(material)
        self._style(self._actor(handle), material)

    def dispose_mesh(self, handle: int) -> None:
        if handle in self._in_scene:
            self.remove_from_scene(handle)
        if self._actors.pop(handle, None) is None:
            raise ResourceReleaseError(f"Mesh {handle} is not registered.")
        self._poses.pop(handle, None)

    # --- Resources ---

    def dispose_geometry(self, geometry: ShapeGeometry) -> None:
        if self._polydata.pop(geometry.id, None) is None:
            raise ResourceReleaseError(f"Geometry {geometry.id} is not registered.")

    def dispose_material(self, material: MaterialSpec) -> None:
        if self._materials.pop(id(material), None) is None:
            raise ResourceReleaseError(f"Material {material} is not registered.")

    # --- Pose ---

    def set_position(self, handle: int, x: float, y: float, z: float) -> None:
        _, rotation = self._poses[handle]
        self._set_pose(handle, Vector3(x, y, z), rotation)

    def set_rotation(self, handle: int, x: float, y: float, z: float) -> None:
        position, _ = self._poses[handle]
        self._set_pose(handle, position, Vector3(x, y, z))

    # --- Scene ---

    def add_to_scene(self, handle: int) -> None:
        self.plotter.add_actor(self._actor(handle), reset_camera=False, render=False)
        self._in_scene.add(handle)

    def remove_from_scene(self, handle: int) -> None:
        if handle not in self._in_scene:
            raise ResourceReleaseError(f"Mesh {handle} is not in the scene.")
        self.plotter.remove_actor(self._actors[handle], reset_camera=False, render=False)
        self._in_scene.discard(handle)

    def set_background(self, color: str) -> None:
        self.plotter.set_background(color)

    def render(self) -> None:
        self.plotter.render()

    # --- Helpers ---

    def _actor(self, handle: int) -> pv.Actor:
        try:
            return self._actors[handle]
        except KeyError:
            raise ResourceReleaseError(f"Mesh {handle} is not registered.") from None

    def _register_geometry(self, geometry: ShapeGeometry) -> pv.PolyData:
        poly = self._polydata.get(geometry.id)
        if poly is None:
            poly = to_polydata(geometry)
            self._polydata[geometry.id] = poly
        return poly

    def _register_material(self, material: MaterialSpec) -> None:
        self._materials[id(material)] = material

    def _set_pose(self, handle: int, position: Vector3, rotation: Vector3) -> None:
        self._poses[handle] = (position, rotation)
        self._actor(handle).user_matrix = pose_matrix(position, rotation)

    @staticmethod
    def _style(actor: pv.Actor, material: MaterialSpec) -> None:
        # Unlit flat colour, both faces visible
        actor.prop.color = tuple(c / 255.0 for c in material.color)
        actor.prop.opacity = material.opacity
        actor.prop.lighting = False
        actor.prop.culling = "none"
