"""
Render Adapter Boundary
=======================
The capability set the scene controller needs from a rendering engine.
The engine owns the actual meshes; the core only holds opaque handles.
"""
from __future__ import annotations

from typing import Hashable, Protocol

from circlematrix.model.colors import MaterialSpec
from circlematrix.model.shapes import ShapeGeometry

MeshHandle = Hashable


class ResourceReleaseError(LookupError):
    """Raised when releasing a geometry, material or mesh that is missing or already released."""


class RenderAdapter(Protocol):
    def create_mesh(self, geometry: ShapeGeometry, material: MaterialSpec) -> MeshHandle: ...

    def set_geometry(self, handle: MeshHandle, geometry: ShapeGeometry) -> None: ...

    def set_material(self, handle: MeshHandle, material: MaterialSpec) -> None: ...

    def dispose_geometry(self, geometry: ShapeGeometry) -> None: ...

    def dispose_material(self, material: MaterialSpec) -> None: ...

    def dispose_mesh(self, handle: MeshHandle) -> None: ...

    def set_position(self, handle: MeshHandle, x: float, y: float, z: float) -> None: ...

    def set_rotation(self, handle: MeshHandle, x: float, y: float, z: float) -> None: ...

    def add_to_scene(self, handle: MeshHandle) -> None: ...

    def remove_from_scene(self, handle: MeshHandle) -> None: ...

    def set_background(self, color: str) -> None: ...

    def render(self) -> None: ...
