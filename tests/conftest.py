from itertools import count
from typing import Any, Dict, List, Set, Tuple

import pytest

from circlematrix.controller.render import ResourceReleaseError
from circlematrix.controller.scheduler import ManualFrameScheduler
from circlematrix.controller.scene import SceneController
from circlematrix.model.state import ProjectState


class FakeRenderAdapter:
    """Records every call and tracks live resources like a real renderer would."""

    def __init__(self) -> None:
        self._ids = count(1)
        self.calls: List[Tuple[str, Any]] = []
        self.meshes: Dict[int, Dict[str, Any]] = {}
        self.geometries: Dict[int, Any] = {}
        self.materials: Dict[int, Any] = {}
        self.in_scene: Set[int] = set()
        self.background: str = ""
        self.render_count = 0
        self.fail_material_release = False

    # --- meshes ---

    def create_mesh(self, geometry, material) -> int:
        handle = next(self._ids)
        self.geometries[geometry.id] = geometry
        self.materials[id(material)] = material
        self.meshes[handle] = {
            "geometry": geometry, "material": material, "position": (0.0, 0.0, 0.0), "rotation": (0.0, 0.0, 0.0)
        }
        self.calls.append(("create_mesh", handle))
        return handle

    def set_geometry(self, handle, geometry) -> None:
        self.geometries[geometry.id] = geometry
        self.meshes[handle]["geometry"] = geometry
        self.calls.append(("set_geometry", handle))

    def set_material(self, handle, material) -> None:
        self.materials[id(material)] = material
        self.meshes[handle]["material"] = material
        self.calls.append(("set_material", handle))

    def dispose_mesh(self, handle) -> None:
        if self.meshes.pop(handle, None) is None:
            raise ResourceReleaseError(f"mesh {handle}")
        self.calls.append(("dispose_mesh", handle))

    # --- resources ---

    def dispose_geometry(self, geometry) -> None:
        if self.geometries.pop(geometry.id, None) is None:
            raise ResourceReleaseError(f"geometry {geometry.id}")
        self.calls.append(("dispose_geometry", geometry.id))

    def dispose_material(self, material) -> None:
        if self.fail_material_release:
            raise ResourceReleaseError("material release failed")
        if self.materials.pop(id(material), None) is None:
            raise ResourceReleaseError(f"material {material}")
        self.calls.append(("dispose_material", id(material)))

    # --- pose ---

    def set_position(self, handle, x, y, z) -> None:
        self.meshes[handle]["position"] = (x, y, z)

    def set_rotation(self, handle, x, y, z) -> None:
        self.meshes[handle]["rotation"] = (x, y, z)

    # --- scene ---

    def add_to_scene(self, handle) -> None:
        self.in_scene.add(handle)

    def remove_from_scene(self, handle) -> None:
        if handle not in self.in_scene:
            raise ResourceReleaseError(f"mesh {handle} not in scene")
        self.in_scene.discard(handle)

    def set_background(self, color: str) -> None:
        self.background = color

    def render(self) -> None:
        self.render_count += 1

    def count_calls(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def adapter() -> FakeRenderAdapter:
    return FakeRenderAdapter()


@pytest.fixture
def scheduler() -> ManualFrameScheduler:
    return ManualFrameScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state() -> ProjectState:
    return ProjectState(color_seed=12345)


@pytest.fixture
def scene(adapter, scheduler, state, clock) -> SceneController:
    controller = SceneController(adapter, scheduler, state, clock=clock)
    controller.build()
    return controller
