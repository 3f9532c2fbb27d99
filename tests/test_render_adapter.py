import numpy as np
import pytest

from circlematrix.controller.render import ResourceReleaseError
from circlematrix.model.colors import MaterialSpec
from circlematrix.model.settings import ShapeKind
from circlematrix.model.shapes import fill_geometry, stroke_geometry
from circlematrix.view.render_adapter import PyVistaRenderAdapter, to_polydata


def test_fill_converts_to_triangles():
    geo = fill_geometry(ShapeKind.DISC, 1.0, 1.0)
    poly = to_polydata(geo)
    assert poly.n_points == geo.n_points
    assert poly.n_cells == geo.n_faces
    assert poly.is_all_triangles


def test_stroke_keeps_z_offset():
    geo = stroke_geometry(ShapeKind.QUAD, 2.0, 1.0, 0.1)
    poly = to_polydata(geo)
    assert np.allclose(poly.points, geo.points)


class RecordingPlotter:
    def __init__(self):
        self.actors = []

    def add_actor(self, actor, reset_camera=False, render=False):
        self.actors.append(actor)

    def remove_actor(self, actor, reset_camera=False, render=False):
        self.actors.remove(actor)


def test_live_counts_follow_create_and_dispose():
    plotter = RecordingPlotter()
    adapter = PyVistaRenderAdapter(plotter)
    geo = fill_geometry(ShapeKind.DISC, 1.0, 1.0)
    material = MaterialSpec((255, 0, 0), 0.8)

    handle = adapter.create_mesh(geo, material)
    adapter.add_to_scene(handle)
    assert adapter.live_counts == {"meshes": 1, "geometries": 1, "materials": 1, "in_scene": 1}
    assert len(plotter.actors) == 1

    adapter.dispose_mesh(handle)
    adapter.dispose_geometry(geo)
    adapter.dispose_material(material)
    assert adapter.live_counts == {"meshes": 0, "geometries": 0, "materials": 0, "in_scene": 0}
    assert plotter.actors == []


def test_double_release_raises():
    adapter = PyVistaRenderAdapter(RecordingPlotter())
    geo = fill_geometry(ShapeKind.QUAD, 1.0, 1.0)
    adapter.create_mesh(geo, MaterialSpec((0, 0, 0), 1.0))
    adapter.dispose_geometry(geo)
    with pytest.raises(ResourceReleaseError):
        adapter.dispose_geometry(geo)
