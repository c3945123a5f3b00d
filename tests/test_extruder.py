"""Tests for building extrusion."""

import numpy as np
import pytest
from shapely.geometry import Polygon

from py_nolli.core import (DegenerateEdgeError, InvalidGeometryError, MeshBuilder,
                           extrude, extrude_all, extrude_into, flat_mesh, make_polygon,
                           triangulate)

# Counter-clockwise as seen from above the x/z plane
SQUARE_FROM_ABOVE = [(0, 0), (0, 10), (10, 10), (10, 0)]
# Counter-clockwise in planar x/y
SQUARE_PLANAR_CCW = [(0, 0), (10, 0), (10, 10), (0, 10)]


def assert_valid_indices(mesh):
    assert len(mesh.indices) % 3 == 0
    assert int(mesh.indices.max()) < mesh.vertex_count


def wall_alignment(mesh, height, center=(5.0, 5.0)):
    """Dot product of each wall normal with (face center - solid centroid)."""
    centroid = np.array([center[0], height / 2, center[1]])
    dots = []
    for start in range(8, mesh.vertex_count, 4):
        face = mesh.positions[start:start + 4]
        normal = mesh.normals[start]
        dots.append(float(np.dot(normal, face.mean(axis=0) - centroid)))
    return dots


class TestExtrudeSquare:
    """Test the unit square scenario."""

    @pytest.fixture
    def mesh(self):
        return extrude(make_polygon(SQUARE_FROM_ABOVE), 5)

    def test_counts(self, mesh):
        """2 floor + 2 ceiling + 8 wall triangles over 24 vertices."""
        assert mesh.triangle_count == 12
        assert mesh.vertex_count == 24
        assert_valid_indices(mesh)

    def test_caps(self, mesh):
        np.testing.assert_array_equal(mesh.positions[:4, 1], [0, 0, 0, 0])
        np.testing.assert_array_equal(mesh.normals[:4], [[0, -1, 0]] * 4)
        np.testing.assert_array_equal(mesh.positions[4:8, 1], [5, 5, 5, 5])
        np.testing.assert_array_equal(mesh.normals[4:8], [[0, 1, 0]] * 4)

    def test_wall_corners(self, mesh):
        """First wall runs from the first to the second ring point."""
        np.testing.assert_array_equal(
            mesh.positions[8:12],
            [[0, 0, 0], [0, 0, 10], [0, 5, 10], [0, 5, 0]],
        )

    def test_wall_normals_point_outward(self, mesh):
        assert all(dot > 0 for dot in wall_alignment(mesh, 5))

    def test_wall_normals_are_unit_and_horizontal(self, mesh):
        normals = mesh.normals[8:]
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, rtol=1e-6)
        np.testing.assert_array_equal(normals[:, 1], 0)


class TestWinding:
    """Test how ring winding drives wall orientation."""

    def test_planar_ccw_faces_inward(self):
        mesh = extrude(make_polygon(SQUARE_PLANAR_CCW), 5)
        assert all(dot < 0 for dot in wall_alignment(mesh, 5))

    def test_orient_fixes_winding(self):
        mesh = extrude(make_polygon(SQUARE_PLANAR_CCW), 5, orient=True)
        assert all(dot > 0 for dot in wall_alignment(mesh, 5))


class TestExtrusionTopology:
    """Test triangle counts for general footprints."""

    def test_closure_count(self):
        """Triangles = 2 * cap triangles + 2 * exterior vertices."""
        polygon = make_polygon([(0, 0), (60, 0), (60, 20), (20, 20), (20, 50), (0, 50)])
        mesh = extrude(polygon, 12)

        assert mesh.triangle_count == 2 * triangulate(polygon).triangle_count + 2 * 6
        assert_valid_indices(mesh)

    def test_holes_get_no_walls(self):
        polygon = make_polygon(
            [(0, 0), (30, 0), (30, 30), (0, 30)],
            holes=[[(10, 10), (20, 10), (20, 20), (10, 20)]],
        )
        mesh = extrude(polygon, 3)
        caps = triangulate(polygon)

        assert mesh.triangle_count == 2 * caps.triangle_count + 8
        assert mesh.vertex_count == 2 * 8 + 4 * 4

    def test_extrude_all_merges_buildings(self):
        a = make_polygon(SQUARE_FROM_ABOVE)
        b = make_polygon([(20, 0), (20, 10), (30, 10), (30, 0)])
        mesh = extrude_all([a, b], height=4)

        assert mesh.vertex_count == 48
        assert mesh.triangle_count == 24
        assert_valid_indices(mesh)
        assert mesh.positions[:, 1].max() == 4

    def test_extrude_all_default_height(self, monkeypatch):
        from py_nolli.config import settings
        monkeypatch.setattr(settings, "default_building_height", 7.0)

        mesh = extrude_all([make_polygon(SQUARE_FROM_ABOVE)])
        assert mesh.positions[:, 1].max() == 7


class TestExtrusionErrors:
    """Test rejected input."""

    DUPLICATED = [(0, 0), (0, 0), (0, 10), (10, 10), (10, 0)]

    @pytest.mark.parametrize("height", [0, -2])
    def test_height_must_be_positive(self, height):
        with pytest.raises(InvalidGeometryError):
            extrude(make_polygon(SQUARE_FROM_ABOVE), height)

    def test_height_below_single_precision_rejected(self):
        """A height that rounds to zero in float32 is not a wall edge problem."""
        with pytest.raises(InvalidGeometryError):
            extrude(make_polygon(SQUARE_FROM_ABOVE), 1e-46)

    def test_degenerate_edge_raises(self):
        builder = MeshBuilder()
        with pytest.raises(DegenerateEdgeError):
            extrude_into(builder, Polygon(self.DUPLICATED), 5, skip_degenerate_edges=False)
        assert builder.vertex_count == 0

    def test_degenerate_edge_skipped(self):
        polygon = Polygon(self.DUPLICATED)
        builder = MeshBuilder()
        extrude_into(builder, polygon, 5, skip_degenerate_edges=True)
        mesh = builder.build()

        assert mesh.triangle_count == 2 * triangulate(polygon).triangle_count + 8
        assert_valid_indices(mesh)

    def test_short_ring_rejected(self):
        with pytest.raises(InvalidGeometryError):
            extrude(Polygon([(0, 0), (1, 1), (0, 0), (1, 1)]), 5)


class TestFlatMesh:
    """Test flat footprint meshes."""

    def test_flat_mesh_ignores_holes(self):
        polygon = make_polygon(
            [(0, 0), (30, 0), (30, 30), (0, 30)],
            holes=[[(10, 10), (20, 10), (20, 20), (10, 20)]],
        )
        mesh = flat_mesh([polygon, make_polygon(SQUARE_FROM_ABOVE)])

        assert mesh.vertex_count == 8
        assert mesh.triangle_count == 4
        np.testing.assert_array_equal(mesh.normals, [[0, 1, 0]] * 8)
        np.testing.assert_array_equal(mesh.positions[:, 1], 0)
