"""Tests for ear-cutting triangulation."""

import numpy as np
import pytest
from shapely.geometry import Polygon

from py_nolli.core import (InvalidGeometryError, TriangulationFailure, make_polygon,
                           triangulate)


def triangle_area_sum(tri):
    corners = tri.vertices[tri.indices.reshape(-1, 3)]
    a, b, c = corners[:, 0], corners[:, 1], corners[:, 2]
    cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    return float(np.abs(cross).sum() / 2)


class TestTriangulate:
    """Test triangulation output."""

    def test_square(self):
        """A square becomes two triangles over its four corners."""
        tri = triangulate(make_polygon([(0, 0), (10, 0), (10, 10), (0, 10)]))

        assert tri.vertex_count == 4
        assert tri.triangle_count == 2
        assert tri.indices.dtype == np.uint32
        assert triangle_area_sum(tri) == pytest.approx(100)

    def test_closing_point_not_duplicated(self):
        """Explicitly closed rings produce the same vertices."""
        tri = triangulate(Polygon([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]))
        assert tri.vertex_count == 4

    def test_concave_polygon_area(self):
        polygon = make_polygon([(0, 0), (60, 0), (60, 20), (20, 20), (20, 50), (0, 50)])
        tri = triangulate(polygon)

        assert tri.triangle_count == 4
        assert triangle_area_sum(tri) == pytest.approx(polygon.area)

    def test_hole_is_subtracted(self):
        """Triangles cover the polygon minus its hole."""
        polygon = make_polygon(
            [(0, 0), (30, 0), (30, 30), (0, 30)],
            holes=[[(10, 10), (20, 10), (20, 20), (10, 20)]],
        )
        tri = triangulate(polygon)

        assert tri.vertex_count == 8
        assert triangle_area_sum(tri) == pytest.approx(800)
        assert int(tri.indices.max()) < tri.vertex_count

    def test_short_ring_rejected(self):
        with pytest.raises(InvalidGeometryError):
            triangulate(Polygon([(0, 0), (1, 0), (0, 0), (1, 0)]))

    def test_short_hole_rejected(self):
        polygon = Polygon(
            [(0, 0), (30, 0), (30, 30), (0, 30)],
            holes=[[(10, 10), (20, 10), (10, 10), (20, 10)]],
        )
        with pytest.raises(InvalidGeometryError):
            triangulate(polygon)

    def test_collinear_ring_fails(self):
        """Three distinct collinear points have nothing to triangulate."""
        with pytest.raises(TriangulationFailure):
            triangulate(Polygon([(0, 0), (1, 0), (2, 0)]))
