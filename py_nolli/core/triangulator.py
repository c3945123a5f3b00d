"""Ear-cutting triangulation of footprints, backed by mapbox_earcut."""

from dataclasses import dataclass

import mapbox_earcut as earcut
import numpy as np
import structlog
from shapely.geometry import Polygon

from .errors import TriangulationFailure
from .geometry import ring_coords, validate_polygon

logger = structlog.get_logger()


@dataclass(frozen=True)
class Triangulation:
    """2D triangle list: planar vertices plus flat triangle indices."""
    vertices: np.ndarray  # (N, 2) float64
    indices: np.ndarray   # (3M,) uint32

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


def triangulate(polygon: Polygon) -> Triangulation:
    """
    Triangulate a footprint, holes included.

    The exterior ring comes first in the vertex array, followed by each hole
    in order. Output winding is whatever earcut produces; consumers assign
    normals explicitly.

    Args:
        polygon: Footprint with >= 3 distinct points per ring

    Returns:
        Triangulation covering the polygon minus its holes

    Raises:
        InvalidGeometryError: a ring is too short
        TriangulationFailure: earcut failed or returned no usable triangles
    """
    validate_polygon(polygon)

    rings = [ring_coords(polygon.exterior)]
    rings.extend(ring_coords(interior) for interior in polygon.interiors)

    vertices = np.ascontiguousarray(np.vstack(rings), dtype=np.float64)
    ring_ends = np.cumsum([len(r) for r in rings]).astype(np.uint32)

    try:
        indices = earcut.triangulate_float64(vertices, ring_ends)
    except (ValueError, TypeError, RuntimeError) as exc:
        raise TriangulationFailure(f"Earcut failed: {exc}") from exc

    indices = np.asarray(indices, dtype=np.uint32)
    if indices.size == 0 or indices.size % 3 != 0:
        raise TriangulationFailure(
            f"Earcut produced {indices.size} indices for {len(vertices)} vertices"
        )
    if int(indices.max()) >= len(vertices):
        raise TriangulationFailure("Earcut produced an out-of-range vertex index")

    logger.debug("Triangulated footprint", vertices=len(vertices),
                 holes=len(rings) - 1, triangles=indices.size // 3)
    return Triangulation(vertices=vertices, indices=indices)
