"""
Planar geometry values shared by the grid and the mesh pipeline.

Footprints are plain shapely polygons in a projected, metric coordinate
space. Nothing in the core mutates them.
"""

from typing import Iterable, NamedTuple, Sequence, Tuple

import numpy as np
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from .errors import InvalidGeometryError

Point2 = Tuple[float, float]


class BoundingRectangle(NamedTuple):
    """Axis-aligned rectangle enclosing a set of footprints."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def origin(self) -> Point2:
        return (self.min_x, self.min_y)

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0)

    @classmethod
    def from_polygons(cls, polygons: Iterable[Polygon]) -> "BoundingRectangle":
        """Smallest rectangle containing every polygon."""
        bounds = np.array([p.bounds for p in polygons], dtype=np.float64)
        if len(bounds) == 0:
            raise InvalidGeometryError("Cannot bound an empty polygon list")
        return cls(
            float(bounds[:, 0].min()),
            float(bounds[:, 1].min()),
            float(bounds[:, 2].max()),
            float(bounds[:, 3].max()),
        )


def _distinct_count(coords) -> int:
    return len({(float(c[0]), float(c[1])) for c in coords})


def _check_ring(coords, what: str) -> None:
    if _distinct_count(coords) < 3:
        raise InvalidGeometryError(f"{what} ring needs at least 3 distinct points")


def validate_polygon(polygon: Polygon) -> Polygon:
    """
    Check that a footprint is usable by the grid and the triangulator.

    Args:
        polygon: Footprint to check

    Returns:
        The same polygon, for chaining

    Raises:
        InvalidGeometryError: polygon is empty, or a ring has < 3 distinct points
    """
    if polygon.is_empty:
        raise InvalidGeometryError("Polygon is empty")
    _check_ring(polygon.exterior.coords, "Exterior")
    for interior in polygon.interiors:
        _check_ring(interior.coords, "Interior")
    return polygon


def make_polygon(exterior: Sequence[Point2], holes: Sequence[Sequence[Point2]] = ()) -> Polygon:
    """Build a validated footprint from raw coordinate rings."""
    _check_ring(exterior, "Exterior")
    for hole in holes:
        _check_ring(hole, "Interior")
    return validate_polygon(Polygon(exterior, holes))


def ring_coords(ring) -> np.ndarray:
    """Ring coordinates as an (N, 2) array without the closing duplicate."""
    coords = np.asarray(ring.coords, dtype=np.float64)[:, :2]
    if len(coords) > 1 and np.array_equal(coords[0], coords[-1]):
        coords = coords[:-1]
    return coords


def orient_for_extrusion(polygon: Polygon) -> Polygon:
    """
    Rewind a footprint so extruded wall normals point outward.

    Walls map planar (x, y) onto (x, z), which mirrors the plane, so the
    exterior has to run clockwise in planar terms (counter-clockwise seen
    from above the x/z plane). Holes get the opposite winding.
    """
    return orient(polygon, sign=-1.0)
