"""
Extrusion of footprints into closed building solids.

A solid is a floor cap at y = 0, a ceiling cap at y = height and one wall
quad per exterior edge. Walls around holes are not generated; floor and
ceiling still leave the hole open.
"""

from typing import Iterable, Optional

import numpy as np
import structlog
from shapely.geometry import Polygon

from ..config import settings
from .errors import DegenerateEdgeError, InvalidGeometryError
from .geometry import orient_for_extrusion, ring_coords, validate_polygon
from .mesh_builder import Mesh, MeshBuilder
from .triangulator import triangulate

logger = structlog.get_logger()

DOWN = (0.0, -1.0, 0.0)
UP = (0.0, 1.0, 0.0)


def wall_normal(corner1: np.ndarray, corner2: np.ndarray, corner3: np.ndarray) -> np.ndarray:
    """Unit normal of the wall spanned by its bottom edge and its up edge."""
    bottom_line = corner2 - corner1
    up_line = corner3 - corner2
    normal = np.cross(bottom_line, up_line)
    length = np.linalg.norm(normal)
    if length == 0:
        raise DegenerateEdgeError(corner1[[0, 2]], corner2[[0, 2]])
    return normal / length


def extrude_into(
    builder: MeshBuilder,
    polygon: Polygon,
    height: float,
    orient: bool = False,
    skip_degenerate_edges: Optional[bool] = None,
) -> None:
    """
    Add the solid for one footprint to a builder.

    Args:
        builder: Target builder
        polygon: Footprint in planar (x, y); walls are outward for an exterior
            wound counter-clockwise as seen from above
        height: Ceiling height, > 0
        orient: Rewind the footprint first so walls always face outward
        skip_degenerate_edges: Skip zero-length edges instead of raising;
            defaults to ``settings.skip_degenerate_edges``

    Raises:
        InvalidGeometryError: bad footprint or non-positive height
        DegenerateEdgeError: zero-length exterior edge
        TriangulationFailure: cap triangulation failed
    """
    if not height > 0:
        raise InvalidGeometryError(f"Extrusion height must be positive, got {height}")
    if skip_degenerate_edges is None:
        skip_degenerate_edges = settings.skip_degenerate_edges

    validate_polygon(polygon)
    if orient:
        polygon = orient_for_extrusion(polygon)

    y1 = np.float32(0.0)
    y2 = np.float32(height)
    if not y2 > 0:
        raise InvalidGeometryError(f"Extrusion height {height} is not representable in single precision")

    # Triangulate once; both caps share the same 2D triangles
    caps = triangulate(polygon)

    # Compute every wall before touching the builder so a bad edge leaves it unchanged
    walls = []
    exterior = ring_coords(polygon.exterior).astype(np.float32)
    for start, end in zip(exterior, np.roll(exterior, -1, axis=0)):
        corner1 = np.array([start[0], y1, start[1]], dtype=np.float32)
        corner2 = np.array([end[0], y1, end[1]], dtype=np.float32)
        corner3 = np.array([end[0], y2, end[1]], dtype=np.float32)
        corner4 = np.array([start[0], y2, start[1]], dtype=np.float32)
        try:
            normal = wall_normal(corner1, corner2, corner3)
        except DegenerateEdgeError:
            if skip_degenerate_edges:
                logger.warning("Skipping zero-length wall edge", start=start.tolist())
                continue
            raise
        walls.append(([corner1, corner2, corner3, corner4], normal))

    builder.add_triangulation(caps, float(y1), DOWN)
    builder.add_triangulation(caps, float(y2), UP)
    for corners, normal in walls:
        builder.add_quad(corners, normal)

    if len(polygon.interiors):
        logger.debug("Holes extruded without walls", holes=len(polygon.interiors))


def extrude(polygon: Polygon, height: float, orient: bool = False) -> Mesh:
    """Extrude a single footprint into its own mesh."""
    builder = MeshBuilder()
    extrude_into(builder, polygon, height, orient=orient)
    return builder.build()


def extrude_all(
    polygons: Iterable[Polygon],
    height: Optional[float] = None,
    orient: bool = False,
) -> Mesh:
    """
    Extrude every footprint into one combined mesh.

    Args:
        polygons: Footprints to extrude
        height: Shared height, defaults to ``settings.default_building_height``
        orient: Rewind footprints so walls face outward

    Returns:
        Single Mesh holding every building
    """
    if height is None:
        height = settings.default_building_height

    builder = MeshBuilder()
    count = 0
    for polygon in polygons:
        extrude_into(builder, polygon, height, orient=orient)
        count += 1

    mesh = builder.build()
    logger.info("Extruded buildings", buildings=count, vertices=mesh.vertex_count,
                triangles=mesh.triangle_count)
    return mesh


def flat_mesh(polygons: Iterable[Polygon], y: float = 0.0) -> Mesh:
    """
    Flat mesh of footprint exteriors at height ``y`` with upward normals.

    Holes are ignored, so courtyards render filled.
    """
    builder = MeshBuilder()
    for polygon in polygons:
        validate_polygon(polygon)
        builder.triangulate_polygon(Polygon(polygon.exterior), y, UP)
    return builder.build()
