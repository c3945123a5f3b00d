"""
Core geometry: footprint rasterization, flooding, triangulation and extrusion.
"""

from .errors import (NolliError, InvalidGeometryError, DegenerateEdgeError,
                     TriangulationFailure, BuilderConsumedError)
from .geometry import BoundingRectangle, make_polygon, validate_polygon, orient_for_extrusion
from .spatial_grid import CellState, GridSnapshot, SpatialGrid
from .flood import FloodEngine
from .triangulator import Triangulation, triangulate
from .mesh_builder import Mesh, MeshBuilder, Vertex
from .extruder import extrude, extrude_all, extrude_into, flat_mesh

__all__ = ['NolliError', 'InvalidGeometryError', 'DegenerateEdgeError',
           'TriangulationFailure', 'BuilderConsumedError',
           'BoundingRectangle', 'make_polygon', 'validate_polygon', 'orient_for_extrusion',
           'CellState', 'GridSnapshot', 'SpatialGrid', 'FloodEngine',
           'Triangulation', 'triangulate', 'Mesh', 'MeshBuilder', 'Vertex',
           'extrude', 'extrude_all', 'extrude_into', 'flat_mesh']
