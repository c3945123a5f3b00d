"""
Append-only accumulation of 3D vertices and triangles.

Positions and normals are single precision, as handed to a renderer.
Footprints live in the x/z plane: planar (x, y) becomes (x, height, y).
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from shapely.geometry import Polygon

from .errors import BuilderConsumedError
from .triangulator import Triangulation, triangulate

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Vertex:
    """Position plus (not necessarily unit) normal."""
    position: Vec3
    normal: Vec3


@dataclass(frozen=True)
class Mesh:
    """Finished vertex/index buffers.

    ``positions`` and ``normals`` are parallel (N, 3) float32 arrays;
    ``indices`` is a flat uint32 array whose length is a multiple of 3.
    All arrays are read-only.
    """
    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def triangles(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)

    @property
    def vertices(self) -> List[Vertex]:
        return [
            Vertex(tuple(p.tolist()), tuple(n.tolist()))
            for p, n in zip(self.positions, self.normals)
        ]


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


class MeshBuilder:
    """Collects vertices and triangles, then freezes them into a Mesh."""

    def __init__(self):
        self._positions: List[Vec3] = []
        self._normals: List[Vec3] = []
        self._indices: List[int] = []
        self._consumed = False

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("MeshBuilder already built")

    @property
    def vertex_count(self) -> int:
        return len(self._positions)

    @property
    def triangle_count(self) -> int:
        return len(self._indices) // 3

    def add_vertex(self, position: Sequence[float], normal: Sequence[float]) -> int:
        """Append a vertex and return its index."""
        self._check_open()
        self._positions.append(tuple(float(v) for v in position))
        self._normals.append(tuple(float(v) for v in normal))
        return len(self._positions) - 1

    def add_triangle(self, i1: int, i2: int, i3: int) -> None:
        self._check_open()
        count = len(self._positions)
        for i in (i1, i2, i3):
            if not 0 <= i < count:
                raise ValueError(f"Vertex index {i} out of range for {count} vertices")
        self._indices.extend((int(i1), int(i2), int(i3)))

    def add_quad(self, corners: Sequence[Sequence[float]], normal: Sequence[float]) -> None:
        """
        Add four corners sharing one normal as triangles 1-2-3 and 1-3-4.

        Corners must be given in a consistent winding around the quad.
        """
        if len(corners) != 4:
            raise ValueError(f"A quad needs 4 corners, got {len(corners)}")
        i1, i2, i3, i4 = (self.add_vertex(corner, normal) for corner in corners)
        self.add_triangle(i1, i2, i3)
        self.add_triangle(i1, i3, i4)

    def add_triangulation(self, triangulation: Triangulation, y: float,
                          normal: Sequence[float]) -> None:
        """
        Merge a planar triangulation at height ``y``.

        Incoming indices are offset by the current vertex count so they keep
        pointing at the merged vertices.
        """
        self._check_open()
        indices = np.asarray(triangulation.indices)
        count = len(triangulation.vertices)
        if indices.size % 3 != 0:
            raise ValueError(f"Triangulation has {indices.size} indices, not a multiple of 3")
        if indices.size and (int(indices.max()) >= count or int(indices.min()) < 0):
            raise ValueError(f"Triangulation index out of range for {count} vertices")
        offset = len(self._positions)
        for px, py in triangulation.vertices:
            self.add_vertex((px, y, py), normal)
        self._indices.extend(int(i) + offset for i in indices)

    def triangulate_polygon(self, polygon: Polygon, y: float,
                            normal: Sequence[float]) -> None:
        """Triangulate a footprint and add it as a horizontal cap at ``y``."""
        self._check_open()
        self.add_triangulation(triangulate(polygon), y, normal)

    def build(self) -> Mesh:
        """Freeze the collected data. The builder cannot be used afterwards."""
        self._check_open()
        self._consumed = True
        positions = np.array(self._positions, dtype=np.float32).reshape(-1, 3)
        normals = np.array(self._normals, dtype=np.float32).reshape(-1, 3)
        indices = np.array(self._indices, dtype=np.uint32)
        self._positions, self._normals, self._indices = [], [], []
        return Mesh(_readonly(positions), _readonly(normals), _readonly(indices))
