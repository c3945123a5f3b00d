"""
Rasterization of building footprints onto a uniform cell grid.

Each cell is classified by testing its center point against every footprint.
This is the brute-force approach: O(rows * cols * polygons * edges), done in
one vectorized shapely call per polygon.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np
import shapely
import structlog
from shapely.geometry import Polygon

from ..config import settings
from .errors import InvalidGeometryError
from .geometry import BoundingRectangle, Point2, validate_polygon

logger = structlog.get_logger()

Cell = Tuple[int, int]  # (col, row)


class CellState(IntEnum):
    """State of a single grid cell.

    Transitions are monotonic: EMPTY -> FRONTIER -> FLOODED. BUILDING is set
    once at construction and never changes during a flood.
    """
    EMPTY = 0
    BUILDING = 1
    FRONTIER = 2
    FLOODED = 3

    @property
    def is_obstacle(self) -> bool:
        return self is CellState.BUILDING

    def advance(self) -> "CellState":
        """Next state of the flood transition for this state."""
        if self is CellState.EMPTY:
            return CellState.FRONTIER
        if self is CellState.FRONTIER:
            return CellState.FLOODED
        if self is CellState.FLOODED:
            return CellState.FLOODED
        if self is CellState.BUILDING:
            raise ValueError("Building cells never flood")
        raise AssertionError(f"Unhandled cell state {self!r}")


@dataclass(frozen=True)
class GridSnapshot:
    """Deep copy of a grid's cells, also the hand-off format for display."""
    resolution: float
    rows: int
    cols: int
    origin: Point2
    cells: np.ndarray  # (rows, cols) int8, read-only

    def state(self, col: int, row: int) -> CellState:
        return CellState(int(self.cells[row, col]))


class SpatialGrid:
    """Row-major grid of CellState over a bounding rectangle."""

    def __init__(self, rows: int, cols: int, resolution: float, origin: Point2 = (0.0, 0.0)):
        if rows <= 0 or cols <= 0:
            raise InvalidGeometryError(f"Grid needs positive dimensions, got {rows}x{cols}")
        if not resolution > 0:
            raise InvalidGeometryError(f"Resolution must be positive, got {resolution}")
        self.rows = rows
        self.cols = cols
        self.resolution = float(resolution)
        self.origin = (float(origin[0]), float(origin[1]))
        # Indexed [row, col], i.e. (y, x)
        self._cells = np.full((rows, cols), CellState.EMPTY, dtype=np.int8)

    @classmethod
    def from_polygons(
        cls,
        polygons: Sequence[Polygon],
        bbox: BoundingRectangle,
        resolution: Optional[float] = None,
    ) -> "SpatialGrid":
        """
        Rasterize footprints into a new grid.

        A cell becomes BUILDING when its center lies strictly inside any
        footprint (holes excluded); all other cells start EMPTY.

        Args:
            polygons: Non-empty list of footprints
            bbox: Rectangle spanning the footprints
            resolution: Cell size, defaults to ``settings.grid_resolution``

        Returns:
            New SpatialGrid of ceil(height/r) rows by ceil(width/r) columns

        Raises:
            InvalidGeometryError: no polygons, degenerate bbox or bad resolution
        """
        if resolution is None:
            resolution = settings.grid_resolution
        if not polygons:
            raise InvalidGeometryError("Cannot build a grid without polygons")
        if bbox.is_degenerate:
            raise InvalidGeometryError(f"Bounding rectangle has no area: {bbox}")
        if not resolution > 0:
            raise InvalidGeometryError(f"Resolution must be positive, got {resolution}")

        rows = math.ceil(bbox.height / resolution)
        cols = math.ceil(bbox.width / resolution)
        grid = cls(rows, cols, resolution, bbox.origin)

        logger.info("Rasterizing footprints", rows=rows, cols=cols,
                    polygons=len(polygons), resolution=resolution)

        xs, ys = grid._cell_centers()
        inside = np.zeros((rows, cols), dtype=bool)
        for polygon in polygons:
            validate_polygon(polygon)
            inside |= shapely.contains_xy(polygon, xs, ys)

        grid._cells[inside] = CellState.BUILDING

        logger.info("Rasterization complete", building_cells=int(inside.sum()),
                    total_cells=rows * cols)
        return grid

    def _cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        cols = (np.arange(self.cols) + 0.5) * self.resolution + self.origin[0]
        rows = (np.arange(self.rows) + 0.5) * self.resolution + self.origin[1]
        return np.meshgrid(cols, rows)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the (rows, cols) state array."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def center_of_cell(self, col: int, row: int) -> Point2:
        return (
            (0.5 + col) * self.resolution + self.origin[0],
            (0.5 + row) * self.resolution + self.origin[1],
        )

    def world_to_cell(self, point: Point2) -> Optional[Cell]:
        """
        Map a planar point to the cell containing it.

        Returns None for points left of / below the grid origin or past the
        last row or column.
        """
        x = point[0] - self.origin[0]
        y = point[1] - self.origin[1]
        if x < 0 or y < 0:
            return None
        col = int(math.floor(x / self.resolution))
        row = int(math.floor(y / self.resolution))
        if col >= self.cols or row >= self.rows:
            return None
        return (col, row)

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def state(self, col: int, row: int) -> CellState:
        if not self.in_bounds(col, row):
            raise IndexError(f"Cell ({col}, {row}) outside {self.cols}x{self.rows} grid")
        return CellState(int(self._cells[row, col]))

    def set_state(self, col: int, row: int, state: CellState) -> None:
        self._cells[row, col] = state

    def neighbors(self, col: int, row: int) -> Iterator[Cell]:
        """Moore neighborhood of a cell, clipped to the grid."""
        for c in range(max(col - 1, 0), min(col + 2, self.cols)):
            for r in range(max(row - 1, 0), min(row + 2, self.rows)):
                if c == col and r == row:
                    continue
                yield (c, r)

    def count(self, state: CellState) -> int:
        return int(np.count_nonzero(self._cells == state))

    def toggle_cell(self, col: int, row: int) -> Optional[CellState]:
        """
        Flip a cell between EMPTY and BUILDING (non-flooding editing mode).

        Out-of-range cells and cells touched by a flood are left alone.

        Returns:
            The cell's new state, or None if nothing changed
        """
        if not self.in_bounds(col, row):
            return None
        current = self.state(col, row)
        if current is CellState.EMPTY:
            new = CellState.BUILDING
        elif current is CellState.BUILDING:
            new = CellState.EMPTY
        else:
            return None
        self._cells[row, col] = new
        return new

    def snapshot(self) -> GridSnapshot:
        cells = self._cells.copy()
        cells.flags.writeable = False
        return GridSnapshot(self.resolution, self.rows, self.cols, self.origin, cells)

    def restore(self, snapshot: GridSnapshot) -> None:
        """Replace every cell with the contents of a snapshot."""
        if (snapshot.rows, snapshot.cols) != self.shape:
            raise ValueError(
                f"Snapshot is {snapshot.rows}x{snapshot.cols}, grid is {self.rows}x{self.cols}"
            )
        np.copyto(self._cells, snapshot.cells)

    def cell_rectangles(self, *states: CellState) -> np.ndarray:
        """
        Overlay rectangles for every cell in the given states.

        Returns:
            (K, 4) array of (min_x, min_y, max_x, max_y), row-major order
        """
        mask = np.isin(self._cells, [int(s) for s in states])
        rows, cols = np.nonzero(mask)
        min_x = cols * self.resolution + self.origin[0]
        min_y = rows * self.resolution + self.origin[1]
        return np.column_stack(
            [min_x, min_y, min_x + self.resolution, min_y + self.resolution]
        ).astype(np.float64)
