"""
Discrete flood propagation over a SpatialGrid.

The engine is a plain state machine: the host decides when to call tick().
Each tick floods the current frontier and promotes every EMPTY Moore
neighbor of the flooded cells to the next frontier. Building cells are
obstacles, so regions cut off by buildings are never reached.

From a single seed, every reachable cell is FRONTIER or FLOODED after D ticks
(D = largest Chebyshev distance from the seed); tick D + 1 floods the last
ring and leaves the frontier empty.
"""

from typing import List, Optional

import structlog

from .spatial_grid import Cell, CellState, GridSnapshot, SpatialGrid

logger = structlog.get_logger()


class FloodEngine:
    """Drives a flood wave across a grid, one tick at a time."""

    def __init__(self, grid: SpatialGrid):
        """
        Args:
            grid: Grid to flood in place. Its state at this point is kept as
                the default reset snapshot.
        """
        self.grid = grid
        self.frontier: List[Cell] = []
        self.ticks = 0
        self._paused = False
        self._initial = grid.snapshot()

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def is_terminal(self) -> bool:
        """True when there is nothing left to flood."""
        return not self.frontier

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def toggle_pause(self) -> bool:
        self._paused = not self._paused
        return self._paused

    def start_flood(self, col: int, row: int) -> bool:
        """
        Add a seed cell to the frontier.

        A seed joins any flood already in flight, so several waves can run at
        once. Seeds outside the grid or on a non-EMPTY cell are ignored.

        Returns:
            Whether the seed was accepted
        """
        if not self.grid.in_bounds(col, row):
            logger.debug("Ignoring out-of-range flood seed", col=col, row=row)
            return False
        state = self.grid.state(col, row)
        if state is not CellState.EMPTY:
            logger.debug("Ignoring flood seed", col=col, row=row, state=state.name)
            return False

        self.grid.set_state(col, row, state.advance())
        self.frontier.append((col, row))
        logger.info("Flood seeded", col=col, row=row, frontier=len(self.frontier))
        return True

    def tick(self) -> int:
        """
        Advance the wave by one step.

        Every frontier cell becomes FLOODED, then each EMPTY neighbor of those
        cells becomes FRONTIER. A cell is promoted at most once, so the next
        frontier never holds duplicates.

        Returns:
            Number of cells flooded by this tick (0 when paused or terminal)
        """
        if self._paused or not self.frontier:
            return 0

        grid = self.grid
        current = self.frontier
        for col, row in current:
            grid.set_state(col, row, grid.state(col, row).advance())

        next_frontier: List[Cell] = []
        for col, row in current:
            for ncol, nrow in grid.neighbors(col, row):
                state = grid.state(ncol, nrow)
                if state is CellState.EMPTY:
                    grid.set_state(ncol, nrow, state.advance())
                    next_frontier.append((ncol, nrow))

        self.frontier = next_frontier
        self.ticks += 1

        logger.debug("Flood tick", tick=self.ticks, flooded=len(current),
                     frontier=len(next_frontier))
        if not next_frontier:
            logger.info("Flood complete", ticks=self.ticks,
                        flooded_cells=grid.count(CellState.FLOODED))
        return len(current)

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick until the flood is terminal.

        Args:
            max_ticks: Optional upper bound on the number of ticks

        Returns:
            Number of ticks performed
        """
        performed = 0
        while not self._paused and not self.is_terminal:
            if max_ticks is not None and performed >= max_ticks:
                break
            self.tick()
            performed += 1
        return performed

    def reset(self, snapshot: Optional[GridSnapshot] = None) -> None:
        """
        Restore the grid and drop any flood in flight.

        Args:
            snapshot: State to restore, defaults to the grid as it was when
                this engine was created
        """
        self.grid.restore(snapshot if snapshot is not None else self._initial)
        self.frontier = []
        self.ticks = 0
        logger.info("Flood reset")
