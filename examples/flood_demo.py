#!/usr/bin/env python3
"""
Demo script: rasterize a few footprints, flood between them, extrude them.
"""

from py_nolli.config import configure_logging
from py_nolli.core import (BoundingRectangle, CellState, FloodEngine, SpatialGrid,
                           extrude_all, make_polygon)

SYMBOLS = {
    CellState.EMPTY: ".",
    CellState.BUILDING: "#",
    CellState.FRONTIER: "~",
    CellState.FLOODED: "o",
}


def print_grid(grid):
    # Row 0 is the southern edge, print it last
    for row in reversed(range(grid.rows)):
        print("  " + "".join(SYMBOLS[grid.state(col, row)] for col in range(grid.cols)))


def main():
    """Demonstrate flooding and extrusion."""
    configure_logging(level="WARNING", log_format="console")

    print("Py-Nolli Flood Demo")
    print("=" * 40)

    buildings = [
        make_polygon([(20, 20), (20, 90), (60, 90), (60, 20)]),
        make_polygon([(90, 0), (90, 60), (100, 60), (100, 0)]),
        make_polygon(
            [(120, 30), (120, 100), (180, 100), (180, 30)],
            holes=[[(135, 45), (165, 45), (165, 85), (135, 85)]],
        ),
    ]
    bbox = BoundingRectangle(0, 0, 200, 120)

    grid = SpatialGrid.from_polygons(buildings, bbox, resolution=10)
    print(f"\nGrid: {grid.rows} rows x {grid.cols} cols, "
          f"{grid.count(CellState.BUILDING)} building cells")
    print_grid(grid)

    engine = FloodEngine(grid)
    engine.start_flood(0, 0)
    for _ in range(5):
        engine.tick()
    print(f"\nAfter {engine.ticks} ticks:")
    print_grid(grid)

    engine.run()
    print(f"\nComplete after {engine.ticks} ticks "
          f"({grid.count(CellState.EMPTY)} cells unreachable):")
    print_grid(grid)

    mesh = extrude_all(buildings, height=15, orient=True)
    print(f"\nExtruded mesh: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles")


if __name__ == "__main__":
    main()
