"""Exception types raised by the geometry core."""


class NolliError(Exception):
    """Base class for all py_nolli errors."""


class InvalidGeometryError(NolliError, ValueError):
    """A ring has fewer than 3 distinct points, or a rectangle has no area."""


class DegenerateEdgeError(NolliError, ValueError):
    """A wall edge has zero length, so its normal is undefined."""

    def __init__(self, start, end):
        self.start = tuple(start)
        self.end = tuple(end)
        super().__init__(f"Zero-length wall edge at {self.start} -> {self.end}")


class TriangulationFailure(NolliError):
    """Ear cutting could not produce a valid triangle set."""


class BuilderConsumedError(NolliError, RuntimeError):
    """A MeshBuilder was used after build()."""
