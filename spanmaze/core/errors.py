class MazeError(Exception):
    """Base class for every error raised by spanmaze."""


class InvalidDimensionsError(MazeError, ValueError):
    """Requested width/height is non-positive or exceeds the grid capacity."""


class NotGeneratedError(MazeError, RuntimeError):
    """solve() was called before a successful generate()."""


class BusyError(MazeError, RuntimeError):
    """Another generate/solve call is already running on this maze."""


class NoPathFoundError(MazeError, LookupError):
    """The search exhausted the grid without reaching the exit."""


class CancelledError(MazeError):
    """The running generate/solve call was cancelled at a step boundary."""
