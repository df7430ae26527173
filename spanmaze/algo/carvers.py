import random
from collections import deque
from typing import List, Optional, Tuple

from spanmaze.algo.base import Carver
from spanmaze.core.grid import Grid, Position


class DepthFirstCarver(Carver):
    """Backtracks to the most recently stored location (stack)."""

    def new_container(self) -> List[Position]:
        return []

    def take(self, container: List[Position]) -> Position:
        return container.pop()


class BreadthFirstCarver(Carver):
    """
    Same forward step as DepthFirstCarver, but backtracks to the oldest
    stored location (FIFO). This is not a frontier-wide breadth-first
    generation; only the order of backtrack targets changes, which gives
    shorter, bushier corridors.
    """

    def new_container(self) -> deque:
        return deque()

    def take(self, container: deque) -> Position:
        return container.popleft()


CARVERS = {
    "depth_first": DepthFirstCarver,
    "breadth_first": BreadthFirstCarver,
}

ALIASES = {
    "dfs": "depth_first",
    "bfs": "breadth_first",
}


def get_carver(name: str):
    key = ALIASES.get(name, name)
    try:
        return CARVERS[key]
    except KeyError:
        raise ValueError(
            f"Unknown generation algorithm {name!r}, expected one of {sorted(CARVERS)}") from None


def _carve(cls, grid: Grid, width: int, height: int,
           rng: Optional[random.Random]) -> Tuple[Position, Position]:
    grid.initialize(width, height)
    carver = cls(grid, rng=rng)
    carver.run_all()
    return carver.entrance, carver.exit


def depth_first_carve(grid: Grid, width: int, height: int,
                      rng: Optional[random.Random] = None) -> Tuple[Position, Position]:
    """Initialises and carves grid, returns (entrance, exit)."""
    return _carve(DepthFirstCarver, grid, width, height, rng)


def breadth_first_carve(grid: Grid, width: int, height: int,
                        rng: Optional[random.Random] = None) -> Tuple[Position, Position]:
    return _carve(BreadthFirstCarver, grid, width, height, rng)
