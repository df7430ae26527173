from collections import deque
from typing import Dict

import numpy as np

from spanmaze.core.grid import Grid, Position


def count_passages(grid: Grid) -> int:
    """Number of open interior wall pairs (boundary openings excluded)."""
    mask = grid.wall_mask()
    # Each interior passage is counted once, from its west/north side
    east_open = np.count_nonzero((mask[:, :-1] & Grid.EAST) == 0)
    south_open = np.count_nonzero((mask[:-1, :] & Grid.SOUTH) == 0)
    return int(east_open + south_open)


def check_wall_symmetry(grid: Grid) -> bool:
    mask = grid.wall_mask()
    east = (mask[:, :-1] & Grid.EAST) != 0
    west = (mask[:, 1:] & Grid.WEST) != 0
    south = (mask[:-1, :] & Grid.SOUTH) != 0
    north = (mask[1:, :] & Grid.NORTH) != 0
    return bool(np.array_equal(east, west) and np.array_equal(south, north))


def reachable_from(grid: Grid, start: Position) -> Dict[Position, int]:
    """Hop distance from start to every cell reachable through open walls."""
    dist = {start: 0}
    queue = deque([start])
    while queue:
        row, col = queue.popleft()
        for nrow, ncol, _ in grid.open_neighbors(row, col):
            if (nrow, ncol) not in dist:
                dist[(nrow, ncol)] = dist[(row, col)] + 1
                queue.append((nrow, ncol))
    return dist


def is_spanning_tree(grid: Grid) -> bool:
    """
    True when the passages connect every active cell and there are exactly
    cells - 1 of them, i.e. the maze is perfect.
    """
    if grid.size == 0:
        return False
    if not check_wall_symmetry(grid):
        return False
    if count_passages(grid) != grid.size - 1:
        return False
    return len(reachable_from(grid, (0, 0))) == grid.size


def tree_distance(grid: Grid, a: Position, b: Position) -> int:
    dist = reachable_from(grid, a)
    if b not in dist:
        raise ValueError(f"{b} is not reachable from {a}")
    return dist[b]


def calculate_stats(grid: Grid):
    mask = grid.wall_mask()
    # Popcount of the four wall bits
    walls = sum(((mask & bit) != 0).astype(np.uint8)
                for bit in (Grid.NORTH, Grid.EAST, Grid.SOUTH, Grid.WEST))

    dead_ends = int(np.count_nonzero(walls == 3))
    corridors = int(np.count_nonzero(walls == 2))
    intersections = int(np.count_nonzero(walls <= 1))

    total = grid.size
    return {
        "dead_ends": dead_ends,
        "corridors": corridors,
        "intersections": intersections,
        "passages": count_passages(grid),
        "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0
    }
