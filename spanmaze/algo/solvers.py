from abc import ABC, abstractmethod
from array import array
from collections import deque
from typing import Iterator, List

from spanmaze.core.errors import NoPathFoundError
from spanmaze.core.grid import Grid, Position


class Solver(ABC):
    def __init__(self, grid: Grid, event_writer=None):
        self.grid = grid
        self.path: List[Position] = []
        self.visited_count = 0
        self.event_writer = event_writer

    @abstractmethod
    def run(self, start: Position, end: Position) -> Iterator[Position]:
        """
        Searches from start to end, yielding the cell being processed once
        per step. On success self.path holds start..end inclusive; raises
        NoPathFoundError otherwise.
        """
        pass

    def run_all(self, start: Position, end: Position) -> List[Position]:
        for _ in self.run(start, end):
            pass
        return self.path

    def mark_visited(self, pos: Position):
        row, col = pos
        if not self.grid.is_visited(row, col):
            self.grid.set_visited(row, col)
            self.visited_count += 1
            if self.event_writer:
                self.event_writer.log_solver_scan(row, col)

    def finish(self, path: List[Position]):
        """Stores the path and stamps its directions for renderers."""
        grid = self.grid
        for idx in range(grid.size):
            grid.directions[idx] = 0
        for a, b in zip(path, path[1:]):
            grid.set_path_direction(a[0], a[1], grid.direction_between(a, b))
        if self.event_writer:
            for row, col in path:
                self.event_writer.log_path_add(row, col)
        self.path = path


class RecursiveDFS(Solver):
    """
    Recursive backtracking: try Left, Right, Up, Down in that order, enter a
    neighbour only through an open wall and only if it was never visited,
    and clear the cell's path direction when every direction failed.

    The call stack is kept as an explicit list of frames
    [position, next direction index], so path length is not limited by the
    interpreter's recursion limit. The frames left on the stack when the
    exit is reached are the path.
    """

    def run(self, start: Position, end: Position) -> Iterator[Position]:
        grid = self.grid
        self.mark_visited(start)
        frames = [[start, 0]]
        yield start

        while frames:
            frame = frames[-1]
            pos, i = frame
            if pos == end:
                self.finish([f[0] for f in frames])
                return

            row, col = pos
            entered = None
            while i < len(Grid.SCAN_ORDER):
                direction = Grid.SCAN_ORDER[i]
                i += 1
                nxt = grid.neighbor(row, col, direction)
                if nxt is None or grid.has_wall(row, col, direction) or grid.is_visited(*nxt):
                    continue
                frame[1] = i
                grid.set_path_direction(row, col, direction)
                self.mark_visited(nxt)
                frames.append([nxt, 0])
                entered = nxt
                break

            if entered is not None:
                yield entered
            else:
                # Dead end: the cell stays visited so it is never re-entered
                grid.set_path_direction(row, col, None)
                frames.pop()
                if frames:
                    yield frames[-1][0]

        raise NoPathFoundError(f"No path from {start} to {end}")


class ParentChainSolver(Solver):
    """
    Iterative search that remembers, per cell index, the direction back to
    the cell it was discovered from, and walks that chain back from the
    exit once it is taken out of the container.
    """

    @abstractmethod
    def new_container(self):
        pass

    @abstractmethod
    def take(self, container) -> Position:
        pass

    def run(self, start: Position, end: Position) -> Iterator[Position]:
        grid = self.grid
        # Dense parent array: 0 = None, else direction bit pointing at the parent
        self.parents = array('B', [0] * grid.size)

        container = self.new_container()
        container.append(start)

        while container:
            current = self.take(container)
            row, col = current

            if current == end:
                self.mark_visited(current)
                yield current
                self.finish(self.reconstruct_path(start, end))
                return

            if grid.is_visited(row, col):
                continue

            self.mark_visited(current)
            yield current

            for nrow, ncol, direction in grid.open_neighbors(row, col):
                if grid.is_visited(nrow, ncol):
                    continue
                n_idx = grid.get_index(nrow, ncol)
                if self.parents[n_idx]:
                    # First discoverer wins
                    continue
                self.parents[n_idx] = Grid.OPPOSITE[direction]
                container.append((nrow, ncol))

        raise NoPathFoundError(f"No path from {start} to {end}")

    def reconstruct_path(self, start: Position, end: Position) -> List[Position]:
        path = [end]
        curr = end
        while curr != start:
            p_dir = self.parents[self.grid.get_index(*curr)]
            if p_dir == 0:
                raise NoPathFoundError(f"Parent chain from {end} is broken at {curr}")
            curr = (curr[0] + Grid.DROW[p_dir], curr[1] + Grid.DCOL[p_dir])
            path.append(curr)
        path.reverse()
        return path


class IterativeDFS(ParentChainSolver):
    def new_container(self) -> list:
        return []

    def take(self, container: list) -> Position:
        return container.pop()


class IterativeBFS(ParentChainSolver):
    def new_container(self) -> deque:
        return deque()

    def take(self, container: deque) -> Position:
        return container.popleft()


class WallFollower(Solver):
    """
    Right-hand rule. Keeps only (cell, facing); tries relative right, front
    and left in that order and, when all three are walled, turns round on
    the spot. Guaranteed to reach the exit of a maze without loops.
    """

    # facing -> (relative right, front, relative left); screen coordinates,
    # so rotating North by +90 degrees gives East
    ROTATIONS = {
        Grid.NORTH: (Grid.EAST, Grid.NORTH, Grid.WEST),
        Grid.EAST: (Grid.SOUTH, Grid.EAST, Grid.NORTH),
        Grid.SOUTH: (Grid.WEST, Grid.SOUTH, Grid.EAST),
        Grid.WEST: (Grid.NORTH, Grid.WEST, Grid.SOUTH),
    }

    def __init__(self, grid: Grid, event_writer=None, facing: int = Grid.EAST):
        super().__init__(grid, event_writer)
        self.facing = facing

    def run(self, start: Position, end: Position) -> Iterator[Position]:
        grid = self.grid
        facing = self.facing
        current = start
        # The walk with dead-end excursions folded away
        trail = [start]

        self.mark_visited(start)
        yield start

        steps = 0
        # Every passage is walked at most twice, plus one turn per dead end
        max_steps = grid.size * 4 + 4

        while current != end:
            if steps >= max_steps:
                raise NoPathFoundError(
                    f"Wall follower gave up after {steps} steps; the maze is not a perfect maze")
            steps += 1

            row, col = current
            for direction in self.ROTATIONS[facing]:
                nxt = grid.neighbor(row, col, direction)
                if nxt is not None and not grid.has_wall(row, col, direction):
                    grid.set_path_direction(row, col, direction)
                    facing = direction
                    current = nxt
                    if len(trail) > 1 and trail[-2] == nxt:
                        trail.pop()
                    else:
                        trail.append(nxt)
                    self.mark_visited(nxt)
                    break
            else:
                facing = Grid.OPPOSITE[facing]

            yield current

        self.facing = facing
        self.finish(trail)


class AutoDFS(Solver):
    """
    Depth-first solve that picks the recursive strategy for small mazes
    and the iterative one above RECURSION_LIMIT_CELLS.
    """
    RECURSION_LIMIT_CELLS = 40 * 80

    def __init__(self, grid: Grid, event_writer=None):
        super().__init__(grid, event_writer)
        if grid.size < self.RECURSION_LIMIT_CELLS:
            self.delegate = RecursiveDFS(grid, event_writer)
        else:
            self.delegate = IterativeDFS(grid, event_writer)

    def run(self, start: Position, end: Position) -> Iterator[Position]:
        yield from self.delegate.run(start, end)
        self.path = self.delegate.path
        self.visited_count = self.delegate.visited_count


SOLVERS = {
    "recursive_dfs": RecursiveDFS,
    "iterative_dfs": IterativeDFS,
    "iterative_bfs": IterativeBFS,
    "wall_follower": WallFollower,
    "dfs": AutoDFS,
}

ALIASES = {
    "bfs": "iterative_bfs",
    "right": "wall_follower",
}


def get_solver(name: str):
    key = ALIASES.get(name, name)
    try:
        return SOLVERS[key]
    except KeyError:
        raise ValueError(
            f"Unknown solver {name!r}, expected one of {sorted(SOLVERS)}") from None


def solve(grid: Grid, entrance: Position, exit: Position,
          algorithm: str = "iterative_bfs", event_writer=None) -> List[Position]:
    """
    Runs one strategy to completion over an already carved grid and
    returns the cells from entrance to exit inclusive.
    """
    cls = get_solver(algorithm)
    grid.reset_search_state()
    return cls(grid, event_writer=event_writer).run_all(entrance, exit)
