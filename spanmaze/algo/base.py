import random
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from spanmaze.core.grid import Grid, Position


class Carver(ABC):
    """
    Randomised spanning-tree carver.

    Every variant shares one step: look for neighbours of the current
    location whose four walls are still intact (i.e. not yet joined to the
    tree); if there are any, knock through to a random one, store the
    pre-move location and move on, otherwise take the next stored location
    back out. Subclasses only decide the container, and so the order in
    which dead ends are backed out of.
    """

    def __init__(self, grid: Grid, rng: Optional[random.Random] = None, seed: int = None):
        self.grid = grid
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.step_count = 0
        self.entrance: Optional[Position] = None
        self.exit: Optional[Position] = None

    @abstractmethod
    def new_container(self):
        pass

    @abstractmethod
    def take(self, container) -> Position:
        """Removes and returns the next backtrack target."""
        pass

    def unjoined_neighbors(self, location: Position):
        grid = self.grid
        return [(nrow, ncol) for nrow, ncol, _ in grid.neighbors(*location)
                if grid.all_walls_intact(nrow, ncol)]

    def run(self) -> Iterator[Position]:
        """
        Carves the already initialised grid in place, yielding the current
        location once per step. Entrance and exit are designated once the
        container runs dry.
        """
        grid = self.grid
        rng = self.rng

        location = (rng.randrange(grid.height), rng.randrange(grid.width))
        container = self.new_container()
        container.append(location)
        yield location

        while container:
            neighbors = self.unjoined_neighbors(location)

            if neighbors:
                chosen = rng.choice(neighbors)
                grid.remove_wall_between(location, chosen)
                container.append(location)
                location = chosen
            else:
                # Backtrack
                location = self.take(container)

            self.step_count += 1
            yield location

        self.make_entrance_exit()

    def make_entrance_exit(self):
        grid = self.grid
        row = self.rng.randrange(grid.height)
        grid.open_boundary(row, 0, Grid.WEST)
        self.entrance = (row, 0)

        row = self.rng.randrange(grid.height)
        grid.open_boundary(row, grid.width - 1, Grid.EAST)
        self.exit = (row, grid.width - 1)

    def run_all(self):
        """Helper to run the carver to completion."""
        for _ in self.run():
            pass
