import logging
import random
import time
from typing import FrozenSet, Iterator, List, Optional, Tuple

from spanmaze.algo.carvers import get_carver
from spanmaze.algo.solvers import get_solver
from spanmaze.core.errors import NotGeneratedError
from spanmaze.core.grid import Cell, Grid, Position
from spanmaze.core.progress import (
    PHASE_GENERATE,
    PHASE_SOLVE,
    ProgressHook,
    ProgressSnapshot,
    StepController,
)

logger = logging.getLogger(__name__)


class Maze:
    """
    A fixed-capacity maze that can be carved and solved repeatedly.

    At most one generate() or solve() runs at a time; a second call made
    while one is in flight (typically from another thread) raises
    BusyError. Progress can be observed with on_step() hooks or by polling
    progress() from another thread, and a running call can be stopped with
    cancel().
    """

    DEFAULT_GENERATOR = "depth_first"
    DEFAULT_SOLVER = "iterative_bfs"

    # Seconds per step at speed level 0; level 100 means no delay
    SPEED_DELAY_UNIT = 0.001

    def __init__(self, max_width: int, max_height: int,
                 step_delay: float = 0.0, event_writer=None):
        self.grid = Grid(max_width, max_height, event_writer=event_writer)
        self.event_writer = event_writer
        self.controller = StepController(step_delay)
        self.entrance: Optional[Position] = None
        self.exit: Optional[Position] = None
        self.path: List[Position] = []
        self._generated = False

    @classmethod
    def create(cls, max_width: int, max_height: int, **kwargs) -> "Maze":
        return cls(max_width, max_height, **kwargs)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def generated(self) -> bool:
        return self._generated

    @property
    def busy(self) -> bool:
        return self.controller.busy

    @property
    def step_delay(self) -> float:
        return self.controller.step_delay

    @step_delay.setter
    def step_delay(self, seconds: float):
        if seconds < 0:
            raise ValueError(f"step_delay must be >= 0, got {seconds}")
        self.controller.step_delay = seconds

    def set_speed(self, level: int):
        """Speed slider, 0 (slowest) to 100 (no delay)."""
        if not 0 <= level <= 100:
            raise ValueError(f"Speed level must be within 0..100, got {level}")
        self.step_delay = (100 - level) * self.SPEED_DELAY_UNIT

    def generate(self, width: int, height: int, algorithm: str = DEFAULT_GENERATOR,
                 seed: int = None, rng: Optional[random.Random] = None) -> Tuple[Position, Position]:
        """
        Carves a new width x height perfect maze and designates its entrance
        and exit. Returns (entrance, exit).
        """
        carver_cls = get_carver(algorithm)

        with self.controller.session(PHASE_GENERATE) as controller:
            # Validates before touching any state; the previous maze survives a bad request
            self.grid.initialize(width, height)
            self._generated = False
            self.entrance = self.exit = None
            self.path = []

            logger.info(f"Generating {width}x{height} maze with {carver_cls.__name__} (seed={seed})")
            t0 = time.time()

            carver = carver_cls(self.grid, rng=rng, seed=seed)
            for location in carver.run():
                controller.step(location)

            self.entrance, self.exit = carver.entrance, carver.exit
            self._generated = True
            logger.debug(f"Carved in {carver.step_count} steps ({time.time() - t0:.4f}s), "
                         f"entrance={self.entrance} exit={self.exit}")

        return self.entrance, self.exit

    def solve(self, algorithm: str = DEFAULT_SOLVER) -> List[Position]:
        """
        Finds the path from entrance to exit with the named strategy and
        returns it as a list of (row, col), entrance first.
        """
        solver_cls = get_solver(algorithm)

        with self.controller.session(PHASE_SOLVE) as controller:
            if not self._generated:
                raise NotGeneratedError("solve() called before a maze was generated")

            self.grid.reset_search_state()
            self.path = []

            logger.info(f"Solving {self.width}x{self.height} maze with {solver_cls.__name__} "
                        f"from {self.entrance} to {self.exit}")
            t0 = time.time()

            solver = solver_cls(self.grid, event_writer=self.event_writer)
            for pos in solver.run(self.entrance, self.exit):
                controller.step(pos)

            self.path = list(solver.path)
            logger.debug(f"Path length {len(self.path)}, visited {solver.visited_count} cells "
                         f"({time.time() - t0:.4f}s)")

        return list(self.path)

    def cancel(self):
        self.controller.cancel()

    def progress(self) -> ProgressSnapshot:
        return self.controller.snapshot()

    def visited_snapshot(self) -> FrozenSet[Position]:
        return self.controller.visited()

    def on_step(self, callback: ProgressHook):
        """
        Registers callback(current_position, visited_positions), called once
        per carve or solve step. Returns a function that unregisters it.
        """
        return self.controller.add_hook(callback)

    def cell(self, row: int, col: int) -> Cell:
        return self.grid.cell(row, col)

    def iter_cells(self) -> Iterator[Cell]:
        return self.grid.iter_cells()

    def entrance_cell(self) -> Cell:
        if self.entrance is None:
            raise NotGeneratedError("No maze has been generated yet")
        return self.grid.cell(*self.entrance)

    def exit_cell(self) -> Cell:
        if self.exit is None:
            raise NotGeneratedError("No maze has been generated yet")
        return self.grid.cell(*self.exit)
