from array import array
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from spanmaze.core.errors import InvalidDimensionsError

Position = Tuple[int, int]


@dataclass(frozen=True)
class Cell:
    """Read-only view of one grid square, as handed to renderers."""
    position: Position
    location: Tuple[int, int]
    north: bool
    east: bool
    south: bool
    west: bool
    visited: bool
    path_direction: Optional[int]

    def all_walls_intact(self) -> bool:
        return self.north and self.east and self.south and self.west


class Grid:
    # Bitmask Constants
    NORTH = 0b00000001
    EAST  = 0b00000010
    SOUTH = 0b00000100
    WEST  = 0b00001000

    # Flags
    VISITED = 0b00010000

    # All walls present by default (N|E|S|W) = 15
    ALL_WALLS = NORTH | EAST | SOUTH | WEST

    # Direction Helpers
    DROW = {NORTH: -1, SOUTH: 1, EAST: 0, WEST: 0}
    DCOL = {NORTH: 0, SOUTH: 0, EAST: 1, WEST: -1}
    OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}
    NAMES = {NORTH: "north", EAST: "east", SOUTH: "south", WEST: "west"}

    # Left, Right, Up, Down
    SCAN_ORDER = (WEST, EAST, NORTH, SOUTH)

    __slots__ = ('max_width', 'max_height', 'width', 'height',
                 'cells', 'directions', 'event_writer')

    def __init__(self, max_width: int, max_height: int, event_writer=None):
        if max_width <= 0 or max_height <= 0:
            raise InvalidDimensionsError(
                f"Grid capacity must be positive, got {max_width}x{max_height}")
        self.max_width = max_width
        self.max_height = max_height
        self.event_writer = event_writer
        # Active sub-rectangle, set by initialize()
        self.width = 0
        self.height = 0
        # One byte per cell: wall bits + VISITED. Sized for the full capacity
        # so re-initialising never reallocates.
        self.cells = array('B', [self.ALL_WALLS] * (max_width * max_height))
        # Solver path direction per cell, 0 = None
        self.directions = array('B', [0] * (max_width * max_height))

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def unit_x(self) -> int:
        return self.max_width // self.width if self.width else 0

    @property
    def unit_y(self) -> int:
        return self.max_height // self.height if self.height else 0

    def initialize(self, width: int, height: int):
        """
        Activates a width x height sub-rectangle and re-stamps every active
        cell to all-walls-intact, unvisited, no path direction.
        """
        if width <= 0 or height <= 0 or width > self.max_width or height > self.max_height:
            raise InvalidDimensionsError(
                f"Cannot initialise {width}x{height} maze "
                f"(capacity {self.max_width}x{self.max_height})")
        self.width = width
        self.height = height
        count = width * height
        self.cells[:count] = array('B', [self.ALL_WALLS] * count)
        self.directions[:count] = array('B', [0] * count)

        if self.event_writer:
            self.event_writer.write_header(width, height)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def get_index(self, row: int, col: int) -> int:
        if 0 <= row < self.height and 0 <= col < self.width:
            return row * self.width + col
        raise IndexError(f"Cell ({row}, {col}) out of bounds")

    def position_of(self, idx: int) -> Position:
        return divmod(idx, self.width)

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------

    def neighbor(self, row: int, col: int, direction: int) -> Optional[Position]:
        nrow = row + self.DROW[direction]
        ncol = col + self.DCOL[direction]
        if 0 <= nrow < self.height and 0 <= ncol < self.width:
            return (nrow, ncol)
        return None

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int, int]]:
        """
        Yields (nrow, ncol, direction_to_neighbor) for all in-bounds
        neighbors, scanning Left, Right, Up, Down.
        Does NOT check walls (that's for pathfinding).
        """
        # Left
        if col > 0:
            yield (row, col - 1, self.WEST)
        # Right
        if col < self.width - 1:
            yield (row, col + 1, self.EAST)
        # Up
        if row > 0:
            yield (row - 1, col, self.NORTH)
        # Down
        if row < self.height - 1:
            yield (row + 1, col, self.SOUTH)

    def open_neighbors(self, row: int, col: int) -> Iterator[Tuple[int, int, int]]:
        """
        Yields (nrow, ncol, direction) for neighbors that are NOT blocked by a wall.
        """
        val = self.cells[row * self.width + col]
        for nrow, ncol, direction in self.neighbors(row, col):
            if not (val & direction):
                yield (nrow, ncol, direction)

    def direction_between(self, a: Position, b: Position) -> int:
        drow = b[0] - a[0]
        dcol = b[1] - a[1]
        if drow == -1 and dcol == 0:
            return self.NORTH
        if drow == 1 and dcol == 0:
            return self.SOUTH
        if drow == 0 and dcol == 1:
            return self.EAST
        if drow == 0 and dcol == -1:
            return self.WEST
        raise ValueError(f"Cells {a} and {b} are not orthogonally adjacent")

    def remove_wall_between(self, a: Position, b: Position):
        """
        Removes the wall between two adjacent cells: clears a's wall facing b
        and b's wall facing a. Both cells are validated before either bit is
        touched, so the operation never leaves one side open.
        """
        direction = self.direction_between(a, b)
        idx1 = self.get_index(*a)
        idx2 = self.get_index(*b)

        if self.event_writer:
            self.event_writer.log_carve(a[0], a[1], direction)

        self.cells[idx1] &= ~direction & 0xFF
        self.cells[idx2] &= ~self.OPPOSITE[direction] & 0xFF

    def open_boundary(self, row: int, col: int, direction: int):
        """Opens an outer wall of the maze (entrance/exit)."""
        if self.neighbor(row, col, direction) is not None:
            raise ValueError(
                f"The {self.NAMES[direction]} wall of ({row}, {col}) is not on the boundary")
        idx = self.get_index(row, col)
        if self.event_writer:
            self.event_writer.log_open(row, col, direction)
        self.cells[idx] &= ~direction & 0xFF

    def has_wall(self, row: int, col: int, dir_bit: int) -> bool:
        return (self.cells[row * self.width + col] & dir_bit) != 0

    def all_walls_intact(self, row: int, col: int) -> bool:
        return (self.cells[row * self.width + col] & self.ALL_WALLS) == self.ALL_WALLS

    # ------------------------------------------------------------------
    # Search bookkeeping
    # ------------------------------------------------------------------

    def set_visited(self, row: int, col: int, visited: bool = True):
        idx = row * self.width + col
        if visited:
            self.cells[idx] |= self.VISITED
        else:
            self.cells[idx] &= ~self.VISITED & 0xFF

    def is_visited(self, row: int, col: int) -> bool:
        return (self.cells[row * self.width + col] & self.VISITED) != 0

    def set_path_direction(self, row: int, col: int, direction: Optional[int]):
        self.directions[row * self.width + col] = direction or 0

    def path_direction(self, row: int, col: int) -> Optional[int]:
        return self.directions[row * self.width + col] or None

    def reset_search_state(self):
        """Clears visited flags and path directions; walls are untouched."""
        for idx in range(self.size):
            self.cells[idx] &= self.ALL_WALLS
            self.directions[idx] = 0

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def cell(self, row: int, col: int) -> Cell:
        idx = self.get_index(row, col)
        val = self.cells[idx]
        return Cell(
            position=(row, col),
            location=(col * self.unit_x, row * self.unit_y),
            north=bool(val & self.NORTH),
            east=bool(val & self.EAST),
            south=bool(val & self.SOUTH),
            west=bool(val & self.WEST),
            visited=bool(val & self.VISITED),
            path_direction=self.directions[idx] or None,
        )

    def iter_cells(self) -> Iterator[Cell]:
        for row in range(self.height):
            for col in range(self.width):
                yield self.cell(row, col)

    def wall_mask(self) -> np.ndarray:
        """(height, width) uint8 array of the wall bits of the active cells."""
        if self.size == 0:
            return np.zeros((self.height, self.width), dtype=np.uint8)
        raw = np.frombuffer(self.cells, dtype=np.uint8, count=self.size)
        return (raw & self.ALL_WALLS).reshape(self.height, self.width).copy()

    def wall_state(self) -> bytes:
        return bytes(c & self.ALL_WALLS for c in self.cells[:self.size])
