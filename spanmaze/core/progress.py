import logging
import threading
from contextlib import contextmanager
from typing import Callable, FrozenSet, List, NamedTuple, Optional, Protocol, Set

from spanmaze.core.errors import BusyError, CancelledError
from spanmaze.core.grid import Position

logger = logging.getLogger(__name__)

PHASE_IDLE = "idle"
PHASE_GENERATE = "generate"
PHASE_SOLVE = "solve"


class ProgressHook(Protocol):
    """Called once per algorithmic step of a carve or a solve."""

    def __call__(self, current: Position, visited: FrozenSet[Position]) -> None:
        ...


class ProgressSnapshot(NamedTuple):
    phase: str
    step: int
    current: Optional[Position]
    visited_count: int


class StepController:
    """
    Owns the run-time state shared between a running generate/solve and
    the outside world: the busy flag, the published progress, cancellation,
    pacing and the registered hooks.

    The snapshot is replaced as a whole (never mutated) under a lock, so a
    reader on another thread sees either the previous step or the current
    one.
    """

    def __init__(self, step_delay: float = 0.0):
        self.step_delay = step_delay
        self._busy = threading.Lock()
        self._state_lock = threading.Lock()
        self._cancel = threading.Event()
        self._hooks: List[ProgressHook] = []
        self._visited: Set[Position] = set()
        self._snapshot = ProgressSnapshot(PHASE_IDLE, 0, None, 0)

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    @contextmanager
    def session(self, phase: str):
        if not self._busy.acquire(blocking=False):
            raise BusyError(f"Cannot {phase}: another operation is in progress")
        try:
            self._cancel.clear()
            with self._state_lock:
                self._visited = set()
                self._snapshot = ProgressSnapshot(phase, 0, None, 0)
            yield self
        finally:
            with self._state_lock:
                last = self._snapshot
                self._snapshot = ProgressSnapshot(PHASE_IDLE, last.step, last.current, last.visited_count)
            self._busy.release()

    def step(self, current: Position):
        """Step boundary: publish, notify hooks, pace, honour cancellation."""
        if self._cancel.is_set():
            raise CancelledError("Operation cancelled")

        with self._state_lock:
            self._visited.add(current)
            last = self._snapshot
            self._snapshot = ProgressSnapshot(last.phase, last.step + 1, current, len(self._visited))
            visited = frozenset(self._visited) if self._hooks else frozenset()

        for hook in list(self._hooks):
            hook(current, visited)

        if self.step_delay > 0:
            # Sleeps on the cancel event so cancel() wakes us immediately
            if self._cancel.wait(self.step_delay):
                raise CancelledError("Operation cancelled")

    def cancel(self):
        if self.busy:
            logger.info("Cancellation requested")
        self._cancel.set()

    def snapshot(self) -> ProgressSnapshot:
        with self._state_lock:
            return self._snapshot

    def visited(self) -> FrozenSet[Position]:
        with self._state_lock:
            return frozenset(self._visited)

    def add_hook(self, hook: ProgressHook) -> Callable[[], None]:
        self._hooks.append(hook)

        def remove():
            if hook in self._hooks:
                self._hooks.remove(hook)

        return remove
