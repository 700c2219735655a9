"""Process control block kept by the kernel."""

from __future__ import annotations

import enum
import threading
import time
from typing import Callable, Dict, List, Optional


class State(enum.Enum):
    NEW = 0
    READY = 1
    EXEC = 2
    BLOCKED = 3
    SUSPENDED_BLOCKED = 4
    SUSPENDED_READY = 5
    EXIT = 6


def state_name(state: Optional[State]) -> str:
    """Printable name of a state; ``UNKNOWN`` for anything that is not one."""
    if isinstance(state, State):
        return state.name
    return "UNKNOWN"


class Pcb:
    """A process: its identity, scheduling estimates and per-state metrics.

    ``state_counts`` holds how many times the process entered each state and
    ``state_times`` the milliseconds spent in each visit.
    """

    def __init__(
        self,
        pid: int,
        size: int,
        executable: str,
        initial_estimate: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pid = pid
        self.program_counter = 0
        self.size = size
        self.executable = executable
        self.state: Optional[State] = None
        self.state_counts: Dict[State, int] = {state: 0 for state in State}
        self.state_times: Dict[State, List[int]] = {state: [] for state in State}
        self.burst_estimate = float(initial_estimate)
        self.executed_burst = 0
        self._clock = clock
        self._started: Optional[float] = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"Pcb(pid={self.pid}, size={self.size}, state={state_name(self.state)})"

    def _elapsed_ms(self) -> int:
        return int((self._clock() - self._started) * 1000)

    def set_state(self, state: State) -> Optional[State]:
        """Move to ``state``, recording the time spent in the old one; returns the old state."""
        with self._lock:
            self.close_interval()
            previous = self.state
            self.state = state
            self.state_counts[state] += 1
            return previous

    def close_interval(self) -> None:
        """Record the time spent in the current state and restart the timer."""
        with self._lock:
            if self._started is None:
                self._started = self._clock()
                return
            if self.state is not None:
                self.state_times[self.state].append(self._elapsed_ms())
            self._started = self._clock()

    def elapsed_in_state(self) -> int:
        """Milliseconds spent in the current state so far."""
        with self._lock:
            if self._started is None:
                return 0
            return self._elapsed_ms()


def is_smaller_than(a: Pcb, b: Pcb) -> bool:
    """Whether process ``a`` needs less memory than ``b``."""
    return a.size < b.size