"""Queues of processes, one for each scheduling state."""

from __future__ import annotations

import functools
import threading
from typing import Callable, Iterator, List, Optional

from minikernel.kernel.pcb import Pcb, State

Pick = Callable[[Pcb, Pcb], Pcb]
Before = Callable[[Pcb, Pcb], bool]


class StateQueue:
    """Thread-safe queue of the processes that are in one state.

    Entering the queue moves the process to the queue's state and logs the
    change. ``pop`` and the ``peek`` methods block while the queue is empty.
    """

    def __init__(self, state: State, logger=None):
        self.state = state
        self._logger = logger
        self._items: List[Pcb] = []
        self._cond = threading.Condition()

    def _enter(self, pcb: Pcb) -> None:
        previous = pcb.set_state(self.state)
        if self._logger is not None:
            self._logger.state_changed(pcb.pid, previous, self.state)
        self._cond.notify_all()

    def _wait_for_process(self) -> None:
        while not self._items:
            self._cond.wait()

    def push(self, pcb: Pcb) -> None:
        """Append ``pcb`` at the end of the queue."""
        with self._cond:
            self._items.append(pcb)
            self._enter(pcb)

    def insert_sorted(self, pcb: Pcb, before: Before) -> None:
        """Insert ``pcb`` after every queued process ``p`` for which ``before(p, pcb)`` holds."""
        with self._cond:
            index = 0
            while index < len(self._items) and before(self._items[index], pcb):
                index += 1
            self._items.insert(index, pcb)
            self._enter(pcb)

    def pop(self) -> Pcb:
        """Remove and return the first process, waiting for one if needed."""
        with self._cond:
            self._wait_for_process()
            return self._items.pop(0)

    def _select(self, pick: Pick) -> Pcb:
        return functools.reduce(pick, self._items)

    def pop_minimum(self, pick: Pick) -> Pcb:
        """Remove and return the process chosen by folding the queue with ``pick``."""
        with self._cond:
            self._wait_for_process()
            chosen = self._select(pick)
            return self._take(chosen.pid)

    def peek(self) -> Pcb:
        """Return the first process without removing it, waiting for one if needed."""
        with self._cond:
            self._wait_for_process()
            return self._items[0]

    def peek_minimum(self, pick: Pick) -> Pcb:
        """Return the process chosen by folding the queue with ``pick``, without removing it."""
        with self._cond:
            self._wait_for_process()
            return self._select(pick)

    def peek_maximum(self, pick: Pick) -> Pcb:
        """Return the process chosen by folding the queue with ``pick``, without removing it."""
        with self._cond:
            self._wait_for_process()
            return self._select(pick)

    def _take(self, pid: int) -> Optional[Pcb]:
        for index, pcb in enumerate(self._items):
            if pcb.pid == pid:
                return self._items.pop(index)
        return None

    def remove(self, pid: int) -> Optional[Pcb]:
        """Remove and return the process ``pid``; ``None`` if it is not queued."""
        with self._cond:
            return self._take(pid)

    def pids(self) -> List[int]:
        """Pids of the queued processes, in queue order."""
        with self._cond:
            return [pcb.pid for pcb in self._items]

    def __iter__(self) -> Iterator[Pcb]:
        with self._cond:
            return iter(list(self._items))

    def __bool__(self) -> bool:
        with self._cond:
            return bool(self._items)

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)