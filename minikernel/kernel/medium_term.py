"""Medium-term scheduling: blocking, suspending and resuming processes."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from minikernel.config import SchedulingAlgorithm
from minikernel.kernel.pcb import Pcb, State, is_smaller_than
from minikernel.kernel.states import StateQueue


class MediumTermScheduler:
    """Keeps BLOCKED, SUSPENDED_BLOCKED and SUSPENDED_READY processes.

    A process that stays blocked for ``suspend_after_ms`` is swapped out of
    memory. ``long_term`` must offer ``insert_exit`` and ``allow_admission``.
    """

    def __init__(
        self,
        algorithm: SchedulingAlgorithm,
        suspend_after_ms: int,
        memory,
        logger,
        long_term,
        insert_ready: Callable[[Pcb], None],
    ):
        if algorithm not in (SchedulingAlgorithm.FIFO, SchedulingAlgorithm.PMCP):
            logger.error("Algoritmo de desuspención no soportado.")
            raise ValueError(f"unsupported ready admission algorithm: {algorithm}")
        self.algorithm = algorithm
        self.suspend_after_ms = suspend_after_ms
        self.memory = memory
        self.logger = logger
        self.long_term = long_term
        self._insert_ready = insert_ready
        self.blocked = StateQueue(State.BLOCKED, logger)
        self.suspended_blocked = StateQueue(State.SUSPENDED_BLOCKED, logger)
        self.suspended_ready = StateQueue(State.SUSPENDED_READY, logger)

    def insert_blocked(self, pcb: Pcb) -> threading.Timer:
        """Block ``pcb`` and start the timer that suspends it if it stays blocked."""
        self.blocked.push(pcb)
        self.logger.timer_started(pcb.pid, self.suspend_after_ms)
        timer = threading.Timer(self.suspend_after_ms / 1000, self.suspend, args=(pcb,))
        timer.daemon = True
        timer.start()
        return timer

    def unblock(self, pcb: Pcb, failed: bool) -> None:
        """Release ``pcb`` once its blocking operation is over; a failure sends it to EXIT."""
        if failed:
            self._handle_failure(pcb)
            return

        state = pcb.state
        if state is State.BLOCKED:
            self._insert_ready(pcb)
            self.blocked.remove(pcb.pid)
        elif state is State.SUSPENDED_BLOCKED:
            self._insert_suspended_ready(pcb)
            self.suspended_blocked.remove(pcb.pid)
        else:
            self.logger.error("proceso no bloqueado, ni bloqueado suspendido.")

    def _handle_failure(self, pcb: Pcb) -> None:
        state = pcb.state
        self.long_term.insert_exit(pcb)
        if state is State.BLOCKED:
            self.blocked.remove(pcb.pid)
        elif state is State.SUSPENDED_BLOCKED:
            self.suspended_blocked.remove(pcb.pid)
        else:
            self.logger.error("proceso no bloqueado, ni bloqueado suspendido.")

    def _insert_suspended_ready(self, pcb: Pcb) -> None:
        if self.algorithm is SchedulingAlgorithm.FIFO:
            self.suspended_ready.push(pcb)
        else:
            self.suspended_ready.insert_sorted(pcb, is_smaller_than)
        self.long_term.allow_admission()

    def suspend(self, pcb: Pcb) -> bool:
        """Swap out ``pcb`` if it is still blocked; return whether it was suspended."""
        if pcb.state is not State.BLOCKED:
            return False

        self.suspended_blocked.push(pcb)
        self.blocked.remove(pcb.pid)
        if not self.memory.swap_out(pcb.pid):
            self.logger.error("Error al solicitar swap out del proceso.")
            raise RuntimeError(f"memory refused to swap out process {pcb.pid}")

        self.long_term.allow_admission()
        return True

    def unsuspend_ready(self) -> Optional[Pcb]:
        """Swap in the first SUSPENDED_READY process; ``None`` if memory has no room.

        Blocks while SUSPENDED_READY is empty.
        """
        pcb = self.suspended_ready.peek()
        if not self.memory.swap_in(pcb.pid):
            self.logger.error("Error al solicitar swap in del proceso suspendido.")
            return None
        return self.suspended_ready.remove(pcb.pid)

    def has_suspended_ready(self) -> bool:
        return bool(self.suspended_ready)