"""Long-term scheduling: admitting new processes and retiring finished ones."""

from __future__ import annotations

import itertools
import threading
from typing import Callable, List, Optional

from minikernel.config import SchedulingAlgorithm
from minikernel.kernel.pcb import Pcb, State, is_smaller_than
from minikernel.kernel.states import StateQueue


class LongTermScheduler:
    """Admits processes from NEW (FIFO or smallest first) and finishes those in EXIT.

    Processes waiting in SUSPENDED_READY are always admitted before new ones;
    they are reached through the hooks given to :meth:`attach_suspended`.
    """

    def __init__(
        self,
        algorithm: SchedulingAlgorithm,
        initial_estimate: float,
        memory,
        logger,
        insert_ready: Callable[[Pcb], None],
    ):
        if algorithm not in (SchedulingAlgorithm.FIFO, SchedulingAlgorithm.PMCP):
            logger.error("Algoritmo de ingreso a NEW no soportado.")
            raise ValueError(f"unsupported ready admission algorithm: {algorithm}")
        self.algorithm = algorithm
        self.initial_estimate = initial_estimate
        self.memory = memory
        self.logger = logger
        self._insert_ready = insert_ready
        self.new = StateQueue(State.NEW, logger)
        self.exiting = StateQueue(State.EXIT, logger)
        self._pids = itertools.count()
        self._pid_lock = threading.Lock()
        self._may_admit = threading.Semaphore(0)
        self._has_suspended_ready: Callable[[], bool] = lambda: False
        self._unsuspend: Callable[[], Optional[Pcb]] = lambda: None

    def attach_suspended(
        self,
        has_suspended_ready: Callable[[], bool],
        unsuspend: Callable[[], Optional[Pcb]],
    ) -> None:
        """Give the scheduler access to the SUSPENDED_READY queue."""
        self._has_suspended_ready = has_suspended_ready
        self._unsuspend = unsuspend

    def new_process(self, executable: str, size: int) -> Pcb:
        """Create a process with the next pid and queue it in NEW."""
        with self._pid_lock:
            pid = next(self._pids)
        pcb = Pcb(pid, size, executable, self.initial_estimate)

        if self.algorithm is SchedulingAlgorithm.FIFO:
            self.new.push(pcb)
        else:
            self.new.insert_sorted(pcb, is_smaller_than)

        self.logger.process_created(pcb.pid)
        self.allow_admission()
        return pcb

    def allow_admission(self) -> None:
        """Signal that another admission attempt may succeed."""
        self._may_admit.release()

    def admit_once(self) -> Optional[Pcb]:
        """Wait for an admission signal and try to move one process to READY.

        Returns the admitted process, or ``None`` if nothing could be admitted.
        """
        self._may_admit.acquire()

        if self._has_suspended_ready():
            pcb = self._unsuspend()
            if pcb is None:
                return None
            self._insert_ready(pcb)
            self.allow_admission()
            return pcb

        if not self.new:
            return None

        pcb = self.new.peek()
        if not self.memory.create_process(pcb.pid, pcb.size, pcb.executable):
            return None

        pcb = self.new.remove(pcb.pid)
        self._insert_ready(pcb)
        self.allow_admission()
        return pcb

    def insert_exit(self, pcb: Pcb) -> None:
        self.exiting.push(pcb)

    def finish_once(self) -> Optional[Pcb]:
        """Ask memory to release the first process in EXIT and log its metrics.

        Blocks while EXIT is empty; returns ``None`` if memory refused.
        """
        pcb = self.exiting.peek()
        if not self.memory.finish_process(pcb.pid):
            return None

        self.allow_admission()
        pcb = self.exiting.remove(pcb.pid)
        pcb.close_interval()
        self.logger.process_metrics(pcb.pid, pcb.state_counts, pcb.state_times)
        self.logger.process_finished(pcb.pid)
        return pcb

    def start(self) -> List[threading.Thread]:
        """Start the admission and finalization threads."""

        def admit_forever() -> None:
            while True:
                self.admit_once()

        def finish_forever() -> None:
            while True:
                self.finish_once()

        threads = [
            threading.Thread(target=admit_forever, name="long-term-admission", daemon=True),
            threading.Thread(target=finish_forever, name="long-term-exit", daemon=True),
        ]
        for thread in threads:
            thread.start()
        return threads