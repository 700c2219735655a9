"""Short-term scheduling: choosing which ready process runs next."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from minikernel.config import SchedulingAlgorithm
from minikernel.kernel.cpus import Eviction, EvictionReason
from minikernel.kernel.pcb import Pcb, State
from minikernel.kernel.states import StateQueue

_SUPPORTED = (SchedulingAlgorithm.FIFO, SchedulingAlgorithm.SJF, SchedulingAlgorithm.SRT)


def estimate_burst(alpha: float, previous_estimate: float, actual: float) -> float:
    """Exponential average of the last real burst and the previous estimate."""
    return alpha * actual + (1 - alpha) * previous_estimate


def _shorter_estimate(a: Pcb, b: Pcb) -> Pcb:
    return a if a.burst_estimate <= b.burst_estimate else b


def _remaining_estimate(pcb: Pcb) -> int:
    return int(pcb.burst_estimate - pcb.elapsed_in_state())


def _longer_remaining(a: Pcb, b: Pcb) -> Pcb:
    return a if _remaining_estimate(a) >= _remaining_estimate(b) else b


class ShortTermScheduler:
    """Moves processes from READY to a CPU with FIFO, SJF or SRT.

    ``cpus`` hands processes to CPUs (see :class:`minikernel.kernel.cpus.CpuPool`)
    and ``handle_syscall`` is called with a process that left the CPU on a syscall.
    """

    def __init__(
        self,
        algorithm: SchedulingAlgorithm,
        alpha: float,
        cpus,
        logger,
        handle_syscall: Callable[[Pcb, Optional[str]], None],
    ):
        if algorithm not in _SUPPORTED:
            logger.error("Algoritmo de planificación de corto plazo no soportado.")
            raise ValueError(f"unsupported short-term scheduling algorithm: {algorithm}")
        self.algorithm = algorithm
        self.alpha = alpha
        self.cpus = cpus
        self.logger = logger
        self._handle_syscall = handle_syscall
        self.ready = StateQueue(State.READY, logger)
        self.executing = StateQueue(State.EXEC, logger)
        self._cpu_free = threading.Semaphore(1)
        self._may_replan = threading.Semaphore(1)

    def _insert_ready(self, pcb: Pcb) -> None:
        pcb.burst_estimate = estimate_burst(self.alpha, pcb.burst_estimate, pcb.executed_burst)
        self.ready.push(pcb)

    def insert_ready(self, pcb: Pcb) -> None:
        """Re-estimate the next burst of ``pcb`` and queue it in READY."""
        self._insert_ready(pcb)
        if self.algorithm is SchedulingAlgorithm.SRT:
            self._may_replan.release()

    def _dispatch(self, pcb: Pcb) -> Pcb:
        self.cpus.execute(pcb)
        self.executing.push(pcb)
        return pcb

    def schedule_once(self) -> Optional[Pcb]:
        """Run one scheduling decision; return the dispatched process, if any.

        Blocks until there is something to decide on.
        """
        if self.algorithm is SchedulingAlgorithm.FIFO:
            return self._dispatch(self.ready.pop())

        if self.algorithm is SchedulingAlgorithm.SJF:
            self._cpu_free.acquire()
            return self._dispatch(self.ready.pop_minimum(_shorter_estimate))

        return self._schedule_srt()

    def _schedule_srt(self) -> Optional[Pcb]:
        self._may_replan.acquire()
        candidate = self.ready.peek_minimum(_shorter_estimate)

        if self.cpus.has_free_cpu():
            return self._dispatch(self.ready.remove(candidate.pid))

        running = self.executing.peek_maximum(_longer_remaining)
        # The candidate's whole burst is compared with what the running one has left.
        if candidate.burst_estimate >= _remaining_estimate(running):
            return None

        self.cpus.interrupt(running.pid)
        return self._dispatch(self.ready.remove(candidate.pid))

    def handle_eviction(self, eviction: Eviction) -> Pcb:
        """Take back a process that left its CPU and route it by the reason it left."""
        pcb = self.executing.remove(eviction.pid)
        if pcb is None:
            self.logger.error(f"Proceso {eviction.pid} no encontrado en EXEC.")
            raise KeyError(f"process {eviction.pid} is not executing")

        if self.algorithm is SchedulingAlgorithm.SJF:
            self._cpu_free.release()
        if self.algorithm is SchedulingAlgorithm.SRT and eviction.reason is not EvictionReason.SCHEDULER_INT:
            self._may_replan.release()

        pcb.program_counter = eviction.program_counter
        pcb.executed_burst = pcb.elapsed_in_state()

        if eviction.reason is EvictionReason.SCHEDULER_INT:
            self._insert_ready(pcb)
        elif eviction.reason is EvictionReason.SYSCALL:
            self._handle_syscall(pcb, eviction.syscall)
        else:
            self.logger.error("Motivo de desalojo no soportado.")
        return pcb

    def start(self) -> List[threading.Thread]:
        """Start the scheduling and eviction-handling threads."""

        def schedule_forever() -> None:
            while True:
                self.schedule_once()

        def evictions_forever() -> None:
            while True:
                self.handle_eviction(self.cpus.next_eviction())

        threads = [
            threading.Thread(target=schedule_forever, name="short-term-scheduler", daemon=True),
            threading.Thread(target=evictions_forever, name="eviction-handler", daemon=True),
        ]
        for thread in threads:
            thread.start()
        return threads