"""CPUs connected to the kernel and the dispatching of processes to them."""

from __future__ import annotations

import enum
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from minikernel.kernel.pcb import Pcb

__all__ = ["EvictionReason", "Eviction", "CpuLink", "DuplicateCpuError", "CpuPool"]


class EvictionReason(enum.Enum):
    """Why a CPU gave a process back to the kernel."""

    SCHEDULER_INT = "SCHEDULER_INT"
    SYSCALL = "SYSCALL"


@dataclass(frozen=True)
class Eviction:
    """A process leaving a CPU, as reported by the CPU."""

    pid: int
    program_counter: int
    reason: EvictionReason
    syscall: Optional[str] = None


class CpuLink(ABC):
    """The dispatch and interrupt connections to one CPU."""

    @abstractmethod
    def dispatch(self, pid: int, program_counter: int) -> Optional[Eviction]:
        """Ask the CPU to run ``pid`` and wait until it is evicted; ``None`` on failure."""

    @abstractmethod
    def interrupt(self) -> None:
        """Send an interrupt signal to the CPU."""

    @abstractmethod
    def close(self) -> None:
        """Close both connections."""


class DuplicateCpuError(ValueError):
    """Raised when a CPU connects with an id that is already in use."""


class _Cpu:
    def __init__(self, cpu_id: str, link: CpuLink):
        self.cpu_id = cpu_id
        self.link = link
        self.pcb: Optional[Pcb] = None
        self.lock = threading.Lock()
        self.work: "queue.Queue[Pcb]" = queue.Queue()


class CpuPool:
    """Keeps the connected CPUs, hands processes to free ones and collects evictions.

    A process whose CPU reports an ``INIT_PROC`` syscall has the syscall handled
    by ``init_proc`` and is sent straight back to the same CPU.
    """

    def __init__(
        self,
        logger,
        is_init_proc: Callable[[Optional[str]], bool],
        init_proc: Callable[[Pcb, str], None],
    ):
        self._logger = logger
        self._is_init_proc = is_init_proc
        self._init_proc = init_proc
        self._cpus: Dict[str, _Cpu] = {}
        self._lock = threading.Lock()
        self._free: "queue.Queue[_Cpu]" = queue.Queue()
        self._evictions: "queue.Queue[Eviction]" = queue.Queue()

    def connect(self, cpu_id: str, link: CpuLink) -> None:
        """Register a CPU and make it available; a repeated id is refused."""
        with self._lock:
            duplicate = cpu_id in self._cpus
            if not duplicate:
                cpu = _Cpu(cpu_id, link)
                self._cpus[cpu_id] = cpu
        if duplicate:
            self._logger.error("Error id CPU existente")
            link.close()
            raise DuplicateCpuError(f"CPU id already connected: {cpu_id}")

        threading.Thread(target=self._run, args=(cpu,), name=f"cpu-{cpu_id}", daemon=True).start()
        self._free.put(cpu)

    def execute(self, pcb: Pcb) -> None:
        """Hand ``pcb`` to a free CPU, waiting for one if all are busy."""
        cpu = self._free.get()
        with cpu.lock:
            cpu.pcb = pcb
        cpu.work.put(pcb)

    def has_free_cpu(self) -> bool:
        return not self._free.empty()

    def interrupt(self, pid: int) -> bool:
        """Interrupt the CPU running ``pid``; ``False`` if no CPU runs it."""
        with self._lock:
            cpus = list(self._cpus.values())
        for cpu in cpus:
            with cpu.lock:
                running = cpu.pcb is not None and cpu.pcb.pid == pid
            if running:
                cpu.link.interrupt()
                return True
        self._logger.error("No se encontró la CPU que ejecuta el proceso")
        return False

    def next_eviction(self) -> Eviction:
        """Wait for and return the next process evicted from any CPU."""
        return self._evictions.get()

    def _drop(self, cpu: _Cpu) -> None:
        with self._lock:
            if self._cpus.get(cpu.cpu_id) is cpu:
                del self._cpus[cpu.cpu_id]
        with cpu.lock:
            cpu.pcb = None
        cpu.link.close()

    def _run(self, cpu: _Cpu) -> None:
        while True:
            pcb = cpu.work.get()
            with cpu.lock:
                pid = pcb.pid
                program_counter = pcb.program_counter

            while True:
                try:
                    eviction = cpu.link.dispatch(pid, program_counter)
                except (OSError, EOFError):
                    eviction = None
                if eviction is None:
                    self._logger.error("Error al recibir desalojo")
                    self._drop(cpu)
                    return
                if self._is_init_proc(eviction.syscall):
                    self._init_proc(pcb, eviction.syscall)
                    program_counter = eviction.program_counter
                    continue
                break

            # Clear the running process first so no interrupt is aimed at it any more.
            with cpu.lock:
                cpu.pcb = None
            self._evictions.put(eviction)
            self._free.put(cpu)