"""The kernel: its schedulers, resources and syscalls wired together."""

from __future__ import annotations

import threading
from typing import Callable, List

from minikernel.config import KernelConfig
from minikernel.kernel.cpus import CpuLink, CpuPool
from minikernel.kernel.io_devices import IoLink, IoManager
from minikernel.kernel.long_term import LongTermScheduler
from minikernel.kernel.medium_term import MediumTermScheduler
from minikernel.kernel.memory import MemoryRequest, MemoryService
from minikernel.kernel.pcb import Pcb
from minikernel.kernel.short_term import ShortTermScheduler
from minikernel.kernel.syscalls import SyscallHandler, is_init_proc

PROMPT = "[+] Presione Enter para comenzar...\n"


def wait_for_enter(read_line: Callable[[str], str] = input) -> None:
    """Prompt until an empty line is entered."""
    while read_line(PROMPT) != "":
        pass


class Kernel:
    """Builds the three schedulers, the CPU and IO pools and the syscall handler.

    ``memory_send`` delivers one request to memory and returns its answer
    (see :class:`minikernel.kernel.memory.MemoryService`).
    """

    def __init__(self, config: KernelConfig, logger, memory_send: Callable[[MemoryRequest], int]):
        self.config = config
        self.logger = logger
        self.memory = MemoryService(memory_send, logger)
        self.long_term = LongTermScheduler(
            config.admission_algorithm,
            config.initial_estimate,
            self.memory,
            logger,
            self._insert_ready,
        )
        self.medium_term = MediumTermScheduler(
            config.admission_algorithm,
            config.suspension_time_ms,
            self.memory,
            logger,
            self.long_term,
            self._insert_ready,
        )
        self.long_term.attach_suspended(
            self.medium_term.has_suspended_ready, self.medium_term.unsuspend_ready
        )
        self.io = IoManager(logger, self.medium_term.unblock)
        self.syscalls = SyscallHandler(
            logger, self.io, self.memory, self.long_term, self.medium_term
        )
        self.cpus = CpuPool(logger, is_init_proc, self.syscalls.init_proc)
        self.short_term = ShortTermScheduler(
            config.short_term_algorithm,
            config.alpha,
            self.cpus,
            logger,
            self.syscalls.handle,
        )
        self._threads: List[threading.Thread] = []

    def _insert_ready(self, pcb: Pcb) -> None:
        self.short_term.insert_ready(pcb)

    def start(self, executable: str, size: int, read_line: Callable[[str], str] = input) -> Pcb:
        """Start scheduling, wait for Enter and create the first process."""
        self._threads = self.long_term.start() + self.short_term.start()
        wait_for_enter(read_line)
        return self.long_term.new_process(executable, size)

    def connect_cpu(self, cpu_id: str, link: CpuLink) -> None:
        self.cpus.connect(cpu_id, link)
        self.logger.event(f"CPU {cpu_id} conectada")

    def connect_io(self, name: str, link: IoLink) -> None:
        self.io.connect(name, link)
        self.logger.event(f"IO {name} conectado")