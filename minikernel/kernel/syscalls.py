"""System calls that processes make to the kernel."""

from __future__ import annotations

import threading
from typing import List, Optional

from minikernel.kernel.io_devices import UnknownDeviceError
from minikernel.kernel.pcb import Pcb


def is_init_proc(syscall: Optional[str]) -> bool:
    """Whether ``syscall`` asks for a new process to be created."""
    return syscall is not None and syscall.startswith("INIT_PROC")


def _split(syscall: Optional[str], minimum: int) -> List[str]:
    parts = (syscall or "").split()
    if len(parts) < minimum:
        raise ValueError(f"malformed syscall: {syscall!r}")
    return parts


class SyscallHandler:
    """Carries out the syscalls ``IO``, ``EXIT``, ``DUMP_MEMORY`` and ``INIT_PROC``."""

    def __init__(self, logger, io, memory, long_term, medium_term):
        self.logger = logger
        self.io = io
        self.memory = memory
        self.long_term = long_term
        self.medium_term = medium_term

    def handle(self, pcb: Pcb, syscall: Optional[str]) -> Optional[threading.Thread]:
        """Carry out the syscall that took ``pcb`` off the CPU.

        Returns the thread that waits for memory on ``DUMP_MEMORY``, else ``None``.
        """
        parts = _split(syscall, 1)
        name = parts[0]
        self.logger.syscall_received(pcb.pid, name)

        if name == "IO":
            parts = _split(syscall, 3)
            self._io(pcb, parts[1], int(parts[2]))
        elif name == "EXIT":
            self.long_term.insert_exit(pcb)
        elif name == "DUMP_MEMORY":
            return self._dump_memory(pcb)
        return None

    def init_proc(self, pcb: Pcb, syscall: str) -> Pcb:
        """Create the process asked for by ``INIT_PROC <path> <size>``; return it."""
        parts = _split(syscall, 3)
        self.logger.syscall_received(pcb.pid, parts[0])
        return self.long_term.new_process(parts[1].strip(), int(parts[2]))

    def _io(self, pcb: Pcb, device: str, duration_ms: int) -> None:
        try:
            self.io.block_for_io(device, pcb, duration_ms)
        except UnknownDeviceError:
            self.long_term.insert_exit(pcb)
            return
        self.medium_term.insert_blocked(pcb)

    def _dump_memory(self, pcb: Pcb) -> threading.Thread:
        self.medium_term.insert_blocked(pcb)

        def dump() -> None:
            succeeded = self.memory.dump_process(pcb.pid)
            self.logger.event("a desbloquear por fin de dump")
            self.medium_term.unblock(pcb, not succeeded)

        thread = threading.Thread(target=dump, name=f"dump-{pcb.pid}", daemon=True)
        thread.start()
        return thread