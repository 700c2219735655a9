"""Fetch, decode and execute loop of the CPU."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from minikernel.cpu.instructions import ExecutionContext, InstructionSet, decode
from minikernel.cpu.interrupt import InterruptFlag
from minikernel.cpu.memory import MemoryClient


class EvictionReason(enum.Enum):
    """Why a process left the CPU."""

    SCHEDULER_INT = "SCHEDULER_INT"
    SYSCALL = "SYSCALL"


@dataclass(frozen=True)
class ExecutionEnd:
    """Outcome of running a process until it leaves the CPU."""

    reason: EvictionReason
    program_counter: int
    syscall: Optional[str] = None


class InstructionCycle:
    """Runs a process instruction by instruction until a syscall or an interrupt."""

    def __init__(
        self,
        memory: MemoryClient,
        instructions: InstructionSet,
        interrupts: InterruptFlag,
        tlb,
        cache,
        logger,
    ):
        self.memory = memory
        self.instructions = instructions
        self.interrupts = interrupts
        self.tlb = tlb
        self.cache = cache
        self.logger = logger

    def _fetch(self, pid: int, program_counter: int) -> str:
        self.logger.fetch(pid, program_counter)
        line = self.memory.fetch_instruction(pid, program_counter)
        if line is None:
            self.logger.error("NULL instruction received")
            raise RuntimeError("NULL instruction received")
        return line

    def run(self, pid: int, program_counter: int) -> ExecutionEnd:
        """Execute ``pid`` from ``program_counter`` and report how it stopped.

        After the process stops the TLB is emptied and every modified cached
        page is written back to memory.
        """
        context = ExecutionContext(pid, program_counter)

        while True:
            line = self._fetch(pid, context.program_counter)
            self.instructions.execute(context, decode(line))

            if context.syscall:
                end = ExecutionEnd(EvictionReason.SYSCALL, context.program_counter, line)
                break

            if self.interrupts.is_pending():
                end = ExecutionEnd(EvictionReason.SCHEDULER_INT, context.program_counter)
                break

        if self.tlb is not None and self.tlb.enabled:
            self.tlb.clear()

        if self.cache is not None and self.cache.enabled:
            self.cache.flush(pid)

        return end