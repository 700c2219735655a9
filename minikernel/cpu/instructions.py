"""Instruction decoding and the CPU's instruction set."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

from minikernel.cpu.logger import MemoryAccess
from minikernel.cpu.memory import MemoryClient


class UnknownInstructionError(LookupError):
    """Raised for an opcode the CPU does not know."""


@dataclass(frozen=True)
class Instruction:
    opcode: str
    params: Tuple[str, ...] = field(default_factory=tuple)


def decode(line: str) -> Instruction:
    """Split an instruction line such as ``WRITE 0 hola`` into opcode and parameters."""
    opcode, *params = line.split(" ")
    return Instruction(opcode, tuple(params))


@dataclass
class ExecutionContext:
    """State of the process being executed."""

    pid: int
    program_counter: int
    syscall: bool = False


Handler = Callable[[ExecutionContext, Sequence[str]], None]


def _as_text(data: Optional[bytes]) -> str:
    if data is None:
        return "(null)"
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class InstructionSet:
    """Executes decoded instructions against the MMU, the cache and memory.

    ``NOOP`` is known but has no handler: executing it only advances the
    program counter and logs it.
    """

    def __init__(self, mmu, cache, memory: MemoryClient, logger, output: Callable[[str], None] = print):
        self.mmu = mmu
        self.cache = cache
        self.memory = memory
        self.logger = logger
        self.output = output
        self._handlers: Dict[str, Optional[Handler]] = {
            "NOOP": None,
            "WRITE": self._write,
            "READ": self._read,
            "GOTO": self._goto,
            "IO": self._syscall,
            "INIT_PROC": self._syscall,
            "DUMP_MEMORY": self._syscall,
            "EXIT": self._syscall,
        }

    def lookup(self, opcode: str) -> Optional[Handler]:
        """Return the handler for ``opcode``; ``None`` for an instruction with no effect."""
        try:
            return self._handlers[opcode]
        except KeyError:
            raise UnknownInstructionError(f"unknown instruction: {opcode}") from None

    def execute(self, context: ExecutionContext, instruction: Instruction) -> None:
        """Advance the program counter, log the instruction and run it."""
        handler = self.lookup(instruction.opcode)
        context.program_counter += 1
        self.logger.instruction_executed(context.pid, instruction.opcode, instruction.params)
        if handler is not None:
            handler(context, instruction.params)

    @property
    def _cache_active(self) -> bool:
        return self.cache is not None and self.cache.enabled

    def _ensure_cached(self, pid: int, address: int) -> int:
        page = self.mmu.page_number(address)
        if not self.cache.contains(pid, page):
            self.cache.load(pid, page, self.mmu.frame(pid, address))
        return page

    def _write(self, context: ExecutionContext, params: Sequence[str]) -> None:
        address = int(params[0])
        text = params[1]
        data = text.encode("utf-8")

        if self._cache_active:
            page = self._ensure_cached(context.pid, address)
            self.cache.write(page, self.mmu.offset(address), data)
            return

        physical = self.mmu.physical_address(context.pid, address)
        self.memory.write_checked(context.pid, physical, data)
        self.logger.memory_access(context.pid, MemoryAccess.WRITE, physical, text)

    def _read(self, context: ExecutionContext, params: Sequence[str]) -> None:
        address = int(params[0])
        size = int(params[1])

        if self._cache_active:
            page = self._ensure_cached(context.pid, address)
            text = _as_text(self.cache.read(page, self.mmu.offset(address), size))
        else:
            physical = self.mmu.physical_address(context.pid, address)
            text = _as_text(self.memory.read(context.pid, physical, size))
            self.logger.memory_access(context.pid, MemoryAccess.READ, physical, text)

        self.output(f"Datos leidos: {text} ")

    def _goto(self, context: ExecutionContext, params: Sequence[str]) -> None:
        context.program_counter = int(params[0])

    def _syscall(self, context: ExecutionContext, params: Sequence[str]) -> None:
        context.syscall = True