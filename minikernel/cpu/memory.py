"""Interface the CPU uses to talk to main memory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


class MemoryWriteError(RuntimeError):
    """Raised when memory does not confirm a write."""


@dataclass(frozen=True)
class PagingInfo:
    """Paging parameters that memory hands to the CPU at connection time."""

    page_bytes: int
    entries_per_table: int
    levels: int

    def __post_init__(self) -> None:
        if self.page_bytes <= 0:
            raise ValueError("page size must be positive")
        if self.entries_per_table <= 0:
            raise ValueError("entries per page table must be positive")
        if self.levels < 1:
            raise ValueError("there must be at least one page table level")

    def page_size(self) -> int:
        """Size of one page, in bytes."""
        return self.page_bytes


class MemoryClient(ABC):
    """Requests a CPU can make to main memory."""

    def __init__(self, paging: PagingInfo):
        self.paging = paging

    @abstractmethod
    def fetch_instruction(self, pid: int, program_counter: int) -> str:
        """Return the instruction of ``pid`` at ``program_counter``."""

    @abstractmethod
    def frame(self, pid: int, entries: Sequence[int]) -> int:
        """Return the frame reached by walking the page tables with one entry per level."""

    @abstractmethod
    def write(self, pid: int, address: int, data: bytes) -> bool:
        """Write ``data`` at a physical address; return whether memory confirmed it."""

    @abstractmethod
    def read(self, pid: int, address: int, size: int) -> Optional[bytes]:
        """Read ``size`` bytes from a physical address, or ``None`` if memory refused."""

    @abstractmethod
    def read_page(self, pid: int, address: int) -> bytes:
        """Return the whole page that starts at a physical address."""

    @abstractmethod
    def write_page(self, pid: int, address: int, content: bytes) -> bool:
        """Overwrite the whole page at a physical address; return whether memory confirmed it."""

    def write_checked(self, pid: int, address: int, data: bytes) -> None:
        """Write ``data`` and raise :class:`MemoryWriteError` if memory does not confirm."""
        if not self.write(pid, address, data):
            raise MemoryWriteError("No se pudo escribir en memoria.")

    def write_page_checked(self, pid: int, address: int, content: bytes) -> None:
        """Write a full page and raise :class:`MemoryWriteError` if memory does not confirm."""
        if len(content) != self.paging.page_size():
            raise ValueError(
                f"page content must be {self.paging.page_size()} bytes, got {len(content)}"
            )
        if not self.write_page(pid, address, content):
            raise MemoryWriteError("No se pudo escribir en memoria.")