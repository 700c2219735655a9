"""Logical to physical address translation over multi-level page tables."""

from __future__ import annotations

from typing import List, Optional

from minikernel.cpu.memory import MemoryClient, PagingInfo
from minikernel.cpu.tlb import Tlb


def level_entries(page: int, levels: int, entries_per_table: int) -> List[int]:
    """Return the page table entry to follow at each level, outermost first."""
    if entries_per_table <= 0:
        raise ValueError("entries per page table must be positive")
    return [
        (page // entries_per_table ** (levels - level)) % entries_per_table
        for level in range(1, levels + 1)
    ]


class Mmu:
    """Translates logical addresses, consulting the TLB before memory's page tables."""

    def __init__(self, memory: MemoryClient, paging: PagingInfo, tlb: Optional[Tlb], logger):
        self.memory = memory
        self.paging = paging
        self.tlb = tlb
        self.logger = logger

    @property
    def tlb_enabled(self) -> bool:
        return self.tlb is not None and self.tlb.enabled

    def page_number(self, address: int) -> int:
        return address // self.paging.page_size()

    def offset(self, address: int) -> int:
        return address % self.paging.page_size()

    def frame(self, pid: int, address: int) -> int:
        """Return the frame holding the page of ``address``."""
        page = self.page_number(address)
        frame = self.tlb.lookup(page) if self.tlb_enabled else None

        if frame is None:
            entries = level_entries(page, self.paging.levels, self.paging.entries_per_table)
            frame = self.memory.frame(pid, entries)
            if self.tlb_enabled:
                self.logger.tlb_miss(pid, page)
                self.tlb.add(page, frame)
                self.logger.tlb_add(pid, page)
        else:
            self.logger.tlb_hit(pid, page)

        self.logger.frame_obtained(pid, page, frame)
        return frame

    def physical_address(self, pid: int, address: int) -> int:
        return self.frame(pid, address) * self.paging.page_size() + self.offset(address)

    def frame_address(self, frame: int) -> int:
        """Physical address where ``frame`` starts."""
        return frame * self.paging.page_size()