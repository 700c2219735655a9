"""Page cache of the CPU with CLOCK or modified CLOCK replacement."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterator, List, Optional

from minikernel.config import ReplacementAlgorithm
from minikernel.cpu.memory import MemoryClient


@dataclass
class CacheEntry:
    page: int
    frame: int
    content: bytearray
    used: bool = True
    modified: bool = False


class PageCache:
    """Holds whole pages in the CPU; a capacity of zero disables it."""

    def __init__(
        self,
        capacity: int,
        algorithm: ReplacementAlgorithm,
        delay_ms: int,
        memory: MemoryClient,
        mmu,
        logger,
    ):
        if capacity < 0:
            raise ValueError("cache capacity cannot be negative")
        if capacity and algorithm not in (ReplacementAlgorithm.CLOCK, ReplacementAlgorithm.CLOCK_M):
            raise ValueError(f"unsupported cache replacement algorithm: {algorithm}")
        self.capacity = capacity
        self.algorithm = algorithm
        self.delay_ms = delay_ms
        self.memory = memory
        self.mmu = mmu
        self.logger = logger
        self._entries: List[CacheEntry] = []
        self._pointer = 0

    @property
    def enabled(self) -> bool:
        return self.capacity > 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries))

    def _index(self, page: int) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.page == page:
                return index
        return None

    def _entry(self, page: int) -> CacheEntry:
        index = self._index(page)
        if index is None:
            raise KeyError(f"page {page} is not cached")
        return self._entries[index]

    def contains(self, pid: int, page: int) -> bool:
        """Whether ``page`` is cached; logs a hit or a miss."""
        if self._index(page) is None:
            self.logger.cache_miss(pid, page)
            return False
        self.logger.cache_hit(pid, page)
        return True

    def load(self, pid: int, page: int, frame: int) -> None:
        """Bring ``page`` from ``frame`` into the cache, replacing a victim when full."""
        if not self.enabled:
            raise RuntimeError("cache is disabled")

        content = self.memory.read_page(pid, self.mmu.frame_address(frame))
        new_entry = CacheEntry(page, frame, bytearray(content))

        if len(self._entries) < self.capacity:
            self._entries.append(new_entry)
        else:
            index = self._select_victim()
            victim = self._entries[index]
            if victim.modified:
                self._write_back(pid, victim)
            self._entries[index] = new_entry

        self.logger.cache_add(pid, page)

    def _advance(self) -> None:
        self._pointer = (self._pointer + 1) % self.capacity

    def _select_victim(self) -> int:
        if self.algorithm is ReplacementAlgorithm.CLOCK:
            while True:
                index = self._pointer
                entry = self._entries[index]
                self._advance()
                if not entry.used:
                    return index
                entry.used = False

        # Passes 1 and 3 look for (unused, clean) without touching anything;
        # passes 2 and 4 look for (unused, modified) and clear use bits on the way.
        for step in range(1, 5):
            wants_modified = step in (2, 4)
            for _ in range(self.capacity):
                index = self._pointer
                entry = self._entries[index]
                self._advance()
                if not entry.used and entry.modified == wants_modified:
                    return index
                if wants_modified:
                    entry.used = False
        raise RuntimeError("no cache victim found")

    def _write_back(self, pid: int, entry: CacheEntry) -> None:
        self.memory.write_page_checked(pid, self.mmu.frame_address(entry.frame), bytes(entry.content))
        self.logger.cache_written_back(pid, entry.page, entry.frame)

    def _wait(self) -> None:
        if self.delay_ms > 0:
            time.sleep(self.delay_ms / 1000)

    def write(self, page: int, offset: int, data: bytes) -> None:
        """Write ``data`` into a cached page, marking it used and modified."""
        self._wait()
        entry = self._entry(page)
        entry.used = True
        entry.modified = True
        entry.content[offset:offset + len(data)] = data

    def read(self, page: int, offset: int, size: int) -> bytes:
        """Read ``size`` bytes from a cached page, marking it used."""
        self._wait()
        entry = self._entry(page)
        entry.used = True
        return bytes(entry.content[offset:offset + size])

    def flush(self, pid: int) -> None:
        """Write every modified page back to memory and empty the cache."""
        for entry in self._entries:
            if entry.modified:
                self._write_back(pid, entry)
        self._entries.clear()