"""Translation lookaside buffer with FIFO or LRU replacement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from minikernel.config import ReplacementAlgorithm


@dataclass(frozen=True)
class TlbEntry:
    page: int
    frame: int


class Tlb:
    """A fixed-size page-to-frame cache; a capacity of zero disables it."""

    def __init__(self, capacity: int, algorithm: ReplacementAlgorithm = ReplacementAlgorithm.FIFO):
        if capacity < 0:
            raise ValueError("TLB capacity cannot be negative")
        if algorithm not in (ReplacementAlgorithm.FIFO, ReplacementAlgorithm.LRU):
            raise ValueError(f"unsupported TLB replacement algorithm: {algorithm}")
        self.capacity = capacity
        self.algorithm = algorithm
        self._entries: List[TlbEntry] = []

    @property
    def enabled(self) -> bool:
        return self.capacity > 0

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, page: int) -> Optional[int]:
        """Return the frame of ``page``, or ``None`` on a miss."""
        for index, entry in enumerate(self._entries):
            if entry.page == page:
                if self.algorithm is ReplacementAlgorithm.LRU:
                    self._entries.append(self._entries.pop(index))
                return entry.frame
        return None

    def add(self, page: int, frame: int) -> None:
        """Insert a mapping, evicting the oldest entry when full."""
        if not self.enabled:
            return
        if len(self._entries) == self.capacity:
            self._entries.pop(0)
        self._entries.append(TlbEntry(page, frame))

    def clear(self) -> None:
        self._entries.clear()

    def pages(self) -> List[int]:
        """Pages held, from the next to be replaced to the last inserted."""
        return [entry.page for entry in self._entries]