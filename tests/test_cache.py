import pytest

from minikernel.config import ReplacementAlgorithm
from minikernel.cpu.cache import PageCache
from minikernel.cpu.memory import MemoryClient, MemoryWriteError, PagingInfo
from minikernel.cpu.mmu import Mmu
from minikernel.cpu.tlb import Tlb

PAGE = 8
PAGING = PagingInfo(page_bytes=PAGE, entries_per_table=4, levels=1)


class RecordingLogger:
    def __init__(self):
        self.events = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args):
            self.events.append((name, *args))

        return record


class FakeMemory(MemoryClient):
    def __init__(self, paging, confirm=True):
        super().__init__(paging)
        self.physical = bytearray(256)
        self.confirm = confirm
        self.page_writes = []

    def fetch_instruction(self, pid, program_counter):
        return "NOOP"

    def frame(self, pid, entries):
        return entries[-1]

    def write(self, pid, address, data):
        self.physical[address:address + len(data)] = data
        return self.confirm

    def read(self, pid, address, size):
        return bytes(self.physical[address:address + size])

    def read_page(self, pid, address):
        return bytes(self.physical[address:address + PAGE])

    def write_page(self, pid, address, content):
        self.page_writes.append(address)
        if self.confirm:
            self.physical[address:address + len(content)] = content
        return self.confirm


def make_cache(capacity=2, algorithm=ReplacementAlgorithm.CLOCK, confirm=True):
    logger = RecordingLogger()
    memory = FakeMemory(PAGING, confirm)
    mmu = Mmu(memory, PAGING, Tlb(0), logger)
    cache = PageCache(capacity, algorithm, 0, memory, mmu, logger)
    return cache, memory, logger


def cached_pages(cache):
    return [entry.page for entry in cache]


def test_disabled_cache_cannot_load():
    cache, _, _ = make_cache(capacity=0)
    assert not cache.enabled
    with pytest.raises(RuntimeError):
        cache.load(1, 0, 0)


def test_unsupported_algorithm_is_rejected():
    memory = FakeMemory(PAGING)
    with pytest.raises(ValueError):
        PageCache(2, ReplacementAlgorithm.FIFO, 0, memory, None, RecordingLogger())


def test_contains_logs_miss_then_hit():
    cache, _, logger = make_cache()
    assert cache.contains(1, 3) is False
    cache.load(1, 3, 3)
    assert cache.contains(1, 3) is True
    assert logger.events == [("cache_miss", 1, 3), ("cache_add", 1, 3), ("cache_hit", 1, 3)]


def test_load_copies_page_from_memory():
    cache, memory, _ = make_cache()
    memory.physical[2 * PAGE:3 * PAGE] = b"abcdefgh"
    cache.load(1, 5, 2)
    assert cache.read(5, 0, PAGE) == b"abcdefgh"


def test_write_then_read_round_trip_stays_in_cache():
    cache, memory, _ = make_cache()
    cache.load(1, 0, 1)
    cache.write(0, 2, b"hola")
    assert cache.read(0, 2, 4) == b"hola"
    assert memory.physical[PAGE:2 * PAGE] == bytes(PAGE)


def test_flush_writes_back_modified_pages_and_empties_cache():
    cache, memory, logger = make_cache()
    cache.load(1, 0, 1)
    cache.load(1, 1, 2)
    cache.write(0, 2, b"hola")
    cache.flush(1)
    assert len(cache) == 0
    assert memory.page_writes == [PAGE]
    assert memory.physical[PAGE + 2:PAGE + 6] == b"hola"
    assert ("cache_written_back", 1, 0, 1) in logger.events


def test_access_to_uncached_page_raises():
    cache, _, _ = make_cache()
    with pytest.raises(KeyError):
        cache.read(4, 0, 1)


def test_clock_replaces_first_page_after_full_sweep():
    cache, _, _ = make_cache(capacity=2, algorithm=ReplacementAlgorithm.CLOCK)
    cache.load(1, 0, 0)
    cache.load(1, 1, 1)
    cache.load(1, 2, 2)
    assert cached_pages(cache) == [2, 1]
    assert all(entry.used for entry in cache if entry.page == 2)


def test_clock_m_prefers_clean_page_over_modified_one():
    cache, memory, _ = make_cache(capacity=2, algorithm=ReplacementAlgorithm.CLOCK_M)
    cache.load(1, 0, 0)
    cache.load(1, 1, 1)
    cache.write(0, 0, b"x")
    cache.load(1, 2, 2)
    assert sorted(cached_pages(cache)) == [0, 2]
    assert memory.page_writes == []


def test_modified_victim_is_written_back_before_replacement():
    cache, memory, logger = make_cache(capacity=1)
    cache.load(1, 0, 3)
    cache.write(0, 0, b"dato")
    cache.load(1, 1, 4)
    assert cached_pages(cache) == [1]
    assert memory.physical[3 * PAGE:3 * PAGE + 4] == b"dato"
    assert ("cache_written_back", 1, 0, 3) in logger.events


def test_failed_write_back_raises():
    cache, _, _ = make_cache(capacity=1, confirm=False)
    cache.load(1, 0, 0)
    cache.write(0, 0, b"dato")
    with pytest.raises(MemoryWriteError):
        cache.load(1, 1, 1)