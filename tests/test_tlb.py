import pytest

from minikernel.config import ReplacementAlgorithm
from minikernel.cpu.tlb import Tlb


def test_miss_on_empty():
    assert Tlb(2).lookup(1) is None


def test_hit_returns_frame():
    tlb = Tlb(2)
    tlb.add(1, 10)
    assert tlb.lookup(1) == 10


def test_fifo_evicts_oldest_regardless_of_use():
    tlb = Tlb(2, ReplacementAlgorithm.FIFO)
    tlb.add(1, 10)
    tlb.add(2, 20)
    assert tlb.lookup(1) == 10
    tlb.add(3, 30)
    assert tlb.pages() == [2, 3]
    assert tlb.lookup(1) is None


def test_lru_keeps_recently_used():
    tlb = Tlb(2, ReplacementAlgorithm.LRU)
    tlb.add(1, 10)
    tlb.add(2, 20)
    assert tlb.lookup(1) == 10
    assert tlb.pages() == [2, 1]
    tlb.add(3, 30)
    assert tlb.pages() == [1, 3]
    assert tlb.lookup(2) is None
    assert tlb.lookup(1) == 10


def test_size_never_exceeds_capacity():
    tlb = Tlb(3, ReplacementAlgorithm.LRU)
    for page in range(10):
        tlb.add(page, page + 100)
        assert len(tlb) <= 3
    assert tlb.pages() == [7, 8, 9]


def test_clear_empties():
    tlb = Tlb(2)
    tlb.add(1, 10)
    tlb.clear()
    assert len(tlb) == 0
    assert tlb.lookup(1) is None


def test_disabled_tlb_stores_nothing():
    tlb = Tlb(0)
    tlb.add(1, 10)
    assert tlb.enabled is False
    assert tlb.lookup(1) is None


def test_rejects_cache_algorithm():
    with pytest.raises(ValueError):
        Tlb(2, ReplacementAlgorithm.CLOCK)


def test_rejects_negative_capacity():
    with pytest.raises(ValueError):
        Tlb(-1)