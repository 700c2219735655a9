import threading

import pytest

from minikernel.kernel.cpus import (
    CpuLink,
    CpuPool,
    DuplicateCpuError,
    Eviction,
    EvictionReason,
)
from minikernel.kernel.pcb import Pcb


class RecordingLogger:
    def __init__(self):
        self.errors = []

    def error(self, message):
        self.errors.append(message)


class ScriptedLink(CpuLink):
    def __init__(self, evictions, gate=None):
        self.evictions = list(evictions)
        self.calls = []
        self.interrupts = 0
        self.gate = gate
        self.running = threading.Event()
        self.closed = threading.Event()

    def dispatch(self, pid, program_counter):
        self.calls.append((pid, program_counter))
        self.running.set()
        if self.gate is not None:
            self.gate.wait(5)
        return self.evictions.pop(0) if self.evictions else None

    def interrupt(self):
        self.interrupts += 1

    def close(self):
        self.closed.set()


def starts_with_init(syscall):
    return syscall is not None and syscall.startswith("INIT_PROC")


def make_pool(logger=None, init_calls=None):
    calls = init_calls if init_calls is not None else []
    return CpuPool(
        logger or RecordingLogger(),
        starts_with_init,
        lambda pcb, syscall: calls.append((pcb.pid, syscall)),
    )


def test_execute_returns_eviction():
    pool = make_pool()
    eviction = Eviction(1, 4, EvictionReason.SYSCALL, "EXIT")
    link = ScriptedLink([eviction])
    pool.connect("1", link)
    assert pool.has_free_cpu()
    pcb = Pcb(1, 10, "prog", 10.0)
    pcb.program_counter = 2
    pool.execute(pcb)
    assert pool.next_eviction() == eviction
    assert link.calls == [(1, 2)]


def test_cpu_is_free_again_after_eviction():
    pool = make_pool()
    link = ScriptedLink([Eviction(1, 1, EvictionReason.SCHEDULER_INT)])
    pool.connect("1", link)
    pool.execute(Pcb(1, 10, "prog", 10.0))
    pool.next_eviction()
    assert pool.has_free_cpu()


def test_init_proc_is_handled_and_process_resumes():
    init_calls = []
    pool = make_pool(init_calls=init_calls)
    link = ScriptedLink([
        Eviction(5, 3, EvictionReason.SYSCALL, "INIT_PROC child 64"),
        Eviction(5, 6, EvictionReason.SYSCALL, "EXIT"),
    ])
    pool.connect("a", link)
    pool.execute(Pcb(5, 10, "prog", 10.0))
    eviction = pool.next_eviction()
    assert eviction.syscall == "EXIT"
    assert init_calls == [(5, "INIT_PROC child 64")]
    assert link.calls == [(5, 0), (5, 3)]


def test_duplicate_cpu_is_refused():
    logger = RecordingLogger()
    pool = make_pool(logger)
    pool.connect("1", ScriptedLink([]))
    second = ScriptedLink([])
    with pytest.raises(DuplicateCpuError):
        pool.connect("1", second)
    assert second.closed.is_set()
    assert logger.errors == ["Error id CPU existente"]


def test_interrupt_reaches_running_cpu():
    logger = RecordingLogger()
    pool = make_pool(logger)
    gate = threading.Event()
    link = ScriptedLink([Eviction(9, 1, EvictionReason.SCHEDULER_INT)], gate)
    pool.connect("1", link)
    pool.execute(Pcb(9, 10, "prog", 10.0))
    assert link.running.wait(5)
    assert not pool.has_free_cpu()
    assert pool.interrupt(9) is True
    assert link.interrupts == 1
    assert pool.interrupt(42) is False
    assert logger.errors == ["No se encontró la CPU que ejecuta el proceso"]
    gate.set()
    assert pool.next_eviction().reason is EvictionReason.SCHEDULER_INT


def test_failed_dispatch_drops_cpu():
    logger = RecordingLogger()
    pool = make_pool(logger)
    link = ScriptedLink([])
    pool.connect("1", link)
    pool.execute(Pcb(1, 10, "prog", 10.0))
    assert link.closed.wait(5)
    assert not pool.has_free_cpu()
    assert logger.errors == ["Error al recibir desalojo"]
    pool.connect("1", ScriptedLink([]))
    assert pool.has_free_cpu()