import pytest

from minikernel.config import SchedulingAlgorithm
from minikernel.kernel.long_term import LongTermScheduler
from minikernel.kernel.pcb import Pcb, State


class RecordingLogger:
    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, args))

        return record

    def names(self):
        return [name for name, _ in self.calls]


class FakeMemory:
    def __init__(self, accept=True):
        self.accept = accept
        self.created = []
        self.finished = []

    def create_process(self, pid, size, path):
        self.created.append((pid, size, path))
        return self.accept

    def finish_process(self, pid):
        self.finished.append(pid)
        return self.accept


def make_scheduler(algorithm=SchedulingAlgorithm.FIFO, accept=True):
    memory = FakeMemory(accept)
    logger = RecordingLogger()
    ready = []
    scheduler = LongTermScheduler(algorithm, 10.0, memory, logger, ready.append)
    return scheduler, memory, logger, ready


def test_new_processes_get_consecutive_pids_in_new():
    scheduler, _, logger, _ = make_scheduler()
    first = scheduler.new_process("a.txt", 64)
    second = scheduler.new_process("b.txt", 32)
    assert (first.pid, second.pid) == (0, 1)
    assert first.state is State.NEW
    assert first.burst_estimate == 10.0
    assert scheduler.new.pids() == [0, 1]
    assert ("process_created", (0,)) in logger.calls


def test_pmcp_orders_new_by_size():
    scheduler, _, _, _ = make_scheduler(SchedulingAlgorithm.PMCP)
    for size in (30, 10, 20):
        scheduler.new_process("p.txt", size)
    assert scheduler.new.pids() == [1, 2, 0]


def test_admit_once_moves_process_to_ready():
    scheduler, memory, _, ready = make_scheduler()
    pcb = scheduler.new_process("prog.txt", 128)
    admitted = scheduler.admit_once()
    assert admitted is pcb
    assert ready == [pcb]
    assert memory.created == [(0, 128, "prog.txt")]
    assert len(scheduler.new) == 0


def test_admit_once_keeps_process_when_memory_refuses():
    scheduler, memory, _, ready = make_scheduler(accept=False)
    scheduler.new_process("prog.txt", 128)
    assert scheduler.admit_once() is None
    assert ready == []
    assert scheduler.new.pids() == [0]


def test_admit_once_with_nothing_new_returns_none():
    scheduler, memory, _, ready = make_scheduler()
    scheduler.allow_admission()
    assert scheduler.admit_once() is None
    assert memory.created == []


def test_suspended_ready_processes_come_first():
    scheduler, memory, _, ready = make_scheduler()
    suspended = Pcb(7, 16, "s.txt", 10.0)
    scheduler.attach_suspended(lambda: True, lambda: suspended)
    scheduler.new_process("prog.txt", 128)
    assert scheduler.admit_once() is suspended
    assert ready == [suspended]
    assert memory.created == []
    assert scheduler.new.pids() == [0]


def test_failed_unsuspend_admits_nothing():
    scheduler, memory, _, ready = make_scheduler()
    scheduler.attach_suspended(lambda: True, lambda: None)
    scheduler.allow_admission()
    assert scheduler.admit_once() is None
    assert ready == []


def test_finish_once_releases_process_and_logs_metrics():
    scheduler, memory, logger, _ = make_scheduler()
    pcb = Pcb(4, 16, "p.txt", 10.0)
    scheduler.insert_exit(pcb)
    assert pcb.state is State.EXIT
    assert scheduler.finish_once() is pcb
    assert memory.finished == [4]
    assert len(scheduler.exiting) == 0
    names = logger.names()
    assert names.index("process_metrics") < names.index("process_finished")


def test_finish_once_keeps_process_when_memory_refuses():
    scheduler, memory, logger, _ = make_scheduler(accept=False)
    scheduler.insert_exit(Pcb(4, 16, "p.txt", 10.0))
    assert scheduler.finish_once() is None
    assert scheduler.exiting.pids() == [4]
    assert "process_finished" not in logger.names()


def test_unsupported_algorithm_is_rejected():
    with pytest.raises(ValueError):
        make_scheduler(SchedulingAlgorithm.SJF)