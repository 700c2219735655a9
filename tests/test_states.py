import threading

from minikernel.kernel.pcb import Pcb, State, is_smaller_than
from minikernel.kernel.states import StateQueue


class RecordingLogger:
    def __init__(self):
        self.changes = []

    def state_changed(self, pid, previous, current):
        self.changes.append((pid, previous, current))


def make(pid, size=10, estimate=100.0):
    return Pcb(pid, size, "prog", estimate)


def test_push_moves_process_to_state_and_logs():
    logger = RecordingLogger()
    queue = StateQueue(State.READY, logger)
    pcb = make(1)
    queue.push(pcb)
    assert pcb.state is State.READY
    assert pcb.state_counts[State.READY] == 1
    assert logger.changes == [(1, None, State.READY)]


def test_state_change_logs_previous_state():
    logger = RecordingLogger()
    new = StateQueue(State.NEW, logger)
    ready = StateQueue(State.READY, logger)
    pcb = make(3)
    new.push(pcb)
    ready.push(pcb)
    assert logger.changes[-1] == (3, State.NEW, State.READY)


def test_pop_is_fifo():
    queue = StateQueue(State.READY)
    for pid in (1, 2, 3):
        queue.push(make(pid))
    assert [queue.pop().pid for _ in range(3)] == [1, 2, 3]
    assert not queue


def test_pop_waits_for_a_push():
    queue = StateQueue(State.READY)
    pcb = make(7)
    pusher = threading.Timer(0.05, queue.push, args=(pcb,))
    pusher.start()
    popped = queue.pop()
    pusher.join(5)
    assert popped is pcb
    assert popped.pid == 7
    assert len(queue) == 0


def test_insert_sorted_by_size():
    queue = StateQueue(State.NEW)
    for pid, size in ((1, 30), (2, 10), (3, 20)):
        queue.insert_sorted(make(pid, size), is_smaller_than)
    assert queue.pids() == [2, 3, 1]


def test_insert_sorted_places_equal_size_first():
    queue = StateQueue(State.NEW)
    queue.insert_sorted(make(1, 10), is_smaller_than)
    queue.insert_sorted(make(2, 10), is_smaller_than)
    assert queue.pids() == [2, 1]


def shorter(a, b):
    return a if a.burst_estimate <= b.burst_estimate else b


def longer(a, b):
    return a if a.burst_estimate >= b.burst_estimate else b


def test_pop_minimum_removes_chosen():
    queue = StateQueue(State.READY)
    for pid, estimate in ((1, 50.0), (2, 5.0), (3, 20.0)):
        queue.push(make(pid, estimate=estimate))
    assert queue.pop_minimum(shorter).pid == 2
    assert queue.pids() == [1, 3]


def test_peek_does_not_remove():
    queue = StateQueue(State.READY)
    for pid, estimate in ((1, 50.0), (2, 5.0), (3, 20.0)):
        queue.push(make(pid, estimate=estimate))
    assert queue.peek().pid == 1
    assert queue.peek_minimum(shorter).pid == 2
    assert queue.peek_maximum(longer).pid == 1
    assert len(queue) == 3


def test_remove_by_pid():
    queue = StateQueue(State.BLOCKED)
    first, second = make(1), make(2)
    queue.push(first)
    queue.push(second)
    assert queue.remove(2) is second
    assert queue.remove(2) is None
    assert queue.pids() == [1]


def test_bool_and_len_follow_contents():
    queue = StateQueue(State.EXIT)
    assert not queue
    assert len(queue) == 0
    queue.push(make(4))
    assert queue
    assert len(queue) == 1