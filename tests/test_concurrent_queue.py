import queue
import threading

import pytest

from nanoraft.concurrent_queue import ConcurrentQueue, QueueClosed


def test_fifo_order():
    q = ConcurrentQueue()
    for item in ("a", "b", "c"):
        q.push(item)
    assert len(q) == 3
    assert [q.try_pop(), q.try_pop(), q.try_pop()] == ["a", "b", "c"]
    assert q.empty()


def test_try_pop_empty_raises():
    with pytest.raises(queue.Empty):
        ConcurrentQueue().try_pop()


def test_try_steal_takes_newest():
    q = ConcurrentQueue()
    q.push("a")
    q.push("b")
    assert q.try_steal() == "b"
    assert q.try_pop() == "a"
    with pytest.raises(queue.Empty):
        q.try_steal()


def test_wait_and_pop_returns_pushed_item():
    q = ConcurrentQueue()
    q.push("x")
    assert q.wait_and_pop(timeout=1) == "x"
    assert len(q) == 0


def test_wait_and_pop_times_out():
    with pytest.raises(queue.Empty):
        ConcurrentQueue().wait_and_pop(timeout=0.05)


def test_wait_and_pop_receives_from_other_thread():
    q = ConcurrentQueue()
    timer = threading.Timer(0.05, q.push, args=("late",))
    timer.start()
    try:
        assert q.wait_and_pop(timeout=5) == "late"
    finally:
        timer.join()


def test_exit_wakes_waiter():
    q = ConcurrentQueue()
    outcome = []

    def consume():
        try:
            q.wait_and_pop(timeout=5)
        except QueueClosed:
            outcome.append("closed")

    worker = threading.Thread(target=consume)
    worker.start()
    q.exit()
    worker.join(5)
    assert not worker.is_alive()
    assert outcome == ["closed"]
    with pytest.raises(QueueClosed):
        q.wait_and_pop(timeout=0.05)
    assert q.empty()


def test_closed_queue_refuses_waiting_pop_but_allows_try_pop():
    q = ConcurrentQueue()
    q.push("a")
    q.push("b")
    q.exit()
    with pytest.raises(QueueClosed):
        q.wait_and_pop(timeout=1)
    assert q.try_pop() == "a"
    assert len(q) == 1


def test_none_is_a_valid_item():
    q = ConcurrentQueue()
    q.push(None)
    assert not q.empty()
    assert q.try_pop() is None
    assert q.empty()