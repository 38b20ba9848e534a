"""Tests for the virtual clock and event queue."""

from lanefall.event_queue import EventQueue


def test_events_fire_in_due_order():
    queue = EventQueue()
    fired = []
    queue.schedule_at(30, lambda: fired.append("c"))
    queue.schedule_at(10, lambda: fired.append("a"))
    queue.schedule_at(20, lambda: fired.append("b"))
    queue.run_until(25)
    assert fired == ["a", "b"]
    assert queue.now_ms == 25
    queue.run_until(100)
    assert fired == ["a", "b", "c"]


def test_same_instant_keeps_scheduling_order():
    queue = EventQueue()
    fired = []
    for name in "xyz":
        queue.schedule_at(5, lambda n=name: fired.append(n))
    queue.run_all()
    assert fired == ["x", "y", "z"]


def test_clock_reads_due_instant_inside_handler():
    queue = EventQueue()
    seen = []
    queue.schedule_at(40, lambda: seen.append(queue.now_ms))
    queue.run_until(1000)
    assert seen == [40]


def test_handler_can_chain_events_within_horizon():
    queue = EventQueue()
    fired = []

    def tick(n):
        fired.append(n)
        if n < 3:
            queue.schedule_in(10, lambda: tick(n + 1))

    queue.schedule_at(0, lambda: tick(0))
    queue.run_until(25)
    assert fired == [0, 1, 2]
    queue.run_until(30)
    assert fired == [0, 1, 2, 3]


def test_cancelled_events_do_not_fire():
    queue = EventQueue()
    fired = []
    event = queue.schedule_at(10, lambda: fired.append(1))
    event.cancel()
    assert len(queue) == 0
    assert queue.run_all() == 0
    assert fired == []


def test_clock_never_moves_backwards():
    queue = EventQueue()
    queue.run_until(100)
    queue.schedule_at(50, lambda: None)
    queue.run_until(120)
    assert queue.now_ms == 120
