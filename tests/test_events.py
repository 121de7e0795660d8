import os
import queue
import threading

import pytest

from vitals_events import INPUT, TICK, TICK_EVENT, EventDispatcher, input_event, read_keys, run_ticker


def _drain(events):
    drained = []
    while True:
        try:
            drained.append(events.next(timeout=0))
        except queue.Empty:
            return drained


def test_events_are_delivered_in_arrival_order() -> None:
    events = EventDispatcher(tick_rate=1.0)

    events.send(input_event("a"))
    events.send(TICK_EVENT)
    events.send(input_event("b"))

    assert [e.kind for e in _drain(events)] == [INPUT, TICK, INPUT]


def test_send_after_close_is_ignored() -> None:
    events = EventDispatcher(tick_rate=1.0)
    events.close()

    assert events.closed
    assert events.send(TICK_EVENT) is False
    assert events.pending() == 0


def test_next_times_out_when_idle() -> None:
    events = EventDispatcher(tick_rate=1.0)

    with pytest.raises(queue.Empty):
        events.next(timeout=0.01)


def test_tick_rate_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EventDispatcher(tick_rate=0)


def test_ticker_emits_ticks_until_closed() -> None:
    with EventDispatcher(tick_rate=0.005) as events:
        first = events.next(timeout=1.0)
        second = events.next(timeout=1.0)

    assert first == TICK_EVENT
    assert second == TICK_EVENT

    _drain(events)
    threading.Event().wait(0.05)
    assert events.pending() == 0


def test_ticker_returns_when_sends_fail() -> None:
    events = EventDispatcher(tick_rate=1.0)
    events.close()

    # Dispatcher closed: the first send fails and the loop returns
    run_ticker(events, 1.0, threading.Event())

    assert events.pending() == 0


def test_input_reader_forwards_each_key() -> None:
    read_fd, write_fd = os.pipe()
    try:
        events = EventDispatcher(tick_rate=60.0, input_fd=read_fd)
        with events:
            os.write(write_fd, "qpé".encode("utf-8"))
            keys = []
            while len(keys) < 3:
                event = events.next(timeout=2.0)
                if event.kind == INPUT:
                    keys.append(event.key)
    finally:
        os.close(write_fd)
        os.close(read_fd)

    assert keys == ["q", "p", "é"]


def test_input_reader_stops_at_eof() -> None:
    read_fd, write_fd = os.pipe()
    events = EventDispatcher(tick_rate=1.0)
    os.write(write_fd, b"x")
    os.close(write_fd)

    try:
        read_keys(read_fd, events, threading.Event(), poll=0.01)
    finally:
        os.close(read_fd)

    assert _drain(events) == [input_event("x")]


def test_close_joins_background_threads() -> None:
    read_fd, write_fd = os.pipe()
    try:
        events = EventDispatcher(tick_rate=0.01, input_fd=read_fd).start()
        threads = list(events._threads)
        events.close()
    finally:
        os.close(write_fd)
        os.close(read_fd)

    assert len(threads) == 2
    assert not any(t.is_alive() for t in threads)
