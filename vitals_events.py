#!/usr/bin/env python3
"""
Event dispatch for the Vitals render loop

Keyboard input and timer ticks are produced on their own threads and
merged into one queue. The render loop is the only consumer:

    with EventDispatcher(tick_rate=0.01, input_fd=sys.stdin.fileno()) as events:
        while True:
            event = events.next()
            if event.kind == INPUT and event.key == "q":
                break
            ...

Ordering between the two producers is arrival order. Closing the
dispatcher sets the shared stop event; producers stop sending and exit.
"""

import codecs
import logging
import os
import queue
import select
import threading
from collections import namedtuple

import vitals_config as config

logger = logging.getLogger(__name__)

INPUT = "input"
TICK = "tick"

Event = namedtuple("Event", ["kind", "key"])

TICK_EVENT = Event(TICK, None)


def input_event(key):
    return Event(INPUT, key)


class EventDispatcher:
    """Multi-producer, single-consumer event stream"""

    def __init__(self, tick_rate=config.TICK_RATE_MS / 1000.0, input_fd=None, stop_event=None):
        """
        Args:
            tick_rate: seconds between Tick events
            input_fd: file descriptor to read keys from, or None for no input thread
            stop_event: shared shutdown token; a private one is made if omitted
        """
        if tick_rate <= 0:
            raise ValueError(f"tick_rate must be positive, got {tick_rate}")
        self.tick_rate = tick_rate
        self.input_fd = input_fd
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._queue = queue.Queue()
        self._threads = []

    def start(self):
        self._spawn("ticker", run_ticker, self, self.tick_rate, self.stop_event)
        if self.input_fd is not None:
            self._spawn(
                "input-reader",
                read_keys,
                self.input_fd,
                self,
                self.stop_event,
                config.INPUT_POLL_SECONDS,
            )
        return self

    def _spawn(self, name, target, *args):
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        self._threads.append(thread)
        logger.debug("started %s thread", name)

    @property
    def closed(self) -> bool:
        return self.stop_event.is_set()

    def send(self, event) -> bool:
        """Queue an event. Returns False once the consumer has gone away."""
        if self.stop_event.is_set():
            return False
        self._queue.put(event)
        return True

    def next(self, timeout=None):
        """Block for the next event. Raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self, timeout=config.THREAD_JOIN_TIMEOUT):
        self.stop_event.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("%s thread did not stop within %.1fs", thread.name, timeout)
        self._threads = []

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def run_ticker(dispatcher, period, stop_event):
    """Send a Tick every ``period`` seconds until stopped"""
    while not stop_event.is_set():
        if not dispatcher.send(TICK_EVENT):
            return
        if stop_event.wait(period):
            return


def read_keys(fd, dispatcher, stop_event, poll=config.INPUT_POLL_SECONDS):
    """Forward each character read from ``fd`` as an Input event.

    select() with a short timeout keeps the read blocking in practice while
    still noticing shutdown. Exits on EOF or once sends start failing.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while not stop_event.is_set():
        try:
            ready, _, _ = select.select([fd], [], [], poll)
        except (OSError, ValueError) as e:
            logger.debug("input reader stopped: %s", e)
            return
        if not ready:
            continue

        try:
            data = os.read(fd, 1)
        except OSError as e:
            logger.debug("input reader stopped: %s", e)
            return
        if not data:
            logger.debug("input reader reached EOF")
            return

        for key in decoder.decode(data):
            if not dispatcher.send(input_event(key)):
                return
