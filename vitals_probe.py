#!/usr/bin/env python3
"""
Liveness probing for Vitals

A ProbeWatcher thread checks an HTTP endpoint on a fixed schedule and, on
success, raises a LivenessSignal. The waveform takes the signal once per
tick, so a success is either turned into a pulse or dropped. Nothing is
queued.

Usage:
    signal = LivenessSignal()
    watcher = ProbeWatcher(signal, HttpProbe("http://localhost:5000/health"))
    watcher.start()
    ...
    watcher.stop_event.set()
    watcher.join()
"""

import http.client
import logging
import threading
import urllib.error
import urllib.request

import vitals_config as config

logger = logging.getLogger(__name__)


class LivenessSignal:
    """Single-slot, edge-triggered handoff between threads.

    set() overwrites, take() reads and clears in one step.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending = False

    def set(self):
        with self._lock:
            self._pending = True

    def take(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = False
            return pending

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending


class HttpProbe:
    """GET a fixed URL; any readable 2xx response counts as alive."""

    def __init__(self, url=config.PROBE_URL, timeout=config.PROBE_TIMEOUT, opener=None):
        self.url = url
        self.timeout = timeout
        self._opener = opener or urllib.request.urlopen

    def __call__(self) -> bool:
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        try:
            with self._opener(self.url, **kwargs) as resp:
                # Body content is irrelevant, only that it can be read
                resp.read()
                status = getattr(resp, "status", 200)
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            logger.debug("probe %s failed: %s", self.url, e)
            return False
        return 200 <= status < 300


class ProbeWatcher:
    """Background thread running one probe per interval.

    Failures are only counted. The next scheduled attempt is the retry.
    """

    def __init__(self, signal, probe, interval=config.PROBE_INTERVAL, stop_event=None):
        """
        Args:
            signal: LivenessSignal raised on each success
            probe: zero-argument callable returning True when alive
            interval: seconds between the start of one wait and the next attempt
            stop_event: shared shutdown token; a private one is made if omitted
        """
        self.signal = signal
        self.probe = probe
        self.interval = interval
        self.stop_event = stop_event if stop_event is not None else threading.Event()

        self.attempts = 0
        self.successes = 0
        self.failures = 0
        self.last_ok = None
        self._thread = None

    def check_once(self) -> bool:
        """Run a single probe and publish the result"""
        self.attempts += 1
        try:
            ok = bool(self.probe())
        except Exception as e:
            logger.debug("probe raised %s: %s", type(e).__name__, e)
            ok = False

        self.last_ok = ok
        if ok:
            self.successes += 1
            self.signal.set()
            logger.debug("probe ok (%d ok / %d failed)", self.successes, self.failures)
        else:
            self.failures += 1
            logger.debug("probe failed (%d ok / %d failed)", self.successes, self.failures)
        return ok

    def run(self):
        logger.info("probe watcher started, interval %.1fs", self.interval)
        while not self.stop_event.is_set():
            self.check_once()
            # wait() doubles as the sleep and the shutdown check
            if self.stop_event.wait(self.interval):
                break
        logger.info(
            "probe watcher stopped after %d attempts (%d ok, %d failed)",
            self.attempts,
            self.successes,
            self.failures,
        )

    def start(self):
        self._thread = threading.Thread(target=self.run, name="probe-watcher", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout=config.THREAD_JOIN_TIMEOUT):
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
