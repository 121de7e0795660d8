import threading
import urllib.error

from vitals_probe import HttpProbe, LivenessSignal, ProbeWatcher


class FakeResponse:
    def __init__(self, status=200, body=b"ok"):
        self.status = status
        self.body = body
        self.read_called = False

    def read(self):
        self.read_called = True
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeOpener:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_signal_take_clears() -> None:
    signal = LivenessSignal()
    assert signal.take() is False

    signal.set()
    signal.set()

    assert signal.pending
    assert signal.take() is True
    assert signal.take() is False


def test_http_probe_success_reads_body() -> None:
    response = FakeResponse()
    opener = FakeOpener(response=response)

    assert HttpProbe("http://example.test/ok", opener=opener)() is True
    assert response.read_called
    assert opener.calls == [("http://example.test/ok", {})]


def test_http_probe_passes_timeout_when_set() -> None:
    opener = FakeOpener(response=FakeResponse())

    HttpProbe("http://example.test/ok", timeout=2.5, opener=opener)()

    assert opener.calls[0][1] == {"timeout": 2.5}


def test_http_probe_non_2xx_is_failure() -> None:
    opener = FakeOpener(response=FakeResponse(status=503))

    assert HttpProbe("http://example.test/ok", opener=opener)() is False


def test_http_probe_connection_error_is_failure() -> None:
    opener = FakeOpener(error=urllib.error.URLError("refused"))

    assert HttpProbe("http://example.test/ok", opener=opener)() is False


def test_http_probe_timeout_is_failure() -> None:
    opener = FakeOpener(error=TimeoutError("timed out"))

    assert HttpProbe("http://example.test/ok", opener=opener)() is False


def test_check_once_sets_signal_on_success() -> None:
    signal = LivenessSignal()
    watcher = ProbeWatcher(signal, lambda: True, interval=1.0)

    assert watcher.check_once() is True
    assert signal.take() is True
    assert (watcher.attempts, watcher.successes, watcher.failures) == (1, 1, 0)


def test_check_once_counts_failures_without_signal() -> None:
    signal = LivenessSignal()
    watcher = ProbeWatcher(signal, lambda: False, interval=1.0)

    watcher.check_once()
    watcher.check_once()

    assert not signal.pending
    assert watcher.failures == 2
    assert watcher.last_ok is False


def test_check_once_treats_probe_exception_as_failure() -> None:
    def broken_probe():
        raise RuntimeError("boom")

    watcher = ProbeWatcher(LivenessSignal(), broken_probe, interval=1.0)

    assert watcher.check_once() is False
    assert watcher.failures == 1


def test_watcher_thread_runs_until_stopped() -> None:
    stop = threading.Event()
    calls = []

    def probe():
        calls.append(1)
        if len(calls) == 3:
            stop.set()
        return len(calls) % 2 == 1

    signal = LivenessSignal()
    watcher = ProbeWatcher(signal, probe, interval=0.001, stop_event=stop)
    watcher.start()
    watcher.join(timeout=2.0)

    assert not watcher.is_alive()
    assert watcher.attempts == 3
    assert watcher.successes == 2
    assert watcher.failures == 1
    assert signal.take() is True


def test_watcher_exits_promptly_on_shutdown() -> None:
    stop = threading.Event()
    watcher = ProbeWatcher(LivenessSignal(), lambda: False, interval=60.0, stop_event=stop)
    watcher.start()

    stop.set()
    watcher.join(timeout=2.0)

    assert not watcher.is_alive()
    assert watcher.attempts <= 1
