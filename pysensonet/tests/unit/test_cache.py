import threading
import traceback

import pytest

from pysensonet.cache import Cached


class Counter:
    def __init__(self, values=None, error=None):
        self.calls = 0
        self.values = values
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.values[self.calls - 1] if self.values else self.calls


def test_single_fetch_within_window(clock):
    fetch = Counter()
    cache = Cached(fetch, 90, clock=clock)
    assert cache.get() == 1
    clock.advance(89)
    assert cache.get() == 1
    assert fetch.calls == 1


def test_refetch_after_expiry(clock):
    fetch = Counter()
    cache = Cached(fetch, 90, clock=clock)
    cache.get()
    clock.advance(90)
    assert cache.get() == 2
    assert fetch.calls == 2


def test_error_is_cached_until_expiry(clock):
    fetch = Counter(error=RuntimeError("down"))
    cache = Cached(fetch, 90, clock=clock)
    with pytest.raises(RuntimeError):
        cache.get()
    with pytest.raises(RuntimeError):
        cache.get()
    assert fetch.calls == 1

    fetch.error = None
    clock.advance(91)
    assert cache.get() == 2


def test_reset_forces_fetch(clock):
    fetch = Counter()
    cache = Cached(fetch, 90, clock=clock)
    cache.get()
    cache.reset()
    assert cache.expires_in() == 0
    assert cache.get() == 2


def test_expires_in_and_last_fetch(clock):
    cache = Cached(Counter(), 90, clock=clock)
    assert cache.last_fetch is None
    assert cache.expires_in() == 0
    cache.get()
    assert cache.last_fetch == clock.now
    clock.advance(30)
    assert cache.expires_in() == 60


def test_concurrent_gets_share_one_fetch():
    started = threading.Event()
    release = threading.Event()
    calls = []

    def fetch():
        calls.append(1)
        started.set()
        release.wait(5)
        return "homes"

    cache = Cached(fetch, 60)
    results = []
    threads = [threading.Thread(target=lambda: results.append(cache.get())) for _ in range(8)]
    for t in threads:
        t.start()
    started.wait(5)
    release.set()
    for t in threads:
        t.join(5)

    assert len(calls) == 1
    assert results == ["homes"] * 8


def test_reset_during_fetch_forces_refetch():
    started = threading.Event()
    release = threading.Event()
    reports = ["before-write", "after-write"]
    calls = []

    def fetch():
        calls.append(1)
        if len(calls) == 1:
            started.set()
            release.wait(5)
        return reports[len(calls) - 1]

    cache = Cached(fetch, 60)
    first = []
    worker = threading.Thread(target=lambda: first.append(cache.get()))
    worker.start()
    started.wait(5)
    cache.reset()
    release.set()
    worker.join(5)

    assert first == ["before-write"]
    assert cache.expires_in() == 0
    assert cache.get() == "after-write"
    assert len(calls) == 2


def test_cached_error_traceback_does_not_grow(clock):
    cache = Cached(Counter(error=RuntimeError("down")), 90, clock=clock)
    depths = []
    for _ in range(3):
        with pytest.raises(RuntimeError) as exc_info:
            cache.get()
        depths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))
    assert depths[1] == depths[2]
