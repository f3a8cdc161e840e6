import logging
import threading
import time
from typing import Callable, Generic, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class Cached(Generic[T]):
    """
    Time bounded cache around a zero-argument fetch function.

    get() returns the stored result while it is younger than `duration`
    seconds and calls `fetch` otherwise. Errors raised by `fetch` are stored
    like values: every get() re-raises the same error until the entry
    expires or reset() is called, so a failing endpoint is not hammered.

    Only one fetch runs at a time per instance. Callers arriving while a
    fetch is in flight wait on the lock and then receive the result that
    fetch stored instead of starting their own request. A reset() during a
    fetch leaves the entry stale, so the next get() fetches again.

    Args:
        fetch (callable): Function returning a fresh value (may raise).
        duration (float): Freshness window in seconds.
        clock (callable, optional): Monotonic time source. Defaults to time.perf_counter.
        name (str, optional): Label used in log messages. Defaults to the fetch function name.
    """

    def __init__(self, fetch: Callable[[], T], duration: float,
                 clock: Callable[[], float] = time.perf_counter, name: Optional[str] = None):
        self.fetch = fetch
        self.duration = duration
        self.clock = clock
        self.name = name or getattr(fetch, '__name__', 'cache')
        self.api_lock = threading.Lock()  # held while a fetch is running
        self._state_lock = threading.Lock()  # guards the fields below
        self._value: Optional[T] = None
        self._error: Optional[Exception] = None
        self._error_tb = None  # traceback of the failed fetch
        self._fetched_at: Optional[float] = None
        self._generation = 0  # bumped by reset()

    @property
    def last_fetch(self) -> Optional[float]:
        return self._fetched_at

    def _is_fresh(self, now: float) -> bool:
        return self._fetched_at is not None and now - self._fetched_at < self.duration

    def _result(self) -> T:
        if self._error is not None:
            # Restart from the fetch traceback so repeated raises do not pile up frames
            raise self._error.with_traceback(self._error_tb)
        return self._value

    def get(self) -> T:
        with self.api_lock:
            with self._state_lock:
                if self._is_fresh(self.clock()):
                    log.debug(f" -- cache: Returning cached {self.name}")
                    return self._result()
                generation = self._generation
            log.debug(f" -- cache: Fetching {self.name}")
            value, error = None, None
            try:
                value = self.fetch()
            except Exception as exc:
                log.debug(f" -- cache: Fetching {self.name} failed - {repr(exc)}")
                error = exc
            with self._state_lock:
                if error is None:
                    self._value = value
                self._error = error
                self._error_tb = error.__traceback__ if error is not None else None
                if generation == self._generation:
                    self._fetched_at = self.clock()
                else:
                    # reset() ran during the fetch: the result may predate it
                    log.debug(f" -- cache: {self.name} was reset during fetch, keeping entry stale")
                return self._result()

    def reset(self):
        """Force the next get() to fetch, even when a fetch is running right now."""
        with self._state_lock:
            self._generation += 1
            self._fetched_at = None
        log.debug(f" -- cache: Reset {self.name}")

    def expires_in(self) -> float:
        """Seconds until the current entry goes stale (0 when stale or empty)."""
        with self._state_lock:
            if self._fetched_at is None:
                return 0.0
            return max(0.0, self.duration - (self.clock() - self._fetched_at))
