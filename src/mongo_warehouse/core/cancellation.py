"""Cooperative cancellation and deadlines for blocking retry loops."""

from __future__ import annotations

import signal
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from mongo_warehouse.core.logging import get_logger

logger = get_logger(module="cancellation")

Clock = Callable[[], float]


class CancellationToken:
    """A flag that can be set once and waited on."""

    def __init__(self, *sources: "CancellationToken") -> None:
        self._event = threading.Event()
        self._sources = sources

    @classmethod
    def any_of(cls, *tokens: "CancellationToken | None") -> "CancellationToken":
        """Return a token that reads as cancelled when any of ``tokens`` is."""

        return cls(*(token for token in tokens if token is not None))

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or any(source.cancelled for source in self._sources)

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    def wait(self, seconds: float, poll: float = 0.1) -> bool:
        """Sleep up to ``seconds``; return True early if cancelled."""

        end = time.monotonic() + seconds
        while not self.cancelled:
            remaining = end - time.monotonic()
            if remaining <= 0:
                return False
            # Sources are other events, so poll them in short slices.
            self._event.wait(min(remaining, poll) if self._sources else remaining)
        return True


# Cleared on shutdown; every connection loop watches it.
process_token = CancellationToken()

# Retry loops currently blocked on process_token.
_watchers = 0


@contextmanager
def watching_shutdown() -> Iterator[None]:
    """Mark a retry loop as active so a shutdown signal cancels it instead of raising."""

    global _watchers
    _watchers += 1
    try:
        yield
    finally:
        _watchers -= 1


def _handle_shutdown(signum: int, frame) -> None:
    process_token.cancel()
    if _watchers:
        logger.info("Received signal {signum}; cancelling pending connections", signum=signum)
        return
    if signum == signal.SIGINT:
        raise KeyboardInterrupt
    raise SystemExit(128 + signum)


def install_shutdown_handlers(signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)) -> None:
    """Route SIGINT/SIGTERM through ``process_token``.

    While a loop is inside ``watching_shutdown`` the signal only cancels it;
    otherwise SIGINT raises ``KeyboardInterrupt`` and SIGTERM exits as usual.
    """

    for signum in signals:
        signal.signal(signum, _handle_shutdown)


class Deadline:
    def __init__(self, end: float, clock: Clock = time.monotonic) -> None:
        self.end = end
        self._clock = clock

    @classmethod
    def after(cls, seconds: float, clock: Clock = time.monotonic) -> "Deadline":
        return cls(clock() + seconds, clock)

    @property
    def expired(self) -> bool:
        return self._clock() >= self.end

    def remaining(self) -> float:
        return max(0.0, self.end - self._clock())
