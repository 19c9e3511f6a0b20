"""Bounded pool of long-lived and short-lived download workers.

Long-lived workers: exactly ``long_conns`` downloads started up front, each
run once to completion. Short-lived workers: an open-ended stream of one-shot
downloads, dispatched while the error budget holds. Both classes share one
semaphore of ``long_conns + short_conns`` slots, so no more than that many
downloads are ever in flight.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from tlsbench.client.budget import ErrorBudget
from tlsbench.client.fetch import download

logger = structlog.get_logger()

DEFAULT_MAX_ERRORS = 10

DownloadFn = Callable[[str], int]


@dataclass
class DriverStats:
    long_attempts: int = 0
    short_attempts: int = 0
    failures: int = 0
    bytes_received: int = 0
    peak_in_flight: int = 0

    @property
    def attempts(self) -> int:
        return self.long_attempts + self.short_attempts


class ConnectionDriver:
    def __init__(
        self,
        long_url: str,
        short_url: str,
        *,
        long_conns: int,
        short_conns: int,
        max_errors: int = DEFAULT_MAX_ERRORS,
        download_fn: DownloadFn = download,
    ) -> None:
        if long_conns < 0 or short_conns < 0:
            raise ValueError("connection counts must be >= 0")
        self.long_url = long_url
        self.short_url = short_url
        self.long_conns = long_conns
        self.short_conns = short_conns
        self.errors = ErrorBudget(max_errors)
        self.download_fn = download_fn
        self.stats = DriverStats()

        self._slots = threading.BoundedSemaphore(long_conns + short_conns)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._outstanding = 0
        self._in_flight = 0

    @property
    def ceiling(self) -> int:
        return self.long_conns + self.short_conns

    def stop(self) -> None:
        """Stop admitting short-lived workers; running downloads finish."""
        self._stop.set()

    def run(self) -> DriverStats:
        """Dispatch both worker classes and wait for every started download."""
        try:
            for _ in range(self.long_conns):
                self._slots.acquire()
                self._dispatch(self.long_url, long_lived=True)
            if self.short_conns > 0:
                self._admit_short_lived()
        except KeyboardInterrupt:
            logger.warning("Interrupted, waiting for running downloads", in_flight=self._in_flight)
            self.stop()
        self.wait()
        return self.stats

    def wait(self) -> None:
        with self._idle:
            while self._outstanding:
                self._idle.wait()

    def _admit_short_lived(self) -> None:
        while not self.errors.exhausted and not self._stop.is_set():
            if not self._acquire_slot():
                break
            # A failure may have used up the budget while we waited for the slot.
            if self.errors.exhausted:
                self._slots.release()
                break
            self._dispatch(self.short_url, long_lived=False)
        logger.info("Short-lived admission stopped", errors=self.errors.count, stopped=self._stop.is_set())

    def _acquire_slot(self) -> bool:
        while not self._stop.is_set():
            if self._slots.acquire(timeout=0.1):
                return True
        return False

    def _dispatch(self, url: str, *, long_lived: bool) -> None:
        with self._lock:
            self._outstanding += 1
            if long_lived:
                self.stats.long_attempts += 1
                name = f"long-{self.stats.long_attempts}"
            else:
                self.stats.short_attempts += 1
                name = f"short-{self.stats.short_attempts}"
        thread = threading.Thread(target=self._attempt, args=(url,), name=name, daemon=True)
        thread.start()

    def _attempt(self, url: str) -> None:
        with self._lock:
            self._in_flight += 1
            self.stats.peak_in_flight = max(self.stats.peak_in_flight, self._in_flight)
        try:
            received = self.download_fn(url)
        except Exception as exc:
            count = self.errors.record()
            logger.warning("Download failed", url=url, error=str(exc), errors=count)
            with self._lock:
                self.stats.failures += 1
        else:
            with self._lock:
                self.stats.bytes_received += received
        finally:
            with self._idle:
                self._in_flight -= 1
                self._outstanding -= 1
                self._idle.notify_all()
            self._slots.release()
