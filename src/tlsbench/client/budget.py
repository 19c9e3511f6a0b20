"""Failure budget for the load client."""

from __future__ import annotations

import threading


class ErrorBudget:
    """Counts failed attempts; new work stops once ``max_errors`` is reached."""

    def __init__(self, max_errors: int) -> None:
        if max_errors < 0:
            raise ValueError(f"max_errors must be >= 0, got {max_errors}")
        self.max_errors = max_errors
        self._lock = threading.Lock()
        self._count = 0

    def record(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def exhausted(self) -> bool:
        return self.count >= self.max_errors
