"""Response writers that count, cap, and randomize the bytes a response sends."""

from __future__ import annotations

import random
import threading

from tlsbench.errors import EndOfStream, SinkWriteError
from tlsbench.server.sink import Sink


class ByteTotal:
    """Running total of bytes sent, shared by every counted response."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def add(self, nbytes: int) -> None:
        if nbytes <= 0:
            return
        with self._lock:
            self._value += nbytes

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ByteCounter:
    """Forwards writes unchanged and tallies the bytes the sink accepted."""

    def __init__(self, sink: Sink, total: ByteTotal) -> None:
        self.sink = sink
        self.total = total
        self.nbytes = 0

    def _count(self, nbytes: int) -> None:
        self.nbytes += nbytes
        self.total.add(nbytes)

    async def write(self, data: bytes) -> int:
        try:
            written = await self.sink.write(data)
        except SinkWriteError as exc:
            self._count(exc.written)
            raise
        self._count(written)
        return written


class CappedWriter:
    """Forwards at most ``budget`` bytes, then signals end of stream.

    A write that crosses the budget is truncated; the excess is dropped, not
    buffered. Once nothing remains every write raises ``EndOfStream``.
    """

    def __init__(self, sink: Sink, budget: int) -> None:
        if budget < 0:
            raise ValueError(f"budget must be >= 0, got {budget}")
        self.sink = sink
        self.remaining = budget

    async def write(self, data: bytes) -> int:
        if self.remaining <= 0:
            raise EndOfStream("response budget exhausted")
        if len(data) > self.remaining:
            data = data[: self.remaining]
        try:
            written = await self.sink.write(data)
        except SinkWriteError as exc:
            self.remaining -= exc.written
            raise
        self.remaining -= written
        return written


class RandomCapPolicy:
    """Draws a per-response byte cap uniformly from ``[low, high]``."""

    def __init__(self, low: int, high: int, rng: random.Random | None = None) -> None:
        if low < 0:
            raise ValueError(f"low must be >= 0, got {low}")
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        self.low = low
        self.high = high
        self._rng = rng or random.Random()

    def draw(self) -> int:
        return self._rng.randint(self.low, self.high)
