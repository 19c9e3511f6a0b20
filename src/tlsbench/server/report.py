"""Once-a-second console line with the bytes sent so far and the current rate."""

from __future__ import annotations

import asyncio

from rich.console import Console

from tlsbench.server.writers import ByteTotal
from tlsbench.units import TO_BITS, bitrate_str, bytes_size


class BandwidthReporter:
    def __init__(self, total: ByteTotal, console: Console | None = None, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.total = total
        self.console = console or Console()
        self.interval = interval
        self._prev = 0

    def tick(self) -> str:
        """Render the line for one interval and remember the total for the next."""
        current = self.total.value
        rate = (current - self._prev) * TO_BITS / self.interval
        self._prev = current
        return f"bandwidth: {bytes_size(current)}\t{bitrate_str(rate)}/s"

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            line = self.tick()
            self.console.print(" " * 42, end="\r", markup=False, highlight=False)
            self.console.print(line, end="\r", markup=False, highlight=False)
