"""Producer decorators that shape a response: counting, capping, random caps.

A producer is ``async (sink, request) -> None``. Each decorator returns a new
producer that hands the wrapped one a decorated sink, so layers compose by
nesting. When a response is both capped and counted the counter wraps the cap:
producer -> ByteCounter -> CappedWriter -> network. The cap reports only the
bytes it forwarded, so the total never includes bytes it dropped.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request

from tlsbench.server.sink import Sink
from tlsbench.server.writers import ByteCounter, ByteTotal, CappedWriter, RandomCapPolicy
from tlsbench.units import bytes_size

logger = structlog.get_logger()

Producer = Callable[[Sink, Request], Awaitable[None]]


def stats(total: ByteTotal, producer: Producer) -> Producer:
    """Count every byte the wrapped producer gets onto the sink."""

    async def counted(sink: Sink, request: Request) -> None:
        await producer(ByteCounter(sink, total), request)

    return counted


def limit(nbytes: int, producer: Producer) -> Producer:
    """Cap each response at ``nbytes``."""

    async def limited(sink: Sink, request: Request) -> None:
        await producer(CappedWriter(sink, nbytes), request)

    return limited


def limit_random_between(policy: RandomCapPolicy, producer: Producer, *, verbose: bool = False) -> Producer:
    """Cap each response at a size drawn once from ``policy`` when it starts."""

    async def limited(sink: Sink, request: Request) -> None:
        budget = policy.draw()
        if verbose:
            logger.info("Will serve", size=bytes_size(budget), path=request.url.path)
        await producer(CappedWriter(sink, budget), request)

    return limited


def limit_with_stats(total: ByteTotal, nbytes: int, producer: Producer) -> Producer:
    return limit(nbytes, stats(total, producer))


def limit_random_between_stats(
    total: ByteTotal,
    policy: RandomCapPolicy,
    producer: Producer,
    *,
    verbose: bool = False,
) -> Producer:
    return limit_random_between(policy, stats(total, producer), verbose=verbose)
