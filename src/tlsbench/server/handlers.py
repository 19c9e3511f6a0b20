"""Content producers and the route table of the instrumented server."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping

import anyio
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from starlette.types import Receive, Scope, Send

from tlsbench.config import Settings
from tlsbench.errors import EndOfStream, SinkWriteError, StartupError
from tlsbench.server.middleware import Producer, limit_random_between_stats, limit_with_stats, stats
from tlsbench.server.sink import ASGISink, Sink
from tlsbench.server.writers import ByteTotal, RandomCapPolicy

logger = structlog.get_logger()

GREETING = "Hello TLS server!\n"
OCTET_STREAM = "application/octet-stream"


def fill(chunk_size: int) -> Producer:
    """Producer writing zero-filled chunks until the sink stops taking them."""
    chunk = bytes(chunk_size)

    async def producer(sink: Sink, request: Request) -> None:
        while True:
            try:
                await sink.write(chunk)
            except EndOfStream:
                return
            except SinkWriteError as exc:
                logger.debug("Stream ended by transport", error=str(exc))
                return

    return producer


def zero_source(path: str, chunk_size: int) -> Producer:
    """Producer copying from a zero device until the sink stops taking bytes."""

    async def producer(sink: Sink, request: Request) -> None:
        async with await anyio.open_file(path, "rb") as source:
            while True:
                data = await source.read(chunk_size)
                if not data:
                    return
                try:
                    await sink.write(data)
                except (EndOfStream, SinkWriteError) as exc:
                    logger.debug("Zero copy ended", error=str(exc))
                    return

    return producer


class SinkResponse(Response):
    """Response whose body is pushed by a producer onto an ``ASGISink``."""

    def __init__(
        self,
        producer: Producer,
        request: Request,
        status_code: int = 200,
        headers: Mapping[str, str] | None = None,
        media_type: str | None = None,
    ) -> None:
        self.producer = producer
        self.request = request
        self.status_code = status_code
        self.media_type = self.media_type if media_type is None else media_type
        self.background = None
        self.init_headers(headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        sink = ASGISink(send)
        await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})

        async def watch_disconnect() -> None:
            while True:
                message = await receive()
                if message["type"] == "http.disconnect":
                    sink.disconnect()
                    return

        watcher = asyncio.create_task(watch_disconnect())
        try:
            await self.producer(sink, self.request)
            await sink.close()
        finally:
            watcher.cancel()


def _check_zero_device(path: str) -> None:
    if not os.access(path, os.R_OK):
        raise StartupError(f"cannot open zero source {path}")


def create_app(total: ByteTotal, settings: Settings) -> FastAPI:
    """Build the server application; every counted route adds to ``total``."""
    _check_zero_device(settings.zero_device)

    random_cap = RandomCapPolicy(settings.random_cap_min_bytes, settings.random_cap_max_bytes)
    unlimited = stats(total, fill(settings.chunk_bytes))
    capped = limit_with_stats(total, settings.fixed_cap_bytes, fill(settings.short_chunk_bytes))
    random_capped = limit_random_between_stats(
        total,
        random_cap,
        fill(settings.short_chunk_bytes),
        verbose=settings.verbose,
    )
    zeros = zero_source(settings.zero_device, settings.chunk_bytes)

    app = FastAPI(title="tlsbench", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.total = total

    @app.get("/", response_class=HTMLResponse)
    async def hello() -> str:
        return GREETING

    @app.get("/dl")
    async def dl(request: Request) -> Response:
        return SinkResponse(unlimited, request, media_type=OCTET_STREAM)

    @app.get("/dls")
    async def dls(request: Request) -> Response:
        return SinkResponse(capped, request, media_type=OCTET_STREAM)

    @app.get("/dlsr")
    async def dlsr(request: Request) -> Response:
        return SinkResponse(random_capped, request, media_type=OCTET_STREAM)

    @app.get("/dlz")
    async def dlz(request: Request) -> Response:
        return SinkResponse(zeros, request, media_type=OCTET_STREAM)

    return app
