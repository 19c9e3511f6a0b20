"""The byte-sink capability shared by every response writer."""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from anyio.lowlevel import checkpoint
from starlette.types import Send

from tlsbench.errors import SinkWriteError

logger = structlog.get_logger()


class Sink(Protocol):
    """Accepts a buffer and returns how many bytes were taken.

    Implementations raise ``EndOfStream`` when they will take no more bytes
    and ``SinkWriteError`` when the transport underneath fails.
    """

    async def write(self, data: bytes) -> int: ...


class ASGISink:
    """Writes response body chunks through an ASGI ``send`` callable."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self.disconnected = False
        self.closed = False

    def disconnect(self) -> None:
        self.disconnected = True

    async def write(self, data: bytes) -> int:
        if self.disconnected or self.closed:
            raise SinkWriteError("client disconnected", written=0)
        message: dict[str, Any] = {"type": "http.response.body", "body": data, "more_body": True}
        try:
            await self._send(message)
        except OSError as exc:
            self.disconnected = True
            raise SinkWriteError(str(exc) or "send failed", written=0) from exc
        # uvicorn's send neither blocks nor raises once the peer is gone; yield
        # so the disconnect watcher and other connections get to run.
        await checkpoint()
        return len(data)

    async def close(self) -> None:
        if self.closed or self.disconnected:
            return
        self.closed = True
        try:
            await self._send({"type": "http.response.body", "body": b"", "more_body": False})
        except OSError as exc:
            self.disconnected = True
            logger.debug("Client gone before end of body", error=str(exc))
