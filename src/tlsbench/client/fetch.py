"""Single download attempts against the server."""

from __future__ import annotations

import httpx
import structlog

from tlsbench.errors import StartupError

logger = structlog.get_logger()

USER_AGENT = "tlsbench/0.1"


def join_url(base: str, path: str) -> str:
    """Append ``path`` to the path of ``base``, e.g. ``http://h:1/x`` + ``dl``."""
    try:
        url = httpx.URL(base)
    except httpx.InvalidURL as exc:
        raise StartupError(f"failed to join url {base!r}: {exc}") from exc
    if not url.scheme or not url.host:
        raise StartupError(f"failed to join url {base!r}: missing scheme or host")
    joined = url.path.rstrip("/") + "/" + path.lstrip("/")
    return str(url.copy_with(path=joined))


def download(url: str, *, timeout_seconds: float | None = None) -> int:
    """GET ``url`` and discard the body; returns the number of body bytes read.

    Certificates are not verified so self-signed test servers work. Transport
    and read errors propagate to the caller.
    """
    with httpx.Client(
        verify=False,
        timeout=timeout_seconds,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        with client.stream("GET", url) as response:
            received = 0
            for chunk in response.iter_raw():
                received += len(chunk)
    logger.debug("Download finished", url=url, status=response.status_code, bytes=received)
    return received
