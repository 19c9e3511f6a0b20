"""Plaintext and TLS listeners sharing one application and one byte total."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog
import uvicorn
from fastapi import FastAPI
from rich.console import Console

from tlsbench.config import Settings
from tlsbench.errors import StartupError
from tlsbench.server.handlers import create_app
from tlsbench.server.report import BandwidthReporter
from tlsbench.server.writers import ByteTotal

logger = structlog.get_logger()


def build_servers(app: FastAPI, settings: Settings, *, tls: bool = True) -> list[uvicorn.Server]:
    """Return the plaintext server and, when ``tls`` is set, the TLS server."""
    configs = [
        uvicorn.Config(
            app,
            host=settings.server_host,
            port=settings.http_port,
            log_level="warning",
            access_log=False,
        )
    ]
    if tls:
        for path in (settings.tls_certfile, settings.tls_keyfile):
            if not Path(path).is_file():
                raise StartupError(f"TLS file not found: {path}")
        configs.append(
            uvicorn.Config(
                app,
                host=settings.server_host,
                port=settings.https_port,
                ssl_certfile=settings.tls_certfile,
                ssl_keyfile=settings.tls_keyfile,
                log_level="warning",
                access_log=False,
            )
        )
    return [uvicorn.Server(config) for config in configs]


async def _run(servers: list[uvicorn.Server], reporter: BandwidthReporter) -> None:
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    report_task = asyncio.create_task(reporter.run())
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # One listener stopping (Ctrl-C or a failure) takes the others down.
        for server in servers:
            server.should_exit = True
        report_task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    for task in done:
        task.result()


def serve(settings: Settings, *, tls: bool = True, console: Console | None = None) -> ByteTotal:
    """Run the listeners until interrupted; returns the final byte total."""
    total = ByteTotal()
    app = create_app(total, settings)
    servers = build_servers(app, settings, tls=tls)
    reporter = BandwidthReporter(total, console=console, interval=settings.report_interval_seconds)

    logger.info(
        "Serving",
        host=settings.server_host,
        http_port=settings.http_port,
        https_port=settings.https_port if tls else None,
    )
    try:
        asyncio.run(_run(servers, reporter))
    except KeyboardInterrupt:
        # uvicorn re-raises the captured SIGINT after its graceful shutdown.
        logger.info("Server stopped", sent=total.value)
    return total
