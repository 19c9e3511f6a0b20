"""CLI entry point using Typer."""

from functools import partial

import structlog
import typer
from rich.console import Console
from rich.table import Table

from tlsbench.config import settings
from tlsbench.errors import StartupError
from tlsbench.units import bytes_size, parse_size

app = typer.Typer(
    name="tlsbench",
    help="TLS throughput bench - instrumented HTTP(S) server and load client.",
)
console = Console()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)


def _size_option(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return parse_size(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def serve(
    host: str = typer.Option(None, help="Listen address (default from settings)"),
    http_port: int = typer.Option(None, help="Plaintext port"),
    https_port: int = typer.Option(None, help="TLS port"),
    certfile: str = typer.Option(None, help="TLS certificate (PEM)"),
    keyfile: str = typer.Option(None, help="TLS private key (PEM)"),
    tls: bool = typer.Option(True, "--tls/--no-tls", help="Also serve over TLS"),
    fixed_cap: str = typer.Option(None, help="Cap for /dls, e.g. 5GiB"),
    random_min: str = typer.Option(None, help="Lower bound of the /dlsr cap, e.g. 3GiB"),
    random_max: str = typer.Option(None, help="Upper bound of the /dlsr cap, e.g. 20GiB"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log the cap drawn for each /dlsr response"),
) -> None:
    """Run the instrumented server on the plaintext and TLS listeners."""
    from tlsbench.server.serve import serve as run_server

    overrides = {
        "server_host": host,
        "http_port": http_port,
        "https_port": https_port,
        "tls_certfile": certfile,
        "tls_keyfile": keyfile,
        "fixed_cap_bytes": _size_option(fixed_cap),
        "random_cap_min_bytes": _size_option(random_min),
        "random_cap_max_bytes": _size_option(random_max),
        "verbose": verbose or None,
    }
    server_settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    try:
        total = run_server(server_settings, tls=tls, console=console)
    except (StartupError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    console.print(f"[bold green]Done![/bold green] Sent {bytes_size(total.value)}")


@app.command()
def load(
    url: str = typer.Option(None, "--url", "-u", help="Server base URL"),
    conns: int = typer.Option(1, "--conns", "-n", min=0, help="# of long-lived connections"),
    short: int = typer.Option(0, "--short", "--nshort", min=0, help="# of short-lived connections"),
    max_errors: int = typer.Option(None, help="Stop short-lived downloads after this many failures"),
    timeout: float = typer.Option(None, help="Per-request timeout in seconds (default: none)"),
) -> None:
    """Download from the server with long-lived and short-lived connections."""
    from tlsbench.client.driver import ConnectionDriver
    from tlsbench.client.fetch import download, join_url

    base = url or settings.target_url
    try:
        long_url = join_url(base, settings.long_path)
        short_url = join_url(base, settings.short_path)
    except StartupError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if timeout is None:
        timeout = settings.request_timeout_seconds
    driver = ConnectionDriver(
        long_url,
        short_url,
        long_conns=conns,
        short_conns=short,
        max_errors=settings.max_errors if max_errors is None else max_errors,
        download_fn=partial(download, timeout_seconds=timeout),
    )
    console.print(f"[bold blue]Downloading[/bold blue] {long_url} x{conns}, {short_url} x{short}")
    stats = driver.run()

    table = Table(title="Load Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Long-lived attempts", str(stats.long_attempts))
    table.add_row("Short-lived attempts", str(stats.short_attempts))
    table.add_row("Failures", str(stats.failures))
    table.add_row("Received", bytes_size(stats.bytes_received))
    table.add_row("Peak concurrency", str(stats.peak_in_flight))
    console.print(table)


if __name__ == "__main__":
    app()
