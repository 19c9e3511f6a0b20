"""Paired load generator and instrumented HTTP(S) throughput server."""

__version__ = "0.1.0"
