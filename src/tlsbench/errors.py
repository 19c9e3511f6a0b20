"""Exception types shared by the server and the load client."""

from __future__ import annotations


class TlsBenchError(Exception):
    """Base class for tlsbench errors."""


class EndOfStream(EOFError, TlsBenchError):
    """A capped sink has no budget left.

    Not a failure: producers stop their write loop when they see it.
    """


class SinkWriteError(OSError, TlsBenchError):
    """The transport under a sink failed.

    ``written`` is how many bytes of the failed write were accepted before the
    failure, so wrappers can account for short writes.
    """

    def __init__(self, message: str, written: int = 0) -> None:
        super().__init__(message)
        self.written = written


class StartupError(TlsBenchError):
    """Fatal bootstrap failure (bad URL, missing certificate, no zero device)."""
