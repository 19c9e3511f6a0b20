"""Pytest fixtures for tlsbench tests."""

import pytest

from tlsbench.config import Settings
from tlsbench.errors import SinkWriteError


class RecordingSink:
    """In-memory sink; with ``accept_limit`` it fails once that many bytes are in."""

    def __init__(self, accept_limit: int | None = None) -> None:
        self.data = bytearray()
        self.writes = 0
        self.accept_limit = accept_limit

    async def write(self, data: bytes) -> int:
        self.writes += 1
        if self.accept_limit is not None and len(self.data) + len(data) > self.accept_limit:
            taken = self.accept_limit - len(self.data)
            self.data += data[:taken]
            raise SinkWriteError("connection reset by peer", written=taken)
        self.data += data
        return len(data)


@pytest.fixture
def make_sink():
    """Factory for recording sinks."""
    return RecordingSink


@pytest.fixture
def small_settings(tmp_path) -> Settings:
    """Settings with caps small enough to stream through a test client."""
    zero = tmp_path / "zero"
    zero.write_bytes(bytes(64))
    return Settings(
        fixed_cap_bytes=10_000,
        random_cap_min_bytes=1_000,
        random_cap_max_bytes=5_000,
        chunk_bytes=4_096,
        short_chunk_bytes=3_000,
        zero_device=str(zero),
        tls_certfile=str(tmp_path / "missing.crt"),
        tls_keyfile=str(tmp_path / "missing.key"),
    )
