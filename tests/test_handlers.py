"""Tests for the server routes (no network, in-process ASGI client)."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from tlsbench.errors import StartupError
from tlsbench.server.handlers import GREETING, create_app, fill, zero_source
from tlsbench.server.writers import ByteTotal, CappedWriter


@pytest.fixture
def total() -> ByteTotal:
    return ByteTotal()


@pytest.fixture
def client(total, small_settings) -> TestClient:
    return TestClient(create_app(total, small_settings))


def test_root_greets(client, total):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == GREETING
    assert response.headers["content-type"].startswith("text/html")
    assert total.value == 0


def test_fixed_cap_route_sends_and_counts_exactly_the_cap(client, total):
    response = client.get("/dls")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"
    assert len(response.content) == 10_000
    assert response.content == bytes(10_000)
    assert total.value == 10_000


def test_random_cap_route_stays_in_range(client, total):
    sizes = [len(client.get("/dlsr").content) for _ in range(5)]
    assert all(1_000 <= size <= 5_000 for size in sizes)
    assert total.value == sum(sizes)


def test_zero_route_is_not_counted(client, total):
    response = client.get("/dlz")
    assert response.status_code == 200
    assert response.content == bytes(64)
    assert total.value == 0


def test_missing_zero_device_is_a_startup_error(total, small_settings, tmp_path):
    broken = small_settings.model_copy(update={"zero_device": str(tmp_path / "nope")})
    with pytest.raises(StartupError):
        create_app(total, broken)


def test_unlimited_fill_stops_on_transport_failure(make_sink):
    """The /dl producer writes until the connection gives out."""
    sink = make_sink(accept_limit=5 * 4096 + 100)
    asyncio.run(fill(4096)(sink, None))
    assert len(sink.data) == 5 * 4096 + 100
    assert sink.writes == 6


def test_zero_source_stops_at_cap(make_sink):
    sink = make_sink()
    asyncio.run(zero_source("/dev/zero", 1024)(CappedWriter(sink, 3000), None))
    assert bytes(sink.data) == bytes(3000)
