"""Tests for the bandwidth console line."""

import pytest
from rich.console import Console

from tlsbench.server.report import BandwidthReporter
from tlsbench.server.writers import ByteTotal


def test_tick_reports_total_and_rate():
    total = ByteTotal()
    reporter = BandwidthReporter(total, console=Console(quiet=True))

    total.add(1_000_000)
    assert reporter.tick() == "bandwidth: 976.6KiB\t8Mbits/s"

    assert reporter.tick() == "bandwidth: 976.6KiB\t0bits/s"


def test_rate_uses_interval():
    total = ByteTotal()
    reporter = BandwidthReporter(total, console=Console(quiet=True), interval=2.0)
    total.add(250_000)
    assert reporter.tick().endswith("\t1Mbits/s")


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        BandwidthReporter(ByteTotal(), interval=0)
