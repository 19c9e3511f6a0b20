"""Tests for byte-size and bit-rate formatting."""

import pytest

from tlsbench.units import GBITS, GiB, KBITS, KiB, MBITS, MiB, TBITS, bitrate_str, bytes_size, parse_size


class TestBitrateStr:
    @pytest.mark.parametrize(
        ("bits", "expected"),
        [
            (4 * MBITS, "4Mbits"),
            (2 * MBITS + 500 * KBITS, "2.5Mbits"),
            (7 * GBITS, "7Gbits"),
            (1000 * MBITS, "1Gbits"),
        ],
    )
    def test_formats_decimal_units(self, bits, expected):
        assert bitrate_str(bits) == expected

    def test_zero(self):
        assert bitrate_str(0) == "0bits"

    def test_stays_in_largest_unit(self):
        """Values past the last suffix are not divided further."""
        assert bitrate_str(5000 * TBITS) == "5000Tbits"


class TestBytesSize:
    def test_binary_units(self):
        assert bytes_size(5 * GiB) == "5GiB"
        assert bytes_size(1536) == "1.5KiB"
        assert bytes_size(3 * MiB) == "3MiB"

    def test_below_one_kib(self):
        assert bytes_size(0) == "0B"
        assert bytes_size(1023) == "1023B"

    def test_four_significant_digits(self):
        assert bytes_size(1_000_000) == "976.6KiB"


class TestParseSize:
    def test_plain_bytes(self):
        assert parse_size("1024") == 1024
        assert parse_size("12b") == 12

    def test_binary_suffixes(self):
        assert parse_size("5GiB") == 5 * GiB
        assert parse_size("20 gb") == 20 * GiB
        assert parse_size("512k") == 512 * KiB
        assert parse_size("1.5KiB") == 1536

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_size("lots")
        with pytest.raises(ValueError):
            parse_size("5 xb")
