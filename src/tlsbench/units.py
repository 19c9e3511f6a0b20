"""Human-readable byte sizes and bit rates."""

from __future__ import annotations

import re

# Byte sizes (binary)
B = 1
KiB = 1 << 10
MiB = 1 << 20
GiB = 1 << 30
TiB = 1 << 40
PiB = 1 << 50
EiB = 1 << 60

# Bit rates (decimal)
BITS = 1
KBITS = 1000 * BITS
MBITS = 1000 * KBITS
GBITS = 1000 * MBITS
TBITS = 1000 * GBITS

TO_BITS = 8

BINARY_ABBRS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB"]
BITRATE_ABBRS = ["bits", "Kbits", "Mbits", "Gbits", "Tbits"]

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kmgtpe]?)(i?b?)\s*$", re.IGNORECASE)
_SIZE_MULTIPLIERS = {"": B, "k": KiB, "m": MiB, "g": GiB, "t": TiB, "p": PiB, "e": EiB}


def _size_and_unit(size: float, base: float, units: list[str]) -> tuple[float, str]:
    i = 0
    units_limit = len(units) - 1
    while size >= base and i < units_limit:
        size /= base
        i += 1
    return size, units[i]


def custom_size(fmt: str, size: float, base: float, units: list[str]) -> str:
    """Return a human-readable approximation of ``size`` using ``fmt``."""
    size, unit = _size_and_unit(size, base, units)
    return fmt % (size, unit)


def bytes_size(size: float) -> str:
    """Format a byte count with binary suffixes, e.g. ``"1.5GiB"``."""
    return custom_size("%.4g%s", size, 1024.0, BINARY_ABBRS)


def bitrate_str(size: float) -> str:
    """Format a bit count with decimal suffixes, e.g. ``"44Kbits"``, ``"2.5Mbits"``."""
    return custom_size("%.4g%s", size, 1000.0, BITRATE_ABBRS)


def parse_size(text: str) -> int:
    """Parse ``"5GiB"``, ``"20 gb"``, ``"512k"`` or ``"1024"`` into bytes.

    Suffixes are always binary: ``5GB`` and ``5GiB`` are both ``5 * 2**30``.
    """
    match = _SIZE_RE.match(text)
    if not match:
        raise ValueError(f"Invalid size: {text!r}")
    number, prefix, _ = match.groups()
    return int(float(number) * _SIZE_MULTIPLIERS[prefix.lower()])
