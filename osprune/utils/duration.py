"""Duration parsing for TTL options.

Durations use the compact ``1h30m`` notation: a sequence of decimal numbers,
each with a unit suffix (ns, us, µs, ms, s, m, h).
"""

from __future__ import annotations

import re
from datetime import timedelta

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """Parse a duration string such as ``7h``, ``30m12s`` or ``1.5h``.

    Args:
        value: Duration string

    Returns:
        Parsed duration

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("invalid duration: empty string")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)

    seconds = 0.0
    position = 0
    for match in _COMPONENT.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")

    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError as e:
        raise ValueError(f"invalid duration: {value!r} is out of range") from e


def format_duration(value: timedelta) -> str:
    """Format a duration in the same notation, e.g. ``7h0m0s``."""
    seconds = int(value.total_seconds())
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
