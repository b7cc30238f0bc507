"""Parsing of renewal periods written as Go-style duration strings ("1h30m", "45s")."""

import re
from datetime import timedelta

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Largest duration Go accepts: int64 nanoseconds, about 2562047h47m16.85s
MAX_DURATION_SECONDS = (2**63 - 1) / 1e9

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration string such as "300ms", "1.5h" or "2h45m".

    A string is a sequence of decimal numbers, each with an optional
    fraction and a unit suffix, optionally preceded by a sign. "0" is
    accepted without a unit.

    Args:
        text: Duration string

    Returns:
        timedelta: Parsed duration

    Raises:
        ValueError: If the string is not a valid duration or exceeds
            MAX_DURATION_SECONDS
    """
    if not isinstance(text, str):
        raise ValueError(f"duration must be a string, got {type(text).__name__}")

    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")

    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration: {text!r}")

    seconds = 0.0
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        if not match:
            raise ValueError(f"invalid duration: {text!r}")
        seconds += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()

    if seconds > MAX_DURATION_SECONDS:
        raise ValueError(f"duration out of range: {text!r}")

    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError as e:
        raise ValueError(f"duration out of range: {text!r}") from e


def parse_positive_duration(text: str) -> timedelta:
    """Parse a duration and reject zero or negative values."""
    value = parse_duration(text)
    if value <= timedelta(0):
        raise ValueError(f"duration must be positive: {text!r}")
    return value


def format_duration(value: timedelta) -> str:
    """Render a timedelta back into the compact "1h30m" notation used in policy files."""
    total = value.total_seconds()
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, remainder = divmod(int(total), 3600)
    minutes, seconds = divmod(remainder, 60)
    fraction = total - int(total)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or fraction or not parts:
        if fraction:
            parts.append(f"{seconds + fraction:g}s")
        else:
            parts.append(f"{seconds}s")
    return sign + "".join(parts)
