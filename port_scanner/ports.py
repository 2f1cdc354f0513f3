from __future__ import annotations

from .errors import MalformedInputError

MIN_PORT = 1
MAX_PORT = 65535


def parse_port(value: str) -> int:
    """
    Parses a single port number in 1-65535.
    """
    try:
        port = int(str(value).strip())
    except ValueError as e:
        raise MalformedInputError(f"Invalid port: {value!r}") from e
    if port < MIN_PORT or port > MAX_PORT:
        raise MalformedInputError(f"Invalid port: {port}")
    return port


def validate_range(start: int, end: int) -> None:
    if start > end:
        raise MalformedInputError(f"Invalid port range: {start}-{end} (start > end)")

