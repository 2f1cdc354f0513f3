from __future__ import annotations

import ipaddress

from .errors import MalformedInputError


def parse_target(target: str) -> str:
    """
    Supports:
      - IPv4: "172.20.0.10"
      - IPv6: "::1", "fe80::1"
    Returns the normalized address string.
    """
    target = target.strip()
    if not target:
        raise MalformedInputError("Empty target")

    # IPv6 literals are sometimes written in URL brackets
    if target.startswith("[") and target.endswith("]"):
        target = target[1:-1]

    try:
        return str(ipaddress.ip_address(target))
    except ValueError as e:
        raise MalformedInputError(f"Invalid target IP address '{target}'") from e
