"""
Payloads written right after connect, keyed by port.

Ports not listed here get an empty probe: connect, send nothing, read once.
"""
from typing import Dict

_HTTP_GET = b"GET / HTTP/1.1\r\nHost: example.com\r\n\r\n"
_QUIT = b"QUIT\r\n"
_IMAP_LOGOUT = b"a1 LOGOUT\r\n"
_RFB = b"RFB 003.008\n"

PROBES: Dict[int, bytes] = {
    21: _QUIT,
    22: b"SSH-2.0-OpenSSH_7.4p1 Debian-10+deb9u7\r\n",
    25: b"HELO example.com\r\n",
    # bare DNS header, no questions
    53: b"\x00\x00\x10\x00\x00\x00\x00\x00\x00\x00\x00\x00",
    80: _HTTP_GET,
    110: _QUIT,
    143: _IMAP_LOGOUT,
    443: _HTTP_GET,
    465: _QUIT,
    993: _IMAP_LOGOUT,
    995: _QUIT,
    1723: b"\x00" * 8,
    3306: (
        b"\x0a\x00\x00\x01\x85\xa6\x03\x00\x00\x00\x00\x01\x08\x00\x00\x00"
        b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
    ),
    # X.224 connection request
    3389: b"\x03\x00\x00\x13\x0e\xe0\x00\x00\x00\x00\x00\x01\x00\x08\x00\x03\x00\x00\x00",
    # SSLRequest
    5432: b"\x00\x00\x00\x08\x04\xd2\x16\x2f",
    5900: _RFB,
    5901: _RFB,
    6379: b"PING\r\n",
    8080: _HTTP_GET,
    8443: _HTTP_GET,
}


def probe_for(port: int) -> bytes:
    return PROBES.get(port, b"")
