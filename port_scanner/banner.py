from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Tuple, Union

UNKNOWN = "Unknown"

Fingerprint = Tuple[str, Optional[str]]
Matcher = Callable[[str], Fingerprint]

_DOTTED = re.compile(r"\d+(?:\.\d+)+")
_SSH = re.compile(r"SSH-\d+\.\d+-[\w.-]+")
_IMAP = re.compile(r"IMAP\d+[\w.-]+")
_APACHE = re.compile(r"Apache/[\d.]+")
_NGINX = re.compile(r"nginx/[\d.]+")
_MAJOR_MINOR = re.compile(r"\d+\.\d+")
_MAJOR_MINOR_PATCH = re.compile(r"\d+\.\d+\.\d+")

_UNMATCHED: Fingerprint = (UNKNOWN, None)


def decode_banner(data: bytes) -> str:
    """Lossy UTF-8 decode; invalid sequences become U+FFFD."""
    return data.decode("utf-8", errors="replace")


def extract_version(response: str, pattern: Union[str, re.Pattern]) -> Optional[str]:
    """
    Return the first full match of `pattern` in `response`, or None.
    """
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    m = pattern.search(response)
    return m.group(0) if m else None


def _contains_all(response: str, *markers: str) -> bool:
    return all(m in response for m in markers)


def _detect_ftp(response: str) -> Fingerprint:
    if _contains_all(response, "220", "FTP"):
        return "FTP", extract_version(response, _DOTTED)
    return _UNMATCHED


def _detect_ssh(response: str) -> Fingerprint:
    if "SSH" in response:
        return "SSH", extract_version(response, _SSH)
    return _UNMATCHED


def _detect_smtp(response: str) -> Fingerprint:
    if _contains_all(response, "220", "SMTP"):
        return "SMTP", extract_version(response, _DOTTED)
    return _UNMATCHED


def _detect_dns(response: str) -> Fingerprint:
    if response.startswith("\x00\x00"):
        return "DNS", None
    return _UNMATCHED


def _web_server(response: str, apache: str, nginx: str, plain: str) -> Fingerprint:
    # Apache wins over nginx when both appear (e.g. proxied responses)
    if "Apache" in response:
        return apache, extract_version(response, _APACHE)
    if "nginx" in response:
        return nginx, extract_version(response, _NGINX)
    return plain, None


def _detect_http(response: str) -> Fingerprint:
    if "HTTP" in response:
        return _web_server(response, "Apache HTTP", "nginx", "HTTP")
    return _UNMATCHED


def _detect_https(response: str) -> Fingerprint:
    if _contains_all(response, "HTTP", "SSL"):
        return _web_server(response, "Apache HTTPS", "nginx (SSL)", "HTTPS")
    return _UNMATCHED


def _detect_pop3(response: str) -> Fingerprint:
    if _contains_all(response, "+OK", "POP3"):
        return "POP3", extract_version(response, _DOTTED)
    return _UNMATCHED


def _detect_imap(response: str) -> Fingerprint:
    if _contains_all(response, "* OK", "IMAP"):
        return "IMAP", extract_version(response, _IMAP)
    return _UNMATCHED


def _detect_smtps(response: str) -> Fingerprint:
    if _contains_all(response, "220", "SMTPS"):
        return "SMTPS", extract_version(response, _DOTTED)
    return _UNMATCHED


def _detect_imaps(response: str) -> Fingerprint:
    if _contains_all(response, "* OK", "IMAP", "SSL"):
        return "IMAPS", extract_version(response, _IMAP)
    return _UNMATCHED


def _detect_pop3s(response: str) -> Fingerprint:
    if _contains_all(response, "+OK", "POP3", "SSL"):
        return "POP3S", extract_version(response, _DOTTED)
    return _UNMATCHED


def _detect_pptp(response: str) -> Fingerprint:
    if response.startswith("\x00\x00\x00\x00"):
        return "PPTP", None
    return _UNMATCHED


def _detect_mysql(response: str) -> Fingerprint:
    """
    Fixed 4-byte prefix, then the server version somewhere after it.
    """
    if response.startswith("\x0a\x00\x00\x01"):
        return "MySQL", extract_version(response, _MAJOR_MINOR_PATCH)
    return _UNMATCHED


def _detect_rdp(response: str) -> Fingerprint:
    # TPKT header of an X.224 connection confirm
    if response.startswith("\x03\x00\x00\x13"):
        return "RDP", None
    return _UNMATCHED


def _detect_postgres(response: str) -> Fingerprint:
    if response.startswith("\x00\x00\x00\x08"):
        return "PostgreSQL", extract_version(response, _MAJOR_MINOR)
    return _UNMATCHED


def _detect_vnc(response: str) -> Fingerprint:
    if response.startswith("RFB "):
        return "VNC", extract_version(response, _MAJOR_MINOR)
    return _UNMATCHED


def _detect_redis(response: str) -> Fingerprint:
    if "+PONG" in response:
        return "Redis", None
    return _UNMATCHED


MATCHERS: Dict[int, Matcher] = {
    21: _detect_ftp,
    22: _detect_ssh,
    25: _detect_smtp,
    53: _detect_dns,
    80: _detect_http,
    110: _detect_pop3,
    143: _detect_imap,
    443: _detect_https,
    465: _detect_smtps,
    993: _detect_imaps,
    995: _detect_pop3s,
    1723: _detect_pptp,
    3306: _detect_mysql,
    3389: _detect_rdp,
    5432: _detect_postgres,
    5900: _detect_vnc,
    5901: _detect_vnc,
    6379: _detect_redis,
    8080: _detect_http,
    8443: _detect_https,
}


def identify_service(port: int, response: str) -> Fingerprint:
    """
    Classify a decoded banner by the port it came from.
    Returns (service, version); never raises for any input.
    """
    matcher = MATCHERS.get(port)
    if matcher is None:
        return _UNMATCHED
    return matcher(response)
