from __future__ import annotations

import logging
import socket
import sys
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from itertools import islice
from typing import Callable, Iterator, List, Optional

from .banner import decode_banner, identify_service
from .config import READ_SIZE, ScanConfig
from .logger import LOGGER_NAME, log_event
from .models import STATUS_OPEN, ScanReport, ScanResult, ScanTarget
from .probes import probe_for

# (ip, port, timeout_s) -> connected socket-like object; raises OSError on failure
Connector = Callable[[str, int, float], socket.socket]


def open_connection(target: str, port: int, timeout_s: float) -> socket.socket:
    # create_connection picks AF_INET / AF_INET6 from the address, and the
    # timeout stays on the socket for the write and read that follow
    return socket.create_connection((target, port), timeout=timeout_s)


def _send_probe(sock: socket.socket, probe: bytes) -> None:
    if not probe:
        return
    try:
        sock.sendall(probe)
    except OSError:
        pass


def _try_recv(sock: socket.socket, n: int = READ_SIZE) -> bytes:
    try:
        return sock.recv(n) or b""
    except OSError:
        return b""


def scan_port(
    target: str,
    port: int,
    timeout_s: float,
    connector: Connector = open_connection,
) -> Optional[ScanResult]:
    """
    Connect, write the port's probe, read once, fingerprint.

    Returns None when the connect fails or times out (closed and filtered
    ports look the same). Write/read failures after a successful connect
    still produce an "open" result, classified from whatever was read.
    """
    unit = ScanTarget(ip=target, port=port)
    try:
        sock = connector(unit.ip, unit.port, timeout_s)
    except OSError:
        return None

    try:
        _send_probe(sock, probe_for(unit.port))
        data = _try_recv(sock)
    finally:
        try:
            sock.close()
        except OSError:
            pass

    service, version = identify_service(unit.port, decode_banner(data))
    return ScanResult(
        target=unit.ip,
        port=unit.port,
        status=STATUS_OPEN,
        service=service,
        version=version,
    )


def iter_ports(start_port: int, end_port: int) -> Iterator[int]:
    return iter(range(start_port, end_port + 1))


def scan_range(
    target: str,
    start_port: int,
    end_port: int,
    concurrency: int,
    timeout_s: float,
    connector: Connector = open_connection,
    progress_every: int = 0,
    logger: Optional[logging.Logger] = None,
) -> List[ScanResult]:
    """
    Scan every port in [start_port, end_port] with at most `concurrency`
    units in flight. Results come back in completion order.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1 (got {concurrency})")
    for p in (start_port, end_port):
        if p < 0 or p > 65535:
            raise ValueError(f"port out of range: {p}")

    logger = logger or logging.getLogger(LOGGER_NAME)
    total = max(0, end_port - start_port + 1)
    results: List[ScanResult] = []

    log_event(logger, "scan_start", {
        "target": target,
        "start_port": start_port,
        "end_port": end_port,
        "total_ports": total,
        "concurrency": concurrency,
        "timeout_s": timeout_s,
    })

    jobs = iter_ports(start_port, end_port)
    scanned = 0
    start_all = time.perf_counter()

    # submitted-but-unfinished ports stay under this, whatever the range size
    max_backlog = max(concurrency * 4, 100)

    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        pending = set()

        def top_up() -> None:
            for p in islice(jobs, max_backlog - len(pending)):
                pending.add(pool.submit(scan_port, target, p, timeout_s, connector))

        top_up()
        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                r = fut.result()
                scanned += 1
                if r is not None:
                    results.append(r)
                    log_event(logger, "port_open", r.to_dict(), level=logging.DEBUG)

                if progress_every > 0 and (scanned % progress_every == 0 or scanned == total):
                    elapsed = time.perf_counter() - start_all
                    rate = scanned / elapsed if elapsed > 0 else 0.0
                    print(
                        f"\r[*] Scanned {scanned}/{total} | open={len(results)} | {rate:.0f} scans/s",
                        end="",
                        file=sys.stderr,
                        flush=True,
                    )
            top_up()

    if progress_every > 0 and total:
        print(file=sys.stderr)

    log_event(logger, "scan_complete", {
        "target": target,
        "total_ports": scanned,
        "open_ports": len(results),
        "elapsed_s": round(time.perf_counter() - start_all, 4),
    })
    return results


def run_scan(
    config: ScanConfig,
    connector: Connector = open_connection,
    logger: Optional[logging.Logger] = None,
) -> ScanReport:
    """Scan the configured range and bundle the results with count and timing."""
    start = time.perf_counter()
    results = scan_range(
        target=config.target,
        start_port=config.start_port,
        end_port=config.end_port,
        concurrency=config.threads,
        timeout_s=config.timeout_s,
        connector=connector,
        progress_every=config.progress_every,
        logger=logger,
    )
    return ScanReport(
        target=config.target,
        start_port=config.start_port,
        end_port=config.end_port,
        total_ports=max(0, config.end_port - config.start_port + 1),
        elapsed_s=time.perf_counter() - start,
        results=results,
    )
