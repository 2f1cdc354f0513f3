from __future__ import annotations

import argparse
import logging

from .config import (
    DEFAULT_END_PORT,
    DEFAULT_FORMAT,
    DEFAULT_START_PORT,
    DEFAULT_THREADS,
    DEFAULT_TIMEOUT_MS,
    FORMATS,
    ScanConfig,
)
from .errors import MalformedInputError
from .logger import create_logger, log_event
from .output import print_results, save_results
from .ports import parse_port, validate_range
from .scanner import run_scan
from .targets import parse_target


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Concurrent TCP port scanner with service fingerprinting")
    p.add_argument("-t", "--target", required=True, help="Target IPv4 or IPv6 address")
    p.add_argument("-s", "--start-port", default=str(DEFAULT_START_PORT),
                   help=f"Starting port, inclusive (default: {DEFAULT_START_PORT})")
    p.add_argument("-e", "--end-port", default=str(DEFAULT_END_PORT),
                   help=f"Ending port, inclusive (default: {DEFAULT_END_PORT})")
    p.add_argument("-j", "--threads", type=int, default=DEFAULT_THREADS,
                   help=f"Max concurrent connection attempts (default: {DEFAULT_THREADS})")
    p.add_argument("-T", "--timeout", type=int, default=DEFAULT_TIMEOUT_MS,
                   help=f"Per-connection timeout in milliseconds (default: {DEFAULT_TIMEOUT_MS})")
    p.add_argument("-f", "--format", choices=FORMATS, default=DEFAULT_FORMAT,
                   help=f"Output format (default: {DEFAULT_FORMAT})")
    p.add_argument("--out-dir", help="Also save the report to a timestamped file in this directory")
    p.add_argument("--progress-every", type=int, default=0,
                   help="Progress update interval in ports (default: 0, off)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log each open port")
    return p


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    """
    Validates raw CLI values. Raises MalformedInputError before any scanning.
    """
    target = parse_target(args.target)
    start = parse_port(args.start_port)
    end = parse_port(args.end_port)
    validate_range(start, end)

    if args.threads < 1:
        raise MalformedInputError("--threads must be >= 1")
    if args.timeout < 0:
        raise MalformedInputError("--timeout must be >= 0")

    return ScanConfig(
        target=target,
        start_port=start,
        end_port=end,
        threads=args.threads,
        timeout_ms=args.timeout,
        fmt=args.format,
        progress_every=max(0, args.progress_every),
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except MalformedInputError as e:
        parser.error(str(e))

    logger = create_logger(logging.DEBUG if args.verbose else logging.INFO)

    report = run_scan(config, logger=logger)
    print_results(report, config.fmt)

    if args.out_dir:
        path = save_results(report, fmt=config.fmt, out_dir=args.out_dir)
        log_event(logger, "results_saved", {"path": path})

    return 0
