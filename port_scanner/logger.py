import json
import logging
import sys
import time
from typing import Any, Dict

LOGGER_NAME = "port_scanner"


def create_logger(level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Prevent duplicate handlers if called more than once
    if logger.handlers:
        return logger

    # stdout belongs to the rendered report
    sh = logging.StreamHandler(sys.stderr)

    # We write JSON ourselves; keep formatter minimal
    sh.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(sh)
    return logger


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())


def log_event(logger: logging.Logger, event: str, fields: Dict[str, Any], level: int = logging.INFO) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.log(level, json.dumps(payload, ensure_ascii=False))
