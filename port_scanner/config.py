from __future__ import annotations

from dataclasses import dataclass

DEFAULT_START_PORT = 1
DEFAULT_END_PORT = 1024
DEFAULT_THREADS = 1000
DEFAULT_TIMEOUT_MS = 750
DEFAULT_FORMAT = "text"
FORMATS = ("text", "json", "csv")

# single recv() per open port
READ_SIZE = 1024


@dataclass(frozen=True)
class ScanConfig:
    target: str
    start_port: int = DEFAULT_START_PORT
    end_port: int = DEFAULT_END_PORT
    threads: int = DEFAULT_THREADS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    fmt: str = DEFAULT_FORMAT
    progress_every: int = 0

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0
