from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

STATUS_OPEN = "open"


@dataclass(frozen=True)
class ScanTarget:
    ip: str
    port: int


@dataclass(frozen=True)
class ScanResult:
    target: str
    port: int
    status: str = STATUS_OPEN
    service: Optional[str] = None
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScanReport:
    target: str
    start_port: int
    end_port: int
    total_ports: int
    elapsed_s: float
    results: List[ScanResult] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return len(self.results)
