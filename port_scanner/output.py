from __future__ import annotations

import csv
import io
import json
import os
from datetime import datetime
from typing import List

from .models import ScanReport, ScanResult

CSV_FIELDS = ["target", "port", "status", "service", "version"]
_EXTENSIONS = {"text": "txt", "json": "json", "csv": "csv"}


def format_row(r: ScanResult) -> str:
    return (
        f"Target: {r.target}, Port: {r.port}, Status: {r.status}, "
        f"Service: {r.service}, Version: {r.version}"
    )


def render_text(results: List[ScanResult]) -> str:
    return "".join(format_row(r) + "\n" for r in results)


def render_json(results: List[ScanResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2) + "\n"


def render_csv(results: List[ScanResult]) -> str:
    buf = io.StringIO()
    w = csv.DictWriter(buf, fieldnames=CSV_FIELDS, lineterminator="\n")
    w.writeheader()
    for r in results:
        w.writerow({k: ("" if v is None else v) for k, v in r.to_dict().items()})
    return buf.getvalue()


def render(results: List[ScanResult], fmt: str) -> str:
    """
    Results are rendered in the order given (scan completion order).
    """
    if fmt == "text":
        return render_text(results)
    if fmt == "json":
        return render_json(results)
    if fmt == "csv":
        return render_csv(results)
    raise ValueError(f"Unsupported format: {fmt}")


def summary_line(report: ScanReport) -> str:
    return f"Scanned {report.total_ports} ports in {report.elapsed_s:.2f} seconds!"


def print_results(report: ScanReport, fmt: str) -> None:
    print(render(report.results, fmt), end="")
    print(summary_line(report))


def save_results(report: ScanReport, fmt: str, out_dir: str = "PortScans") -> str:
    if fmt not in _EXTENSIONS:
        raise ValueError(f"Unsupported format: {fmt}")

    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_scan.{_EXTENSIONS[fmt]}")

    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(render(report.results, fmt))
    return path
