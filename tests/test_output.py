import csv
import io
import json
import os

import pytest

from port_scanner.models import ScanReport, ScanResult
from port_scanner.output import format_row, print_results, render, save_results, summary_line

RESULTS = [
    ScanResult(target="10.0.0.1", port=6379, service="Redis"),
    ScanResult(target="10.0.0.1", port=21, service="FTP", version="3.4.1"),
]


def _report(results=RESULTS):
    return ScanReport(
        target="10.0.0.1",
        start_port=1,
        end_port=10000,
        total_ports=10000,
        elapsed_s=1.234,
        results=list(results),
    )


def test_text_row():
    assert format_row(RESULTS[1]) == (
        "Target: 10.0.0.1, Port: 21, Status: open, Service: FTP, Version: 3.4.1"
    )
    assert format_row(RESULTS[0]).endswith("Service: Redis, Version: None")


def test_text_keeps_completion_order():
    lines = render(RESULTS, "text").splitlines()
    assert [line.split(", ")[1] for line in lines] == ["Port: 6379", "Port: 21"]


def test_json_payload():
    payload = json.loads(render(RESULTS, "json"))
    assert payload[0] == {
        "target": "10.0.0.1",
        "port": 6379,
        "status": "open",
        "service": "Redis",
        "version": None,
    }
    assert payload[1]["version"] == "3.4.1"


def test_csv_rows():
    rows = list(csv.DictReader(io.StringIO(render(RESULTS, "csv"))))
    assert rows[0] == {"target": "10.0.0.1", "port": "6379", "status": "open", "service": "Redis", "version": ""}
    assert rows[1]["version"] == "3.4.1"


def test_empty_results():
    assert render([], "text") == ""
    assert json.loads(render([], "json")) == []
    assert render([], "csv") == "target,port,status,service,version\n"


def test_unknown_format():
    with pytest.raises(ValueError):
        render(RESULTS, "html")


def test_print_results_ends_with_summary(capsys):
    print_results(_report(), "text")
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 3
    assert out[-1] == "Scanned 10000 ports in 1.23 seconds!"
    assert summary_line(_report([])) == out[-1]


@pytest.mark.parametrize("fmt,ext", [("text", "txt"), ("json", "json"), ("csv", "csv")])
def test_save_results(tmp_path, fmt, ext):
    path = save_results(_report(), fmt, out_dir=str(tmp_path / "scans"))
    assert path.endswith(f"_port_scan.{ext}")
    assert os.path.dirname(path) == str(tmp_path / "scans")
    with open(path, encoding="utf-8") as f:
        assert f.read() == render(RESULTS, fmt)
