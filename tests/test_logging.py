from __future__ import annotations

import csv
import io
import json
from pathlib import Path

import pytest

from prnglab.app import PrngLabApp
from prnglab.logging import LOG_FIELDNAMES, log_run_result, trim_log


def test_log_run_result_appends_jsonl(tmp_path: Path, make_run_result) -> None:
    report_path = tmp_path / "report.md"
    result = make_run_result()

    log_file = log_run_result(result, report_path, log_path=tmp_path / "log.jsonl", fmt="jsonl")

    assert log_file.exists()
    payload = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert len(payload) == 1
    entry = json.loads(payload[0])
    assert entry["verdict"] == "PASS"
    assert entry["source"] == "generator:lcg"
    assert entry["entries"] == 3
    assert entry["passed"] == 1
    assert entry["not_evaluable"] == 1
    assert entry["report_path"] == str(report_path)


def test_log_run_result_without_report(tmp_path: Path, make_run_result) -> None:
    log_file = log_run_result(make_run_result(), None, log_path=tmp_path / "log.jsonl")

    entry = json.loads(log_file.read_text(encoding="utf-8"))
    assert entry["report_path"] == ""


def test_log_run_result_enforces_jsonl_retention(tmp_path: Path, make_run_result) -> None:
    log_path = tmp_path / "history.jsonl"
    report_path = tmp_path / "report.md"

    for idx in range(5):
        result = make_run_result(idx=idx)
        log_run_result(result, report_path, log_path=log_path, fmt="jsonl", retention=3)

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 3
    timestamps = [json.loads(line)["timestamp"] for line in lines]
    assert timestamps == sorted(timestamps)


def test_log_run_result_supports_csv(tmp_path: Path, make_run_result) -> None:
    report_path = tmp_path / "report.md"
    log_path = tmp_path / "runs.csv"
    result = make_run_result(passed=False)

    log_run_result(result, report_path, log_path=log_path, fmt="csv", retention=5)

    with log_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert tuple(rows[0].keys()) == LOG_FIELDNAMES
    assert len(rows) == 1
    assert rows[0]["verdict"] == "FAIL"


def test_log_run_result_enforces_csv_retention(tmp_path: Path, make_run_result) -> None:
    report_path = tmp_path / "report.md"
    log_path = tmp_path / "runs.csv"

    for idx in range(6):
        result = make_run_result(idx=idx)
        log_run_result(result, report_path, log_path=log_path, fmt="csv", retention=2)

    content = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(content) == 3  # header + two retained rows
    timestamps = [row.split(",")[0] for row in content[1:]]
    assert timestamps == sorted(timestamps)


def test_log_run_result_rejects_unknown_format(tmp_path: Path, make_run_result) -> None:
    with pytest.raises(ValueError):
        log_run_result(make_run_result(), None, log_path=tmp_path / "log.xml", fmt="xml")


def test_log_record_carries_sample_counts(tmp_path: Path) -> None:
    config_path = tmp_path / "config.ini"
    config_path.write_text(
        "[generator]\nalgorithm = lcg\nseeds = 7\nmultiplier = 5\nincrement = 3\nmodulus = 16\n\n"
        "[distribution]\nname = exponential\nparams = 1\n\n"
        "[output]\nlog_results = true\nlog_format = csv\nlog_path = runs.csv\n",
        encoding="utf-8",
    )

    PrngLabApp(stream=io.StringIO()).run(config_path=config_path, report_path=tmp_path / "report.md")

    with (tmp_path / "runs.csv").open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["distribution"] == "Exponential"
    assert rows[0]["samples"] == "15"
    assert rows[0]["rejected_uniforms"] == "1"


def test_trim_log_keeps_every_record_below_limit(tmp_path: Path) -> None:
    path = tmp_path / "log.jsonl"
    path.write_text('{"n": 1}\n{"n": 2}\n', encoding="utf-8")

    trim_log(path, 5)

    assert path.read_text(encoding="utf-8").splitlines() == ['{"n": 1}', '{"n": 2}']
    with pytest.raises(ValueError):
        trim_log(path, 1, fmt="xml")
