"""Run history: one structured record per application run.

Records are appended as JSON Lines or CSV.  After each append the file is
trimmed to the newest ``retention`` records.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass
from datetime import timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Tuple

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .app import RunResult


LOG_FORMATS: Tuple[str, ...] = ("jsonl", "csv")
DEFAULT_LOG_PATH = Path("logs") / "run_log.jsonl"
DEFAULT_LOG_RETENTION = 100


@dataclass(frozen=True)
class RunLogRecord:
    """One line of the run history."""

    timestamp: str
    source: str
    entries: int
    verdict: str
    passed: int
    counted: int
    not_evaluable: int
    distribution: str
    samples: int
    rejected_uniforms: int
    report_path: str

    @classmethod
    def from_run_result(cls, result: "RunResult", report_path: Path | None) -> "RunLogRecord":
        samples = result.samples
        return cls(
            timestamp=result.started_at.astimezone(timezone.utc).isoformat(),
            source=result.source,
            entries=result.total_entries,
            verdict=result.verdict_label,
            passed=result.passed_count,
            counted=result.counted,
            not_evaluable=sum(len(summary.not_evaluable) for summary in result.batteries),
            distribution=samples.distribution if samples is not None else "",
            samples=len(samples.values) if samples is not None else 0,
            rejected_uniforms=samples.rejected if samples is not None else 0,
            report_path=str(report_path) if report_path is not None else "",
        )


LOG_FIELDNAMES: Tuple[str, ...] = tuple(RunLogRecord.__dataclass_fields__)


def log_run_result(
    result: "RunResult",
    report_path: Path | None,
    *,
    log_path: Path | None = None,
    fmt: str = "jsonl",
    retention: int | None = DEFAULT_LOG_RETENTION,
) -> Path:
    """Append ``result`` to the run history and return the log file path."""

    writer = _WRITERS.get(fmt.lower())
    if writer is None:
        raise ValueError(f"Unsupported log format: {fmt}")
    target = Path(log_path if log_path is not None else DEFAULT_LOG_PATH).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    writer(target, RunLogRecord.from_run_result(result, report_path))
    if retention is not None and retention > 0:
        trim_log(target, retention, fmt=fmt.lower())
    return target


def trim_log(path: Path, max_entries: int, *, fmt: str = "jsonl") -> None:
    """Keep only the newest ``max_entries`` records of ``path``."""

    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format: {fmt}")
    if max_entries <= 0 or not path.exists():
        return
    with path.open("r", encoding="utf-8", newline="") as handle:
        lines = handle.readlines()
    # CSV logs carry a header line that is never trimmed.
    header, records = (lines[:1], lines[1:]) if fmt == "csv" else ([], lines)
    if len(records) <= max_entries:
        return
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.writelines(header + records[-max_entries:])


def _append_jsonl(path: Path, record: RunLogRecord) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(asdict(record), ensure_ascii=False) + "\n")


def _append_csv(path: Path, record: RunLogRecord) -> None:
    is_new_file = not path.exists() or path.stat().st_size == 0
    with path.open("a", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=LOG_FIELDNAMES)
        if is_new_file:
            writer.writeheader()
        writer.writerow(asdict(record))


_WRITERS: Dict[str, Callable[[Path, RunLogRecord], None]] = {
    "jsonl": _append_jsonl,
    "csv": _append_csv,
}


__all__ = [
    "DEFAULT_LOG_PATH",
    "DEFAULT_LOG_RETENTION",
    "LOG_FIELDNAMES",
    "LOG_FORMATS",
    "RunLogRecord",
    "log_run_result",
    "trim_log",
]
