"""Reporting utilities for console and markdown output."""

from __future__ import annotations

import re
import sys
import textwrap
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from string import Template
from typing import Sequence, TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from datetime import timedelta
    from .analysis import BatterySummary
    from .app import RunResult
    from .tests.base import TestResult

NOT_EVALUABLE = "---"
"""Placeholder shown instead of a statistic for tests that could not run."""


@dataclass(frozen=True)
class ReportTemplate:
    """Container for the markdown report template."""

    template: Template = Template(
        textwrap.dedent(
            """
            # PRNG Laboratory Report

            ## Summary
            ${summary}

            ## Source
            ${source}

            ## Test Results
            ${battery_tables}${test_notes}
            ## Samples
            ${samples}

            ## Notes
            ${notes}

            _Generated on ${timestamp} (duration: ${duration})._
            """
        ).strip()
    )


DEFAULT_TEMPLATE = ReportTemplate()


def format_statistic(result: "TestResult") -> str:
    """Return the statistic for display, or ``---`` when not evaluable."""

    if not result.evaluable:
        return NOT_EVALUABLE
    return f"{result.statistic:.4f}"


def format_outcome(result: "TestResult") -> str:
    if not result.evaluable:
        return "NOT EVALUABLE"
    if not result.gated:
        return "INFO"
    return "PASS" if result.passed else "FAIL"


def print_console_summary(result: "RunResult", *, verbose: bool = False, stream: TextIO | None = None) -> None:
    """Print a short summary of the run to ``stream``."""

    output = stream if stream is not None else sys.stdout
    print(
        f"Result: {result.verdict_label} | Passed: {result.passed_count}/{result.counted} "
        f"| Values: {result.total_entries}",
        file=output,
    )
    for summary in result.batteries:
        print(
            f"{summary.title}: {summary.verdict} ({summary.passed_count}/{summary.counted} passed)",
            file=output,
        )
        if not verbose:
            continue
        for test_result in summary.results:
            p_value = _optional_number(test_result.p_value if test_result.evaluable else None)
            print(
                f" - {test_result.name}: {format_statistic(test_result)} "
                f"(p {p_value}) {format_outcome(test_result)}",
                file=output,
            )
            for line in _format_detail_block(test_result.details):
                print(f"   {line}", file=output)
    if not verbose:
        return

    print(f"Source: {result.source}", file=output)
    if result.sequence is not None:
        print(
            f"Generation stopped by {result.sequence.terminated_by} after {len(result.sequence)} values.",
            file=output,
        )
    if result.sample_summary is not None:
        print(_format_sample_line(result), file=output)
    for warning in result.warnings:
        print(f"warning: {warning}", file=output)


def build_markdown_report(result: "RunResult", *, template: Template | None = None) -> str:
    """Generate a markdown report for ``result`` using ``template``."""

    template = template or DEFAULT_TEMPLATE.template
    timestamp = result.started_at.astimezone(timezone.utc).isoformat()
    return template.substitute(
        summary=_format_summary_section(result),
        source=_format_source_section(result),
        battery_tables="\n\n".join(_format_battery_table(summary) for summary in result.batteries),
        test_notes=_format_test_notes(result.batteries),
        samples=_format_samples_section(result),
        notes=_format_notes(result),
        timestamp=timestamp,
        duration=_format_duration(result.duration),
    )


def write_markdown_report(
    result: "RunResult",
    path: Path | None = None,
    *,
    template: Template | None = None,
) -> Path:
    """Render and persist a markdown report for ``result``."""

    target = _resolve_report_path(result, path)
    target.parent.mkdir(parents=True, exist_ok=True)
    content = build_markdown_report(result, template=template)
    target.write_text(content, encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# Helper formatting utilities
# ---------------------------------------------------------------------------

def _format_detail_block(details: str) -> Sequence[str]:
    stripped = details.strip()
    if not stripped:
        return ()
    return tuple(stripped.splitlines())


def _format_summary_section(result: "RunResult") -> str:
    lines = [
        f"- **Result:** {result.verdict_label}",
        f"- **Counted tests passed:** {result.passed_count}/{result.counted}",
    ]
    for summary in result.batteries:
        skipped = ", ".join(summary.not_evaluable) or "none"
        lines.append(f"- **{summary.title}:** {summary.verdict} (not evaluable: {skipped})")
    return "\n".join(lines)


def _format_source_section(result: "RunResult") -> str:
    lines = [_metadata_line("Configuration", result.config_path)]
    if result.input_path is not None:
        lines.append(_metadata_line("Input", result.input_path))
    else:
        lines.append(f"- **Source:** {result.source}")
    lines.append(f"- **Total values:** {result.total_entries}")
    if result.sequence is not None:
        lines.append(f"- **Terminated by:** {result.sequence.terminated_by}")
        lines.append(f"- **Normalisation divisor:** {result.sequence.divisor}")
    return "\n".join(lines)


def _metadata_line(label: str, path: Path) -> str:
    try:
        stat = path.stat()
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        details = f"size: {stat.st_size} bytes, modified: {modified.isoformat()}"
    except OSError:
        details = "metadata unavailable"
    return f"- **{label} file:** {path} ({details})"


def _format_battery_table(summary: "BatterySummary") -> str:
    header = "| Test | Statistic | P-Value | Critical | DoF | Outcome |"
    separator = "| --- | --- | --- | --- | --- | --- |"
    rows = []
    for test in summary.results:
        rows.append(
            "| {} | {} | {} | {} | {} | {} |".format(
                test.name,
                format_statistic(test),
                _optional_number(test.p_value if test.evaluable else None),
                _optional_number(test.critical_value if test.evaluable else None),
                test.degrees_of_freedom if test.degrees_of_freedom is not None and test.evaluable else NOT_EVALUABLE,
                format_outcome(test),
            )
        )
    if not rows:
        rows.append("| _(no tests executed)_ | - | - | - | - | - |")
    return "\n".join([f"### {summary.title}", "", header, separator, *rows])


def _format_test_notes(summaries: Sequence["BatterySummary"]) -> str:
    sections: list[str] = []
    for summary in summaries:
        for test in summary.results:
            detail_lines = _format_detail_block(test.details)
            if not detail_lines and not test.bins:
                continue
            section_lines = [f"#### {summary.title}: {test.name}"]
            if detail_lines:
                section_lines.extend(f"> {line}" for line in detail_lines)
            if test.bins:
                section_lines.append("")
                section_lines.append("| Bin | Observed | Expected |")
                section_lines.append("| --- | --- | --- |")
                section_lines.extend(
                    f"| {entry.label} | {entry.observed:g} | {entry.expected:.3f} |" for entry in test.bins
                )
            sections.append("\n".join(section_lines))
    if not sections:
        return "\n"
    return "\n\n" + "\n\n".join(sections) + "\n"


def _format_sample_line(result: "RunResult") -> str:
    summary = result.sample_summary
    modes = ", ".join(f"{mode:g}" for mode in summary.modes) or "none"
    return (
        f"Samples: {summary.count} | mean {summary.mean:.5f} | "
        f"variance {summary.variance:.5f} | modes {modes}"
    )


def _format_samples_section(result: "RunResult") -> str:
    if result.samples is None:
        return "- No distribution transform configured."
    lines = [
        f"- **Distribution:** {result.samples.distribution}",
        f"- **Samples drawn:** {len(result.samples.values)}",
        f"- **Uniforms consumed:** {result.samples.consumed} (left over: {result.samples.leftover})",
    ]
    if result.samples.rejected:
        lines.append(f"- **Uniforms rejected:** {result.samples.rejected} (transform undefined at these values)")
    if result.sample_summary is not None:
        summary = result.sample_summary
        modes = ", ".join(f"{mode:g}" for mode in summary.modes) or "none"
        lines.append(f"- **Mean:** {summary.mean:.5f}")
        lines.append(f"- **Variance:** {summary.variance:.5f}")
        lines.append(f"- **Modes:** {modes}")
    return "\n".join(lines)


def _format_notes(result: "RunResult") -> str:
    if not result.warnings:
        return "- No additional notes were recorded."
    return "\n".join(f"- {note}" for note in result.warnings)


def _optional_number(value: float | None) -> str:
    return NOT_EVALUABLE if value is None else f"{value:.4f}"


def _format_duration(duration: "timedelta") -> str:
    total_seconds = duration.total_seconds()
    if total_seconds < 1:
        return f"{total_seconds * 1000:.0f} ms"
    return f"{total_seconds:.2f} s"


def _resolve_report_path(result: "RunResult", path: Path | None) -> Path:
    if path is not None:
        return Path(path).expanduser().resolve()
    base_dir = Path("reports")
    stem = result.input_path.stem if result.input_path is not None else result.source
    safe_stem = re.sub(r"[^A-Za-z0-9_.-]+", "-", stem).strip("-") or "analysis"
    timestamp = result.started_at.astimezone(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return (base_dir / f"{safe_stem}-{timestamp}.md").resolve()


__all__ = [
    "NOT_EVALUABLE",
    "ReportTemplate",
    "build_markdown_report",
    "format_statistic",
    "print_console_summary",
    "write_markdown_report",
]
