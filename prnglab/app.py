"""Application orchestration for the PRNG laboratory CLI."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Sequence, TextIO, Tuple

from .analysis import BatterySummary, overall_verdict, summarise_battery
from .config import PrngLabConfig, load_config
from .distributions import SampleRun, SampleSummary, describe_samples, get_distribution, sample_many
from .errors import InvalidConfigurationError
from .generators import GeneratedSequence, generate
from .io import read_sequence_file
from .logging import log_run_result
from .reporting import print_console_summary, write_markdown_report
from .tests import build_randomness_battery, run_goodness_battery, run_randomness_battery


@dataclass(frozen=True)
class RunResult:
    """Summary of a full application run."""

    config_path: Path
    source: str
    values: Tuple[float, ...]
    randomness: BatterySummary
    started_at: datetime
    duration: timedelta
    input_path: Optional[Path] = None
    sequence: Optional[GeneratedSequence] = None
    distribution: Optional[BatterySummary] = None
    samples: Optional[SampleRun] = None
    sample_summary: Optional[SampleSummary] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_entries(self) -> int:
        return len(self.values)

    @property
    def batteries(self) -> Tuple[BatterySummary, ...]:
        if self.distribution is None:
            return (self.randomness,)
        return (self.randomness, self.distribution)

    @property
    def verdict(self) -> Optional[bool]:
        return overall_verdict(self.batteries)

    @property
    def verdict_label(self) -> str:
        verdict = self.verdict
        if verdict is None:
            return "INCONCLUSIVE"
        return "PASS" if verdict else "FAIL"

    @property
    def passed_count(self) -> int:
        return sum(summary.passed_count for summary in self.batteries)

    @property
    def counted(self) -> int:
        return sum(summary.counted for summary in self.batteries)


class PrngLabApp:
    """High level service wiring configuration, generation, testing and rendering."""

    def __init__(self, *, stream: TextIO | None = None) -> None:
        self._stream = stream

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(
        self,
        config_path: Path,
        input_path: Path | None = None,
        report_path: Path | None = None,
        verbose: bool = False,
        *,
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        """Execute the generate, transform and test workflow."""

        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        config = load_config(Path(config_path))
        values, sequence, source, resolved_input = self._load_values(config, input_path, cancel_event)
        randomness = summarise_battery(
            "Randomness", run_randomness_battery(values, build_randomness_battery(config.randomness))
        )
        distribution, samples, sample_summary = self._run_distribution(config, values)
        run_result = RunResult(
            config_path=Path(config_path),
            source=source,
            values=values,
            randomness=randomness,
            started_at=started_at,
            duration=timedelta(seconds=time.perf_counter() - start),
            input_path=resolved_input,
            sequence=sequence,
            distribution=distribution,
            samples=samples,
            sample_summary=sample_summary,
            warnings=config.warnings,
        )
        print_console_summary(run_result, verbose=verbose, stream=self._stream)

        target_report = report_path if report_path is not None else config.output.report_path
        written_report: Path | None = None
        if target_report is not None:
            written_report = write_markdown_report(run_result, target_report)
        if config.output.log_results:
            log_run_result(
                run_result,
                written_report,
                log_path=config.output.run_log_path,
                fmt=config.output.run_log_format,
                retention=config.output.run_log_retention,
            )
        return run_result

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    def _load_values(
        self,
        config: PrngLabConfig,
        input_path: Path | None,
        cancel_event: threading.Event | None,
    ) -> Tuple[Tuple[float, ...], Optional[GeneratedSequence], str, Optional[Path]]:
        if input_path is not None:
            data = read_sequence_file(input_path)
            return data.values, None, str(data.path), data.path
        section = config.generator
        if section is None:
            raise InvalidConfigurationError(
                "Configuration needs a [generator] section when no input file is given."
            )
        sequence = generate(
            section.algorithm,
            section.parameters,
            mode=section.mode,
            count=section.count,
            max_iterations=section.max_iterations,
            cancel_event=cancel_event,
        )
        return sequence.values, sequence, f"generator:{section.algorithm}", None

    def _run_distribution(
        self, config: PrngLabConfig, values: Sequence[float]
    ) -> Tuple[Optional[BatterySummary], Optional[SampleRun], Optional[SampleSummary]]:
        section = config.distribution
        if section is None:
            return None, None, None
        model = get_distribution(section.name)
        samples = sample_many(model, values, *section.params, limit=section.limit)
        summary = describe_samples(samples.values) if samples.values else None
        battery = summarise_battery(
            f"Goodness of fit ({model.name})", run_goodness_battery(samples.values, section)
        )
        return battery, samples, summary


__all__ = ["PrngLabApp", "RunResult"]
