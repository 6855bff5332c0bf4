from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from prnglab.analysis import summarise_battery
from prnglab.app import RunResult
from prnglab.tests.base import BinEntry
from prnglab.tests.base import TestResult as RawTestResult


def _build_run_result(base_dir: Path, *, passed: bool = True, idx: int = 0) -> RunResult:
    started_at = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=idx)
    config_path = base_dir / "config.ini"
    config_path.write_text("[generator]\nalgorithm = lcg\n", encoding="utf-8")
    randomness = summarise_battery(
        "Randomness",
        (
            RawTestResult(
                name="chi_square",
                statistic=4.2,
                passed=passed,
                details="All good",
                p_value=0.8976,
                degrees_of_freedom=9,
                bins=(BinEntry(label="[0.00, 0.10)", observed=9, expected=10),),
            ),
            RawTestResult.not_evaluable("poker", "Poker test needs at least 10 groups of 5, got 2."),
        ),
    )
    return RunResult(
        config_path=config_path,
        source="generator:lcg",
        values=(0.1, 0.5, 0.9),
        randomness=randomness,
        started_at=started_at,
        duration=timedelta(seconds=1.234),
        warnings=("Interpretation 1",),
    )


@pytest.fixture
def make_run_result(tmp_path: Path) -> Callable[..., RunResult]:
    """Factory building a small two-test :class:`RunResult` under ``tmp_path``."""

    def factory(**kwargs) -> RunResult:
        return _build_run_result(tmp_path, **kwargs)

    return factory

