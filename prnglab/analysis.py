"""Utilities for merging individual test results into an overall verdict.

The :mod:`prnglab.tests` package exposes the randomness and goodness-of-fit
tests, each returning a :class:`prnglab.tests.base.TestResult`.  This module
folds a battery of those results into a single :class:`BatterySummary`.

Only *gated* and *evaluable* results take part in the verdict:

``gated``
    Descriptive tests such as ``mean_variance`` report numbers without a
    pass/fail decision of their own and are shown but never counted.

``evaluable``
    Tests that could not be computed on the given data (too few values,
    degenerate bins, ...) are listed separately.  They are neither passes nor
    failures.

A battery with no counted result has no verdict (``passed`` is ``None``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .tests.base import TestResult as RawTestResult


@dataclass(frozen=True)
class BatterySummary:
    """Aggregate verdict built from one battery of test outcomes."""

    title: str
    results: Tuple[RawTestResult, ...]
    passed: Optional[bool]
    passed_count: int
    counted: int
    not_evaluable: Tuple[str, ...] = field(default_factory=tuple)
    failed: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def verdict(self) -> str:
        if self.passed is None:
            return "INCONCLUSIVE"
        return "PASS" if self.passed else "FAIL"

    @property
    def pass_rate(self) -> float:
        return self.passed_count / self.counted if self.counted else 0.0


def summarise_battery(title: str, results: Sequence[RawTestResult]) -> BatterySummary:
    """Combine ``results`` into a :class:`BatterySummary`."""

    counted = [result for result in results if result.gated and result.evaluable]
    not_evaluable = tuple(result.name for result in results if not result.evaluable)
    failed = tuple(result.name for result in counted if not result.passed)
    passed_count = len(counted) - len(failed)
    passed: Optional[bool] = None
    if counted:
        passed = not failed
    return BatterySummary(
        title=title,
        results=tuple(results),
        passed=passed,
        passed_count=passed_count,
        counted=len(counted),
        not_evaluable=not_evaluable,
        failed=failed,
    )


def overall_verdict(summaries: Sequence[BatterySummary]) -> Optional[bool]:
    """Return ``False`` if any battery failed, ``None`` if none decided."""

    decided = [summary.passed for summary in summaries if summary.passed is not None]
    if not decided:
        return None
    return all(decided)


__all__ = ["BatterySummary", "overall_verdict", "summarise_battery"]
