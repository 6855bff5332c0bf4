"""Utility helpers shared by the statistical tests."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Iterable, List, Sequence, Tuple

from scipy import stats

from .base import BinEntry

SIGNIFICANCE_LEVEL: float = 0.05
"""Significance level used by every test."""

MINIMUM_EXPECTED: float = 5.0
"""Smallest expected frequency a chi-square category may have."""

# Upper 5% points of the chi-square distribution, indexed by degrees of freedom.
CHI_SQUARE_CRITICAL_005: Tuple[float, ...] = (
    0.0, 3.841, 5.991, 7.815, 9.488, 11.070, 12.592, 14.067, 15.507, 16.919, 18.307,
    19.675, 21.026, 22.362, 23.685, 24.996, 26.296, 27.587, 28.869, 30.144, 31.410,
    32.671, 33.924, 35.172, 36.415, 37.652, 38.885, 40.113, 41.337, 42.557, 43.773,
)

# Two-sided 5% critical values of the one-sample KS statistic, indexed by N.
KS_CRITICAL_005: Tuple[float, ...] = (
    0.0, 0.975, 0.842, 0.708, 0.624, 0.565, 0.521, 0.486, 0.457, 0.432, 0.410,
    0.391, 0.375, 0.361, 0.349, 0.338, 0.328, 0.318, 0.309, 0.301, 0.294,
    0.287, 0.281, 0.275, 0.269, 0.264, 0.259, 0.254, 0.250, 0.246, 0.242,
    0.238, 0.234, 0.231, 0.227, 0.224,
)

_Z_095 = 1.645


def chi_square_sf(statistic: float, degrees_of_freedom: int) -> float:
    """Return the upper-tail probability of the chi-square distribution."""

    if degrees_of_freedom <= 0:
        return 1.0
    return float(stats.chi2.sf(max(0.0, statistic), degrees_of_freedom))


def two_sided_normal_p(z: float) -> float:
    """Return ``P(|Z| >= |z|)`` for a standard normal ``Z``."""

    return float(2.0 * stats.norm.sf(abs(z)))


def chi_square_statistic(bins: Iterable[BinEntry]) -> float:
    return math.fsum(entry.chi_term for entry in bins)


def chi_square_critical_value(degrees_of_freedom: int) -> float:
    """Tabulated 5% critical value, Wilson-Hilferty beyond 30 df."""

    if degrees_of_freedom < 1:
        raise ValueError("Degrees of freedom must be at least 1.")
    if degrees_of_freedom < len(CHI_SQUARE_CRITICAL_005):
        return CHI_SQUARE_CRITICAL_005[degrees_of_freedom]
    ratio = 2.0 / (9.0 * degrees_of_freedom)
    return degrees_of_freedom * (1.0 - ratio + _Z_095 * math.sqrt(ratio)) ** 3


def ks_critical_value(sample_size: int) -> float:
    """Tabulated 5% critical value for N <= 35, ``1.36 / sqrt(N)`` above."""

    if sample_size < 1:
        raise ValueError("Sample size must be at least 1.")
    if sample_size < len(KS_CRITICAL_005):
        return KS_CRITICAL_005[sample_size]
    return 1.36 / math.sqrt(sample_size)


@lru_cache(maxsize=None)
def stirling2(n: int, k: int) -> int:
    """Stirling number of the second kind ``S(n, k)``."""

    if n == k:
        return 1
    if k == 0 or k > n:
        return 0
    return k * stirling2(n - 1, k) + stirling2(n - 1, k - 1)


def merge_bins(bins: Sequence[BinEntry], minimum: float = MINIMUM_EXPECTED) -> List[BinEntry]:
    """Merge adjacent bins until every expected frequency reaches ``minimum``.

    Deficient bins absorb their right neighbour; a deficient trailing bin is
    folded into the previous one.  Observed and expected totals are conserved.
    """

    if not bins:
        return []
    merged: List[BinEntry] = []
    current = bins[0]
    for following in bins[1:]:
        if current.expected < minimum:
            current = current.merge(following)
        else:
            merged.append(current)
            current = following
    if current.expected < minimum and merged:
        current = merged.pop().merge(current)
    merged.append(current)
    return merged


def split_valid_categories(
    bins: Sequence[BinEntry], minimum: float = MINIMUM_EXPECTED
) -> Tuple[List[BinEntry], List[str]]:
    """Return bins with enough expected frequency and the labels discarded."""

    valid = [entry for entry in bins if entry.expected >= minimum]
    discarded = [entry.label for entry in bins if entry.expected < minimum]
    return valid, discarded


__all__ = [
    "CHI_SQUARE_CRITICAL_005",
    "KS_CRITICAL_005",
    "MINIMUM_EXPECTED",
    "SIGNIFICANCE_LEVEL",
    "chi_square_critical_value",
    "chi_square_sf",
    "chi_square_statistic",
    "ks_critical_value",
    "merge_bins",
    "split_valid_categories",
    "stirling2",
    "two_sided_normal_p",
]
