"""Randomness and goodness-of-fit test batteries."""

from .base import BinEntry, RandomnessTest, TestResult
from .factory import (
    DEFAULT_TESTS,
    RANDOMNESS_TEST_NAMES,
    build_randomness_battery,
    run_goodness_battery,
    run_randomness_battery,
)
from .goodness import GOODNESS_TESTS, chi_square_gof, kolmogorov_smirnov
from .randomness import (
    ChiSquareUniformityTest,
    GapsTest,
    MeanVarianceTest,
    PokerTest,
    RunLengthTest,
    RunsTest,
)
from .utils import merge_bins

__all__ = [
    "BinEntry",
    "ChiSquareUniformityTest",
    "DEFAULT_TESTS",
    "GOODNESS_TESTS",
    "GapsTest",
    "MeanVarianceTest",
    "PokerTest",
    "RANDOMNESS_TEST_NAMES",
    "RandomnessTest",
    "RunLengthTest",
    "RunsTest",
    "TestResult",
    "build_randomness_battery",
    "chi_square_gof",
    "kolmogorov_smirnov",
    "merge_bins",
    "run_goodness_battery",
    "run_randomness_battery",
]
