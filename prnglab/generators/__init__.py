"""Pseudo-random number generator families."""

from .algorithms import (
    ALGORITHMS,
    acg,
    bbs,
    cmm,
    generate,
    get_algorithm,
    lcg,
    mcg,
    middle_digits,
    mpm,
    msm,
    qcg,
)
from .base import (
    DEFAULT_MAX_ITERATIONS,
    AlgorithmDefinition,
    GeneratedSequence,
    GeneratorParameters,
    TerminationMode,
    run_generator,
)

__all__ = [
    "ALGORITHMS",
    "DEFAULT_MAX_ITERATIONS",
    "AlgorithmDefinition",
    "GeneratedSequence",
    "GeneratorParameters",
    "TerminationMode",
    "acg",
    "bbs",
    "cmm",
    "generate",
    "get_algorithm",
    "lcg",
    "mcg",
    "middle_digits",
    "mpm",
    "msm",
    "qcg",
    "run_generator",
]
