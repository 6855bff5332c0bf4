"""Distribution transforms consuming a uniform(0,1) stream."""

from .base import (
    Distribution,
    SampleRun,
    SampleSummary,
    UniformStream,
    describe_samples,
    sample_many,
)
from .models import (
    DISTRIBUTIONS,
    BernoulliDist,
    BinomialDist,
    ErlangDist,
    ExponentialDist,
    NormalDist,
    PoissonDist,
    TriangularDist,
    UniformDist,
    get_distribution,
)

__all__ = [
    "DISTRIBUTIONS",
    "BernoulliDist",
    "BinomialDist",
    "Distribution",
    "ErlangDist",
    "ExponentialDist",
    "NormalDist",
    "PoissonDist",
    "SampleRun",
    "SampleSummary",
    "TriangularDist",
    "UniformDist",
    "UniformStream",
    "describe_samples",
    "get_distribution",
    "sample_many",
]
