"""Concrete distribution models built on the inverse-transform and composition methods."""

from __future__ import annotations

import math
from typing import Dict, Mapping, Tuple

from ..errors import InvalidParameterError, UnusableUniformError
from .base import Distribution, UniformStream

_TOLERANCE = 1e-9


def _require_positive_integer(name: str, value: float) -> int:
    if value <= 0 or value != math.floor(value):
        raise InvalidParameterError(f"Parameter '{name}' must be a positive integer, got {value}.")
    return int(value)


def _require_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidParameterError(f"Parameter '{name}' must be between 0 and 1, got {value}.")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise InvalidParameterError(f"Parameter '{name}' must be positive, got {value}.")


def _as_support_point(x: float) -> int | None:
    """Return ``x`` as an integer when it lies on the integer lattice."""

    nearest = round(x)
    if abs(x - nearest) > _TOLERANCE:
        return None
    return int(nearest)


class UniformDist(Distribution):
    name = "Uniform"
    parameter_names = ("a", "b")

    def _check(self, params: Tuple[float, ...]) -> None:
        a, b = params
        if a >= b:
            raise InvalidParameterError(f"Minimum 'a' must be less than maximum 'b', got a={a}, b={b}.")

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        a, b = params
        return a + (b - a) * stream.next()

    def probability(self, x: float, *params: float) -> float:
        a, b = self.validate(params)
        return 1.0 / (b - a) if a <= x <= b else 0.0

    def cdf(self, x: float, *params: float) -> float:
        a, b = self.validate(params)
        if x <= a:
            return 0.0
        if x >= b:
            return 1.0
        return (x - a) / (b - a)


class ExponentialDist(Distribution):
    name = "Exponential"
    parameter_names = ("lambda",)

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_positive("lambda", params[0])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        (rate,) = params
        r = stream.next()
        if r >= 1.0:
            raise UnusableUniformError(
                "Exponential transform is undefined for a uniform value of 1.",
                index=stream.position - 1,
            )
        return -math.log(1.0 - r) / rate

    def probability(self, x: float, *params: float) -> float:
        (rate,) = self.validate(params)
        return rate * math.exp(-rate * x) if x >= 0 else 0.0

    def cdf(self, x: float, *params: float) -> float:
        (rate,) = self.validate(params)
        return 1.0 - math.exp(-rate * x) if x > 0 else 0.0


class NormalDist(Distribution):
    """Irwin-Hall approximation: twelve uniforms summed and centred."""

    name = "Normal"
    parameter_names = ("mean", "stddev")
    uniforms_per_draw = 12

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_positive("stddev", params[1])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        mean, stddev = params
        total = math.fsum(stream.take(self.uniforms_per_draw))
        return (total - 6.0) * stddev + mean

    def probability(self, x: float, *params: float) -> float:
        mean, stddev = self.validate(params)
        z = (x - mean) / stddev
        return math.exp(-0.5 * z * z) / (stddev * math.sqrt(2.0 * math.pi))

    def cdf(self, x: float, *params: float) -> float:
        mean, stddev = self.validate(params)
        return 0.5 * (1.0 + math.erf((x - mean) / (stddev * math.sqrt(2.0))))


class ErlangDist(Distribution):
    name = "Erlang"
    parameter_names = ("k", "lambda")

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_positive_integer("k", params[0])
        _require_positive("lambda", params[1])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        shape, rate = int(params[0]), params[1]
        start = stream.position
        uniforms = stream.take(shape)
        for offset, r in enumerate(uniforms):
            if r <= 0.0:
                raise UnusableUniformError(
                    "Erlang transform is undefined for a uniform value of 0.",
                    index=start + offset,
                )
        # Sum of logs equals the log of the product without underflowing.
        return -math.fsum(math.log(r) for r in uniforms) / rate

    def probability(self, x: float, *params: float) -> float:
        shape, rate = self.validate(params)
        shape = int(shape)
        if x < 0:
            return 0.0
        return rate**shape * x ** (shape - 1) * math.exp(-rate * x) / math.factorial(shape - 1)

    def cdf(self, x: float, *params: float) -> float:
        shape, rate = self.validate(params)
        if x <= 0:
            return 0.0
        scaled = rate * x
        tail = math.fsum(
            math.exp(-scaled) * scaled**i / math.factorial(i) for i in range(int(shape))
        )
        return 1.0 - tail


class BernoulliDist(Distribution):
    name = "Bernoulli"
    parameter_names = ("p",)
    is_continuous = False

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_probability("p", params[0])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        return 1.0 if stream.next() <= params[0] else 0.0

    def probability(self, x: float, *params: float) -> float:
        (p,) = self.validate(params)
        point = _as_support_point(x)
        if point == 1:
            return p
        if point == 0:
            return 1.0 - p
        return 0.0

    def cdf(self, x: float, *params: float) -> float:
        (p,) = self.validate(params)
        if x < 0:
            return 0.0
        if x < 1:
            return 1.0 - p
        return 1.0


class PoissonDist(Distribution):
    name = "Poisson"
    parameter_names = ("lambda",)
    is_continuous = False

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_positive("lambda", params[0])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        threshold = math.exp(-params[0])
        product = 1.0
        count = 0
        while True:
            product *= stream.next()
            count += 1
            if product < threshold:
                return float(count - 1)

    def probability(self, x: float, *params: float) -> float:
        (rate,) = self.validate(params)
        k = _as_support_point(x)
        if k is None or k < 0:
            return 0.0
        return math.exp(k * math.log(rate) - rate - math.lgamma(k + 1))

    def cdf(self, x: float, *params: float) -> float:
        (rate,) = self.validate(params)
        if x < 0:
            return 0.0
        upper = int(math.floor(x + _TOLERANCE))
        return min(1.0, math.fsum(self.probability(k, rate) for k in range(upper + 1)))


class BinomialDist(Distribution):
    name = "Binomial"
    parameter_names = ("n", "p")
    is_continuous = False

    def _check(self, params: Tuple[float, ...]) -> None:
        _require_positive_integer("n", params[0])
        _require_probability("p", params[1])

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        trials, p = int(params[0]), params[1]
        return float(sum(1 for r in stream.take(trials) if r <= p))

    def probability(self, x: float, *params: float) -> float:
        trials, p = self.validate(params)
        trials = int(trials)
        k = _as_support_point(x)
        if k is None or k < 0 or k > trials:
            return 0.0
        return math.comb(trials, k) * p**k * (1.0 - p) ** (trials - k)

    def cdf(self, x: float, *params: float) -> float:
        trials, p = self.validate(params)
        if x < 0:
            return 0.0
        if x >= trials:
            return 1.0
        upper = int(math.floor(x + _TOLERANCE))
        return math.fsum(self.probability(k, trials, p) for k in range(upper + 1))


class TriangularDist(Distribution):
    name = "Triangular"
    parameter_names = ("a", "b", "c")

    def _check(self, params: Tuple[float, ...]) -> None:
        a, b, c = params
        if a >= b:
            raise InvalidParameterError(f"Minimum 'a' must be less than maximum 'b', got a={a}, b={b}.")
        if not a <= c <= b:
            raise InvalidParameterError(f"Mode 'c' must satisfy a <= c <= b, got a={a}, c={c}, b={b}.")

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:
        a, b, c = params
        r = stream.next()
        split = (c - a) / (b - a)
        if r < split:
            return a + math.sqrt(r * (b - a) * (c - a))
        return b - math.sqrt((1.0 - r) * (b - a) * (b - c))

    def probability(self, x: float, *params: float) -> float:
        a, b, c = self.validate(params)
        if x < a or x > b:
            return 0.0
        if abs(x - c) < _TOLERANCE:
            return 2.0 / (b - a)
        if x < c:
            return 2.0 * (x - a) / ((b - a) * (c - a))
        return 2.0 * (b - x) / ((b - a) * (b - c))

    def cdf(self, x: float, *params: float) -> float:
        a, b, c = self.validate(params)
        if x <= a:
            return 0.0
        if x >= b:
            return 1.0
        if x <= c:
            return (x - a) ** 2 / ((b - a) * (c - a))
        return 1.0 - (b - x) ** 2 / ((b - a) * (b - c))


def _registry() -> Dict[str, Distribution]:
    return {
        model.name.lower(): model
        for model in (
            UniformDist(),
            ExponentialDist(),
            NormalDist(),
            ErlangDist(),
            BernoulliDist(),
            PoissonDist(),
            BinomialDist(),
            TriangularDist(),
        )
    }


DISTRIBUTIONS: Mapping[str, Distribution] = _registry()


def get_distribution(name: str) -> Distribution:
    """Look up a shared model instance by name (case insensitive)."""

    model = DISTRIBUTIONS.get(name.strip().lower())
    if model is None:
        known = ", ".join(sorted(DISTRIBUTIONS))
        raise InvalidParameterError(f"Unknown distribution '{name}'. Known distributions: {known}.")
    return model


__all__ = [
    "DISTRIBUTIONS",
    "BernoulliDist",
    "BinomialDist",
    "ErlangDist",
    "ExponentialDist",
    "NormalDist",
    "PoissonDist",
    "TriangularDist",
    "UniformDist",
    "get_distribution",
]
