"""Uniform stream cursor and the common interface of distribution models."""

from __future__ import annotations

import math
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple

from ..errors import (
    InvalidParameterError,
    StreamExhaustedError,
    UnsupportedOperationError,
    UnusableUniformError,
)


class UniformStream:
    """Left-to-right cursor over a finite sequence of uniform(0,1) values.

    The cursor is owned by a single consumer.  Draws that need several values
    are all-or-nothing: when the stream runs dry mid-draw the cursor is moved
    back to where the draw started.
    """

    def __init__(self, values: Iterable[float]) -> None:
        materialised = tuple(float(value) for value in values)
        for index, value in enumerate(materialised):
            if math.isnan(value) or not 0.0 <= value <= 1.0:
                raise InvalidParameterError(
                    f"Uniform value at index {index} must lie in [0, 1], got {value}."
                )
        self._values = list(materialised)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        while self._position < len(self._values):
            yield self.next()

    def next(self) -> float:
        if self._position >= len(self._values):
            raise StreamExhaustedError("Uniform stream exhausted.")
        value = self._values[self._position]
        self._position += 1
        return value

    def take(self, count: int) -> Tuple[float, ...]:
        """Consume exactly ``count`` values or none at all."""

        if count > self.remaining:
            raise StreamExhaustedError(
                f"Draw needs {count} uniform values but only {self.remaining} remain."
            )
        start = self._position
        self._position += count
        return tuple(self._values[start:self._position])

    def discard(self, index: int) -> None:
        """Drop the unconsumed value at ``index`` from the stream."""

        if not self._position <= index < len(self._values):
            raise InvalidParameterError(f"Index {index} is not an unconsumed stream position.")
        del self._values[index]

    @contextmanager
    def draw(self) -> Iterator["UniformStream"]:
        """Restore the cursor if the enclosed draw fails."""

        mark = self._position
        try:
            yield self
        except Exception:
            self._position = mark
            raise


class Distribution:
    """Base class for stateless distribution models.

    Parameters are passed positionally on every call in the order given by
    :attr:`parameter_names`.  Subclasses implement :meth:`_check` for
    parameter validation and :meth:`_draw` for the transform itself.
    """

    name: str = ""
    parameter_names: Tuple[str, ...] = ()
    is_continuous: bool = True

    def generate(self, stream: UniformStream, *params: float) -> float:
        """Draw one sample, consuming uniforms from ``stream``."""

        values = self.validate(params)
        with stream.draw():
            return self._draw(stream, values)

    def probability(self, x: float, *params: float) -> float:
        """Return the density (continuous) or mass (discrete) at ``x``."""

        raise UnsupportedOperationError(f"{self.name} does not provide a probability function.")

    def cdf(self, x: float, *params: float) -> float:
        """Return ``P(X <= x)``."""

        raise UnsupportedOperationError(f"{self.name} does not provide a closed-form CDF.")

    @property
    def has_cdf(self) -> bool:
        return type(self).cdf is not Distribution.cdf

    def validate(self, params: Sequence[float]) -> Tuple[float, ...]:
        """Convert and validate ``params`` before any uniform is consumed."""

        if len(params) != len(self.parameter_names):
            expected = ", ".join(self.parameter_names)
            raise InvalidParameterError(
                f"{self.name} requires {len(self.parameter_names)} parameter(s): {expected}."
            )
        values: list[float] = []
        for name, raw in zip(self.parameter_names, params):
            if isinstance(raw, bool):
                raise InvalidParameterError(f"Parameter '{name}' must be numeric, got {raw!r}.")
            try:
                value = float(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidParameterError(
                    f"Parameter '{name}' must be numeric, got {raw!r}."
                ) from exc
            if not math.isfinite(value):
                raise InvalidParameterError(f"Parameter '{name}' must be finite, got {value}.")
            values.append(value)
        checked = tuple(values)
        self._check(checked)
        return checked

    def _check(self, params: Tuple[float, ...]) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _draw(self, stream: UniformStream, params: Tuple[float, ...]) -> float:  # pragma: no cover - abstract
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass(frozen=True)
class SampleRun:
    """Samples drawn from a stream in one pass."""

    distribution: str
    values: Tuple[float, ...]
    consumed: int
    leftover: int
    exhausted: bool
    rejected: int = 0


@dataclass(frozen=True)
class SampleSummary:
    """Descriptive statistics of a sample."""

    count: int
    mean: float
    variance: float
    modes: Tuple[float, ...]


def sample_many(
    distribution: Distribution,
    stream: UniformStream | Iterable[float],
    *params: float,
    limit: Optional[int] = None,
) -> SampleRun:
    """Draw samples until the stream runs out or ``limit`` samples exist.

    A draw that cannot be completed stops the pass; every completed sample is
    kept and the partially consumed uniforms are left on the stream.  A uniform
    at which the transform is undefined is dropped from the stream and counted
    in :attr:`SampleRun.rejected`; the draw is then retried.
    """

    if not isinstance(stream, UniformStream):
        stream = UniformStream(stream)
    distribution.validate(params)
    if limit is not None and limit <= 0:
        raise InvalidParameterError("Sample limit must be greater than zero.")

    start = stream.position
    samples: list[float] = []
    rejected = 0
    exhausted = False
    while limit is None or len(samples) < limit:
        if stream.remaining == 0:
            exhausted = True
            break
        try:
            samples.append(distribution.generate(stream, *params))
        except StreamExhaustedError:
            exhausted = True
            break
        except UnusableUniformError as exc:
            stream.discard(exc.index)
            rejected += 1
    return SampleRun(
        distribution=distribution.name,
        values=tuple(samples),
        consumed=stream.position - start,
        leftover=stream.remaining,
        exhausted=exhausted,
        rejected=rejected,
    )


def describe_samples(values: Sequence[float]) -> SampleSummary:
    """Return the mean, sample variance and most frequent values."""

    count = len(values)
    if count == 0:
        raise InvalidParameterError("Cannot describe an empty sample.")
    mean = math.fsum(values) / count
    variance = 0.0
    if count > 1:
        variance = math.fsum((value - mean) ** 2 for value in values) / (count - 1)
    frequencies = Counter(values)
    top = max(frequencies.values())
    # A mode only exists when some value repeats.
    modes = tuple(sorted(value for value, freq in frequencies.items() if freq == top)) if top > 1 else ()
    return SampleSummary(count=count, mean=mean, variance=variance, modes=modes)


__all__ = [
    "Distribution",
    "SampleRun",
    "SampleSummary",
    "UniformStream",
    "describe_samples",
    "sample_many",
]
