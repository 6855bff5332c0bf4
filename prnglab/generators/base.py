"""Common data structures and the driver loop shared by every generator.

Each algorithm is described by an :class:`AlgorithmDefinition`: a small table
of pure functions (``validate``, ``initialize``, ``next``, ``divisor`` and
``update``) over an immutable :class:`GeneratorState`.  :func:`run_generator`
is the only loop in the engine and applies the requested termination mode
uniformly to all algorithms.

Two termination modes are supported:

``until_cycle``
    Stop at the first raw value that was already emitted.  The repeated value
    itself is not part of the sequence.

``count``
    Emit exactly ``count`` values, repeats included.

Every run is bounded by ``max_iterations``.  A cycle-terminated run that
reaches the cap raises :class:`~prnglab.errors.GenerationDidNotTerminateError`
instead of looping forever.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Callable, Optional, Tuple

from ..errors import (
    GenerationCancelledError,
    GenerationDidNotTerminateError,
    InvalidParameterError,
)

DEFAULT_MAX_ITERATIONS = 1_000_000
"""Upper bound on the number of steps a single run may take."""


class TerminationMode(str, Enum):
    """Explicit lifecycle policy for a generation run."""

    UNTIL_CYCLE = "until_cycle"
    COUNT = "count"


@dataclass(frozen=True)
class GeneratorParameters:
    """Natural-number inputs for a generation run.

    Only the fields an algorithm needs have to be populated.  Every populated
    field must be a strictly positive integer.
    """

    seeds: Tuple[int, ...] = ()
    modulus: Optional[int] = None
    multiplier: Optional[int] = None
    increment: Optional[int] = None
    a: Optional[int] = None
    b: Optional[int] = None
    c: Optional[int] = None
    constant: Optional[int] = None
    p: Optional[int] = None
    q: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "seeds", tuple(self.seeds))
        for seed in self.seeds:
            _require_natural("seed", seed)
        for item in fields(self):
            if item.name == "seeds":
                continue
            value = getattr(self, item.name)
            if value is not None:
                _require_natural(item.name, value)

    @property
    def seed(self) -> int:
        """Return the first seed."""

        if not self.seeds:
            raise InvalidParameterError("At least one seed is required.")
        return self.seeds[0]

    def require(self, *names: str) -> None:
        """Raise when any of ``names`` is missing."""

        missing = [name for name in names if getattr(self, name) in (None, ())]
        if missing:
            raise InvalidParameterError(
                "Missing required parameters: " + ", ".join(missing) + "."
            )


@dataclass(frozen=True)
class GeneratorState:
    """Immutable state threaded through the algorithm function table."""

    window: Tuple[int, ...]
    """Most recent raw values, oldest first."""
    modulus: int
    """Modulus of the recurrence, or ``10**digits`` for digit methods."""
    digits: int = 0
    """Seed digit length for the digit-extraction methods."""


@dataclass(frozen=True)
class AlgorithmDefinition:
    """Tagged variant describing one generator family."""

    name: str
    title: str
    required: Tuple[str, ...]
    validate: Callable[[GeneratorParameters], None]
    initialize: Callable[[GeneratorParameters], GeneratorState]
    next: Callable[[GeneratorState, GeneratorParameters], int]
    divisor: Callable[[GeneratorState], int]
    update: Callable[[GeneratorState, int], GeneratorState]
    closed_upper_bound: bool = True
    """Whether 1.0 is a reachable normalised value."""


@dataclass(frozen=True)
class GeneratedSequence:
    """Result of a single generation run."""

    algorithm: str
    values: Tuple[float, ...]
    raw: Tuple[int, ...]
    divisor: int
    mode: TerminationMode
    terminated_by: str
    metadata: Tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, index):
        return self.values[index]


def run_generator(
    definition: AlgorithmDefinition,
    params: GeneratorParameters,
    *,
    mode: TerminationMode | str = TerminationMode.UNTIL_CYCLE,
    count: int | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    cancel_event: threading.Event | None = None,
) -> GeneratedSequence:
    """Drive ``definition`` from ``params`` and return the produced sequence."""

    mode = _resolve_mode(mode)
    if max_iterations <= 0:
        raise InvalidParameterError("max_iterations must be greater than zero.")
    if mode is TerminationMode.COUNT:
        if count is None or isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidParameterError("Count-terminated runs need a positive integer count.")
        if count > max_iterations:
            raise InvalidParameterError(
                f"Requested count {count} exceeds the iteration cap of {max_iterations}."
            )

    params.require(*definition.required)
    definition.validate(params)
    state = definition.initialize(params)
    divisor = definition.divisor(state)
    if divisor <= 0:
        raise InvalidParameterError(f"{definition.title} normalisation divisor must be positive.")

    raw: list[int] = []
    seen: set[int] = set()
    terminated_by = "count"
    iterations = 0
    while True:
        if mode is TerminationMode.COUNT and len(raw) >= count:
            break
        if iterations >= max_iterations:
            raise GenerationDidNotTerminateError(
                f"{definition.title} did not repeat a value within {max_iterations} iterations."
            )
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError(
                f"{definition.title} generation cancelled after {iterations} iterations."
            )
        iterations += 1
        candidate = definition.next(state, params)
        if mode is TerminationMode.UNTIL_CYCLE:
            if candidate in seen:
                terminated_by = "cycle"
                break
            seen.add(candidate)
        raw.append(candidate)
        state = definition.update(state, candidate)

    return GeneratedSequence(
        algorithm=definition.name,
        values=tuple(value / divisor for value in raw),
        raw=tuple(raw),
        divisor=divisor,
        mode=mode,
        terminated_by=terminated_by,
    )


def _resolve_mode(mode: TerminationMode | str) -> TerminationMode:
    if isinstance(mode, TerminationMode):
        return mode
    try:
        return TerminationMode(str(mode).strip().lower())
    except ValueError as exc:
        raise InvalidParameterError(
            f"Unknown termination mode '{mode}'; expected 'until_cycle' or 'count'."
        ) from exc


def _require_natural(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(f"Parameter '{name}' must be an integer, got {value!r}.")
    if value <= 0:
        raise InvalidParameterError(f"Parameter '{name}' must be a natural number, got {value}.")


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "AlgorithmDefinition",
    "GeneratorParameters",
    "GeneratorState",
    "GeneratedSequence",
    "TerminationMode",
    "run_generator",
]
