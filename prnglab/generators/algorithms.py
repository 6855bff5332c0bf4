"""Concrete generator families and their registry."""

from __future__ import annotations

import math
import threading
from typing import Dict, Mapping

from ..errors import DigitOverflowError, InvalidParameterError, StructuralConstraintError
from .base import (
    DEFAULT_MAX_ITERATIONS,
    AlgorithmDefinition,
    GeneratedSequence,
    GeneratorParameters,
    GeneratorState,
    TerminationMode,
    run_generator,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def digit_length(value: int) -> int:
    """Return the number of decimal digits of a natural number."""

    return len(str(value))


def middle_digits(product: int, length: int) -> int:
    """Extract the middle ``length`` digits of ``product``.

    ``product`` is read as a ``2 * length`` digit zero-padded number and the
    digits at positions ``[length // 2, length // 2 + length)`` are returned.
    """

    if product >= 10 ** (2 * length):
        raise DigitOverflowError(
            f"Product {product} has more than {2 * length} digits; middle extraction is undefined."
        )
    low_places = length - length // 2
    return (product // 10**low_places) % 10**length


def is_prime(value: int) -> bool:
    """Trial-division primality check."""

    if value < 2:
        return False
    if value % 2 == 0:
        return value == 2
    for divisor in range(3, math.isqrt(value) + 1, 2):
        if value % divisor == 0:
            return False
    return True


def _validate_modulus(params: GeneratorParameters) -> None:
    if params.modulus <= 1:
        raise InvalidParameterError("Modulus must be greater than 1.")


def _single(state: GeneratorState, raw: int) -> GeneratorState:
    return GeneratorState(window=(raw,), modulus=state.modulus, digits=state.digits)


def _sliding(state: GeneratorState, raw: int) -> GeneratorState:
    return GeneratorState(window=state.window[1:] + (raw,), modulus=state.modulus, digits=state.digits)


def _modulus_divisor(state: GeneratorState) -> int:
    return state.modulus - 1


def _digit_divisor(state: GeneratorState) -> int:
    return 10**state.digits


# ---------------------------------------------------------------------------
# Congruential families
# ---------------------------------------------------------------------------

def _lcg_initialize(params: GeneratorParameters) -> GeneratorState:
    return GeneratorState(window=(params.seed,), modulus=params.modulus)


def _lcg_next(state: GeneratorState, params: GeneratorParameters) -> int:
    return (params.multiplier * state.window[-1] + params.increment) % state.modulus


def _mcg_next(state: GeneratorState, params: GeneratorParameters) -> int:
    return (params.multiplier * state.window[-1]) % state.modulus


def _qcg_next(state: GeneratorState, params: GeneratorParameters) -> int:
    current = state.window[-1]
    # Python's % is non-negative for a positive modulus.
    return (params.a * current * current + params.b * current + params.c) % state.modulus


def _acg_validate(params: GeneratorParameters) -> None:
    _validate_modulus(params)
    if len(params.seeds) < 2:
        raise InvalidParameterError("The additive generator needs at least two seeds.")


def _acg_initialize(params: GeneratorParameters) -> GeneratorState:
    return GeneratorState(window=params.seeds, modulus=params.modulus)


def _acg_next(state: GeneratorState, params: GeneratorParameters) -> int:
    # window holds the last k values, so window[0] is x[n-k].
    return (state.window[-1] + state.window[0]) % state.modulus


def _bbs_validate(params: GeneratorParameters) -> None:
    for name in ("p", "q"):
        value = getattr(params, name)
        if not is_prime(value):
            raise StructuralConstraintError(f"Blum Blum Shub requires '{name}' to be prime, got {value}.")
        if value % 4 != 3:
            raise StructuralConstraintError(
                f"Blum Blum Shub requires '{name}' ≡ 3 (mod 4), got {value} ≡ {value % 4}."
            )
    modulus = params.p * params.q
    if math.gcd(params.seed, modulus) != 1:
        raise StructuralConstraintError(
            f"Blum Blum Shub seed {params.seed} must be coprime with p*q = {modulus}."
        )


def _bbs_initialize(params: GeneratorParameters) -> GeneratorState:
    return GeneratorState(window=(params.seed,), modulus=params.p * params.q)


def _bbs_next(state: GeneratorState, params: GeneratorParameters) -> int:
    return pow(state.window[-1], 2, state.modulus)


# ---------------------------------------------------------------------------
# Digit-extraction families
# ---------------------------------------------------------------------------

def _digit_initialize(params: GeneratorParameters) -> GeneratorState:
    digits = digit_length(params.seed)
    return GeneratorState(window=params.seeds[:2], modulus=10**digits, digits=digits)


def _msm_validate(params: GeneratorParameters) -> None:
    if len(params.seeds) != 1:
        raise InvalidParameterError("The mid-square method takes exactly one seed.")


def _msm_next(state: GeneratorState, params: GeneratorParameters) -> int:
    current = state.window[-1]
    return middle_digits(current * current, state.digits)


def _mpm_validate(params: GeneratorParameters) -> None:
    if len(params.seeds) != 2:
        raise InvalidParameterError("The mid-product method takes exactly two seeds.")
    first, second = params.seeds
    if digit_length(first) != digit_length(second):
        raise StructuralConstraintError(
            f"Mid-product seeds must have the same digit length, got {first} and {second}."
        )


def _mpm_next(state: GeneratorState, params: GeneratorParameters) -> int:
    previous, current = state.window
    return middle_digits(previous * current, state.digits)


def _cmm_validate(params: GeneratorParameters) -> None:
    if len(params.seeds) != 1:
        raise InvalidParameterError("The constant multiplier method takes exactly one seed.")
    if digit_length(params.constant) > digit_length(params.seed):
        raise StructuralConstraintError(
            f"Constant {params.constant} has more digits than seed {params.seed}."
        )


def _cmm_next(state: GeneratorState, params: GeneratorParameters) -> int:
    return middle_digits(params.constant * state.window[-1], state.digits)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def _registry() -> Dict[str, AlgorithmDefinition]:
    definitions = (
        AlgorithmDefinition(
            name="msm",
            title="Mid-square method",
            required=("seeds",),
            validate=_msm_validate,
            initialize=_digit_initialize,
            next=_msm_next,
            divisor=_digit_divisor,
            update=_single,
            closed_upper_bound=False,
        ),
        AlgorithmDefinition(
            name="mpm",
            title="Mid-product method",
            required=("seeds",),
            validate=_mpm_validate,
            initialize=_digit_initialize,
            next=_mpm_next,
            divisor=_digit_divisor,
            update=_sliding,
            closed_upper_bound=False,
        ),
        AlgorithmDefinition(
            name="cmm",
            title="Constant multiplier method",
            required=("seeds", "constant"),
            validate=_cmm_validate,
            initialize=_digit_initialize,
            next=_cmm_next,
            divisor=_digit_divisor,
            update=_single,
            closed_upper_bound=False,
        ),
        AlgorithmDefinition(
            name="lcg",
            title="Linear congruential generator",
            required=("seeds", "multiplier", "increment", "modulus"),
            validate=_validate_modulus,
            initialize=_lcg_initialize,
            next=_lcg_next,
            divisor=_modulus_divisor,
            update=_single,
        ),
        AlgorithmDefinition(
            name="mcg",
            title="Multiplicative congruential generator",
            required=("seeds", "multiplier", "modulus"),
            validate=_validate_modulus,
            initialize=_lcg_initialize,
            next=_mcg_next,
            divisor=_modulus_divisor,
            update=_single,
        ),
        AlgorithmDefinition(
            name="acg",
            title="Additive congruential generator",
            required=("seeds", "modulus"),
            validate=_acg_validate,
            initialize=_acg_initialize,
            next=_acg_next,
            divisor=_modulus_divisor,
            update=_sliding,
        ),
        AlgorithmDefinition(
            name="qcg",
            title="Quadratic congruential generator",
            required=("seeds", "a", "b", "c", "modulus"),
            validate=_validate_modulus,
            initialize=_lcg_initialize,
            next=_qcg_next,
            divisor=_modulus_divisor,
            update=_single,
        ),
        AlgorithmDefinition(
            name="bbs",
            title="Blum Blum Shub",
            required=("seeds", "p", "q"),
            validate=_bbs_validate,
            initialize=_bbs_initialize,
            next=_bbs_next,
            divisor=_modulus_divisor,
            update=_single,
        ),
    )
    return {definition.name: definition for definition in definitions}


ALGORITHMS: Mapping[str, AlgorithmDefinition] = _registry()


def get_algorithm(name: str) -> AlgorithmDefinition:
    """Look up an algorithm by its short name (case insensitive)."""

    definition = ALGORITHMS.get(name.strip().lower())
    if definition is None:
        known = ", ".join(sorted(ALGORITHMS))
        raise InvalidParameterError(f"Unknown algorithm '{name}'. Known algorithms: {known}.")
    return definition


def generate(
    algorithm: str,
    params: GeneratorParameters,
    *,
    mode: TerminationMode | str = TerminationMode.UNTIL_CYCLE,
    count: int | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    cancel_event: threading.Event | None = None,
) -> GeneratedSequence:
    """Generate a sequence with the named ``algorithm``."""

    return run_generator(
        get_algorithm(algorithm),
        params,
        mode=mode,
        count=count,
        max_iterations=max_iterations,
        cancel_event=cancel_event,
    )


# ---------------------------------------------------------------------------
# Convenience wrappers
# ---------------------------------------------------------------------------

def msm(seed: int, **options) -> GeneratedSequence:
    return generate("msm", GeneratorParameters(seeds=(seed,)), **options)


def mpm(seed1: int, seed2: int, **options) -> GeneratedSequence:
    return generate("mpm", GeneratorParameters(seeds=(seed1, seed2)), **options)


def cmm(seed: int, constant: int, **options) -> GeneratedSequence:
    return generate("cmm", GeneratorParameters(seeds=(seed,), constant=constant), **options)


def lcg(seed: int, multiplier: int, increment: int, modulus: int, **options) -> GeneratedSequence:
    params = GeneratorParameters(
        seeds=(seed,), multiplier=multiplier, increment=increment, modulus=modulus
    )
    return generate("lcg", params, **options)


def mcg(seed: int, multiplier: int, modulus: int, **options) -> GeneratedSequence:
    params = GeneratorParameters(seeds=(seed,), multiplier=multiplier, modulus=modulus)
    return generate("mcg", params, **options)


def acg(seeds, modulus: int, **options) -> GeneratedSequence:
    return generate("acg", GeneratorParameters(seeds=tuple(seeds), modulus=modulus), **options)


def qcg(seed: int, a: int, b: int, c: int, modulus: int, **options) -> GeneratedSequence:
    params = GeneratorParameters(seeds=(seed,), a=a, b=b, c=c, modulus=modulus)
    return generate("qcg", params, **options)


def bbs(seed: int, p: int, q: int, **options) -> GeneratedSequence:
    return generate("bbs", GeneratorParameters(seeds=(seed,), p=p, q=q), **options)


__all__ = [
    "ALGORITHMS",
    "acg",
    "bbs",
    "cmm",
    "digit_length",
    "generate",
    "get_algorithm",
    "is_prime",
    "lcg",
    "mcg",
    "middle_digits",
    "mpm",
    "msm",
    "qcg",
]
