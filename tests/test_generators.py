from __future__ import annotations

import threading

import pytest

from prnglab.errors import (
    DigitOverflowError,
    GenerationCancelledError,
    GenerationDidNotTerminateError,
    InvalidParameterError,
    StructuralConstraintError,
)
from prnglab.generators import (
    GeneratorParameters,
    TerminationMode,
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


def test_lcg_count_mode_matches_recurrence() -> None:
    sequence = lcg(7, 5, 3, 16, mode="count", count=5)

    assert sequence.raw == (6, 1, 8, 11, 10)
    assert sequence.values == pytest.approx([6 / 15, 1 / 15, 8 / 15, 11 / 15, 10 / 15])
    assert sequence.divisor == 15
    assert sequence.terminated_by == "count"
    assert sequence.mode is TerminationMode.COUNT


def test_generation_is_deterministic() -> None:
    first = lcg(12345, 1103515245, 12345, 2**31, mode="count", count=50)
    second = lcg(12345, 1103515245, 12345, 2**31, mode="count", count=50)

    assert first.raw == second.raw


def test_full_period_lcg_stops_before_repeat() -> None:
    sequence = lcg(7, 5, 3, 16)

    assert len(sequence) == 16
    assert len(set(sequence.raw)) == 16
    assert sequence.terminated_by == "cycle"


def test_mcg_values_lie_in_closed_unit_interval() -> None:
    sequence = mcg(1, 3, 7)

    assert sequence.raw == (3, 2, 6, 4, 5, 1)
    assert all(0.0 <= value <= 1.0 for value in sequence)
    assert max(sequence.values) == 1.0


def test_qcg_uses_quadratic_recurrence() -> None:
    sequence = qcg(1, 2, 3, 1, 11, mode="count", count=3)

    # 2*1 + 3 + 1 = 6; 2*36 + 18 + 1 = 91 % 11 = 3; 2*9 + 9 + 1 = 28 % 11 = 6
    assert sequence.raw == (6, 3, 6)


def test_acg_emits_only_generated_values() -> None:
    sequence = acg((1, 2), 10)

    assert sequence.raw == (3, 5, 8)


def test_acg_requires_two_seeds() -> None:
    with pytest.raises(InvalidParameterError):
        acg((4,), 10)


def test_bbs_squares_modulo_blum_integer() -> None:
    sequence = bbs(3, 7, 11)

    assert sequence.raw == (9, 4, 16, 25)
    assert sequence.divisor == 76


@pytest.mark.parametrize(
    ("seed", "p", "q"),
    [
        (3, 5, 11),  # 5 is not congruent to 3 mod 4
        (3, 15, 11),  # 15 is not prime
        (7, 7, 11),  # seed shares a factor with p*q
    ],
)
def test_bbs_rejects_structural_violations(seed: int, p: int, q: int) -> None:
    with pytest.raises(StructuralConstraintError):
        bbs(seed, p, q)


def test_msm_extracts_middle_digits() -> None:
    sequence = msm(1234, mode="count", count=1)

    assert sequence.raw == (5227,)
    assert sequence.divisor == 10_000


def test_middle_digits_rejects_oversized_product() -> None:
    assert middle_digits(1522756, 4) == 5227
    with pytest.raises(DigitOverflowError):
        middle_digits(10**8, 4)


def test_mpm_requires_equal_seed_lengths() -> None:
    with pytest.raises(StructuralConstraintError):
        mpm(12, 345)


def test_cmm_rejects_long_constant() -> None:
    with pytest.raises(StructuralConstraintError):
        cmm(12, 345)


def test_modulus_must_exceed_one() -> None:
    with pytest.raises(InvalidParameterError):
        lcg(1, 5, 3, 1)


def test_parameters_must_be_natural_numbers() -> None:
    with pytest.raises(InvalidParameterError):
        GeneratorParameters(seeds=(0,), modulus=16)
    with pytest.raises(InvalidParameterError):
        GeneratorParameters(seeds=(1,), modulus=True)


def test_missing_parameters_are_reported() -> None:
    with pytest.raises(InvalidParameterError, match="modulus"):
        generate("lcg", GeneratorParameters(seeds=(1,), multiplier=5, increment=3))


def test_unknown_algorithm_is_rejected() -> None:
    with pytest.raises(InvalidParameterError):
        generate("xorshift", GeneratorParameters(seeds=(1,)))


def test_iteration_cap_stops_cycle_mode() -> None:
    with pytest.raises(GenerationDidNotTerminateError):
        lcg(7, 5, 3, 16, max_iterations=3)


def test_count_larger_than_cap_is_rejected() -> None:
    with pytest.raises(InvalidParameterError):
        lcg(7, 5, 3, 16, mode="count", count=10, max_iterations=5)


def test_count_mode_requires_positive_count() -> None:
    with pytest.raises(InvalidParameterError):
        lcg(7, 5, 3, 16, mode="count")


def test_cancel_event_stops_generation() -> None:
    event = threading.Event()
    event.set()

    with pytest.raises(GenerationCancelledError):
        lcg(7, 5, 3, 16, cancel_event=event)


def test_digit_methods_stay_below_one() -> None:
    sequence = msm(5735)

    assert get_algorithm("msm").closed_upper_bound is False
    assert get_algorithm("lcg").closed_upper_bound is True
    assert all(0.0 <= value < 1.0 for value in sequence)
