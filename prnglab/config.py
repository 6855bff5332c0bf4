"""Configuration parsing utilities for the PRNG laboratory."""

from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .distributions import get_distribution
from .errors import InvalidConfigurationError, InvalidParameterError, MissingFileError
from .generators import DEFAULT_MAX_ITERATIONS, GeneratorParameters, TerminationMode, get_algorithm
from .io import parse_float_list, parse_seed_list
from .logging import DEFAULT_LOG_PATH, DEFAULT_LOG_RETENTION, LOG_FORMATS

RANDOMNESS_TESTS: Tuple[str, ...] = (
    "mean_variance",
    "chi_square",
    "runs",
    "run_length",
    "gaps",
    "poker",
)
GOODNESS_TESTS: Tuple[str, ...] = ("chi_square", "kolmogorov_smirnov")

_NUMERIC_FIELDS: Tuple[str, ...] = (
    "modulus",
    "multiplier",
    "increment",
    "a",
    "b",
    "c",
    "constant",
    "p",
    "q",
)


@dataclass(frozen=True)
class GeneratorSection:
    """Algorithm choice and parameters for the generation stage."""

    algorithm: str
    parameters: GeneratorParameters
    mode: TerminationMode = TerminationMode.UNTIL_CYCLE
    count: Optional[int] = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS


@dataclass(frozen=True)
class RandomnessSection:
    """Configuration data describing which randomness tests are enabled."""

    enabled_tests: Tuple[str, ...] = RANDOMNESS_TESTS
    gap_lower: float = 0.0
    gap_upper: float = 0.5


@dataclass(frozen=True)
class DistributionSection:
    """Distribution transform and goodness-of-fit options."""

    name: str
    params: Tuple[float, ...]
    tests: Tuple[str, ...] = GOODNESS_TESTS
    estimated_parameters: int = 0
    limit: Optional[int] = None


@dataclass(frozen=True)
class OutputSection:
    """Options controlling how results should be presented to the user."""

    log_results: bool
    report_path: Path | None
    run_log_path: Path
    run_log_format: str
    run_log_retention: int | None


@dataclass(frozen=True)
class PrngLabConfig:
    """Aggregate configuration container returned by :func:`load_config`."""

    generator: GeneratorSection | None
    randomness: RandomnessSection
    distribution: DistributionSection | None
    output: OutputSection
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def load_config(path: Path) -> PrngLabConfig:
    """Load and validate an INI configuration file."""

    parser = configparser.ConfigParser()
    try:
        with path.open("r", encoding="utf-8") as config_file:
            parser.read_file(config_file)
    except FileNotFoundError as exc:
        raise MissingFileError(f"Configuration file not found: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read configuration file: {path}") from exc
    except configparser.Error as exc:
        raise InvalidConfigurationError(f"Configuration is not valid INI: {exc}") from exc

    warnings: list[str] = []
    generator_section = _parse_generator(parser)
    randomness_section = _parse_randomness(parser, warnings)
    distribution_section = _parse_distribution(parser)
    output_section = _parse_output(parser, path)

    return PrngLabConfig(
        generator=generator_section,
        randomness=randomness_section,
        distribution=distribution_section,
        output=output_section,
        warnings=tuple(warnings),
    )


def _parse_generator(parser: configparser.ConfigParser) -> GeneratorSection | None:
    if not parser.has_section("generator"):
        return None
    section = parser["generator"]
    algorithm = section.get("algorithm", "").strip().lower()
    if not algorithm:
        raise InvalidConfigurationError("Option 'algorithm' in [generator] is required.")
    try:
        get_algorithm(algorithm)
    except InvalidParameterError as exc:
        raise InvalidConfigurationError(str(exc)) from exc

    seeds: Tuple[int, ...] = ()
    for key in ("seeds", "seed"):
        if key in section:
            try:
                seeds = parse_seed_list(section[key])
            except InvalidParameterError as exc:
                raise InvalidConfigurationError(
                    f"Option '{key}' in [generator] is invalid: {exc}"
                ) from exc
            break

    numeric: dict[str, int] = {}
    for name in _NUMERIC_FIELDS:
        if name in section:
            numeric[name] = _get_int(section, name, "generator")

    raw_mode = section.get("mode", TerminationMode.UNTIL_CYCLE.value).strip().lower()
    try:
        mode = TerminationMode(raw_mode)
    except ValueError as exc:
        raise InvalidConfigurationError(
            "Option 'mode' in [generator] must be either 'until_cycle' or 'count'."
        ) from exc
    count = _get_int(section, "count", "generator") if "count" in section else None
    if mode is TerminationMode.COUNT and count is None:
        raise InvalidConfigurationError("Option 'count' in [generator] is required for mode 'count'.")
    max_iterations = DEFAULT_MAX_ITERATIONS
    if "max_iterations" in section:
        max_iterations = _get_int(section, "max_iterations", "generator")

    try:
        parameters = GeneratorParameters(seeds=seeds, **numeric)
    except InvalidParameterError as exc:
        raise InvalidConfigurationError(f"Invalid [generator] parameters: {exc}") from exc

    return GeneratorSection(
        algorithm=algorithm,
        parameters=parameters,
        mode=mode,
        count=count,
        max_iterations=max_iterations,
    )


def _parse_randomness(
    parser: configparser.ConfigParser, warnings: list[str]
) -> RandomnessSection:
    if not parser.has_section("randomness"):
        return RandomnessSection()
    section = parser["randomness"]
    enabled: list[str] = []
    for name in RANDOMNESS_TESTS:
        if name not in section:
            enabled.append(name)
            continue
        try:
            is_enabled = section.getboolean(name)
        except ValueError as exc:
            raise InvalidConfigurationError(
                f"Test '{name}' in [randomness] must be a boolean value."
            ) from exc
        if is_enabled:
            enabled.append(name)

    known = set(RANDOMNESS_TESTS) | {"gap_lower", "gap_upper"}
    for key in section:
        if key not in known and key not in parser.defaults():
            raise InvalidConfigurationError(f"Unknown randomness test '{key}' in configuration.")

    if not enabled:
        raise InvalidConfigurationError("At least one test must be enabled in [randomness] section.")

    gap_lower = _get_float(section, "gap_lower", "randomness", 0.0)
    gap_upper = _get_float(section, "gap_upper", "randomness", 0.5)
    if not 0.0 <= gap_lower < gap_upper <= 1.0:
        raise InvalidConfigurationError(
            "Options 'gap_lower' and 'gap_upper' in [randomness] must satisfy 0 <= lower < upper <= 1."
        )
    if "gaps" in enabled and gap_upper - gap_lower > 0.9:
        warnings.append("Gap interval covers almost the whole unit interval; gaps will be rare.")
    return RandomnessSection(enabled_tests=tuple(enabled), gap_lower=gap_lower, gap_upper=gap_upper)


def _parse_distribution(parser: configparser.ConfigParser) -> DistributionSection | None:
    if not parser.has_section("distribution"):
        return None
    section = parser["distribution"]
    name = section.get("name", "").strip().lower()
    if not name:
        raise InvalidConfigurationError("Option 'name' in [distribution] is required.")
    try:
        model = get_distribution(name)
        params = parse_float_list(section.get("params", ""))
        model.validate(params)
    except InvalidParameterError as exc:
        raise InvalidConfigurationError(f"Invalid [distribution] settings: {exc}") from exc

    tests = GOODNESS_TESTS
    if "tests" in section:
        tests = tuple(item.strip().lower() for item in section["tests"].split(",") if item.strip())
        unknown = [item for item in tests if item not in GOODNESS_TESTS]
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown goodness-of-fit test(s) in [distribution]: {', '.join(unknown)}."
            )

    estimated = 0
    if "estimated_parameters" in section:
        estimated = _get_int(section, "estimated_parameters", "distribution", minimum=0)
    limit = _get_int(section, "limit", "distribution") if "limit" in section else None

    return DistributionSection(
        name=name,
        params=params,
        tests=tests,
        estimated_parameters=estimated,
        limit=limit,
    )


def _parse_output(
    parser: configparser.ConfigParser, config_path: Path
) -> OutputSection:
    base_dir = config_path.resolve().parent
    if parser.has_section("logging"):
        raise InvalidConfigurationError(
            "Section [logging] is not supported; set the log_* options in [output]."
        )
    if not parser.has_section("output"):
        return OutputSection(
            log_results=False,
            report_path=None,
            run_log_path=(base_dir / DEFAULT_LOG_PATH).resolve(),
            run_log_format=LOG_FORMATS[0],
            run_log_retention=DEFAULT_LOG_RETENTION,
        )

    section = parser["output"]
    try:
        log_results = section.getboolean("log_results", fallback=False)
    except ValueError as exc:
        raise InvalidConfigurationError("Option 'log_results' in [output] must be a boolean value.") from exc

    log_format = section.get("log_format", LOG_FORMATS[0]).strip().lower()
    if log_format not in LOG_FORMATS:
        raise InvalidConfigurationError(
            f"Option 'log_format' in [output] must be one of: {', '.join(LOG_FORMATS)}."
        )

    # A retention of zero or less keeps every run.
    log_retention: int | None = DEFAULT_LOG_RETENTION
    raw_retention = section.get("log_retention", "").strip()
    if raw_retention:
        try:
            parsed = int(raw_retention)
        except ValueError as exc:
            raise InvalidConfigurationError(
                "Option 'log_retention' in [output] must be an integer value."
            ) from exc
        log_retention = parsed if parsed > 0 else None

    return OutputSection(
        log_results=log_results,
        report_path=_resolve_path(section.get("report_path", ""), base_dir),
        run_log_path=_resolve_path(section.get("log_path", ""), base_dir)
        or (base_dir / DEFAULT_LOG_PATH).resolve(),
        run_log_format=log_format,
        run_log_retention=log_retention,
    )


def _resolve_path(raw: str, base_dir: Path) -> Path | None:
    raw = raw.strip()
    if not raw:
        return None
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


def _get_int(
    section: configparser.SectionProxy, key: str, section_name: str, *, minimum: int = 1
) -> int:
    raw = section[key].strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section_name}] must be an integer value."
        ) from exc
    if value < minimum:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section_name}] must be at least {minimum}."
        )
    return value


def _get_float(
    section: configparser.SectionProxy, key: str, section_name: str, default: float
) -> float:
    if key not in section:
        return default
    try:
        return float(section[key].strip())
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{key}' in [{section_name}] must be numeric."
        ) from exc


__all__ = [
    "DistributionSection",
    "GOODNESS_TESTS",
    "GeneratorSection",
    "OutputSection",
    "PrngLabConfig",
    "RANDOMNESS_TESTS",
    "RandomnessSection",
    "load_config",
]
