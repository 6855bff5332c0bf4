"""Input/output helpers for reading uniform sequences and parameter lists."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PureWindowsPath
from typing import Literal, Tuple

from .errors import (
    EmptyInputFileError,
    InputTooLargeError,
    InvalidInputError,
    InvalidParameterError,
    MissingFileError,
)

EntryCategory = Literal["numeric", "non_numeric", "empty"]

DEFAULT_MAX_ENTRIES = 1_000_000


@dataclass(frozen=True)
class SequenceData:
    """Uniform values loaded from a sequence file."""

    path: Path
    values: Tuple[float, ...]
    skipped_blank_lines: int

    @property
    def entry_count(self) -> int:
        return len(self.values)


NUMERIC_PATTERN = re.compile(
    r"""
    ^
    [+-]?
    (
        (?:\d+\.\d+)|
        (?:\d+\.)|
        (?:\.\d+)|
        (?:\d+)
    )
    (?:[eE][+-]?\d+)?
    $
    """,
    re.VERBOSE,
)


def read_sequence_file(path: Path | str, *, max_entries: int | None = DEFAULT_MAX_ENTRIES) -> SequenceData:
    """Read one uniform value per line from ``path`` using UTF-8 encoding.

    Blank lines are ignored.  Every other line must be a decimal number in
    ``[0, 1]``.
    """

    candidate = _normalise_path(path)
    if not candidate.exists():
        raise MissingFileError(f"Input file not found: {candidate}")
    try:
        with candidate.open("r", encoding="utf-8", newline="") as handle:
            entries = tuple(line.rstrip("\r\n") for line in handle)
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read input file: {candidate}") from exc

    non_empty = [(number, entry.strip()) for number, entry in enumerate(entries, start=1) if entry.strip()]
    if not non_empty:
        raise EmptyInputFileError(
            f"Input file '{candidate}' does not contain any non-empty entries."
        )
    if max_entries is not None and len(non_empty) > max_entries:
        raise InputTooLargeError(
            f"Input file '{candidate}' has {len(non_empty)} entries, exceeding the allowed maximum of {max_entries}."
        )

    values: list[float] = []
    for number, entry in non_empty:
        if _classify_entry_cached(entry) != "numeric":
            raise InvalidInputError(f"Line {number} of '{candidate}' is not a number: {entry!r}.")
        value = float(entry)
        if not 0.0 <= value <= 1.0:
            raise InvalidInputError(
                f"Line {number} of '{candidate}' must lie in [0, 1], got {value}."
            )
        values.append(value)
    return SequenceData(
        path=candidate,
        values=tuple(values),
        skipped_blank_lines=len(entries) - len(non_empty),
    )


def parse_seed_list(raw: str) -> Tuple[int, ...]:
    """Parse a comma separated list of natural numbers."""

    seeds: list[int] = []
    for token in _split_list(raw):
        if not re.fullmatch(r"[0-9]+", token):
            raise InvalidParameterError(f"Seed '{token}' is not a natural number.")
        value = int(token)
        if value <= 0:
            raise InvalidParameterError(f"Seed '{token}' must be greater than zero.")
        seeds.append(value)
    if not seeds:
        raise InvalidParameterError("At least one seed is required.")
    return tuple(seeds)


def parse_float_list(raw: str) -> Tuple[float, ...]:
    """Parse a comma separated list of finite decimal numbers."""

    values: list[float] = []
    for token in _split_list(raw):
        if _classify_entry_cached(token) != "numeric":
            raise InvalidParameterError(f"Value '{token}' is not a number.")
        value = float(token)
        if not math.isfinite(value):  # pragma: no cover - pattern excludes inf/nan
            raise InvalidParameterError(f"Value '{token}' must be finite.")
        values.append(value)
    return tuple(values)


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(token.strip() for token in raw.split(",") if token.strip())


def _classify_entry(entry: str) -> EntryCategory:
    stripped = entry.strip()
    if not stripped:
        return "empty"
    if NUMERIC_PATTERN.fullmatch(stripped):
        return "numeric"
    return "non_numeric"


def _normalise_path(path: Path | str) -> Path:
    if isinstance(path, str) and re.match(r"^[A-Za-z]:\\", path):
        return Path(PureWindowsPath(path))
    return Path(path).expanduser().resolve()


@lru_cache(maxsize=2048)
def _classify_entry_cached(entry: str) -> EntryCategory:
    """Memoized wrapper around :func:`_classify_entry` for repeated tokens."""

    return _classify_entry(entry)


__all__ = [
    "DEFAULT_MAX_ENTRIES",
    "SequenceData",
    "parse_float_list",
    "parse_seed_list",
    "read_sequence_file",
]
