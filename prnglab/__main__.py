"""Command line entry point for the PRNG laboratory."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .app import PrngLabApp
from .errors import (
    DigitOverflowError,
    GenerationCancelledError,
    GenerationDidNotTerminateError,
    InvalidConfigurationError,
    InvalidInputError,
    InvalidParameterError,
    MissingFileError,
    StructuralConstraintError,
    TestExecutionError,
    UnsupportedOperationError,
    UnusableUniformError,
)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_MISSING_FILE = 2
EXIT_INVALID_CONFIG = 3
EXIT_TEST_FAILURE = 4
EXIT_INVALID_PARAMETERS = 5

_PARAMETER_ERRORS = (
    InvalidParameterError,
    StructuralConstraintError,
    DigitOverflowError,
    GenerationDidNotTerminateError,
    GenerationCancelledError,
    UnsupportedOperationError,
    InvalidInputError,
    UnusableUniformError,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prnglab",
        description=(
            "Generate pseudo-random sequences, transform them into random variables "
            "and run the randomness and goodness-of-fit batteries."
        ),
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        required=True,
        help="Path to the INI configuration file describing the run.",
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        help="Optional file with one uniform value per line, used instead of the [generator] section.",
    )
    parser.add_argument(
        "--report",
        "-r",
        type=Path,
        help="Optional path where a markdown report will be written.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print detailed per-test information to the console output.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    app = PrngLabApp()
    try:
        app.run(
            config_path=args.config,
            input_path=args.input,
            report_path=args.report,
            verbose=args.verbose,
        )
    except MissingFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_MISSING_FILE
    except InvalidConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except TestExecutionError as exc:
        print(f"Test execution failed: {exc}", file=sys.stderr)
        return EXIT_TEST_FAILURE
    except _PARAMETER_ERRORS as exc:
        print(f"Invalid parameters: {exc}", file=sys.stderr)
        return EXIT_INVALID_PARAMETERS
    except Exception as exc:  # pragma: no cover - defensive guard
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
