"""Custom exceptions for the pseudo-random number laboratory."""

from __future__ import annotations


class PrngLabError(Exception):
    """Base error type for application specific failures."""


class MissingFileError(PrngLabError):
    """Raised when a required input file could not be located."""


class InvalidConfigurationError(PrngLabError):
    """Raised when the configuration file is malformed or invalid."""


class TestExecutionError(PrngLabError):
    """Raised when one or more statistical tests fail to execute."""


class InvalidInputError(PrngLabError):
    """Raised when the provided input data does not meet application constraints."""


class EmptyInputFileError(InvalidInputError):
    """Raised when the input file does not contain any usable entries."""


class InputTooLargeError(InvalidInputError):
    """Raised when the input file exceeds the supported number of entries."""


class InvalidParameterError(PrngLabError, ValueError):
    """Raised when a numeric parameter is out of range or malformed."""


class StructuralConstraintError(PrngLabError):
    """Raised when parameters violate an algorithm's structural requirements."""


class DigitOverflowError(PrngLabError, ArithmeticError):
    """Raised when a digit-extraction product outgrows its ``2L`` digit window."""


class StreamExhaustedError(PrngLabError):
    """Raised when a distribution draw needs more uniforms than remain."""


class UnusableUniformError(PrngLabError, ValueError):
    """Raised when a transform is undefined at one value of the uniform stream."""

    def __init__(self, message: str, *, index: int) -> None:
        super().__init__(message)
        self.index = index


class GenerationDidNotTerminateError(PrngLabError):
    """Raised when a cycle-terminated run reaches its iteration cap."""


class GenerationCancelledError(PrngLabError):
    """Raised when a generation run observes its cancellation event."""


class UnsupportedOperationError(PrngLabError):
    """Raised when a model does not provide the requested capability."""
