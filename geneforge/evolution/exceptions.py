"""
Evolution Engine Exception Classes

This module defines the exceptions raised by the evolutionary engine and its
operators. Configuration errors are collected and reported together, so a
single exception may describe several independent violations.
"""

import math
from contextlib import contextmanager
from typing import Iterator, List, Optional, Type


class EvolutionError(Exception):
    """Base exception class for all evolution-related errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.suggestion:
            return f"{self.message}. Suggestion: {self.suggestion}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(EvolutionError):
    """
    Raised when a component is built with invalid parameters.

    Carries every violation found in a single validation pass, not just the
    first one.
    """

    subject = "configuration"

    def __init__(self, violations: List[str], suggestion: Optional[str] = None):
        self.violations = list(violations)
        message = f"Invalid {self.subject}: " + "; ".join(
            f"{{ {violation} }}" for violation in self.violations
        )
        super().__init__(message, suggestion)


class EngineConfigurationError(ConfigurationError):
    """Raised when the engine configuration is invalid."""

    subject = "engine configuration"


class SelectionError(ConfigurationError):
    """Raised when a selector is misconfigured or invoked with invalid arguments."""

    subject = "selection"


class CrossoverConfigurationError(ConfigurationError):
    """
    Raised when a crossover is misconfigured or invoked with a number of
    parents different from the one it was built for.
    """

    subject = "crossover configuration"


class MutatorConfigurationError(ConfigurationError):
    """Raised when a mutator rate is outside [0, 1]."""

    subject = "mutator configuration"


class LimitConfigurationError(ConfigurationError):
    """Raised when a limit is built with a non-positive bound."""

    subject = "limit configuration"


class ChromosomeConfigurationError(ConfigurationError):
    """Raised when a chromosome or its factory is built with invalid data."""

    subject = "chromosome configuration"


class ConstraintViolationError(ConfigurationError):
    """
    Raised when a value object is assigned a value breaking its invariants,
    e.g. a negative generation number or steady counter.
    """

    subject = "value"


# =============================================================================
# Runtime Errors
# =============================================================================

class InvalidIndexError(EvolutionError, IndexError):
    """Raised on out-of-range chromosome or genotype indexing."""

    def __init__(self, index: int, size: int, container: str = "sequence"):
        self.index = index
        self.size = size
        self.container = container
        message = f"Index {index} out of range for {container} of size {size}"
        suggestion = f"Use an index in [0, {size})"
        super().__init__(message, suggestion)


class AbsurdOperationError(EvolutionError):
    """
    Raised when an operation is invoked on a sentinel of the uninhabited
    domain (`NothingGene`, `NothingChromosome`).

    This signals a programming error and is never caught by the engine.
    """

    def __init__(self, operation: str):
        self.operation = operation
        message = f"Absurd operation: '{operation}' cannot be performed on an uninhabited type"
        super().__init__(message)


class RecordTimingError(EvolutionError):
    """Raised when a timing field of a record is read before it was measured."""

    def __init__(self, field_name: str, record: str):
        self.field_name = field_name
        self.record = record
        message = f"'{field_name}' of {record} has not been initialized yet"
        suggestion = "Read timing fields only after the phase has started (start_time) or ended (duration)"
        super().__init__(message, suggestion)


class EvolutionStateError(EvolutionError):
    """
    Raised when the population size invariant is broken during a run, which
    can only happen when a user-supplied component misbehaves.
    """

    def __init__(self, expected: int, actual: int, phase: str):
        self.expected = expected
        self.actual = actual
        self.phase = phase
        message = f"Population size after {phase} is {actual}, expected {expected}"
        super().__init__(message)


# =============================================================================
# Utility Functions
# =============================================================================

class Constraints:
    """Collects violations and raises them together as one exception."""

    def __init__(self, error_type: Type[ConfigurationError] = ConfigurationError):
        self.error_type = error_type
        self.violations: List[str] = []

    def require(self, condition: bool, message: str) -> None:
        if not condition:
            self.violations.append(message)

    def raise_if_violated(self) -> None:
        if self.violations:
            raise self.error_type(self.violations)


@contextmanager
def constraints(error_type: Type[ConfigurationError] = ConfigurationError) -> Iterator[Constraints]:
    """Validate a group of requirements in a single pass.

    Example:
        with constraints(LimitConfigurationError) as c:
            c.require(n > 0, f"Generations ({n}) must be positive")
    """
    collector = Constraints(error_type)
    yield collector
    collector.raise_if_violated()


def validate_probability(c: Constraints, name: str, value: float) -> None:
    """Require value to be a probability in [0, 1]."""
    c.require(
        not math.isnan(value) and 0.0 <= value <= 1.0,
        f"The {name} ({value}) must be in 0.0..1.0",
    )


def validate_positive(c: Constraints, name: str, value: float) -> None:
    """Require value to be strictly positive."""
    c.require(value > 0, f"The {name} ({value}) must be positive")


def validate_non_negative(c: Constraints, name: str, value: float) -> None:
    """Require value to be zero or positive."""
    c.require(value >= 0, f"The {name} ({value}) must not be negative")
