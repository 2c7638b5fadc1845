"""
Expression engine data models.

This module defines the immutable result of an evaluation along with the
mode enumerations the engine passes into the evaluator.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config.defaults import DisplayParams
from ..errors import ErrorKind
from .formatter import format_number

__all__ = ["AngleMode", "CalculatorMode", "ErrorKind", "EvaluationResult"]


class AngleMode(str, Enum):
    """Interpretation of trigonometric function inputs."""
    RADIANS = "radians"
    DEGREES = "degrees"


class CalculatorMode(str, Enum):
    """Input mode of the calculator."""
    BASIC = "basic"          # left-to-right accumulation, no precedence
    ADVANCED = "advanced"    # full expression entry


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating an expression: a finite value or an error kind."""

    value: Optional[float] = None
    error: Optional[ErrorKind] = None
    raw_value: Optional[float] = None      # non-finite value behind a numeric error
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display(self) -> str:
        return self.render()

    def render(self, params: Optional[DisplayParams] = None) -> str:
        """Format for the display, using ``params`` or the default display settings."""
        if params is None:
            params = DisplayParams()
        if not self.ok:
            return params.error_text
        return format_number(self.value, params)

    @classmethod
    def success(cls, value: float) -> "EvaluationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: Optional[str] = None,
                raw_value: Optional[float] = None) -> "EvaluationResult":
        return cls(error=error, message=message, raw_value=raw_value)

    @classmethod
    def from_value(cls, value: float, division_by_zero: bool = False) -> "EvaluationResult":
        """
        Classify a raw evaluated number.

        Finite values succeed. A non-finite value becomes DIVISION_BY_ZERO when
        a zero divisor was seen during evaluation, DOMAIN_ERROR when it is NaN,
        and NOT_FINITE otherwise.
        """
        if math.isfinite(value):
            return cls.success(value)

        if division_by_zero:
            kind = ErrorKind.DIVISION_BY_ZERO
        elif math.isnan(value):
            kind = ErrorKind.DOMAIN_ERROR
        else:
            kind = ErrorKind.NOT_FINITE

        return cls.failure(kind, message=f"Result is not finite: {value}", raw_value=value)
