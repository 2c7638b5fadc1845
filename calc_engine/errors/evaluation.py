"""
Evaluation error classifications for expression processing.

These exceptions are raised inside the converter and evaluator and are
caught at the evaluation boundary, where they become a failed
EvaluationResult rendered as the display marker ``Error``.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Kinds of evaluation failure carried by an EvaluationResult."""
    MALFORMED_EXPRESSION = "malformed_expression"
    STACK_UNDERFLOW = "stack_underflow"
    DIVISION_BY_ZERO = "division_by_zero"
    NOT_FINITE = "not_finite"
    DOMAIN_ERROR = "domain_error"


class EvaluationError(Exception):
    """Base class for expression evaluation failures."""

    kind = ErrorKind.DOMAIN_ERROR

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedExpressionError(EvaluationError):
    """Unbalanced parentheses or operands left over after evaluation."""

    kind = ErrorKind.MALFORMED_EXPRESSION

    def __init__(self, message: str, position: Optional[int] = None,
                 leftover_operands: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.position = position
        self.leftover_operands = leftover_operands


class StackUnderflowError(EvaluationError):
    """An operator or function was applied with a missing operand."""

    kind = ErrorKind.STACK_UNDERFLOW

    def __init__(self, message: str, token: Optional[str] = None,
                 required: Optional[int] = None, available: Optional[int] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.token = token
        self.required = required
        self.available = available


class DomainError(EvaluationError):
    """Input outside what the engine can evaluate, e.g. an unknown symbol."""

    kind = ErrorKind.DOMAIN_ERROR

    def __init__(self, message: str, symbol: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol
