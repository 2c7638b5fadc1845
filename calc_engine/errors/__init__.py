"""
Error classification system for expression evaluation.

This module provides the exception hierarchy for failures raised while
converting and evaluating expressions, and for the supporting system
layers (configuration and history persistence).
"""

from .evaluation import (
    ErrorKind,
    EvaluationError,
    MalformedExpressionError,
    StackUnderflowError,
    DomainError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ConfigurationError,
)

__all__ = [
    # Evaluation Errors
    "ErrorKind",
    "EvaluationError",
    "MalformedExpressionError",
    "StackUnderflowError",
    "DomainError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "ConfigurationError",
]
