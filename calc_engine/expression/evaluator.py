"""
Postfix evaluation.

Evaluates a postfix token sequence with a single numeric stack. Binary
operators pop their right operand first. Arithmetic follows IEEE rules
(division by zero gives infinity, an undefined result gives NaN) instead
of raising, and the non-finite value is classified when the result is
built. Structural problems raise EvaluationError subclasses, which
``evaluate`` turns into a failed EvaluationResult.
"""

import math
from collections.abc import Sequence
from typing import Callable

from ..errors import DomainError, EvaluationError, MalformedExpressionError, StackUnderflowError
from ..logging.config import get_evaluation_logger, log_evaluation
from .converter import to_postfix
from .models import AngleMode, EvaluationResult
from .tokens import (
    CloseParen,
    ConstantToken,
    Function,
    FunctionToken,
    NumberToken,
    OpenParen,
    Operator,
    OperatorToken,
    Token,
    expression_to_string,
)

logger = get_evaluation_logger(__name__)


def _trig(fn: Callable[[float], float], x: float, angle_mode: AngleMode) -> float:
    if not math.isfinite(x):
        return math.nan
    if angle_mode is AngleMode.DEGREES:
        x = math.radians(x)
    return fn(x)


def _logarithm(fn: Callable[[float], float], x: float) -> float:
    if x == 0:
        return -math.inf
    if x < 0:
        return math.nan
    return fn(x)


def apply_function(function: Function, x: float,
                   angle_mode: AngleMode = AngleMode.RADIANS) -> float:
    """Apply a unary function, returning NaN or infinity outside its domain."""
    match function:
        case Function.SIN:
            return _trig(math.sin, x, angle_mode)
        case Function.COS:
            return _trig(math.cos, x, angle_mode)
        case Function.TAN:
            return _trig(math.tan, x, angle_mode)
        case Function.LN:
            return _logarithm(math.log, x)
        case Function.LOG:
            return _logarithm(math.log10, x)
        case Function.SQRT:
            return math.nan if x < 0 else math.sqrt(x)
        case Function.NEG:
            return -x
        case Function.SQUARE:
            return x * x
        case Function.RECIPROCAL:
            return math.inf if x == 0 else 1 / x


class PostfixEvaluator:
    """Evaluates postfix token sequences under a caller-supplied angle mode."""

    def __init__(self, angle_mode: AngleMode = AngleMode.RADIANS) -> None:
        self.angle_mode = angle_mode
        self.logger = logger

    def compute(self, postfix: Sequence[Token]) -> float:
        """
        Evaluate to a raw float.

        Raises:
            StackUnderflowError: an operator or function is missing an operand
            MalformedExpressionError: operands are left over at the end
        """
        value, _ = self._run(postfix)
        return value

    def evaluate(self, postfix: Sequence[Token]) -> EvaluationResult:
        """Evaluate to an EvaluationResult; evaluation errors become failed results."""
        try:
            value, division_by_zero = self._run(postfix)
        except EvaluationError as e:
            return EvaluationResult.failure(e.kind, message=str(e))

        return EvaluationResult.from_value(value, division_by_zero=division_by_zero)

    def _run(self, postfix: Sequence[Token]) -> tuple[float, bool]:
        stack: list[float] = []
        division_by_zero = False

        for token in postfix:
            match token:
                case NumberToken():
                    stack.append(token.number)
                case ConstantToken(constant=constant):
                    stack.append(constant.number)
                case OperatorToken(operator=operator):
                    if len(stack) < 2:
                        raise StackUnderflowError(
                            f"Operator {operator.value} needs two operands",
                            token=operator.value, required=2, available=len(stack),
                        )
                    b = stack.pop()
                    a = stack.pop()
                    if operator is Operator.DIVIDE and b == 0:
                        division_by_zero = True
                    stack.append(token.spec.apply(a, b))
                case FunctionToken(function=function):
                    if not stack:
                        raise StackUnderflowError(
                            f"Function {function.value} needs an operand",
                            token=function.value, required=1, available=0,
                        )
                    x = stack.pop()
                    if function is Function.RECIPROCAL and x == 0:
                        division_by_zero = True
                    stack.append(apply_function(function, x, self.angle_mode))
                case OpenParen() | CloseParen():
                    raise MalformedExpressionError("Parenthesis in postfix sequence")
                case _:
                    raise DomainError(f"Unsupported token: {token!r}", symbol=str(token))

        if not stack:
            raise StackUnderflowError("Expression produced no value", required=1, available=0)
        if len(stack) > 1:
            raise MalformedExpressionError(
                f"{len(stack) - 1} operand(s) left without an operator",
                leftover_operands=len(stack) - 1,
            )

        return stack[0], division_by_zero


def evaluate_postfix(postfix: Sequence[Token],
                     angle_mode: AngleMode = AngleMode.RADIANS) -> EvaluationResult:
    """Evaluate a postfix sequence."""
    return PostfixEvaluator(angle_mode).evaluate(postfix)


def evaluate_expression(tokens: Sequence[Token],
                        angle_mode: AngleMode = AngleMode.RADIANS) -> EvaluationResult:
    """
    Convert an infix expression to postfix and evaluate it.

    All evaluation errors are converted into a failed EvaluationResult here;
    none propagate to the caller.
    """
    try:
        postfix = to_postfix(tokens)
    except EvaluationError as e:
        result = EvaluationResult.failure(e.kind, message=str(e))
    else:
        result = evaluate_postfix(postfix, angle_mode)

    log_evaluation(
        logger,
        expression_to_string(tokens),
        result,
        context={"angle_mode": angle_mode.value},
    )
    return result
