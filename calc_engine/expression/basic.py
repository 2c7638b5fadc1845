"""Binary arithmetic for basic mode, where operators fold left to right."""

import math
from enum import Enum

from .tokens import Operator


class BasicOperator(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> Operator:
        match self:
            case BasicOperator.ADD:
                return Operator.ADD
            case BasicOperator.SUBTRACT:
                return Operator.SUBTRACT
            case BasicOperator.MULTIPLY:
                return Operator.MULTIPLY
            case BasicOperator.DIVIDE:
                return Operator.DIVIDE


def calculate(first: float, second: float, operator: BasicOperator) -> float:
    """Apply ``operator``; dividing by zero gives infinity, shown as Error."""
    match operator:
        case BasicOperator.ADD:
            return first + second
        case BasicOperator.SUBTRACT:
            return first - second
        case BasicOperator.MULTIPLY:
            return first * second
        case BasicOperator.DIVIDE:
            if second == 0:
                return math.inf
            return first / second
