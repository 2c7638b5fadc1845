"""Expression engine: tokens, infix to postfix conversion, evaluation and formatting"""

from .basic import BasicOperator, calculate
from .converter import to_postfix
from .evaluator import PostfixEvaluator, apply_function, evaluate_expression, evaluate_postfix
from .formatter import format_number
from .models import AngleMode, CalculatorMode, ErrorKind, EvaluationResult
from .tokens import (
    OPERATOR_SPECS,
    CloseParen,
    Constant,
    ConstantToken,
    Function,
    FunctionToken,
    NumberToken,
    OpenParen,
    Operator,
    OperatorToken,
    Token,
    expression_to_string,
    parse_token,
    parse_tokens,
)

__all__ = [
    "AngleMode",
    "BasicOperator",
    "CalculatorMode",
    "CloseParen",
    "Constant",
    "ConstantToken",
    "ErrorKind",
    "EvaluationResult",
    "Function",
    "FunctionToken",
    "NumberToken",
    "OPERATOR_SPECS",
    "OpenParen",
    "Operator",
    "OperatorToken",
    "PostfixEvaluator",
    "Token",
    "apply_function",
    "calculate",
    "evaluate_expression",
    "evaluate_postfix",
    "expression_to_string",
    "format_number",
    "parse_token",
    "parse_tokens",
    "to_postfix",
]
