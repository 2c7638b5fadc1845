"""
Token model and shared operator tables.

An expression is an ordered list of tokens. Each token kind is its own
frozen dataclass, so converters and evaluators dispatch on the token
class with ``match`` rather than on raw strings.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Union

from ..errors import DomainError

NUMBER_PATTERN = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class Operator(str, Enum):
    """Binary infix operators."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


class Function(str, Enum):
    """Unary prefix functions."""
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LN = "ln"
    LOG = "log"
    SQRT = "sqrt"
    NEG = "neg"
    SQUARE = "square"
    RECIPROCAL = "reciprocal"


class Constant(str, Enum):
    """Named constants."""
    PI = "pi"
    E = "e"

    @property
    def number(self) -> float:
        match self:
            case Constant.PI:
                return math.pi
            case Constant.E:
                return math.e


class Associativity(str, Enum):
    LEFT = "left"
    RIGHT = "right"


def divide(a: float, b: float) -> float:
    """IEEE division: a zero divisor gives a signed infinity, or NaN for 0/0."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def power(a: float, b: float) -> float:
    """IEEE power: overflow gives infinity, an undefined real power gives NaN."""
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and float(b).is_integer() and b % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0:
            return math.inf
        return math.nan


@dataclass(frozen=True)
class OperatorSpec:
    """Precedence, associativity and arithmetic of a binary operator."""
    precedence: int
    associativity: Associativity
    apply: Callable[[float, float], float]


OPERATOR_SPECS: dict[Operator, OperatorSpec] = {
    Operator.ADD: OperatorSpec(2, Associativity.LEFT, lambda a, b: a + b),
    Operator.SUBTRACT: OperatorSpec(2, Associativity.LEFT, lambda a, b: a - b),
    Operator.MULTIPLY: OperatorSpec(3, Associativity.LEFT, lambda a, b: a * b),
    Operator.DIVIDE: OperatorSpec(3, Associativity.LEFT, divide),
    Operator.POWER: OperatorSpec(4, Associativity.RIGHT, power),
}


@dataclass(frozen=True)
class NumberToken:
    """A decimal number literal, kept as entered."""
    text: str

    def __post_init__(self) -> None:
        if not NUMBER_PATTERN.fullmatch(self.text):
            raise DomainError(f"Not a number: {self.text!r}", symbol=self.text)

    @property
    def number(self) -> float:
        return float(self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class OperatorToken:
    operator: Operator

    @property
    def spec(self) -> OperatorSpec:
        return OPERATOR_SPECS[self.operator]

    def __str__(self) -> str:
        return self.operator.value


@dataclass(frozen=True)
class FunctionToken:
    function: Function

    def __str__(self) -> str:
        return self.function.value


@dataclass(frozen=True)
class ConstantToken:
    constant: Constant

    def __str__(self) -> str:
        return self.constant.value


@dataclass(frozen=True)
class OpenParen:
    def __str__(self) -> str:
        return "("


@dataclass(frozen=True)
class CloseParen:
    def __str__(self) -> str:
        return ")"


Token = Union[NumberToken, OperatorToken, FunctionToken, ConstantToken, OpenParen, CloseParen]

_OPERATORS = {op.value: op for op in Operator}
_FUNCTIONS = {fn.value: fn for fn in Function}
_CONSTANTS = {const.value: const for const in Constant}


def parse_token(symbol: str) -> Token:
    """
    Build a token from its symbol.

    Raises:
        DomainError: the symbol is not a number, operator, function,
            constant or parenthesis.
    """
    symbol = symbol.strip()

    if symbol == "(":
        return OpenParen()
    if symbol == ")":
        return CloseParen()
    if symbol in _OPERATORS:
        return OperatorToken(_OPERATORS[symbol])
    if symbol in _FUNCTIONS:
        return FunctionToken(_FUNCTIONS[symbol])
    if symbol in _CONSTANTS:
        return ConstantToken(_CONSTANTS[symbol])
    if NUMBER_PATTERN.fullmatch(symbol):
        return NumberToken(symbol)

    raise DomainError(f"Unknown token: {symbol!r}", symbol=symbol)


def parse_tokens(text: str) -> list[Token]:
    """Parse a space-separated expression string such as ``"( 2 + 3 ) * 4"``."""
    return [parse_token(part) for part in text.split()]


def expression_to_string(tokens: Iterable[Token]) -> str:
    """Render tokens back into a space-separated expression string."""
    return " ".join(str(token) for token in tokens)
