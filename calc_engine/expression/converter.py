"""
Infix to postfix conversion (shunting-yard).

Numbers and constants go straight to the output. Operators wait on a
stack until an operator of lower precedence (or equal precedence, for
left-associative operators) arrives. Functions are prefix markers that no
operator pops: a function closes over the parenthesised group that
follows it, or over the rest of its enclosing group when written without
parentheses.
"""

from collections.abc import Sequence

import structlog

from ..errors import DomainError, MalformedExpressionError
from .tokens import (
    Associativity,
    CloseParen,
    ConstantToken,
    FunctionToken,
    NumberToken,
    OpenParen,
    OperatorSpec,
    OperatorToken,
    Token,
)

logger = structlog.get_logger(__name__)


def _pops_before(incoming: OperatorSpec, stacked: OperatorSpec) -> bool:
    """Whether a stacked operator must be output before pushing the incoming one."""
    if incoming.associativity is Associativity.LEFT:
        return incoming.precedence <= stacked.precedence
    return incoming.precedence < stacked.precedence


def to_postfix(tokens: Sequence[Token]) -> list[Token]:
    """
    Convert an infix token sequence into postfix order.

    Args:
        tokens: Expression in entry order

    Returns:
        The same tokens (minus parentheses) in postfix order

    Raises:
        MalformedExpressionError: parentheses are unbalanced
        DomainError: an element is not a token
    """
    output: list[Token] = []
    stack: list[Token] = []

    for position, token in enumerate(tokens):
        match token:
            case NumberToken() | ConstantToken():
                output.append(token)
            case OperatorToken():
                while (
                    stack
                    and isinstance(stack[-1], OperatorToken)
                    and _pops_before(token.spec, stack[-1].spec)
                ):
                    output.append(stack.pop())
                stack.append(token)
            case FunctionToken() | OpenParen():
                stack.append(token)
            case CloseParen():
                while stack and not isinstance(stack[-1], OpenParen):
                    output.append(stack.pop())
                if not stack:
                    raise MalformedExpressionError(
                        "Closing parenthesis without a matching opening parenthesis",
                        position=position,
                    )
                stack.pop()
                if stack and isinstance(stack[-1], FunctionToken):
                    output.append(stack.pop())
            case _:
                raise DomainError(f"Unsupported token: {token!r}", symbol=str(token))

    while stack:
        token = stack.pop()
        if isinstance(token, OpenParen):
            raise MalformedExpressionError("Unclosed opening parenthesis")
        output.append(token)

    logger.debug(
        "Converted expression to postfix",
        infix_length=len(tokens),
        postfix=" ".join(str(t) for t in output),
    )
    return output
