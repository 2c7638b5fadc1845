"""
Calculator commands and keyboard bindings.

Commands name the actions a keypad or keyboard can trigger. They are
plain values; ``CalculatorEngine.dispatch`` maps each one onto an engine
method.
"""

from enum import Enum
from typing import Optional


class Command(str, Enum):
    DIGIT = "digit"
    DECIMAL = "decimal"
    CLEAR = "clear"
    CLEAR_ENTRY = "clear-entry"
    BACKSPACE = "backspace"
    PERCENT = "percent"
    PAREN_OPEN = "paren-open"
    PAREN_CLOSE = "paren-close"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    EQUALS = "equals"
    NEGATE = "negate"
    SQRT = "sqrt"
    SQUARE = "square"
    RECIPROCAL = "reciprocal"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LN = "ln"
    LOG = "log"
    PI = "pi"
    E = "e"
    MEMORY_CLEAR = "mem-clear"
    MEMORY_RECALL = "mem-recall"
    MEMORY_PLUS = "mem-plus"
    MEMORY_MINUS = "mem-minus"
    DEG_TOGGLE = "deg-toggle"


KEY_BINDINGS: dict[str, Command] = {
    ".": Command.DECIMAL,
    "+": Command.ADD,
    "-": Command.SUBTRACT,
    "*": Command.MULTIPLY,
    "x": Command.MULTIPLY,
    "X": Command.MULTIPLY,
    "/": Command.DIVIDE,
    "Enter": Command.EQUALS,
    "=": Command.EQUALS,
    "Backspace": Command.BACKSPACE,
    "Escape": Command.CLEAR,
    "%": Command.PERCENT,
}


def command_for_key(key: str) -> Optional[tuple[Command, Optional[str]]]:
    """
    Resolve a key name to a command and its argument.

    Digit keys resolve to ``(Command.DIGIT, key)``; unbound keys to None.
    """
    if len(key) == 1 and key in "0123456789":
        return Command.DIGIT, key
    command = KEY_BINDINGS.get(key)
    if command is None:
        return None
    return command, None
