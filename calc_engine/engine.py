"""
Main calculator engine.

Owns the single calculator state (display, in-progress expression, memory
register, angle mode) and exposes every input as a method taking explicit
values, so the engine can be driven by any keypad, keyboard or test
without a display attached.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .commands import Command, command_for_key
from .config.defaults import DefaultConfig, get_default_config
from .config.loader import ConfigLoader
from .errors import DomainError, PersistenceError
from .expression.basic import BasicOperator, calculate
from .expression.evaluator import apply_function, evaluate_expression
from .expression.formatter import format_number, render_plain
from .expression.models import AngleMode, CalculatorMode, EvaluationResult
from .expression.tokens import (
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
from .logging.config import configure_logging
from .persistence.history_store import HistoryEntry, HistoryStore

logger = structlog.get_logger(__name__)

DIGITS = "0123456789"


@dataclass
class CalculatorState:
    """Everything the calculator remembers between inputs."""

    display_value: str = "0"

    # Basic mode accumulation
    first_operand: Optional[float] = None
    pending_operator: Optional[BasicOperator] = None
    waiting_for_second_operand: bool = False

    memory: float = 0.0

    # Advanced mode expression
    tokens: list[Token] = field(default_factory=list)
    current_entry: str = ""                      # number being typed, not yet a token
    last_result: Optional[str] = None            # display text of the last successful equals

    angle_mode: AngleMode = AngleMode.RADIANS
    mode: CalculatorMode = CalculatorMode.ADVANCED
    error_displayed: bool = False


class CalculatorEngine:
    """
    Interactive calculator engine.

    In advanced mode inputs build an expression that ``equals`` converts to
    postfix and evaluates. In basic mode each operator press folds the
    pending operand with the current value, left to right.
    """

    def __init__(self, config: Optional[DefaultConfig] = None,
                 history_store: Optional[HistoryStore] = None) -> None:
        """Initialize the engine; without a history store nothing is recorded."""
        self.logger = logger
        self.config = config or get_default_config()
        self.display_params = self.config.display
        self.history_store = history_store

        self.state = CalculatorState(
            angle_mode=AngleMode(self.config.engine.angle_mode),
            mode=CalculatorMode(self.config.engine.mode),
        )

        self.logger.info(
            "Calculator engine initialized",
            angle_mode=self.state.angle_mode.value,
            mode=self.state.mode.value,
            history=history_store is not None,
        )

    @classmethod
    def from_config(
        cls,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
        setup_logging: bool = False,
    ) -> "CalculatorEngine":
        """Build an engine from defaults, calc.yaml and overrides."""
        config = ConfigLoader.create(Path(config_dir) if config_dir else None).load(overrides)

        if setup_logging:
            configure_logging(level=config.logging.level, format_json=config.logging.format_json)

        history_store = None
        if config.history.enabled:
            history_store = HistoryStore(config.history.db_path, config.history.max_entries)

        return cls(config, history_store)

    # Display

    @property
    def display_text(self) -> str:
        return self.state.display_value

    @property
    def expression_text(self) -> str:
        """The expression line: committed tokens followed by the entry being typed."""
        return " ".join(str(t) for t in self.current_tokens())

    @property
    def memory(self) -> float:
        return self.state.memory

    def current_tokens(self) -> list[Token]:
        """Committed tokens plus the number being typed."""
        tokens = list(self.state.tokens)
        if self.state.current_entry:
            tokens.append(NumberToken(self.state.current_entry))
        return tokens

    def _format(self, value: Optional[float]) -> str:
        return format_number(value, self.display_params)

    def _current_value(self) -> Optional[float]:
        """Numeric value of the entry being typed, or of the display."""
        text = self.state.current_entry or self.state.display_value
        try:
            return float(text)
        except ValueError:
            return None

    def _commit_entry(self) -> None:
        if self.state.current_entry:
            self.state.tokens.append(NumberToken(self.state.current_entry))
            self.state.current_entry = ""

    def _reset_after_error(self) -> None:
        """A displayed Error makes the next input start from scratch."""
        if self.state.error_displayed:
            self.logger.debug("Starting fresh after error")
            self.clear()

    def _show_error(self) -> None:
        self.clear()
        self.state.display_value = self.display_params.error_text
        self.state.error_displayed = True

    # Clearing

    def clear(self) -> None:
        """Discard the expression and pending operation; memory and modes are kept."""
        self.state.display_value = "0"
        self.state.first_operand = None
        self.state.pending_operator = None
        self.state.waiting_for_second_operand = False
        self.state.tokens = []
        self.state.current_entry = ""
        self.state.last_result = None
        self.state.error_displayed = False

    def clear_expression(self) -> None:
        """Discard the in-progress expression only."""
        self.state.tokens = []
        self.state.current_entry = ""

    def clear_entry(self) -> None:
        self.state.current_entry = ""
        self.state.display_value = "0"

    # Numeric entry

    def input_digit(self, digit: str) -> None:
        if len(digit) != 1 or digit not in DIGITS:
            raise DomainError(f"Not a digit: {digit!r}", symbol=digit)

        self._reset_after_error()

        if len(self.state.current_entry) >= self.display_params.max_length:
            return

        if self.state.current_entry == "0":
            self.state.current_entry = digit
        else:
            self.state.current_entry += digit

        self.state.waiting_for_second_operand = False
        self.state.last_result = None
        self.state.display_value = self.state.current_entry

    def input_decimal(self) -> None:
        self._reset_after_error()

        if not self.state.current_entry:
            self.state.current_entry = "0."
        elif "." not in self.state.current_entry and "e" not in self.state.current_entry:
            self.state.current_entry += "."

        self.state.waiting_for_second_operand = False
        self.state.last_result = None
        self.state.display_value = self.state.current_entry

    def backspace(self) -> None:
        """Delete the last typed character, or the last token once the entry is empty."""
        if self.state.current_entry:
            self.state.current_entry = self.state.current_entry[:-1]
            if self.state.current_entry == "-":
                self.state.current_entry = ""
            self.state.display_value = self.state.current_entry or "0"
            return

        if self.state.tokens:
            self.state.tokens.pop()
            self.state.display_value = "0"

    def input_percent(self) -> None:
        """Divide the current operand by 100."""
        start = self._trailing_operand_start()
        if start is not None and isinstance(self.state.tokens[-1], CloseParen):
            self._wrap_group(start, None)
            return

        value = self._operand_value(start)
        if value is None:
            return

        result = value / 100
        if start is not None:
            del self.state.tokens[start:]
        self.state.current_entry = render_plain(result)
        self.state.display_value = self._format(result)

    # Operands

    def _trailing_operand_start(self) -> Optional[int]:
        """
        Index where the last complete operand of the expression begins.

        Only committed tokens are considered; None while a number is being
        typed or when the expression ends without an operand.
        """
        tokens = self.state.tokens
        if self.state.current_entry or not tokens:
            return None

        match tokens[-1]:
            case NumberToken() | ConstantToken():
                return len(tokens) - 1
            case CloseParen():
                depth = 0
                for index in range(len(tokens) - 1, -1, -1):
                    match tokens[index]:
                        case CloseParen():
                            depth += 1
                        case OpenParen():
                            depth -= 1
                            if depth == 0:
                                # functions written in front of the group belong to it
                                while index > 0 and isinstance(tokens[index - 1], FunctionToken):
                                    index -= 1
                                return index
                return None
            case _:
                return None

    def _operand_value(self, start: Optional[int]) -> Optional[float]:
        """Value an immediate operation acts on: the entry, a trailing number or constant, or the display."""
        if self.state.current_entry:
            return self._current_value()
        if start is not None:
            match self.state.tokens[start]:
                case NumberToken() as token:
                    return token.number
                case ConstantToken(constant=constant):
                    return constant.number
        if self.state.tokens:
            return None
        return self._current_value()

    def _wrap_group(self, start: int, function: Optional[Function]) -> str:
        """
        Apply ``function`` to the parenthesised group starting at ``start``.

        With no function the group is taken as a percentage. The group stays
        in the expression, wrapped, so the history shows what was computed.
        """
        group = self.state.tokens[start:]
        if function is None:
            wrapped = [OpenParen(), *group, OperatorToken(Operator.DIVIDE),
                       NumberToken("100"), CloseParen()]
        elif isinstance(group[0], OpenParen):
            wrapped = [FunctionToken(function), *group]
        else:
            wrapped = [FunctionToken(function), OpenParen(), *group, CloseParen()]

        result = evaluate_expression(wrapped, self.state.angle_mode)
        if not result.ok:
            self._show_error()
            return self.state.display_value

        self.state.tokens[start:] = wrapped
        self.state.display_value = result.render(self.display_params)
        return self.state.display_value

    def _show_group_value(self) -> None:
        """Show the value of the group just closed, when it has one."""
        start = self._trailing_operand_start()
        if start is None:
            return
        result = evaluate_expression(self.state.tokens[start:], self.state.angle_mode)
        if result.ok:
            self.state.display_value = result.render(self.display_params)

    # Expression tokens

    def append_token(self, token: Token) -> None:
        """
        Append a token to the expression.

        Operators, functions and parentheses first commit the number being
        typed. An operator typed straight after ``equals`` continues from
        the previous result.
        """
        self._reset_after_error()

        match token:
            case NumberToken():
                self._commit_entry()
                self.state.tokens.append(token)
                self.state.display_value = str(token)
            case ConstantToken(constant=constant):
                self._commit_entry()
                self.state.tokens.append(token)
                self.state.display_value = self._format(constant.number)
            case OperatorToken():
                if (not self.state.tokens and not self.state.current_entry
                        and self.state.last_result is not None):
                    self.state.current_entry = self.state.last_result
                self._commit_entry()
                self.state.tokens.append(token)
            case FunctionToken() | OpenParen():
                self._commit_entry()
                self.state.tokens.append(token)
            case CloseParen():
                self._commit_entry()
                self.state.tokens.append(token)
                self._show_group_value()
            case _:
                raise DomainError(f"Unsupported token: {token!r}", symbol=str(token))

        self.state.last_result = None

    def append_text(self, symbol: str) -> None:
        """Append the token spelled by ``symbol`` (e.g. ``"sin"``, ``"("``, ``"2.5"``)."""
        self.append_token(parse_token(symbol))

    def remove_last_token(self) -> Optional[Token]:
        """Remove and return the last token, counting the number being typed."""
        if self.state.current_entry:
            removed = NumberToken(self.state.current_entry)
            self.state.current_entry = ""
            return removed
        if self.state.tokens:
            return self.state.tokens.pop()
        return None

    def insert_constant(self, constant: Constant) -> None:
        """Enter pi or e: a constant token in advanced mode, its value in basic mode."""
        self._reset_after_error()

        if self.state.mode is CalculatorMode.ADVANCED:
            self.append_token(ConstantToken(constant))
            return

        self.state.current_entry = render_plain(constant.number)
        self.state.display_value = self._format(constant.number)
        self.state.waiting_for_second_operand = False

    def apply_unary(self, function: Function) -> str:
        """
        Apply a function immediately to the current value.

        The operand is the number being typed, the trailing number or
        constant of the expression, or the trailing parenthesised group,
        which is wrapped in the function rather than evaluated away. An
        expression ending in an operator has no operand and is left alone.

        Returns:
            The new display text; an Error result resets the engine.
        """
        start = self._trailing_operand_start()
        if start is not None and isinstance(self.state.tokens[-1], CloseParen):
            return self._wrap_group(start, function)

        value = self._operand_value(start)
        if value is None:
            return self.state.display_value

        result = apply_function(function, value, self.state.angle_mode)
        formatted = self._format(result)

        if formatted == self.display_params.error_text:
            self.logger.warning(
                "Unary operation failed",
                function=function.value,
                operand=value,
                raw_value=result,
            )
            self._show_error()
            return self.state.display_value

        if start is not None:
            del self.state.tokens[start:]
        self.state.current_entry = render_plain(result)
        self.state.display_value = formatted
        return formatted

    # Evaluation

    def evaluate(self) -> EvaluationResult:
        """Evaluate the current expression without consuming it."""
        return evaluate_expression(self.current_tokens(), self.state.angle_mode)

    def equals(self) -> Optional[EvaluationResult]:
        """
        Finish the calculation, show its result and record it in history.

        Returns:
            The evaluation result, or None when there is nothing to evaluate
        """
        if self.state.mode is CalculatorMode.BASIC:
            return self._basic_equals()

        tokens = self.current_tokens()
        if not tokens:
            return None

        result = evaluate_expression(tokens, self.state.angle_mode)
        self._finish(expression_to_string(tokens), result)
        return result

    def _finish(self, expression: str, result: EvaluationResult) -> None:
        display = result.render(self.display_params)
        self._record_history(expression, display)

        self.clear()
        self.state.display_value = display
        if result.ok:
            self.state.last_result = display
        else:
            self.state.error_displayed = True

        self.logger.info(
            "Calculation finished",
            expression=expression,
            display=display,
            error_kind=result.error.value if result.error else None,
        )

    # Basic mode

    def press_operator(self, operator: BasicOperator) -> None:
        """
        Handle an arithmetic operator key.

        In advanced mode this appends the operator token. In basic mode the
        pending operation is folded with the current value immediately.
        """
        if self.state.mode is CalculatorMode.ADVANCED:
            self.append_token(OperatorToken(operator.symbol))
            return

        if self.state.error_displayed:
            return

        if self.state.pending_operator is not None and self.state.waiting_for_second_operand:
            self.state.pending_operator = operator
            return

        value = self._current_value()
        if value is None:
            return

        if self.state.pending_operator is not None and self.state.first_operand is not None:
            result = calculate(self.state.first_operand, value, self.state.pending_operator)
            formatted = self._format(result)
            if formatted == self.display_params.error_text:
                self._show_error()
                return
            self.state.display_value = formatted
            self.state.first_operand = result
        else:
            self.state.first_operand = value

        self.state.pending_operator = operator
        self.state.waiting_for_second_operand = True
        self.state.current_entry = ""

    def _basic_equals(self) -> Optional[EvaluationResult]:
        operator = self.state.pending_operator
        first = self.state.first_operand
        if operator is None or first is None:
            return None

        second = self._current_value()
        if second is None:
            return None

        raw = calculate(first, second, operator)
        result = EvaluationResult.from_value(
            raw, division_by_zero=operator is BasicOperator.DIVIDE and second == 0
        )
        expression = f"{render_plain(first)} {operator.symbol.value} {render_plain(second)}"
        self._finish(expression, result)
        return result

    # Memory register

    def memory_clear(self) -> None:
        self.state.memory = 0.0

    def memory_recall(self) -> None:
        self._reset_after_error()
        formatted = self._format(self.state.memory)
        if formatted == self.display_params.error_text:
            self._show_error()
            return
        self.state.current_entry = render_plain(self.state.memory)
        self.state.display_value = formatted
        self.state.waiting_for_second_operand = False

    def memory_add(self) -> None:
        value = self._current_value()
        if value is not None:
            self.state.memory += value

    def memory_subtract(self) -> None:
        value = self._current_value()
        if value is not None:
            self.state.memory -= value

    # Modes

    def set_angle_mode(self, angle_mode: AngleMode) -> None:
        self.state.angle_mode = angle_mode
        self.logger.debug("Angle mode changed", angle_mode=angle_mode.value)

    def toggle_angle_mode(self) -> AngleMode:
        if self.state.angle_mode is AngleMode.DEGREES:
            self.set_angle_mode(AngleMode.RADIANS)
        else:
            self.set_angle_mode(AngleMode.DEGREES)
        return self.state.angle_mode

    def set_mode(self, mode: CalculatorMode) -> None:
        """Switch input mode; a calculation in progress is discarded."""
        if mode is not self.state.mode:
            self.clear()
        self.state.mode = mode
        self.logger.debug("Calculator mode changed", mode=mode.value)

    # History

    def _record_history(self, expression: str, result: str) -> None:
        if self.history_store is None:
            return
        try:
            self.history_store.record(expression, result)
        except PersistenceError as e:
            self.logger.error(
                "History entry not recorded",
                expression=expression,
                error=str(e),
                operation=e.operation,
            )

    def history(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Recorded calculations, newest first."""
        if self.history_store is None:
            return []
        return self.history_store.recent(limit)

    def recall_history(self, entry: HistoryEntry) -> None:
        """Load a past calculation: its tokens become the expression, its result the display."""
        tokens = parse_tokens(entry.expression)

        self.clear()
        self.state.tokens = tokens
        self.state.display_value = entry.result
        self.state.error_displayed = entry.result == self.display_params.error_text

        self.logger.debug("History entry recalled", entry_id=entry.id, expression=entry.expression)

    # Commands

    def dispatch(self, command: Command, argument: Optional[str] = None) -> None:
        """Run the engine method behind a keypad or keyboard command."""
        match command:
            case Command.DIGIT:
                if argument is None:
                    raise DomainError("Digit command needs a digit")
                self.input_digit(argument)
            case Command.DECIMAL:
                self.input_decimal()
            case Command.CLEAR:
                self.clear()
            case Command.CLEAR_ENTRY:
                self.clear_entry()
            case Command.BACKSPACE:
                self.backspace()
            case Command.PERCENT:
                self.input_percent()
            case Command.PAREN_OPEN:
                self._append_expression_token(OpenParen())
            case Command.PAREN_CLOSE:
                self._append_expression_token(CloseParen())
            case Command.ADD:
                self.press_operator(BasicOperator.ADD)
            case Command.SUBTRACT:
                self.press_operator(BasicOperator.SUBTRACT)
            case Command.MULTIPLY:
                self.press_operator(BasicOperator.MULTIPLY)
            case Command.DIVIDE:
                self.press_operator(BasicOperator.DIVIDE)
            case Command.POWER:
                self._append_expression_token(OperatorToken(Operator.POWER))
            case Command.EQUALS:
                self.equals()
            case Command.NEGATE:
                self.apply_unary(Function.NEG)
            case Command.SQRT:
                self.apply_unary(Function.SQRT)
            case Command.SQUARE:
                self.apply_unary(Function.SQUARE)
            case Command.RECIPROCAL:
                self.apply_unary(Function.RECIPROCAL)
            case Command.SIN:
                self._append_expression_token(FunctionToken(Function.SIN))
            case Command.COS:
                self._append_expression_token(FunctionToken(Function.COS))
            case Command.TAN:
                self._append_expression_token(FunctionToken(Function.TAN))
            case Command.LN:
                self._append_expression_token(FunctionToken(Function.LN))
            case Command.LOG:
                self._append_expression_token(FunctionToken(Function.LOG))
            case Command.PI:
                self.insert_constant(Constant.PI)
            case Command.E:
                self.insert_constant(Constant.E)
            case Command.MEMORY_CLEAR:
                self.memory_clear()
            case Command.MEMORY_RECALL:
                self.memory_recall()
            case Command.MEMORY_PLUS:
                self.memory_add()
            case Command.MEMORY_MINUS:
                self.memory_subtract()
            case Command.DEG_TOGGLE:
                self.toggle_angle_mode()

    def _append_expression_token(self, token: Token) -> None:
        """Parentheses, power and scientific functions only build advanced-mode expressions."""
        if self.state.mode is CalculatorMode.BASIC:
            self.logger.debug("Key ignored in basic mode", token=str(token))
            return
        self.append_token(token)

    def handle_key(self, key: str) -> bool:
        """Dispatch a keyboard key; returns False for keys with no binding."""
        resolved = command_for_key(key)
        if resolved is None:
            return False
        command, argument = resolved
        self.dispatch(command, argument)
        return True
