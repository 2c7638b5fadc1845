"""Unit tests for the calculator engine."""

import math

import pytest

from calc_engine.commands import Command
from calc_engine.config.defaults import get_default_config
from calc_engine.engine import CalculatorEngine
from calc_engine.errors import DomainError, ErrorKind
from calc_engine.expression.basic import BasicOperator
from calc_engine.expression.formatter import render_plain
from calc_engine.expression.models import AngleMode, CalculatorMode
from calc_engine.expression.tokens import (
    CloseParen,
    Constant,
    ConstantToken,
    Function,
    FunctionToken,
    NumberToken,
    OpenParen,
    Operator,
    OperatorToken,
)


def type_number(engine: CalculatorEngine, text: str) -> None:
    for char in text:
        if char == ".":
            engine.input_decimal()
        else:
            engine.input_digit(char)


class TestEngineInitialization:
    """Test suite for engine construction."""

    def test_initial_state(self, engine):
        assert engine.display_text == "0"
        assert engine.expression_text == ""
        assert engine.memory == 0
        assert engine.state.angle_mode is AngleMode.RADIANS
        assert engine.state.mode is CalculatorMode.ADVANCED
        assert engine.history() == []

    def test_from_config_overrides(self, tmp_path):
        engine = CalculatorEngine.from_config(
            config_dir=tmp_path,
            overrides={
                "engine": {"angle_mode": "degrees", "mode": "basic"},
                "history": {"db_path": str(tmp_path / "h.db")},
            },
        )
        assert engine.state.angle_mode is AngleMode.DEGREES
        assert engine.state.mode is CalculatorMode.BASIC
        assert engine.history_store is not None

    def test_from_config_without_history(self, tmp_path):
        engine = CalculatorEngine.from_config(
            config_dir=tmp_path, overrides={"history": {"enabled": False}}
        )
        assert engine.history_store is None

    def test_engines_do_not_share_state(self):
        first = CalculatorEngine()
        second = CalculatorEngine()
        first.input_digit("7")
        assert second.display_text == "0"


class TestNumericEntry:
    """Digits, decimal point, backspace and percent."""

    def test_digits_build_entry(self, engine):
        type_number(engine, "123")
        assert engine.display_text == "123"
        assert engine.expression_text == "123"

    def test_leading_zero_replaced(self, engine):
        type_number(engine, "05")
        assert engine.display_text == "5"

    def test_decimal_point(self, engine):
        engine.input_decimal()
        engine.input_digit("5")
        engine.input_decimal()
        assert engine.display_text == "0.5"

    def test_invalid_digit(self, engine):
        with pytest.raises(DomainError):
            engine.input_digit("a")

    def test_entry_limited_to_display_width(self, engine):
        type_number(engine, "1" * 20)
        assert engine.display_text == "1" * 16

    def test_backspace_entry_then_tokens(self, engine):
        type_number(engine, "12")
        engine.append_text("+")
        type_number(engine, "34")
        engine.backspace()
        assert engine.display_text == "3"
        engine.backspace()
        assert engine.display_text == "0"
        engine.backspace()
        assert engine.expression_text == "12"

    def test_percent(self, engine):
        type_number(engine, "50")
        engine.input_percent()
        assert engine.display_text == "0.5"
        assert engine.expression_text == "0.5"

    def test_clear_entry(self, engine):
        type_number(engine, "9")
        engine.append_text("+")
        type_number(engine, "8")
        engine.clear_entry()
        assert engine.display_text == "0"
        assert engine.expression_text == "9 +"


class TestExpressionEntry:
    """Tokens appended to the expression."""

    def test_operator_commits_entry(self, engine):
        type_number(engine, "5")
        engine.append_token(OperatorToken(Operator.ADD))
        assert engine.state.tokens == [NumberToken("5"), OperatorToken(Operator.ADD)]
        assert engine.state.current_entry == ""

    def test_append_text(self, engine):
        for symbol in ["(", "2", "+", "3", ")", "*", "4"]:
            engine.append_text(symbol)
        assert engine.expression_text == "( 2 + 3 ) * 4"

    def test_closing_paren_shows_group_value(self, engine):
        for symbol in ["(", "2", "+", "2", ")"]:
            engine.append_text(symbol)
        assert engine.display_text == "4"

    def test_unbalanced_close_keeps_display(self, engine):
        engine.append_text("2")
        engine.append_text(")")
        assert engine.display_text == "2"

    def test_append_unknown_text(self, engine):
        with pytest.raises(DomainError):
            engine.append_text("asin")

    def test_remove_last_token(self, engine):
        engine.append_text("2")
        engine.append_text("+")
        assert engine.remove_last_token() == OperatorToken(Operator.ADD)
        assert engine.remove_last_token() == NumberToken("2")
        assert engine.remove_last_token() is None

    def test_remove_last_token_drops_entry_first(self, engine):
        engine.append_text("2")
        engine.append_text("*")
        type_number(engine, "7")
        assert engine.remove_last_token() == NumberToken("7")
        assert engine.expression_text == "2 *"

    def test_clear_expression(self, engine):
        engine.append_text("2")
        type_number(engine, "3")
        engine.clear_expression()
        assert engine.expression_text == ""

    def test_constant_token(self, engine):
        engine.insert_constant(Constant.PI)
        assert engine.state.tokens == [ConstantToken(Constant.PI)]
        assert engine.display_text == "3.14159265359"


class TestEvaluation:
    """Evaluate and equals."""

    def test_evaluate_does_not_consume(self, engine):
        for symbol in "5 + 3 * 2".split():
            engine.append_text(symbol)
        result = engine.evaluate()
        assert result.value == 11
        assert engine.expression_text == "5 + 3 * 2"

    def test_equals_shows_result_and_discards_expression(self, engine):
        for symbol in "( 2 + 3 ) * 4".split():
            engine.append_text(symbol)
        result = engine.equals()
        assert result.ok
        assert engine.display_text == "20"
        assert engine.expression_text == ""

    def test_equals_includes_typed_entry(self, engine):
        engine.append_text("2")
        engine.append_text("^")
        type_number(engine, "10")
        engine.equals()
        assert engine.display_text == "1024"

    def test_equals_on_empty_expression(self, engine):
        assert engine.equals() is None
        assert engine.display_text == "0"

    def test_operator_after_equals_continues_from_result(self, engine):
        for symbol in "2 + 3".split():
            engine.append_text(symbol)
        engine.equals()
        engine.append_text("*")
        engine.append_text("4")
        assert engine.expression_text == "5 * 4"
        assert engine.equals().value == 20

    def test_digit_after_equals_starts_new_number(self, engine):
        engine.append_text("9")
        engine.equals()
        type_number(engine, "4")
        assert engine.expression_text == "4"

    def test_degree_mode(self, degree_engine):
        for symbol in "sin ( 30 )".split():
            degree_engine.append_text(symbol)
        assert degree_engine.equals().value == pytest.approx(0.5, abs=1e-12)
        assert degree_engine.display_text == "0.5"

    def test_toggle_angle_mode(self, engine):
        assert engine.toggle_angle_mode() is AngleMode.DEGREES
        assert engine.toggle_angle_mode() is AngleMode.RADIANS


class TestErrorContract:
    """A displayed Error is reset by the next input."""

    def test_division_by_zero_shows_error(self, engine):
        for symbol in "1 / 0".split():
            engine.append_text(symbol)
        result = engine.equals()
        assert result.error is ErrorKind.DIVISION_BY_ZERO
        assert engine.display_text == "Error"
        assert engine.state.error_displayed

    def test_unbalanced_expression_shows_error(self, engine):
        for symbol in "( 2 + 3".split():
            engine.append_text(symbol)
        assert engine.equals().error is ErrorKind.MALFORMED_EXPRESSION
        assert engine.display_text == "Error"

    def test_digit_after_error_starts_fresh(self, engine):
        for symbol in "sqrt ( -1 )".split():
            engine.append_text(symbol)
        engine.equals()
        engine.input_digit("7")
        assert engine.display_text == "7"
        assert engine.expression_text == "7"
        assert not engine.state.error_displayed

    def test_operator_after_error_does_not_reuse_it(self, engine):
        engine.append_text("1")
        engine.append_text("/")
        engine.append_text("0")
        engine.equals()
        engine.append_text("+")
        assert engine.expression_text == "+"


class TestUnaryOperations:
    """Immediate unary operations on the current value."""

    def test_sqrt_of_entry(self, engine):
        type_number(engine, "16")
        assert engine.apply_unary(Function.SQRT) == "4"
        assert engine.expression_text == "4"

    def test_negate(self, engine):
        type_number(engine, "3")
        engine.apply_unary(Function.NEG)
        assert engine.display_text == "-3"

    def test_square_of_result(self, engine):
        engine.append_text("3")
        engine.equals()
        assert engine.apply_unary(Function.SQUARE) == "9"

    def test_reciprocal_of_zero_resets_with_error(self, engine):
        engine.append_text("2")
        engine.append_text("+")
        type_number(engine, "0")
        assert engine.apply_unary(Function.RECIPROCAL) == "Error"
        assert engine.expression_text == ""
        assert engine.state.error_displayed

    def test_sqrt_of_constant_replaces_it(self, engine):
        engine.insert_constant(Constant.PI)
        engine.apply_unary(Function.SQRT)
        assert engine.expression_text == render_plain(math.sqrt(math.pi))

        result = engine.equals()
        assert result.value == pytest.approx(math.sqrt(math.pi))
        assert engine.display_text == "1.772453850906"

    def test_square_of_group_wraps_it(self, engine):
        for symbol in ["(", "2", "+", "2", ")"]:
            engine.append_text(symbol)

        assert engine.apply_unary(Function.SQUARE) == "16"
        assert engine.expression_text == "square ( 2 + 2 )"
        engine.equals()
        assert engine.display_text == "16"

    def test_group_keeps_its_function(self, degree_engine):
        for symbol in ["sin", "(", "30", ")"]:
            degree_engine.append_text(symbol)

        assert degree_engine.apply_unary(Function.NEG) == "-0.5"
        assert degree_engine.expression_text == "neg ( sin ( 30 ) )"

    def test_group_then_operator_keeps_precedence(self, engine):
        for symbol in ["(", "1", "+", "2", ")"]:
            engine.append_text(symbol)
        engine.apply_unary(Function.SQUARE)
        engine.append_text("+")
        engine.append_text("1")
        assert engine.equals().value == 10

    def test_expression_ending_in_operator_is_left_alone(self, engine):
        engine.append_text("2")
        engine.append_text("+")
        assert engine.apply_unary(Function.SQRT) == "2"
        assert engine.expression_text == "2 +"

    def test_percent_of_group(self, engine):
        for symbol in ["(", "2", "+", "2", ")"]:
            engine.append_text(symbol)
        engine.input_percent()
        assert engine.display_text == "0.04"
        assert engine.expression_text == "( ( 2 + 2 ) / 100 )"

    def test_percent_of_constant(self, engine):
        engine.append_text("2")
        engine.append_text("*")
        engine.insert_constant(Constant.E)
        engine.input_percent()
        assert engine.display_text == "0.027182818285"
        assert engine.equals().value == pytest.approx(2 * math.e / 100)

    def test_unary_on_error_is_ignored(self, engine):
        type_number(engine, "4")
        engine.apply_unary(Function.NEG)
        engine.apply_unary(Function.SQRT)
        assert engine.apply_unary(Function.SQUARE) == "Error"

    def test_backspace_after_negate_never_leaves_sign(self, engine):
        type_number(engine, "5")
        engine.apply_unary(Function.NEG)
        engine.backspace()
        assert engine.display_text == "0"
        assert engine.expression_text == ""


class TestMemory:
    """Memory register operations."""

    def test_memory_add_subtract_recall(self, engine):
        type_number(engine, "10")
        engine.memory_add()
        engine.clear()
        type_number(engine, "3")
        engine.memory_subtract()
        assert engine.memory == 7
        engine.clear()
        engine.memory_recall()
        assert engine.display_text == "7"
        assert engine.expression_text == "7"

    def test_memory_clear(self, engine):
        type_number(engine, "5")
        engine.memory_add()
        engine.memory_clear()
        assert engine.memory == 0

    def test_memory_ignores_error_display(self, engine):
        engine.append_text("1")
        engine.append_text("/")
        engine.append_text("0")
        engine.equals()
        engine.memory_add()
        assert engine.memory == 0

    def test_clear_keeps_memory(self, engine):
        type_number(engine, "2")
        engine.memory_add()
        engine.clear()
        assert engine.memory == 2


class TestBasicMode:
    """Left-to-right accumulation without precedence."""

    @pytest.fixture
    def basic_engine(self) -> CalculatorEngine:
        engine = CalculatorEngine(get_default_config())
        engine.set_mode(CalculatorMode.BASIC)
        return engine

    def test_folds_left_to_right(self, basic_engine):
        type_number(basic_engine, "5")
        basic_engine.press_operator(BasicOperator.ADD)
        type_number(basic_engine, "3")
        basic_engine.press_operator(BasicOperator.MULTIPLY)
        assert basic_engine.display_text == "8"
        type_number(basic_engine, "2")
        result = basic_engine.equals()
        assert result.value == 16
        assert basic_engine.display_text == "16"

    def test_repeated_operator_replaces_pending(self, basic_engine):
        type_number(basic_engine, "9")
        basic_engine.press_operator(BasicOperator.ADD)
        basic_engine.press_operator(BasicOperator.SUBTRACT)
        type_number(basic_engine, "4")
        assert basic_engine.equals().value == 5

    def test_divide_by_zero(self, basic_engine):
        type_number(basic_engine, "8")
        basic_engine.press_operator(BasicOperator.DIVIDE)
        type_number(basic_engine, "0")
        result = basic_engine.equals()
        assert result.error is ErrorKind.DIVISION_BY_ZERO
        assert basic_engine.display_text == "Error"

    def test_equals_without_operator(self, basic_engine):
        type_number(basic_engine, "8")
        assert basic_engine.equals() is None

    def test_expression_keys_ignored(self, basic_engine):
        for command in [Command.PAREN_OPEN, Command.SIN, Command.POWER, Command.PAREN_CLOSE]:
            basic_engine.dispatch(command)
        assert basic_engine.state.tokens == []
        assert basic_engine.expression_text == ""

    def test_switching_mode_discards_expression(self, engine):
        engine.append_text("2")
        engine.append_text("+")
        engine.memory_add()
        engine.set_mode(CalculatorMode.BASIC)
        assert engine.expression_text == ""
        assert engine.display_text == "0"
        assert engine.memory == 2

    def test_constant_enters_value(self, basic_engine):
        basic_engine.insert_constant(Constant.E)
        assert basic_engine.display_text == "2.718281828459"
        assert basic_engine.state.tokens == []


class TestDispatch:
    """Commands and key bindings drive the same methods."""

    def test_dispatch_expression(self, engine):
        engine.dispatch(Command.PAREN_OPEN)
        engine.dispatch(Command.DIGIT, "2")
        engine.dispatch(Command.ADD)
        engine.dispatch(Command.DIGIT, "3")
        engine.dispatch(Command.PAREN_CLOSE)
        engine.dispatch(Command.POWER)
        engine.dispatch(Command.DIGIT, "2")
        engine.dispatch(Command.EQUALS)
        assert engine.display_text == "25"

    def test_dispatch_functions_append_tokens(self, engine):
        engine.dispatch(Command.SIN)
        engine.dispatch(Command.PAREN_OPEN)
        assert engine.state.tokens == [FunctionToken(Function.SIN), OpenParen()]

    def test_dispatch_digit_needs_argument(self, engine):
        with pytest.raises(DomainError):
            engine.dispatch(Command.DIGIT)

    def test_dispatch_deg_toggle(self, engine):
        engine.dispatch(Command.DEG_TOGGLE)
        assert engine.state.angle_mode is AngleMode.DEGREES

    def test_handle_keys(self, engine):
        for key in ["7", "x", "6", "Enter"]:
            assert engine.handle_key(key)
        assert engine.display_text == "42"

    def test_escape_clears(self, engine):
        engine.handle_key("5")
        engine.handle_key("Escape")
        assert engine.display_text == "0"
        assert engine.expression_text == ""

    def test_unbound_key(self, engine):
        assert engine.handle_key("F1") is False
        assert engine.handle_key("²") is False
