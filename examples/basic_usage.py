#!/usr/bin/env python3
"""
Basic Usage Example - Calculator Expression Engine

This script demonstrates the basic usage of the calculator engine. It shows how to:
- Initialize the engine from configuration
- Enter an expression key by key and evaluate it
- Switch between basic and advanced modes
- Use memory, angle mode and calculation history

Run: python examples/basic_usage.py
"""

import tempfile
from pathlib import Path

from calc_engine.commands import Command
from calc_engine.engine import CalculatorEngine
from calc_engine.expression import evaluate_expression, parse_tokens, to_postfix
from calc_engine.expression.basic import BasicOperator
from calc_engine.expression.models import CalculatorMode


def press(engine: CalculatorEngine, keys: str) -> None:
    """Feed space-separated key names to the engine."""
    for key in keys.split():
        if not engine.handle_key(key):
            print(f"   (no binding for {key!r})")


def print_state(engine: CalculatorEngine) -> None:
    print(f"   Expression: {engine.expression_text or '-'}")
    print(f"   Display:    {engine.display_text}")
    print()


def main():
    print("Calculator Expression Engine - Basic Usage Demo")
    print("=" * 60)

    workdir = Path(tempfile.mkdtemp())
    engine = CalculatorEngine.from_config(
        config_dir=workdir,
        overrides={"history": {"db_path": str(workdir / "history.db")}},
        setup_logging=True,
    )

    print("1. Converting and evaluating an expression directly...")
    tokens = parse_tokens("( 2 + 3 ) * 4 ^ 2")
    print(f"   Postfix: {' '.join(str(t) for t in to_postfix(tokens))}")
    print(f"   Result:  {evaluate_expression(tokens).display}")
    print()

    print("2. Advanced mode with operator precedence...")
    press(engine, "2 + 3 * 4")
    print_state(engine)
    press(engine, "Enter")
    print_state(engine)

    print("3. Functions and parentheses...")
    engine.dispatch(Command.LN)
    engine.dispatch(Command.PAREN_OPEN)
    press(engine, "9 - 5")
    engine.dispatch(Command.PAREN_CLOSE)
    print_state(engine)
    press(engine, "=")
    print_state(engine)
    press(engine, "1 6")
    engine.dispatch(Command.SQRT)
    print_state(engine)
    engine.clear()

    print("4. Division by zero...")
    press(engine, "8 / 0 =")
    print_state(engine)

    print("5. Degrees mode...")
    engine.toggle_angle_mode()
    engine.dispatch(Command.SIN)
    press(engine, "3 0 =")
    print_state(engine)

    print("6. Basic mode accumulates left to right...")
    engine.clear()
    engine.set_mode(CalculatorMode.BASIC)
    press(engine, "2")
    engine.press_operator(BasicOperator.ADD)
    press(engine, "3")
    engine.press_operator(BasicOperator.MULTIPLY)
    press(engine, "4 =")
    print_state(engine)

    print("7. Memory register...")
    engine.dispatch(Command.MEMORY_PLUS)
    engine.clear()
    engine.dispatch(Command.MEMORY_RECALL)
    print(f"   Memory: {engine.memory}")
    print_state(engine)

    print("8. History, newest first...")
    for entry in engine.history():
        print(f"   {entry.expression} = {entry.result}")


if __name__ == "__main__":
    main()
