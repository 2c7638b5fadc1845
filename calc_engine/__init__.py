"""
Calc Engine - Expression Evaluation Engine for an Interactive Calculator

Turns a sequence of entered tokens (numbers, operators, parentheses,
functions and constants) into a numeric result using a shunting-yard
conversion to postfix followed by stack evaluation, and renders results
for a fixed-width calculator display.
"""

__version__ = "0.1.0"
__author__ = "Calc Engine Team"
