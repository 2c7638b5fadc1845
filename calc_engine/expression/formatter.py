"""
Numeric formatting for the calculator display.

Results are rounded to a fixed number of decimal digits to hide binary
floating-point noise (0.1 + 0.2 renders as "0.3"), rendered in plain
positional form, and re-rendered in scientific notation when the plain
form is wider than the display. A scientific mantissa short enough to
fit the display in plain form is shown plain.
"""

import math
from decimal import Decimal
from typing import Optional

from ..config.defaults import DisplayParams


def round_result(value: float, digits: int = 12) -> float:
    """Round half-up to ``digits`` decimal places."""
    scale = 10.0 ** digits
    scaled = value * scale
    if not math.isfinite(scaled):
        # Too large to carry fractional digits anyway
        return value
    return math.floor(scaled + 0.5) / scale


def render_plain(value: float) -> str:
    """Positional decimal rendering using the shortest round-trip digits."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def render_scientific(value: float, digits: int = 10) -> str:
    """Normalized scientific notation with an unpadded signed exponent."""
    mantissa, exponent = f"{value:.{digits}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def format_number(value: Optional[float], params: Optional[DisplayParams] = None) -> str:
    """
    Produce the canonical display string for a raw result.

    Args:
        value: Raw double-precision result
        params: Display settings, defaults to DisplayParams()

    Returns:
        Display text, or the error marker for non-finite input
    """
    if params is None:
        params = DisplayParams()

    if value is None or not math.isfinite(value):
        return params.error_text

    rounded = round_result(value, params.round_digits)
    text = render_plain(rounded)

    if len(text) > params.max_length:
        text = render_scientific(rounded, params.exponent_digits)
        # the shortened mantissa may fit in plain form after all
        shortened = render_plain(float(text))
        if len(shortened) <= params.max_length:
            text = shortened

    return text
