"""Numeric coercion helpers for user-edited values."""

import math


def parse_or_zero(value: object) -> float:
    """Parse a user-supplied number, returning 0 when it cannot be parsed.

    Edits never fail on bad numbers: blanks, garbage, NaN, infinities and
    negative values all become 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def whole_or_zero(value: object) -> int:
    """Parse a macro field to a whole number, truncating any fraction."""
    return math.trunc(parse_or_zero(value))
