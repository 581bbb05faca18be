"""Numeric coercion for loosely-typed catalog data.

Catalog payloads arrive from a JavaScript backend: prices can be missing,
``null``, strings, or NaN. Everything the pricing engine touches passes
through these helpers first so arithmetic never sees a bad value.
"""
from __future__ import annotations

import math
from typing import Any


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce ``value`` to a finite float, falling back to ``default``.

    Accepts ints, floats and numeric strings. ``None``, bools, NaN,
    infinities and anything unparseable become ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_non_negative(value: Any) -> float:
    """Coerce to a float and floor at zero."""
    return max(0.0, to_number(value))


def to_quantity(value: Any) -> int:
    """Coerce to a non-negative integer quantity.

    Fractional quantities are truncated; negatives clamp to 0.
    """
    return max(0, int(to_number(value)))
