"""Numeric guards.

Centralizes defensive handling of non-finite and out-of-range values so the
models themselves stay free of ad-hoc checks.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def finite_or(value: float, fallback: float) -> float:
    """Return *value* if it is a finite number, else *fallback*."""
    return value if math.isfinite(value) else fallback


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
