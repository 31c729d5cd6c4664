"""
Numeric helpers shared by the parsing and ranking steps.
"""

import math
import re
from typing import Any, Optional

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (66.5 -> 67)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def coerce_number(value: Any) -> Optional[float]:
    """
    Best-effort conversion of an LLM-provided value to a float.

    Accepts ints, floats and strings such as "85", "85%" or "about 85".
    Returns None for booleans, NaN, or values without a number.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
