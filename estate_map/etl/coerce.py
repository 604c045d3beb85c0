"""Text-to-type coercion used by the record normalizer.

Every helper accepts whatever the tokenizer produced (or ``None``) and
returns a defaulted value instead of raising.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")
_LEADING_INT = re.compile(r"^[+-]?\d+")
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_currency(value: Any) -> float:
    """'$1,250,000' -> 1250000.0; anything unparsable -> 0.0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    digits = _NON_NUMERIC.sub("", to_text(value))
    if not digits:
        return 0.0
    try:
        number = float(digits)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_optional_int(value: Any) -> Optional[int]:
    """Base-10 parse of the leading integer part; parsing stops at the first non-digit."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(to_text(value))
    if not match:
        return None
    return int(match.group(0))


def to_int(value: Any) -> int:
    parsed = to_optional_int(value)
    return parsed if parsed is not None else 0


def to_number(value: Any) -> float:
    """Leading floating-point prefix, e.g. '2.5 baths' -> 2.5; otherwise 0.0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    match = _LEADING_NUMBER.match(to_text(value))
    if not match:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def to_coordinate(value: Any) -> Optional[float]:
    """Return the value as a finite float, or ``None`` if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = to_text(value)
        # float() would accept digit-group underscores such as "4_0"
        if "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number
