from __future__ import annotations

import math
import re
from typing import Any

from .models import Cell, CellKind

_NON_AMOUNT_CHARS = re.compile(r"[^\d.\-]")
_LEADING_DECIMAL = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_BARE_NUMBER = re.compile(
    r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity"
    r"|0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+"
)


def parse_amount(value: Any) -> float:
    """Normalize an amount cell to float, e.g. "30.25 USD" -> 30.25, "1,234.5" -> 1234.5, True -> 0.0."""
    if isinstance(value, Cell):
        if value.kind is CellKind.NUMBER:
            return value.value
        if value.kind is CellKind.TEXT:
            return _parse_amount_text(value.value)
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return _parse_amount_text(value)
    return 0.0


def _parse_amount_text(text: str) -> float:
    cleaned = _NON_AMOUNT_CHARS.sub("", text)
    match = _LEADING_DECIMAL.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def is_numeric_text(text: str) -> bool:
    """True when ``text`` reads as a bare number, e.g. " 12.5 ", "1e3" or "0x1F"; blank text counts as numeric.

    Hex, binary and octal literals ("0x1F", "0b11", "0o7") are accepted unsigned only, so "-0x1F" is text.
    """
    stripped = text.strip()
    if not stripped:
        return True
    return bool(_BARE_NUMBER.fullmatch(stripped))


def round_half_up(value: float, places: int = 2) -> float:
    """Scale, round half toward +infinity, then descale, e.g. 0.125 -> 0.13 and -0.125 -> -0.12."""
    scale = 10**places
    return math.floor(value * scale + 0.5) / scale
