from __future__ import annotations

import re
from collections.abc import Sequence

from ..models.record import RawRecord, to_text

"""Base price extraction from loosely named price columns."""

__all__ = [
    "DEFAULT_PRICE_FIELDS",
    "parse_leading_float",
    "extract_price",
]

DEFAULT_PRICE_FIELDS: tuple[str, ...] = ("Price", "Cost", "Value", "Amount")

# 先頭の数値部分のみ採用 ("1200 USD" -> 1200, "$1200" -> 数値なし)
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity)")


def parse_leading_float(text: str) -> float | None:
    """Parse the numeric prefix of ``text``; None when there is none."""
    m = _LEADING_FLOAT.match(text)
    if m is None:
        return None
    return float(m.group(1).replace("Infinity", "inf"))


def extract_price(record: RawRecord, fields: Sequence[str] = DEFAULT_PRICE_FIELDS) -> float | int:
    """Return the first present price-like field that parses as a number, else 0.

    Integral values come back as int so 1200 serializes as ``1200``.
    """
    for name in fields:
        value = record.get(name)
        if value is None:
            continue
        number = parse_leading_float(to_text(value))
        if number is None:
            continue
        if number.is_integer():
            return int(number)
        return number
    return 0
