from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

"""RawRecord model for spreadsheet upload grouping.

RawRecord represents a single non-blank spreadsheet row after header
processing. Cells that were empty in the sheet are simply not present in
``values``.

Lookup semantics:
- present: the column exists and its value is truthy
- absent: missing column, None, "", 0, False or NaN
"""

__all__ = [
    "RawRecord",
    "is_absent",
    "to_text",
]


def is_absent(value: Any) -> bool:
    """Return True when a cell value counts as missing."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return not value


def to_text(value: Any) -> str:
    """Coerce a cell value to text for pattern matching and key building.

    Integral floats render without the trailing ``.0`` so that a storage cell
    read as ``512.0`` still reads ``512``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class RawRecord:
    """One spreadsheet row: column name -> cell value (str / number).

    ``row_number`` is the 1-based sheet row (header = row 1, first data row = 2).
    Records built in code without a sheet origin use 0.
    """
    values: dict[str, Any]
    row_number: int = 0

    def get(self, column: str, default: Any = None) -> Any:
        """Return the cell value when present, else ``default``."""
        value = self.values.get(column)
        if is_absent(value):
            return default
        return value

    def has(self, column: str) -> bool:
        return not is_absent(self.values.get(column))

    def text(self, column: str, default: str = "") -> str:
        value = self.get(column)
        if value is None:
            return default
        return to_text(value)

    def to_dict(self) -> dict[str, Any]:
        """Original cell mapping as it appears in the response payload."""
        return dict(self.values)

    @classmethod
    def from_mapping(cls, values: dict[str, Any], row_number: int = 0) -> RawRecord:
        return cls(values=dict(values), row_number=row_number)
