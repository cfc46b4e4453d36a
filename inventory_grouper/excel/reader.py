from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ..models.record import RawRecord, to_text

"""Spreadsheet decoding: workbook bytes -> RawRecord list.

Rules:
- Only the first sheet is read.
- The first non-blank row is the header row; following rows are data rows.
- Blank header cells are named ``__EMPTY``, ``__EMPTY_1``, ...; duplicate
  header names get ``_1``, ``_2`` suffixes.
- Fully blank data rows are skipped, empty cells are left out of the record.
- Text cells are kept verbatim ("NA" / "N/A" stay strings, not NaN).
"""

__all__ = [
    "DecodeError",
    "SheetHeaderError",
    "SheetData",
    "read_first_sheet",
    "decode_spreadsheet",
    "read_workbook_file",
]

EMPTY_HEADER = "__EMPTY"


class DecodeError(Exception):
    """Raised when the uploaded bytes are not a readable workbook."""


class SheetHeaderError(DecodeError):
    """Raised when the first sheet is missing or has no header row."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RawRecord]


def _header_names(raw_headers: list[Any]) -> list[str]:
    columns: list[str] = []
    used: set[str] = set()
    counts: dict[str, int] = {}
    for val in raw_headers:
        # 見出しは書かれたまま (前後の空白も保持)
        if pd.isna(val) or val == "":
            base = EMPTY_HEADER
        else:
            base = to_text(val)
        name = base
        n = counts.get(base, 0)
        while name in used:
            n += 1
            name = f"{base}_{n}"
        counts[base] = n
        used.add(name)
        columns.append(name)
    return columns


def _cell_value(val: Any) -> Any:
    # pandas / numpy 型を JSON 化可能な Python 値へ
    if hasattr(val, "isoformat"):
        return val.isoformat()
    if isinstance(val, np.generic):
        return val.item()
    return val


def _normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    non_blank = [i for i in range(df.shape[0]) if not df.iloc[i].isna().all()]
    if not non_blank:
        raise SheetHeaderError(f"sheet '{sheet_name}' is empty")
    header_pos = non_blank[0]
    columns = _header_names(df.iloc[header_pos].tolist())

    rows: list[RawRecord] = []
    for pos in range(header_pos + 1, df.shape[0]):
        raw = df.iloc[pos]
        if raw.isna().all():
            continue
        values: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            if pd.isna(val):
                continue
            values[col] = _cell_value(val)
        rows.append(RawRecord(values=values, row_number=pos + 1))
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_first_sheet(data: bytes) -> SheetData:
    """Decode workbook bytes and normalize the first sheet.

    Raises
    ------
    DecodeError: bytes are not a workbook pandas can open
    SheetHeaderError: the workbook has no sheets or the first sheet is blank
    """
    if not data:
        raise DecodeError("empty file")
    try:
        xls = pd.ExcelFile(BytesIO(data))
    except Exception as e:
        raise DecodeError(f"unreadable workbook: {e}") from e
    with xls:
        if not xls.sheet_names:
            raise SheetHeaderError("workbook has no sheets")
        name = str(xls.sheet_names[0])
        try:
            # 空セルのみ NaN 扱い ("NA" などの文字列はそのまま保持)
            df = xls.parse(xls.sheet_names[0], header=None, keep_default_na=False, na_values=[""])
        except Exception as e:
            raise DecodeError(f"failed to read sheet '{name}': {e}") from e
    return _normalize_sheet(df, name)


def decode_spreadsheet(data: bytes) -> list[RawRecord]:
    """Workbook bytes -> ordered records of the first sheet."""
    return read_first_sheet(data).rows


def read_workbook_file(path: Path) -> SheetData:
    return read_first_sheet(path.read_bytes())
