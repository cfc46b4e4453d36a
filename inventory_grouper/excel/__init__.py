"""Spreadsheet decoding (pandas / openpyxl)."""

from .reader import DecodeError, SheetData, SheetHeaderError, decode_spreadsheet, read_first_sheet

__all__ = [
    "DecodeError",
    "SheetHeaderError",
    "SheetData",
    "decode_spreadsheet",
    "read_first_sheet",
]
