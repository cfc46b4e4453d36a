"""Spreadsheet upload -> laptop product group aggregation."""

__version__ = "0.1.0"
