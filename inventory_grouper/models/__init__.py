"""Domain models for spreadsheet upload grouping.

This package contains the record, aggregate and result types shared by the
grouping engine, the HTTP handler and the CLI.
"""

from .aggregate import AggregateResult, ProductGroup, Variant
from .processing_result import BatchResult, FileStat, ProcessingResult
from .record import RawRecord

__all__ = [
    # Input
    "RawRecord",
    # Aggregate
    "AggregateResult",
    "ProductGroup",
    "Variant",
    # Results
    "BatchResult",
    "FileStat",
    "ProcessingResult",
]
