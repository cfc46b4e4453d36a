from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .aggregate import AggregateResult

"""Processing result models for upload grouping.

ProcessingResult pairs the AggregateResult of one upload with the metrics
needed for the SUMMARY output line. FileStat / BatchResult cover CLI runs over
several workbook files.
"""


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregate plus metrics for a single workbook."""
    aggregate: AggregateResult
    decoded_rows: int  # デコード済み行数 (フィルタ前)
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def filtered_rows(self) -> int:
        return self.aggregate.total_items

    @property
    def excluded_rows(self) -> int:
        return self.decoded_rows - self.aggregate.total_items


@dataclass(frozen=True)
class FileStat:
    """Per-file outcome for CLI batch runs."""
    file_name: str
    status: str  # success/failed
    items: int
    groups: int
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class BatchResult:
    success_files: int
    failed_files: int
    total_items: int
    total_groups: int
    file_stats: list[FileStat] | None = None
