from __future__ import annotations

import sys
from collections.abc import Iterator, Sequence
from pathlib import Path

from tqdm import tqdm

from ..models.processing_result import BatchResult, FileStat

"""Batch progress for the CLI: workbook bar plus running grouping totals.

The bar is only drawn on a TTY; elsewhere tqdm is created disabled so the
SUMMARY / log lines stay clean. Totals are kept either way and become the
batch's ``BatchResult``.
"""

__all__ = [
    "BatchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class BatchProgress:
    """Walks the input workbooks and accumulates their ``FileStat`` outcomes.

    Usage::

        with BatchProgress(files) as progress:
            for path in progress:
                progress.record(process(path))
        result = progress.result()
    """

    def __init__(self, files: Sequence[Path], *, description: str = "Grouping workbooks") -> None:
        self.files = list(files)
        self.description = description
        self.stats: list[FileStat] = []
        self.bar = tqdm(
            total=len(self.files),
            desc=description,
            unit="workbook",
            disable=not is_tty_enabled(),
            leave=True,
            ascii=True,
            dynamic_ncols=True,
        )

    def __iter__(self) -> Iterator[Path]:
        for path in self.files:
            self.bar.set_description(f"{self.description} ({path.name})")
            yield path

    @property
    def succeeded(self) -> list[FileStat]:
        return [s for s in self.stats if s.status == "success"]

    @property
    def failed_count(self) -> int:
        return len(self.stats) - len(self.succeeded)

    def record(self, stat: FileStat) -> None:
        """Count one finished workbook and refresh the running totals.

        Items and groups only count for successful workbooks; failures are
        shown separately.
        """
        self.stats.append(stat)
        ok = self.succeeded
        self.bar.update(1)
        self.bar.set_postfix(
            items=sum(s.items for s in ok),
            groups=sum(s.groups for s in ok),
            failed=self.failed_count,
        )

    def result(self) -> BatchResult:
        ok = self.succeeded
        return BatchResult(
            success_files=len(ok),
            failed_files=self.failed_count,
            total_items=sum(s.items for s in ok),
            total_groups=sum(s.groups for s in ok),
            file_stats=list(self.stats),
        )

    def close(self) -> None:
        self.bar.set_description(self.description)
        self.bar.close()

    def __enter__(self) -> BatchProgress:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
