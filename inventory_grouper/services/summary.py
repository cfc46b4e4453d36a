from __future__ import annotations

from ..models.processing_result import BatchResult, ProcessingResult

"""SUMMARY line rendering.

Formats:
    SUMMARY rows={decoded} items={filtered} excluded={excluded} groups={groups}
        variants={variants} elapsed_sec={elapsed}
    SUMMARY files={total}/{total} success={success} failed={failed}
        items={items} groups={groups}
"""


def format_seconds(seconds: float) -> str:
    """Render seconds without scientific notation or a trailing ``.0``."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_upload_summary(result: ProcessingResult) -> str:
    """Render the per-upload SUMMARY line.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from inventory_grouper.models.aggregate import AggregateResult
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = ProcessingResult(AggregateResult({}, []), decoded_rows=3,
        ...     start_time=t, end_time=t, elapsed_seconds=0.0)
        >>> render_upload_summary(r)
        'SUMMARY rows=3 items=0 excluded=3 groups=0 variants=0 elapsed_sec=0'
    """
    agg = result.aggregate
    return (
        f"SUMMARY rows={result.decoded_rows} "
        f"items={agg.total_items} "
        f"excluded={result.excluded_rows} "
        f"groups={agg.group_count} "
        f"variants={agg.variant_count} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )


def render_batch_summary(total_files: int, result: BatchResult) -> str:
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"items={result.total_items} "
        f"groups={result.total_groups}"
    )
