from __future__ import annotations

import json
import logging
import math
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from ..config.loader import GrouperConfig
from ..excel.reader import decode_spreadsheet
from ..grouping.aggregator import aggregate
from ..logging.init import SUMMARY_LEVEL
from ..models.processing_result import ProcessingResult
from ..models.record import RawRecord
from .summary import render_upload_summary

"""Upload processing service: workbook bytes -> ProcessingResult.

Decoding is injected (``decoder``) so the grouping step only ever sees a
RawRecord sequence. Decoder failures propagate to the caller unchanged.
"""

__all__ = [
    "Decoder",
    "process_records",
    "process_workbook",
    "to_json",
]

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], Sequence[RawRecord]]


def process_records(records: Sequence[RawRecord], config: GrouperConfig | None = None) -> ProcessingResult:
    """Filter and group already decoded records."""
    cfg = config or GrouperConfig()
    start = datetime.now(UTC)
    t0 = time.perf_counter()
    agg = aggregate(
        records,
        column=cfg.category_column,
        keyword=cfg.category_keyword,
        price_fields=cfg.price_fields,
    )
    elapsed = time.perf_counter() - t0
    result = ProcessingResult(
        aggregate=agg,
        decoded_rows=len(records),
        start_time=start,
        end_time=datetime.now(UTC),
        elapsed_seconds=elapsed,
    )
    # "SUMMARY " 接頭辞はフォーマッタ側で付与
    logger.log(SUMMARY_LEVEL, render_upload_summary(result)[len("SUMMARY "):])
    return result


def process_workbook(
    data: bytes,
    config: GrouperConfig | None = None,
    decoder: Decoder = decode_spreadsheet,
) -> ProcessingResult:
    """Decode workbook bytes and group the first sheet's rows.

    Raises:
        DecodeError: from the decoder (not caught here)
    """
    logger.debug(f"decoding workbook bytes={len(data)}")
    records = decoder(data)
    logger.debug(f"decoded rows={len(records)}")
    return process_records(records, config)


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def to_json(result: ProcessingResult) -> str:
    """Serialize the response payload as strict JSON.

    Non-ASCII text is kept as-is. Infinite or NaN numbers (e.g. a price cell
    reading "1e999") become ``null``.
    """
    return json.dumps(_json_safe(result.aggregate.to_dict()), ensure_ascii=False, allow_nan=False)
