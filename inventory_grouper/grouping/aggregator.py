from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..models.aggregate import AggregateResult, ProductGroup
from ..models.record import RawRecord
from .keys import build_group_key, build_variant_key, variant_fields
from .normalizer import normalize_memory, normalize_model, normalize_processor, normalize_storage
from .price import DEFAULT_PRICE_FIELDS, extract_price

"""Category filter and two-level product grouping.

Flow per upload:
1. filter_by_category: keep records whose category column contains the keyword
2. group_products: record -> ProductGroup (get-or-create) -> Variant (get-or-create)
3. aggregate: wrap the group map and the filtered records into AggregateResult

All state is created per call; nothing is kept between invocations.
"""

__all__ = [
    "DEFAULT_CATEGORY_COLUMN",
    "DEFAULT_CATEGORY_KEYWORD",
    "matches_category",
    "filter_by_category",
    "get_or_create_group",
    "group_products",
    "aggregate",
]

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_COLUMN = "Sub-Category"
DEFAULT_CATEGORY_KEYWORD = "laptop"


def matches_category(
    record: RawRecord,
    column: str = DEFAULT_CATEGORY_COLUMN,
    keyword: str = DEFAULT_CATEGORY_KEYWORD,
) -> bool:
    """True when the record's ``column`` cell contains ``keyword``.

    Args:
        record: decoded row
        column: category column name (exact header text)
        keyword: substring to look for, compared case-insensitively

    Returns:
        False for an absent cell, otherwise the containment test result
    """
    if not record.has(column):
        return False
    return keyword.lower() in record.text(column).lower()


def filter_by_category(
    records: Iterable[RawRecord],
    column: str = DEFAULT_CATEGORY_COLUMN,
    keyword: str = DEFAULT_CATEGORY_KEYWORD,
) -> list[RawRecord]:
    """Keep records whose ``column`` contains ``keyword`` (case-insensitive), in order."""
    return [r for r in records if matches_category(r, column, keyword)]


def get_or_create_group(
    groups: dict[str, ProductGroup],
    key: str,
    record: RawRecord,
    price_fields: Sequence[str] = DEFAULT_PRICE_FIELDS,
) -> ProductGroup:
    """Return the group for ``key``, creating it from ``record`` on first sight.

    Attributes and base price are fixed by the first record (first-write-wins).
    """
    group = groups.get(key)
    if group is None:
        group = ProductGroup(
            model=normalize_model(record.get("Model")),
            processor=normalize_processor(record.get("Processor")),
            storage=normalize_storage(record.get("Storage")),
            memory=normalize_memory(record.get("Memory")),
            base_price=extract_price(record, price_fields),
        )
        groups[key] = group
        logger.debug(f"new group key={key!r} row={record.row_number}")
    return group


def group_products(
    records: Iterable[RawRecord],
    price_fields: Sequence[str] = DEFAULT_PRICE_FIELDS,
) -> dict[str, ProductGroup]:
    """Group records by product key, then by color/condition variant.

    Args:
        records: already category-filtered rows, in input order
        price_fields: price column priority used for each new group

    Returns:
        Group key -> ProductGroup, in first-seen order. Every record is
        appended to exactly one group and one of its variants.
    """
    groups: dict[str, ProductGroup] = {}
    for record in records:
        group = get_or_create_group(groups, build_group_key(record), record, price_fields)
        color, condition = variant_fields(record)
        variant = group.get_or_create_variant(build_variant_key(record), color, condition)
        variant.add(record)
        group.items.append(record)
    return groups


def aggregate(
    records: Iterable[RawRecord],
    column: str = DEFAULT_CATEGORY_COLUMN,
    keyword: str = DEFAULT_CATEGORY_KEYWORD,
    price_fields: Sequence[str] = DEFAULT_PRICE_FIELDS,
) -> AggregateResult:
    """Filter ``records`` by category and group them into an AggregateResult."""
    filtered = filter_by_category(records, column, keyword)
    groups = group_products(filtered, price_fields)
    return AggregateResult(product_groups=groups, raw_data=filtered)
