"""Grouping and normalization engine."""

from .aggregator import aggregate, filter_by_category, group_products
from .keys import build_group_key, build_variant_key
from .normalizer import normalize_memory, normalize_model, normalize_processor, normalize_storage
from .price import extract_price

__all__ = [
    "aggregate",
    "filter_by_category",
    "group_products",
    "build_group_key",
    "build_variant_key",
    "normalize_model",
    "normalize_processor",
    "normalize_storage",
    "normalize_memory",
    "extract_price",
]
