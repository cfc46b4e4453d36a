from __future__ import annotations

from ..models.record import RawRecord, to_text
from .normalizer import UNKNOWN, normalize_memory, normalize_model, normalize_processor, normalize_storage

"""Group / variant key construction.

The group key is built from the same normalizers used to populate a
ProductGroup, so the key and the group attributes always agree.
"""

__all__ = [
    "KEY_DELIMITER",
    "DEFAULT_COLOR",
    "DEFAULT_CONDITION",
    "build_group_key",
    "build_variant_key",
    "variant_fields",
]

KEY_DELIMITER = "_"
DEFAULT_COLOR = "Default"
DEFAULT_CONDITION = "Unknown"


def build_group_key(record: RawRecord) -> str:
    """Build the product group key for a record.

    Args:
        record: decoded row

    Returns:
        ``<model>_<processor>_<storage>_<memory>`` from the normalized
        attributes, each rendered with ``to_text``
    """
    parts = (
        normalize_model(record.get("Model", UNKNOWN)),
        normalize_processor(record.get("Processor", "")),
        normalize_storage(record.get("Storage", "")),
        normalize_memory(record.get("Memory", "")),
    )
    return KEY_DELIMITER.join(to_text(p) for p in parts)


def variant_fields(record: RawRecord) -> tuple[object, object]:
    """Raw (color, condition) with defaults for absent cells."""
    return record.get("Color", DEFAULT_COLOR), record.get("Condition", DEFAULT_CONDITION)


def build_variant_key(record: RawRecord) -> str:
    """``<color>_<condition>`` from the raw cells, defaults for absent ones."""
    color, condition = variant_fields(record)
    return f"{to_text(color)}{KEY_DELIMITER}{to_text(condition)}"
