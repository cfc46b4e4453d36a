from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .record import RawRecord

"""Aggregate models: ProductGroup -> Variant -> raw items.

The serialized field names (``basePrice``, ``productGroups``, ``rawData`` ...)
are part of the response contract and must not change.
"""

__all__ = [
    "Variant",
    "ProductGroup",
    "AggregateResult",
]


@dataclass
class Variant:
    """Sub-bucket of a ProductGroup keyed by raw (color, condition)."""
    color: Any
    condition: Any
    quantity: int = 0
    items: list[RawRecord] = field(default_factory=list)

    def add(self, record: RawRecord) -> None:
        self.quantity += 1
        self.items.append(record)

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "condition": self.condition,
            "quantity": self.quantity,
            "items": [r.to_dict() for r in self.items],
        }


@dataclass
class ProductGroup:
    """Bucket of records sharing one normalized (model, processor, storage, memory).

    Attributes and ``base_price`` are taken from the first record of the group
    and are never overwritten afterwards.
    """
    model: Any
    processor: Any
    storage: Any
    memory: Any
    base_price: float | int
    items: list[RawRecord] = field(default_factory=list)
    variants: dict[str, Variant] = field(default_factory=dict)

    def get_or_create_variant(self, key: str, color: Any, condition: Any) -> Variant:
        variant = self.variants.get(key)
        if variant is None:
            variant = Variant(color=color, condition=condition)
            self.variants[key] = variant
        return variant

    @property
    def variant_quantity(self) -> int:
        return sum(v.quantity for v in self.variants.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "processor": self.processor,
            "storage": self.storage,
            "memory": self.memory,
            "basePrice": self.base_price,
            "items": [r.to_dict() for r in self.items],
            "variants": {k: v.to_dict() for k, v in self.variants.items()},
        }


@dataclass
class AggregateResult:
    """Response payload for one processed upload."""
    product_groups: dict[str, ProductGroup]
    raw_data: list[RawRecord]

    @property
    def total_items(self) -> int:
        return len(self.raw_data)

    @property
    def group_count(self) -> int:
        return len(self.product_groups)

    @property
    def variant_count(self) -> int:
        return sum(len(g.variants) for g in self.product_groups.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "productGroups": {k: g.to_dict() for k, g in self.product_groups.items()},
            "rawData": [r.to_dict() for r in self.raw_data],
            "groupCount": self.group_count,
        }
