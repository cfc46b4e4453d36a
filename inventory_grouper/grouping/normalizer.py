from __future__ import annotations

from typing import Any

from ..models.record import is_absent, to_text

"""Attribute normalization to a small controlled vocabulary.

Each normalizer lower-cases the text form of the raw value and tests substring
containment against an ordered rule table, returning the label of the first
matching rule. Rule order matters (e.g. "macbook pro" must win over "macbook").

Unmatched values pass through unchanged, except processor which is truncated
to its first 10 characters. Casing of unmatched values is kept as-is, so
"Ryzen 7" and "ryzen 7" produce different group keys.
"""

__all__ = [
    "UNKNOWN",
    "normalize_model",
    "normalize_processor",
    "normalize_storage",
    "normalize_memory",
]

UNKNOWN = "Unknown"
PROCESSOR_FALLBACK_LENGTH = 10

# (patterns, label) - any pattern matching selects the label
MODEL_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("macbook pro",), "MacBook Pro"),
    (("macbook air",), "MacBook Air"),
    (("macbook",), "MacBook"),
    (("imac",), "iMac"),
    (("mac mini",), "Mac Mini"),
)

PROCESSOR_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("m3",), "M3"),
    (("m2",), "M2"),
    (("m1",), "M1"),
    (("intel", "i7"), "Intel i7"),
    (("i5",), "Intel i5"),
    (("i3",), "Intel i3"),
)

STORAGE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("1tb", "1000gb"), "1TB"),
    (("512gb",), "512GB"),
    (("256gb",), "256GB"),
    (("128gb",), "128GB"),
    (("2tb",), "2TB"),
)

MEMORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("32gb",), "32GB"),
    (("16gb",), "16GB"),
    (("8gb",), "8GB"),
    (("4gb",), "4GB"),
    (("64gb",), "64GB"),
)


def _match(raw: Any, rules: tuple[tuple[tuple[str, ...], str], ...]) -> str | None:
    lowered = to_text(raw).lower()
    for patterns, label in rules:
        if any(p in lowered for p in patterns):
            return label
    return None


def normalize_model(raw: Any) -> Any:
    """Map a model cell to a product family label.

    Args:
        raw: Model cell value (any type; absent values give "Unknown")

    Returns:
        "MacBook Pro", "MacBook Air", "MacBook", "iMac", "Mac Mini", or
        ``raw`` unchanged when no rule matches
    """
    if is_absent(raw):
        return UNKNOWN
    label = _match(raw, MODEL_RULES)
    return raw if label is None else label


def normalize_processor(raw: Any) -> Any:
    """Map a processor cell to a chip label.

    Args:
        raw: Processor cell value

    Returns:
        "M3"/"M2"/"M1"/"Intel i7"/"Intel i5"/"Intel i3", "Unknown" when
        absent, otherwise the text form of ``raw`` cut to 10 characters
    """
    if is_absent(raw):
        return UNKNOWN
    label = _match(raw, PROCESSOR_RULES)
    if label is None:
        return to_text(raw)[:PROCESSOR_FALLBACK_LENGTH]
    return label


def normalize_storage(raw: Any) -> Any:
    """Storage label ("1TB", "512GB", ...); unmatched values pass through."""
    if is_absent(raw):
        return UNKNOWN
    label = _match(raw, STORAGE_RULES)
    return raw if label is None else label


def normalize_memory(raw: Any) -> Any:
    """Memory label ("32GB" ... "4GB").

    Rules are tried 32 -> 16 -> 8 -> 4 -> 64, so "64GB" contains "4gb" and
    normalizes to "4GB".
    """
    if is_absent(raw):
        return UNKNOWN
    label = _match(raw, MEMORY_RULES)
    return raw if label is None else label
