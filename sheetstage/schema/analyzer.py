from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..models.sheet import Column
from .layout import estimate_width
from .type_inference import infer_type

"""Schema analysis: raw records -> column definitions."""

__all__ = [
    "collect_key_map",
    "collect_keys",
    "analyze_columns",
]


def collect_key_map(rows: Sequence[Mapping[Any, Any]]) -> dict[str, Any]:
    """Column key -> key object as it appears in the records, first-seen order.

    Positional records (OCR pages keyed 0, 1, ...) keep their int keys for
    lookups; only the column key is the string form.
    """
    seen: dict[str, Any] = {}
    for row in rows:
        for key in row:
            seen.setdefault(str(key), key)
    return seen


def collect_keys(rows: Sequence[Mapping[Any, Any]]) -> list[str]:
    """Union of record keys (as strings) in first-seen order."""
    return list(collect_key_map(rows))


def analyze_columns(rows: Sequence[Mapping[Any, Any]], threshold: float = 1.0) -> list[Column]:
    """Infer one Column per key found in ``rows``.

    Each key's values are gathered across all records (missing keys count as
    empty), typed by ``infer_type`` and sized by ``estimate_width``. The key
    doubles as the initial title.

    Args:
        rows: Raw records sharing a (mostly) common key set
        threshold: Passed through to ``infer_type``

    Returns:
        Columns in first-seen key order; empty when ``rows`` is empty
    """
    if not rows:
        return []
    columns: list[Column] = []
    for key, source_key in collect_key_map(rows).items():
        values = [row.get(source_key) for row in rows]
        column_type = infer_type(values, threshold=threshold)
        columns.append(
            Column(
                key=key,
                title=key,
                type=column_type,
                width=estimate_width(key, values, column_type),
                editable=True,
                sortable=True,
                visible=True,
            )
        )
    return columns
