from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..models.sheet import ColumnType
from .type_inference import is_empty

"""Column width estimation for the editable grid."""

__all__ = [
    "MAX_WIDTH",
    "MIN_WIDTHS",
    "estimate_width",
]

MAX_WIDTH = 300
HEADER_CHAR_PX = 8
CONTENT_CHAR_PX = 6
PADDING_PX = 24

MIN_WIDTHS: dict[ColumnType, int] = {
    ColumnType.BOOLEAN: 80,
    ColumnType.NUMBER: 100,
    ColumnType.DATE: 120,
    ColumnType.EMAIL: 200,
    ColumnType.URL: 200,
    ColumnType.TEXT: 100,
}


def estimate_width(title: str, values: Iterable[Any], column_type: ColumnType) -> int:
    """Pixel width for a column: widest of header, content and type floor, capped at 300."""
    header_width = len(title) * HEADER_CHAR_PX + PADDING_PX
    lengths = [len(str(v)) for v in values if not is_empty(v)]
    content_width = max(lengths) * CONTENT_CHAR_PX + PADDING_PX if lengths else 0
    min_width = MIN_WIDTHS[column_type]
    return min(max(header_width, content_width, min_width), MAX_WIDTH)
