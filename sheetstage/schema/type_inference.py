from __future__ import annotations

import math
import re
import warnings
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import Any

import pandas as pd

from ..models.sheet import ColumnType

"""Column type inference.

A column's values are classified by testing the non-empty subset against five
predicates in fixed priority order (boolean, number, date, email, url); the
first predicate satisfied by the required share of values wins, otherwise the
column is text.

The required share is ``threshold`` (default 1.0, i.e. every value). Raising
it above 0 but below 1 gives the looser "most values" behaviour.
"""

__all__ = [
    "infer_type",
    "is_empty",
    "is_boolean_like",
    "is_number_like",
    "is_date_like",
    "is_email_like",
    "is_url_like",
]

_BOOLEAN_RE = re.compile(
    r"^(true|false|yes|no|y|n|1|0|on|off|active|inactive|enabled|disabled)$",
    re.IGNORECASE,
)
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_URL_RE = re.compile(r"^https?://.+\..+")
_NUMBER_STRIP_RE = re.compile(r"[$,%]")

# 日付として扱う表記パターン (parse 成功 + 形状一致の両方が必要)
_DATE_SHAPES: tuple[re.Pattern[str], ...] = (
    # ISO YYYY-MM-DD, optionally with the time part str(datetime) produces
    re.compile(
        r"^\d{4}-\d{2}-\d{2}"
        r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
    ),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),  # MM/DD/YYYY
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"),  # MM-DD-YYYY
    re.compile(r"^[A-Za-z]{3,9}\.? \d{1,2}, \d{4}$"),  # Mon DD, YYYY
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2}$"),  # M/D/YY
)


def is_empty(value: Any) -> bool:
    """None, NaN/NaT and blank strings count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    return str(value).strip()


def is_boolean_like(value: Any) -> bool:
    return bool(_BOOLEAN_RE.match(_as_text(value)))


def is_number_like(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    text = _NUMBER_STRIP_RE.sub("", _as_text(value)).strip()
    # float() は "1_000" も通す
    if not text or "_" in text:
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def _parses_as_date(text: str) -> bool:
    with warnings.catch_warnings():
        # 単一値 parse 時の format 推定警告は不要
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return False
    return not pd.isna(parsed)


def is_date_like(value: Any) -> bool:
    if isinstance(value, date):
        return True
    if isinstance(value, (bool, int, float)):
        return False
    text = _as_text(value)
    if not any(shape.match(text) for shape in _DATE_SHAPES):
        return False
    return _parses_as_date(text)


def is_email_like(value: Any) -> bool:
    return bool(_EMAIL_RE.match(_as_text(value)))


def is_url_like(value: Any) -> bool:
    return bool(_URL_RE.match(_as_text(value)))


_PREDICATES: tuple[tuple[ColumnType, Callable[[Any], bool]], ...] = (
    (ColumnType.BOOLEAN, is_boolean_like),
    (ColumnType.NUMBER, is_number_like),
    (ColumnType.DATE, is_date_like),
    (ColumnType.EMAIL, is_email_like),
    (ColumnType.URL, is_url_like),
)


def _satisfies(values: Sequence[Any], predicate: Callable[[Any], bool], threshold: float) -> bool:
    if threshold >= 1.0:
        return all(predicate(v) for v in values)
    matched = sum(1 for v in values if predicate(v))
    return matched / len(values) >= threshold


def infer_type(values: Iterable[Any], threshold: float = 1.0) -> ColumnType:
    """Classify one column's values into a ColumnType.

    Args:
        values: Raw values of the column across all rows (may contain empties)
        threshold: Share of non-empty values a predicate must accept

    Returns:
        The first matching type in priority order, or TEXT

    Examples:
        >>> infer_type(["true", "false", "yes"]).value
        'boolean'
        >>> infer_type(["1", "2", "3.5"]).value
        'number'
        >>> infer_type([None, ""]).value
        'text'
    """
    present = [v for v in values if not is_empty(v)]
    if not present:
        return ColumnType.TEXT
    for column_type, predicate in _PREDICATES:
        if _satisfies(present, predicate, threshold):
            return column_type
    return ColumnType.TEXT
