from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Union

"""Sheet, Column and Row models for the staging engine.

A Sheet is the unit of tabular staging: one worksheet, CSV body or OCR'd PDF
page waiting for review before it becomes part of a data source. The models
are mutable; the MutationDispatcher is the only code expected to change them
after creation, and it keeps the row/column invariants below:

- ``metadata.row_count == len(rows)`` and ``metadata.column_count == len(columns)``
- every ``Row.data`` has exactly the key set of the Sheet's columns
"""

__all__ = [
    "Scalar",
    "ColumnType",
    "Column",
    "Row",
    "SheetMetadata",
    "Sheet",
    "utcnow",
]

Scalar = Union[str, int, float, bool, date, datetime, None]


def utcnow() -> datetime:
    return datetime.now(UTC)


class ColumnType(Enum):
    """Semantic column type assigned by type inference."""
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    TEXT = "text"


@dataclass
class Column:
    """Field definition inside a Sheet.

    ``key`` is unique within its Sheet. ``original_key`` / ``original_title``
    are recorded on the first rename only, so the backend can still map the
    column to the name it had when the file was parsed.
    """
    key: str
    title: str
    type: ColumnType = ColumnType.TEXT
    width: int = 100
    editable: bool = True
    sortable: bool = True
    visible: bool = True
    original_key: str | None = None
    original_title: str | None = None


@dataclass
class Row:
    """One data record inside a Sheet."""
    id: str
    index: int  # ordinal position at creation time (not renumbered on delete)
    data: dict[str, Scalar] = field(default_factory=dict)
    selected: bool = False


@dataclass
class SheetMetadata:
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)
    row_count: int = 0
    column_count: int = 0


@dataclass
class Sheet:
    """Tabular staging unit keyed to its originating ImportFile."""
    id: str
    name: str
    file_id: str
    index: int = 0  # worksheet / page position inside the file
    columns: list[Column] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    metadata: SheetMetadata = field(default_factory=SheetMetadata)

    def __post_init__(self) -> None:
        self.refresh_counts()

    @property
    def column_keys(self) -> list[str]:
        return [c.key for c in self.columns]

    @property
    def is_eligible(self) -> bool:
        """Eligible for submission: at least one column and one row."""
        return bool(self.columns) and bool(self.rows)

    def find_column(self, key: str) -> Column | None:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def find_row(self, row_id: str) -> Row | None:
        for row in self.rows:
            if row.id == row_id:
                return row
        return None

    def refresh_counts(self) -> None:
        self.metadata.row_count = len(self.rows)
        self.metadata.column_count = len(self.columns)

    def touch(self) -> None:
        """Recompute cached counts and bump the modified timestamp."""
        self.refresh_counts()
        self.metadata.modified_at = utcnow()
