from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from ..ingest.validation import FileCandidate
from ..models.sheet import Column, Scalar, Sheet

"""Session events.

Two families share one entry point (``ImportSession.handle``):

- mutation events, emitted by the editable grid and applied to the
  SheetCollection by the MutationDispatcher
- inbound events, emitted by file transport (drag/drop, file picker) and by
  the OCR pipeline when a page's table has been extracted

Mutation events with ``sheet_id=None`` target the active sheet.
"""

__all__ = [
    "AddSheet",
    "RemoveSheetsByFile",
    "CellUpdate",
    "RowsRemoved",
    "ColumnRemoved",
    "RowAdded",
    "ColumnAdded",
    "ColumnRenamed",
    "SheetChanged",
    "SheetDeleted",
    "SheetRenamed",
    "MutationEvent",
    "FilesDropped",
    "PageReady",
    "PagesCompleted",
    "FileRemoved",
    "InboundEvent",
]


@dataclass(frozen=True)
class AddSheet:
    sheet: Sheet


@dataclass(frozen=True)
class RemoveSheetsByFile:
    file_id: str


@dataclass(frozen=True)
class CellUpdate:
    row_id: str
    column_key: str
    value: Scalar
    sheet_id: str | None = None


@dataclass(frozen=True)
class RowsRemoved:
    row_ids: tuple[str, ...] = ()
    all_removed: bool = False
    sheet_id: str | None = None


@dataclass(frozen=True)
class ColumnRemoved:
    column_key: str
    sheet_id: str | None = None


@dataclass(frozen=True)
class RowAdded:
    data: Mapping[str, Scalar] = field(default_factory=dict)
    sheet_id: str | None = None


@dataclass(frozen=True)
class ColumnAdded:
    column: Column
    sheet_id: str | None = None


@dataclass(frozen=True)
class ColumnRenamed:
    old_key: str
    new_key: str
    new_title: str | None = None
    sheet_id: str | None = None


@dataclass(frozen=True)
class SheetChanged:
    sheet_id: str


@dataclass(frozen=True)
class SheetDeleted:
    sheet_id: str


@dataclass(frozen=True)
class SheetRenamed:
    sheet_id: str
    name: str


MutationEvent = Union[
    AddSheet,
    RemoveSheetsByFile,
    CellUpdate,
    RowsRemoved,
    ColumnRemoved,
    RowAdded,
    ColumnAdded,
    ColumnRenamed,
    SheetChanged,
    SheetDeleted,
    SheetRenamed,
]


@dataclass(frozen=True)
class FilesDropped:
    candidates: tuple[FileCandidate, ...]


@dataclass(frozen=True)
class PageReady:
    """One OCR'd PDF page; ``rows`` are records keyed by column name."""
    file_id: str
    page_index: int
    rows: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class PagesCompleted:
    file_id: str


@dataclass(frozen=True)
class FileRemoved:
    file_id: str


InboundEvent = Union[FilesDropped, PageReady, PagesCompleted, FileRemoved]
