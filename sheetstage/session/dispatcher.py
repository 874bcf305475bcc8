from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from typing import Any

from ..ingest.factory import new_row_id
from ..models.sheet import Row, Sheet
from .collection import SheetCollection
from .events import (
    AddSheet,
    CellUpdate,
    ColumnAdded,
    ColumnRemoved,
    ColumnRenamed,
    MutationEvent,
    RemoveSheetsByFile,
    RowAdded,
    RowsRemoved,
    SheetChanged,
    SheetDeleted,
    SheetRenamed,
)

"""Mutation dispatcher for the editable grid.

Applies the closed set of mutation events to a SheetCollection. Every handler
leaves the collection satisfying:

- each sheet's cached row/column counts equal ``len(rows)`` / ``len(columns)``
- each row's data has exactly the sheet's column keys
- the active id is None or names a present sheet

Events referencing a sheet, row or column that no longer exists are ignored
(logged at DEBUG). The grid validates ids against the snapshot it renders, so
a stale id only means a newer edit already removed the target.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "MutationDispatcher",
]


class MutationDispatcher:
    """Routes mutation events to their handlers."""

    def __init__(self, collection: SheetCollection) -> None:
        self.collection = collection
        self._handlers: dict[type, Callable[[Any], bool]] = {
            AddSheet: self._add_sheet,
            RemoveSheetsByFile: self._remove_sheets_by_file,
            CellUpdate: self._cell_update,
            RowsRemoved: self._rows_removed,
            ColumnRemoved: self._column_removed,
            RowAdded: self._row_added,
            ColumnAdded: self._column_added,
            ColumnRenamed: self._column_renamed,
            SheetChanged: self._sheet_changed,
            SheetDeleted: self._sheet_deleted,
            SheetRenamed: self._sheet_renamed,
        }

    def dispatch(self, event: MutationEvent) -> bool:
        """Apply one event.

        Returns:
            True if the collection changed, False for ignored (stale) events

        Raises:
            TypeError: ``event`` is not a mutation event
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported mutation event: {type(event).__name__}")
        applied = handler(event)
        if not applied:
            logger.debug(f"ignored stale mutation: {event!r}")
        return applied

    def _target(self, sheet_id: str | None) -> Sheet | None:
        return self.collection.resolve(sheet_id)

    def _add_sheet(self, event: AddSheet) -> bool:
        event.sheet.refresh_counts()
        self.collection.add(event.sheet)
        return True

    def _remove_sheets_by_file(self, event: RemoveSheetsByFile) -> bool:
        return bool(self.collection.remove_by_file(event.file_id))

    def _cell_update(self, event: CellUpdate) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None or sheet.find_column(event.column_key) is None:
            return False
        row = sheet.find_row(event.row_id)
        if row is None:
            return False
        row.data[event.column_key] = event.value
        sheet.touch()
        return True

    def _rows_removed(self, event: RowsRemoved) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None:
            return False
        if event.all_removed:
            sheet.rows = []
        else:
            doomed = set(event.row_ids)
            kept = [r for r in sheet.rows if r.id not in doomed]
            if len(kept) == len(sheet.rows):
                return False
            sheet.rows = kept
        sheet.touch()
        return True

    def _column_removed(self, event: ColumnRemoved) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None or sheet.find_column(event.column_key) is None:
            return False
        sheet.columns = [c for c in sheet.columns if c.key != event.column_key]
        for row in sheet.rows:
            row.data.pop(event.column_key, None)
        sheet.touch()
        return True

    def _row_added(self, event: RowAdded) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None:
            return False
        next_index = max((r.index for r in sheet.rows), default=-1) + 1
        # 未知キーは破棄、欠損キーは None
        data = {key: event.data.get(key) for key in sheet.column_keys}
        sheet.rows.append(Row(id=new_row_id(), index=next_index, data=data, selected=False))
        sheet.touch()
        return True

    def _column_added(self, event: ColumnAdded) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None or sheet.find_column(event.column.key) is not None:
            return False
        sheet.columns.append(dataclasses.replace(event.column))
        for row in sheet.rows:
            row.data[event.column.key] = None
        sheet.touch()
        return True

    def _column_renamed(self, event: ColumnRenamed) -> bool:
        sheet = self._target(event.sheet_id)
        if sheet is None:
            return False
        column = sheet.find_column(event.old_key)
        if column is None:
            return False
        if event.new_key != event.old_key and sheet.find_column(event.new_key) is not None:
            return False

        if event.new_key != event.old_key:
            if column.original_key is None:
                column.original_key = event.old_key
            column.key = event.new_key
            for row in sheet.rows:
                # 列順を保ったままキーを付け替える
                row.data = {
                    (event.new_key if k == event.old_key else k): v
                    for k, v in row.data.items()
                }
        if event.new_title is not None and event.new_title != column.title:
            if column.original_title is None:
                column.original_title = column.title
            column.title = event.new_title
        sheet.touch()
        return True

    def _sheet_changed(self, event: SheetChanged) -> bool:
        return self.collection.activate(event.sheet_id)

    def _sheet_deleted(self, event: SheetDeleted) -> bool:
        return self.collection.remove(event.sheet_id) is not None

    def _sheet_renamed(self, event: SheetRenamed) -> bool:
        sheet = self.collection.get(event.sheet_id)
        if sheet is None:
            return False
        sheet.name = event.name
        sheet.touch()
        return True
