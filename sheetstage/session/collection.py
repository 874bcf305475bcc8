from __future__ import annotations

from collections.abc import Iterator

from ..models.sheet import Sheet

"""SheetCollection: every staged sheet of one import session.

Sheets keep insertion order; replacing a sheet by id keeps its original
position. The collection also owns the active-sheet pointer, which is None
exactly when the collection is empty and otherwise names a present sheet.
"""

__all__ = [
    "SheetCollection",
]


class SheetCollection:
    """Insertion-ordered sheet store plus the active sheet id."""

    def __init__(self) -> None:
        self._sheets: dict[str, Sheet] = {}
        self._active_id: str | None = None

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active_sheet(self) -> Sheet | None:
        if self._active_id is None:
            return None
        return self._sheets.get(self._active_id)

    @property
    def sheets(self) -> list[Sheet]:
        return list(self._sheets.values())

    def get(self, sheet_id: str) -> Sheet | None:
        return self._sheets.get(sheet_id)

    def resolve(self, sheet_id: str | None) -> Sheet | None:
        """Sheet by id, or the active sheet when ``sheet_id`` is None."""
        if sheet_id is None:
            return self.active_sheet
        return self._sheets.get(sheet_id)

    def sheets_for_file(self, file_id: str) -> list[Sheet]:
        return [s for s in self._sheets.values() if s.file_id == file_id]

    def __contains__(self, sheet_id: object) -> bool:
        return sheet_id in self._sheets

    def __iter__(self) -> Iterator[Sheet]:
        return iter(list(self._sheets.values()))

    def __len__(self) -> int:
        return len(self._sheets)

    def add(self, sheet: Sheet) -> None:
        """Insert or replace by id; the first sheet added becomes active."""
        self._sheets[sheet.id] = sheet
        if self._active_id is None:
            self._active_id = sheet.id

    def remove(self, sheet_id: str) -> Sheet | None:
        removed = self._sheets.pop(sheet_id, None)
        if removed is not None:
            self._repoint_active()
        return removed

    def remove_by_file(self, file_id: str) -> list[Sheet]:
        doomed = [sid for sid, s in self._sheets.items() if s.file_id == file_id]
        removed = [self._sheets.pop(sid) for sid in doomed]
        if removed:
            self._repoint_active()
        return removed

    def activate(self, sheet_id: str) -> bool:
        if sheet_id not in self._sheets:
            return False
        self._active_id = sheet_id
        return True

    def clear(self) -> None:
        self._sheets.clear()
        self._active_id = None

    def _repoint_active(self) -> None:
        if self._active_id in self._sheets:
            return
        self._active_id = next(iter(self._sheets), None)
