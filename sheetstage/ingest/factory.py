from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.import_file import ImportFile, InputKind
from ..models.sheet import Row, Sheet
from ..schema.analyzer import analyze_columns, collect_key_map

"""Sheet factories: one parsed body -> one staged Sheet.

The base ``SheetFactory`` holds the shared logic; the subclasses only decide
how a sheet is labelled for their input kind (worksheet name, CSV file stem,
PDF page number).
"""

__all__ = [
    "sheet_id_for",
    "new_row_id",
    "create_sheet",
    "SheetFactory",
    "WorksheetSheetFactory",
    "CsvSheetFactory",
    "PdfPageSheetFactory",
    "factory_for",
]


def sheet_id_for(file_id: str, sheet_index: int) -> str:
    """Deterministic sheet id; re-parsing the same worksheet maps to the same Sheet."""
    return f"{file_id}_sheet_{sheet_index}"


def new_row_id() -> str:
    return uuid.uuid4().hex


def create_sheet(
    file: ImportFile,
    rows: Sequence[Mapping[Any, Any]],
    sheet_label: str,
    sheet_index: int,
    threshold: float = 1.0,
) -> Sheet | None:
    """Build a Sheet from raw records, or None when there are no records.

    Every Row gets a fresh id, its ordinal index and ``selected=False``; its
    data is backfilled with None for keys other records introduced, so each
    row carries exactly the sheet's column keys.
    """
    if not rows:
        return None
    columns = analyze_columns(rows, threshold=threshold)
    source_keys = collect_key_map(rows)
    staged_rows = [
        Row(
            id=new_row_id(),
            index=i,
            data={key: record.get(source) for key, source in source_keys.items()},
            selected=False,
        )
        for i, record in enumerate(rows)
    ]
    return Sheet(
        id=sheet_id_for(file.id, sheet_index),
        name=sheet_label,
        file_id=file.id,
        index=sheet_index,
        columns=columns,
        rows=staged_rows,
    )


class SheetFactory:
    """Strategy turning parsed bodies of one input kind into Sheets."""

    kind: InputKind = InputKind.WORKSHEET

    def __init__(self, threshold: float = 1.0) -> None:
        self.threshold = threshold

    def label_for(self, file: ImportFile, sheet_index: int, source_name: str | None) -> str:
        return source_name or f"Sheet{sheet_index + 1}"

    def build(
        self,
        file: ImportFile,
        rows: Sequence[Mapping[str, Any]],
        sheet_index: int,
        source_name: str | None = None,
    ) -> Sheet | None:
        label = self.label_for(file, sheet_index, source_name)
        return create_sheet(file, rows, label, sheet_index, threshold=self.threshold)


class WorksheetSheetFactory(SheetFactory):
    kind = InputKind.WORKSHEET


class CsvSheetFactory(SheetFactory):
    kind = InputKind.CSV

    def label_for(self, file: ImportFile, sheet_index: int, source_name: str | None) -> str:
        return file.stem


class PdfPageSheetFactory(SheetFactory):
    kind = InputKind.PDF

    def label_for(self, file: ImportFile, sheet_index: int, source_name: str | None) -> str:
        return f"Page {sheet_index + 1}"


_FACTORIES: dict[InputKind, type[SheetFactory]] = {
    InputKind.WORKSHEET: WorksheetSheetFactory,
    InputKind.CSV: CsvSheetFactory,
    InputKind.PDF: PdfPageSheetFactory,
}


def factory_for(kind: InputKind, threshold: float = 1.0) -> SheetFactory:
    return _FACTORIES[kind](threshold=threshold)
