from __future__ import annotations

from sheetstage.ingest.factory import (
    CsvSheetFactory,
    PdfPageSheetFactory,
    WorksheetSheetFactory,
    create_sheet,
    factory_for,
    sheet_id_for,
)
from sheetstage.models.import_file import InputKind
from sheetstage.models.sheet import ColumnType


def test_create_sheet_returns_none_for_empty_rows(make_file):
    assert create_sheet(make_file(), [], "Sheet1", 0) is None


def test_create_sheet_ids_and_metadata(make_file):
    file = make_file(file_id="abc")
    sheet = create_sheet(file, [{"a": "1"}, {"a": "2"}], "Data", 2)
    assert sheet is not None
    assert sheet.id == "abc_sheet_2" == sheet_id_for("abc", 2)
    assert sheet.file_id == "abc"
    assert sheet.name == "Data"
    assert sheet.metadata.row_count == 2
    assert sheet.metadata.column_count == 1
    assert [r.index for r in sheet.rows] == [0, 1]
    assert len({r.id for r in sheet.rows}) == 2
    assert all(r.selected is False for r in sheet.rows)
    assert sheet.columns[0].type is ColumnType.NUMBER


def test_create_sheet_backfills_missing_keys(make_file):
    sheet = create_sheet(make_file(), [{"a": 1}, {"b": 2}], "S", 0)
    assert sheet.column_keys == ["a", "b"]
    assert sheet.rows[0].data == {"a": 1, "b": None}
    assert sheet.rows[1].data == {"a": None, "b": 2}


def test_same_file_and_index_give_same_sheet_id(make_file):
    file = make_file()
    first = create_sheet(file, [{"a": 1}], "S", 0)
    second = create_sheet(file, [{"a": 9}], "S", 0)
    assert first.id == second.id
    assert first.rows[0].id != second.rows[0].id


def test_labels_per_strategy(make_file):
    rows = [{"x": "1"}]
    xlsx = make_file(name="book.xlsx")
    assert WorksheetSheetFactory().build(xlsx, rows, 0, "Customers").name == "Customers"
    assert WorksheetSheetFactory().build(xlsx, rows, 1).name == "Sheet2"

    csv = make_file(name="orders.csv", kind=InputKind.CSV)
    assert CsvSheetFactory().build(csv, rows, 0, "ignored").name == "orders"

    pdf = make_file(name="scan.pdf", kind=InputKind.PDF)
    sheet = PdfPageSheetFactory().build(pdf, rows, 2)
    assert sheet.name == "Page 3"
    assert sheet.id == f"{pdf.id}_sheet_2"


def test_factory_for_kind_and_threshold():
    f = factory_for(InputKind.CSV, threshold=0.8)
    assert isinstance(f, CsvSheetFactory)
    assert f.threshold == 0.8
    assert isinstance(factory_for(InputKind.PDF), PdfPageSheetFactory)


def test_create_sheet_from_positional_records(make_file):
    sheet = create_sheet(make_file(), [{0: "1", 1: "a@b.com"}, {0: "2"}], "Page 1", 0)
    assert sheet.column_keys == ["0", "1"]
    assert sheet.rows[0].data == {"0": "1", "1": "a@b.com"}
    assert sheet.rows[1].data == {"0": "2", "1": None}
    assert sheet.columns[0].type is ColumnType.NUMBER
