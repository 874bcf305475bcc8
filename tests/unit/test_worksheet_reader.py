from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytest

from sheetstage.ingest.reader import (
    SheetHeaderError,
    SheetParseError,
    normalize_sheet,
    read_csv_body,
    read_worksheets,
)


def test_normalize_sheet_basic():
    df = pd.DataFrame([
        ["id", "name", None],
        [1, "  Alice ", "x"],
        [None, None, None],
        [2, "NULL", "y"],
    ])
    ws = normalize_sheet(df, "Customers", null_sentinels={"NULL"})
    assert ws.columns == ["id", "name", "Column_3"]
    assert ws.rows == [
        {"id": 1, "name": "Alice", "Column_3": "x"},
        {"id": 2, "name": None, "Column_3": "y"},
    ]


def test_normalize_sheet_duplicate_headers_and_header_row():
    df = pd.DataFrame([
        ["report title", None],
        ["a", "a"],
        ["1", "2"],
    ])
    ws = normalize_sheet(df, "S", header_row=1)
    assert ws.columns == ["a", "a_2"]
    assert ws.rows == [{"a": "1", "a_2": "2"}]


def test_normalize_sheet_timestamps_become_datetime():
    df = pd.DataFrame([["when"], [pd.Timestamp("2024-01-02 03:04:05")]], dtype=object)
    ws = normalize_sheet(df, "S")
    assert ws.rows[0]["when"] == datetime(2024, 1, 2, 3, 4, 5)
    assert type(ws.rows[0]["when"]) is datetime


def test_empty_dataframe_is_blank_sheet():
    ws = normalize_sheet(pd.DataFrame(), "Blank")
    assert ws.is_empty and ws.columns == []


def test_missing_header_row_raises():
    with pytest.raises(SheetHeaderError):
        normalize_sheet(pd.DataFrame([["a"]]), "S", header_row=3)


def test_read_csv_body_latin1_fallback():
    body = "name\nJos\xe9\n".encode("latin-1")
    df = read_csv_body(body)
    assert df.iloc[1, 0] == "Jos\xe9"


def test_read_csv_body_strips_bom():
    df = read_csv_body("\ufeffa,b\n1,2\n".encode("utf-8"))
    assert df.iloc[0].tolist() == ["a", "b"]


def test_read_csv_body_empty():
    assert read_csv_body(b"").empty


def test_read_worksheets_dispatch(xlsx_bytes):
    sheets = read_worksheets(b"x,y\n1,2\n", "data.csv")
    assert [s.name for s in sheets] == ["data"]
    assert sheets[0].rows == [{"x": "1", "y": "2"}]

    book = xlsx_bytes({"One": [["k"], ["v"]], "Two": [["n"], [3]]})
    names = [s.name for s in read_worksheets(book, "book.xlsx")]
    assert names == ["One", "Two"]


def test_read_worksheets_errors():
    with pytest.raises(SheetParseError, match="unsupported"):
        read_worksheets(b"", "notes.txt")
    with pytest.raises(SheetParseError):
        read_worksheets(b"garbage", "book.xlsx")
