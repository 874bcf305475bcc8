from __future__ import annotations

from pathlib import Path

from sheetstage.cli import main as cli_main


def test_inspect_prints_inferred_columns(temp_workdir: Path, xlsx_bytes, capsys):
    book = temp_workdir / "data" / "book.xlsx"
    book.write_bytes(xlsx_bytes({
        "Contacts": [["email", "site", "active"], ["a@x.io", "https://x.io", "yes"]],
        "Empty": [],
    }))
    code = cli_main(["inspect", str(book)])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: book.xlsx status=loaded" in out
    assert "SHEET: Contacts" in out
    assert "email: email" in out
    assert "site: url" in out
    assert "active: boolean" in out
    assert "SHEET: Empty" not in out


def test_inspect_header_row_option(temp_workdir: Path, capsys):
    csv = temp_workdir / "data" / "report.csv"
    csv.write_text("Monthly report,\nitem,qty\npen,3\n", encoding="utf-8")
    assert cli_main(["inspect", "--header-row", "1", str(csv)]) == 0
    out = capsys.readouterr().out
    assert "qty: number" in out


def test_inspect_reports_rejected_files(temp_workdir: Path, capsys):
    notes = temp_workdir / "data" / "notes.txt"
    notes.write_text("hello", encoding="utf-8")
    broken = temp_workdir / "data" / "broken.xlsx"
    broken.write_bytes(b"not a workbook")
    code = cli_main(["inspect", str(notes), str(broken)])
    out = capsys.readouterr().out
    assert code == 2
    assert "REJECTED: notes.txt, broken.xlsx" in out
    assert "FILE: broken.xlsx status=error" in out


def test_inspect_directory_argument(temp_workdir: Path, capsys):
    code = cli_main(["inspect", str(temp_workdir / "data")])
    out = capsys.readouterr().out
    assert code == 2
    assert "REJECTED: data" in out
