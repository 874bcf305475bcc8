from __future__ import annotations

import pytest

from sheetstage.ingest.validation import FileCandidate, FileRejectedError, kind_for, validate_candidate
from sheetstage.models.import_file import InputKind


@pytest.mark.parametrize(
    "name, kind",
    [
        ("book.xlsx", InputKind.WORKSHEET),
        ("BOOK.XLSM", InputKind.WORKSHEET),
        ("legacy.xls", InputKind.WORKSHEET),
        ("rows.csv", InputKind.CSV),
        ("scan.pdf", InputKind.PDF),
        ("notes.txt", None),
        ("noext", None),
    ],
)
def test_kind_for(name, kind):
    assert kind_for(name) is kind


def test_validate_accepts_browser_csv_mime():
    cand = FileCandidate(name="a.csv", size=3, mime_type="application/vnd.ms-excel")
    assert validate_candidate(cand) is InputKind.CSV


def test_validate_rejections():
    with pytest.raises(FileRejectedError, match="extension"):
        validate_candidate(FileCandidate(name="a.docx"))
    with pytest.raises(FileRejectedError, match="MIME"):
        validate_candidate(FileCandidate(name="a.pdf", mime_type="text/html"))
    with pytest.raises(FileRejectedError, match="exceeds"):
        validate_candidate(FileCandidate(name="a.pdf", size=11), max_bytes=10)
    with pytest.raises(FileRejectedError, match="not accepted"):
        validate_candidate(FileCandidate(name="a.pdf"), allowed_kinds=[InputKind.CSV])


def test_rejection_carries_name_and_reason():
    with pytest.raises(FileRejectedError) as e:
        validate_candidate(FileCandidate(name="x.exe"))
    assert e.value.file_name == "x.exe"
    assert e.value.reason == "unsupported file extension"
