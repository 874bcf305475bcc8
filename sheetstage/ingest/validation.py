from __future__ import annotations

import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass

from ..models.import_file import InputKind

"""Upload acceptance rules.

A dropped/selected file is accepted when its extension belongs to one of the
wizard's input kinds, its MIME type (when the browser supplied one) is one we
expect for that extension, and it is not larger than the configured limit.
"""

__all__ = [
    "FileRejectedError",
    "FileCandidate",
    "kind_for",
    "validate_candidate",
]

EXTENSION_KINDS: dict[str, InputKind] = {
    ".xlsx": InputKind.WORKSHEET,
    ".xlsm": InputKind.WORKSHEET,
    ".xls": InputKind.WORKSHEET,
    ".csv": InputKind.CSV,
    ".pdf": InputKind.PDF,
}

ACCEPTED_MIME_TYPES: dict[InputKind, frozenset[str]] = {
    InputKind.WORKSHEET: frozenset({
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel.sheet.macroenabled.12",
        "application/vnd.ms-excel",
        "application/octet-stream",
    }),
    InputKind.CSV: frozenset({
        "text/csv",
        "text/plain",
        "application/csv",
        "application/vnd.ms-excel",  # Windows ブラウザは csv をこれで送る
        "application/octet-stream",
    }),
    InputKind.PDF: frozenset({"application/pdf", "application/octet-stream"}),
}


class FileRejectedError(Exception):
    """Raised when a candidate file fails extension, MIME or size checks."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


@dataclass(frozen=True)
class FileCandidate:
    """A file the user dropped or selected, before acceptance."""
    name: str
    size: int = 0
    mime_type: str | None = None
    content: bytes | None = None  # 読み込み済みバイト列 (PDF は OCR 側で処理)


def kind_for(file_name: str) -> InputKind | None:
    dot = file_name.rfind(".")
    if dot < 0:
        return None
    return EXTENSION_KINDS.get(file_name[dot:].lower())


def validate_candidate(
    candidate: FileCandidate,
    allowed_kinds: Iterable[InputKind] | None = None,
    max_bytes: int | None = None,
) -> InputKind:
    """Return the candidate's input kind or raise FileRejectedError."""
    kind = kind_for(candidate.name)
    if kind is None:
        raise FileRejectedError(candidate.name, "unsupported file extension")
    if allowed_kinds is not None and kind not in set(allowed_kinds):
        raise FileRejectedError(candidate.name, f"{kind.value} files are not accepted here")

    mime = candidate.mime_type or mimetypes.guess_type(candidate.name)[0]
    if mime and mime.lower() not in ACCEPTED_MIME_TYPES[kind]:
        raise FileRejectedError(candidate.name, f"unexpected MIME type {mime}")

    if candidate.size < 0:
        raise FileRejectedError(candidate.name, "negative file size")
    if max_bytes is not None and candidate.size > max_bytes:
        raise FileRejectedError(candidate.name, f"file exceeds {max_bytes} bytes")
    return kind
