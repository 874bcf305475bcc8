from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

"""Structured failure records for the staging engine.

Three things produce records: a dropped file the session refuses, a file
whose body cannot be parsed, and a sheet submission the persistence API
rejects. ``ErrorLogBuffer`` writes them as one JSON object per line.
"""

__all__ = [
    "FILE_LEVEL",
    "NO_ROW",
    "ErrorRecord",
]

FILE_LEVEL = "<FILE_LEVEL>"  # sheet 名の代わり (シート生成前の失敗)
NO_ROW = -1


def _utc_stamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """One staged-import failure.

    Attributes:
        timestamp: ISO8601 UTC with 'Z' suffix
        file: Display name of the uploaded file
        sheet: Sheet name, or ``FILE_LEVEL`` when no sheet exists yet
        row: Row index, ``NO_ROW`` when the failure is not about a row
        error_type: UPPER_SNAKE classification (FILE_REJECTED, PARSE_ERROR, ...)
        message: Human readable reason
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @classmethod
    def for_file(cls, file: str, error_type: str, message: str) -> ErrorRecord:
        return cls(_utc_stamp(), file, FILE_LEVEL, NO_ROW, error_type, message)

    @classmethod
    def for_sheet(cls, file: str, sheet: str, error_type: str, message: str, row: int = NO_ROW) -> ErrorRecord:
        return cls(_utc_stamp(), file, sheet, row, error_type, message)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
