from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

"""ImportFile domain model and FileStatus enum for the staging engine.

An ImportFile is one uploaded asset (spreadsheet, CSV or OCR'd PDF) registered
in an import session. Its status drives what the wizard shows for the file and
is updated by the session while parsing and by the upload sequencer while
submitting.
"""

__all__ = [
    "FileStatus",
    "InputKind",
    "ImportFile",
]


class FileStatus(Enum):
    """Status enum for ImportFile lifecycle.

    State transitions:
        pending → processing → (loaded | completed | empty | error)
        loaded/completed → processing → (uploaded | failed)

    - PENDING: File accepted but not yet parsed
    - PROCESSING: File is being parsed, or its sheets are being submitted
    - LOADED: Spreadsheet parsed, sheets staged
    - COMPLETED: All OCR pages of a PDF have arrived
    - ERROR: Reading/parsing raised
    - EMPTY: Parse succeeded but produced no rows
    - UPLOADED: Every sheet of the file was submitted
    - FAILED: At least one sheet submission raised
    """
    PENDING = "pending"
    PROCESSING = "processing"
    LOADED = "loaded"
    COMPLETED = "completed"
    ERROR = "error"
    EMPTY = "empty"
    UPLOADED = "uploaded"
    FAILED = "failed"


class InputKind(Enum):
    """Which sheet factory strategy turns the file into sheets."""
    WORKSHEET = "worksheet"
    CSV = "csv"
    PDF = "pdf"


@dataclass
class ImportFile:
    """One uploaded asset owned by an import session.

    Sheets are not stored here; the session's SheetCollection owns them and
    links back through ``Sheet.file_id``.
    """
    id: str                              # opaque, unique within the session
    name: str                            # display name (original filename)
    size: int = 0                        # byte size
    mime_type: str | None = None
    kind: InputKind = InputKind.WORKSHEET
    status: FileStatus = FileStatus.PENDING
    error: str | None = None             # 失敗理由 (parse / upload)

    @property
    def stem(self) -> str:
        return PurePath(self.name).stem
