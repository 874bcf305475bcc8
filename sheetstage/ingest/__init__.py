"""File ingestion: acceptance checks, worksheet reading and sheet factories."""

from .factory import SheetFactory, create_sheet, factory_for
from .reader import SheetParseError, Worksheet, read_worksheets
from .validation import FileCandidate, FileRejectedError, validate_candidate

__all__ = [
    "FileCandidate",
    "FileRejectedError",
    "SheetFactory",
    "SheetParseError",
    "Worksheet",
    "create_sheet",
    "factory_for",
    "read_worksheets",
    "validate_candidate",
]
