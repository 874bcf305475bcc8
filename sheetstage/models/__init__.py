"""Domain models for the multi-sheet staging engine."""

from .config_models import IngestConfig, InferenceConfig, PersistenceConfig, StagingConfig, UploadConfig
from .error_record import ErrorRecord
from .import_file import FileStatus, ImportFile, InputKind
from .sheet import Column, ColumnType, Row, Scalar, Sheet, SheetMetadata
from .upload_result import SheetUploadStat, UploadResult

__all__ = [
    # Configuration models
    "IngestConfig",
    "InferenceConfig",
    "PersistenceConfig",
    "StagingConfig",
    "UploadConfig",
    # Staging models
    "Column",
    "ColumnType",
    "FileStatus",
    "ImportFile",
    "InputKind",
    "Row",
    "Scalar",
    "Sheet",
    "SheetMetadata",
    # Results
    "ErrorRecord",
    "SheetUploadStat",
    "UploadResult",
]
