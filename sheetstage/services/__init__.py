"""Upload sequencing, progress display and summary rendering."""

from .summary import render_summary_line
from .uploader import UploadSequencer, build_payload, normalize_column_name

__all__ = [
    "UploadSequencer",
    "build_payload",
    "normalize_column_name",
    "render_summary_line",
]
