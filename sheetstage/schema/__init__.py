"""Schema inference: column types, widths and column definitions."""

from .analyzer import analyze_columns
from .layout import estimate_width
from .type_inference import infer_type

__all__ = [
    "analyze_columns",
    "estimate_width",
    "infer_type",
]
