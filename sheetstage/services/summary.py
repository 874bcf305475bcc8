from __future__ import annotations

from ..models.upload_result import UploadResult

"""SUMMARY line rendering for an upload batch."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: UploadResult) -> str:
    """Render the SUMMARY line for an UploadResult.

    Format:
    SUMMARY sheets={attempted+skipped} uploaded={n} failed={n} skipped={n}
    rows={n} data_source_id={id|none} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = UploadResult(
        ...     data_source_id=42, uploaded_sheets=2, failed_sheets=1, skipped_sheets=0,
        ...     total_rows=10, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(r)
        'SUMMARY sheets=3 uploaded=2 failed=1 skipped=0 rows=10 data_source_id=42 elapsed_sec=2'
    """
    total = result.uploaded_sheets + result.failed_sheets + result.skipped_sheets
    ds_id = "none" if result.data_source_id is None else str(result.data_source_id)
    return (
        f"SUMMARY sheets={total} "
        f"uploaded={result.uploaded_sheets} "
        f"failed={result.failed_sheets} "
        f"skipped={result.skipped_sheets} "
        f"rows={result.total_rows} "
        f"data_source_id={ds_id} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
