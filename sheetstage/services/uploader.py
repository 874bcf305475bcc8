from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.import_file import FileStatus, ImportFile
from ..models.sheet import Column, Scalar, Sheet
from ..models.upload_result import SheetUploadStat, SubmissionStatsAccumulator, UploadResult
from ..persistence.client import PersistenceClient, extract_data_source_id
from .progress import ProgressTracker

"""Upload sequencing: staged sheets -> one data source.

Sheets are submitted strictly one after another in collection order. The
first successful submission creates the data source; its id is sent with
every later submission so all sheets of the session attach to it. A failing
submission marks its file ``failed`` and the batch moves on to the next
sheet.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "COLUMN_NAME_MAX",
    "normalize_column_name",
    "build_payload",
    "UploadSequencer",
]

COLUMN_NAME_MAX = 20
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_column_name(title: str) -> str:
    """Lower-case, whitespace runs to ``_``, truncated to 20 characters."""
    return _WHITESPACE_RE.sub("_", title.strip().lower())[:COLUMN_NAME_MAX]


def _json_value(value: Scalar) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _column_payload(column: Column) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": column.title,
        "key": column.key,
        "column_name": normalize_column_name(column.title),
        "type": column.type.value,
    }
    # rename 前の名前 (backend の列マッピング用)
    if column.original_key is not None:
        payload["original_key"] = column.original_key
    if column.original_title is not None:
        payload["original_title"] = column.original_title
    return payload


def build_payload(
    sheet: Sheet,
    file: ImportFile,
    *,
    project_id: int,
    data_source_name: str,
    data_source_id: int | str | None,
) -> dict[str, Any]:
    """Request body for one sheet submission."""
    keys = sheet.column_keys
    return {
        "file_id": file.id,
        "data": {
            "columns": [_column_payload(c) for c in sheet.columns],
            "rows": [{k: _json_value(row.data.get(k)) for k in keys} for row in sheet.rows],
        },
        "data_source_name": data_source_name,
        "project_id": project_id,
        "data_source_id": data_source_id,
        "sheet_info": {
            "sheet_id": sheet.id,
            "sheet_name": sheet.name,
            "file_name": file.name,
            "sheet_index": sheet.index,
        },
    }


class UploadSequencer:
    """Submits eligible sheets one at a time, threading the data source id."""

    def __init__(
        self,
        client: PersistenceClient,
        files: Mapping[str, ImportFile],
        *,
        project_id: int,
        data_source_name: str,
        cooldown_seconds: float = 1.0,
        error_log: ErrorLogBuffer | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.files = files
        self.project_id = project_id
        self.data_source_name = data_source_name
        self.cooldown_seconds = cooldown_seconds
        self.error_log = error_log
        self._sleep = sleep

    def _skip_reason(self, sheet: Sheet) -> str | None:
        if not sheet.columns:
            return "no columns"
        if not sheet.rows:
            return "no rows"
        if sheet.file_id not in self.files:
            return "file no longer registered"
        return None

    async def upload_all(self, sheets: Iterable[Sheet]) -> UploadResult:
        """Submit every eligible sheet in order.

        Never raises for a failed submission; check ``failed_sheets`` and the
        per-sheet stats instead.

        Returns:
            UploadResult whose ``data_source_id`` is the id returned by the first
            successful submission, or None
        """
        start_time = datetime.now(UTC)
        ordered = list(sheets)
        data_source_id: int | str | None = None
        failed_files: set[str] = set()
        stats: list[SheetUploadStat] = []
        timings = SubmissionStatsAccumulator()
        uploaded = failed = skipped = total_rows = 0
        submitted_any = False

        eligible = [s for s in ordered if self._skip_reason(s) is None]
        with ProgressTracker(len(eligible)) as progress:
            for sheet in ordered:
                reason = self._skip_reason(sheet)
                if reason is not None:
                    logger.info(f"skipping sheet {sheet.name!r}: {reason}")
                    skipped += 1
                    stats.append(SheetUploadStat(
                        sheet_id=sheet.id,
                        sheet_name=sheet.name,
                        file_id=sheet.file_id,
                        status="skipped",
                        rows=len(sheet.rows),
                    ))
                    continue

                if submitted_any and self.cooldown_seconds > 0:
                    await self._sleep(self.cooldown_seconds)
                submitted_any = True

                file = self.files[sheet.file_id]
                if file.id not in failed_files:
                    file.status = FileStatus.PROCESSING
                progress.start_sheet(sheet.name)
                payload = build_payload(
                    sheet,
                    file,
                    project_id=self.project_id,
                    data_source_name=self.data_source_name,
                    data_source_id=data_source_id,
                )
                t0 = time.perf_counter()
                try:
                    response = await self.client.submit(payload, kind=file.kind)
                    returned_id = extract_data_source_id(response)
                except Exception as e:
                    elapsed = time.perf_counter() - t0
                    failed += 1
                    failed_files.add(file.id)
                    file.status = FileStatus.FAILED
                    file.error = str(e)
                    logger.error(f"upload failed for {file.name} / {sheet.name}: {e}")
                    if self.error_log is not None:
                        self.error_log.append(
                            ErrorRecord.for_sheet(file.name, sheet.name, "SUBMISSION_FAILED", str(e))
                        )
                    stats.append(SheetUploadStat(
                        sheet_id=sheet.id,
                        sheet_name=sheet.name,
                        file_id=file.id,
                        status="failed",
                        rows=len(sheet.rows),
                        elapsed_seconds=elapsed,
                        error=str(e),
                    ))
                    progress.finish_sheet(success=False)
                    continue

                elapsed = time.perf_counter() - t0
                timings.add_submission_time(elapsed)
                if data_source_id is None:
                    data_source_id = returned_id
                uploaded += 1
                total_rows += len(sheet.rows)
                # 同一ファイルの他シートが失敗済みなら failed のまま
                if file.id not in failed_files:
                    file.status = FileStatus.UPLOADED
                logger.info(
                    f"uploaded {file.name} / {sheet.name}: rows={len(sheet.rows)} "
                    f"data_source_id={data_source_id}"
                )
                stats.append(SheetUploadStat(
                    sheet_id=sheet.id,
                    sheet_name=sheet.name,
                    file_id=file.id,
                    status="uploaded",
                    rows=len(sheet.rows),
                    elapsed_seconds=elapsed,
                ))
                progress.finish_sheet(success=True)

        end_time = datetime.now(UTC)
        total_submissions, avg_seconds, p95_seconds = timings.get_stats()
        return UploadResult(
            data_source_id=data_source_id,
            uploaded_sheets=uploaded,
            failed_sheets=failed,
            skipped_sheets=skipped,
            total_rows=total_rows,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            sheet_stats=stats,
            total_submissions=total_submissions,
            avg_submission_seconds=avg_seconds,
            p95_submission_seconds=p95_seconds,
        )
