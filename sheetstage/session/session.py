from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from ..ingest.factory import factory_for
from ..ingest.reader import SheetParseError, Source, Worksheet, read_worksheets
from ..ingest.validation import FileCandidate, FileRejectedError, validate_candidate
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import IngestConfig, InferenceConfig
from ..models.error_record import ErrorRecord
from ..models.import_file import FileStatus, ImportFile, InputKind
from ..models.sheet import Sheet
from .collection import SheetCollection
from .dispatcher import MutationDispatcher
from .events import (
    AddSheet,
    FileRemoved,
    FilesDropped,
    PageReady,
    PagesCompleted,
    RemoveSheetsByFile,
)

"""Import session: the state one import wizard works on.

The session owns the registered files, the SheetCollection, the mutation
dispatcher and the rejected-file report. Everything reaches it through
``handle`` (or the named methods behind it), so a test can replay a recorded
event sequence without any UI.

Files removed while their parse or OCR is still in flight are simply no
longer registered when the result arrives; the result is dropped.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ImportSession",
]


class ImportSession:
    """Files, staged sheets and edit dispatch for one import wizard run."""

    def __init__(
        self,
        ingest: IngestConfig | None = None,
        inference: InferenceConfig | None = None,
        allowed_kinds: Iterable[InputKind] | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.ingest_config = ingest or IngestConfig()
        self.inference_config = inference or InferenceConfig()
        self.allowed_kinds = frozenset(allowed_kinds) if allowed_kinds is not None else None
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.files: dict[str, ImportFile] = {}
        self.collection = SheetCollection()
        self.dispatcher = MutationDispatcher(self.collection)
        self._rejected: list[str] = []
        self._pending_content: dict[str, bytes] = {}

    @property
    def rejected(self) -> list[str]:
        return list(self._rejected)

    def take_rejected(self) -> list[str]:
        """Return the batched rejected-file names and reset the report."""
        names, self._rejected = self._rejected, []
        return names

    def record_rejection(self, file_name: str, error_type: str, message: str) -> None:
        """Add a file to the rejected report and the error log."""
        self._rejected.append(file_name)
        self.error_log.append(ErrorRecord.for_file(file_name, error_type, message))

    def register_files(self, candidates: Iterable[FileCandidate]) -> tuple[list[ImportFile], list[str]]:
        """Validate candidates and register the accepted ones as pending files.

        Returns:
            (accepted files, names rejected in this batch)
        """
        accepted: list[ImportFile] = []
        rejected: list[str] = []
        for candidate in candidates:
            try:
                kind = validate_candidate(
                    candidate,
                    allowed_kinds=self.allowed_kinds,
                    max_bytes=self.ingest_config.max_file_bytes,
                )
            except FileRejectedError as e:
                logger.warning(f"rejected file {e.file_name}: {e.reason}")
                self.record_rejection(candidate.name, "FILE_REJECTED", e.reason)
                rejected.append(candidate.name)
                continue
            file = ImportFile(
                id=uuid.uuid4().hex,
                name=candidate.name,
                size=candidate.size,
                mime_type=candidate.mime_type,
                kind=kind,
            )
            self.files[file.id] = file
            if candidate.content is not None:
                self._pending_content[file.id] = candidate.content
            accepted.append(file)
        if rejected:
            logger.warning(f"{len(rejected)} file(s) rejected: {', '.join(rejected)}")
        return accepted, rejected

    def load_worksheets(self, file_id: str, worksheets: Sequence[Worksheet]) -> list[Sheet]:
        """Stage parsed worksheets of a registered file.

        Blank worksheets produce no sheet but keep their index, so sheet ids
        stay stable across re-parses. A file whose worksheets are all blank
        ends ``empty``.
        """
        file = self.files.get(file_id)
        if file is None:
            logger.debug(f"discarding parse result for removed file {file_id}")
            return []
        factory = factory_for(file.kind, threshold=self.inference_config.match_threshold)
        created: list[Sheet] = []
        for index, ws in enumerate(worksheets):
            sheet = factory.build(file, ws.rows, index, ws.name)
            if sheet is None:
                logger.debug(f"skipping empty sheet {ws.name!r} in {file.name}")
                continue
            self.dispatcher.dispatch(AddSheet(sheet))
            created.append(sheet)
        file.status = FileStatus.LOADED if created else FileStatus.EMPTY
        logger.info(f"loaded {file.name}: sheets={len(created)} status={file.status.value}")
        return created

    def _read(self, file: ImportFile, source: Source) -> list[Worksheet]:
        return read_worksheets(
            source,
            file.name,
            header_row=self.ingest_config.header_row,
            null_sentinels=self.ingest_config.null_sentinels,
        )

    def _parse_failed(self, file: ImportFile, error: Exception) -> None:
        file.status = FileStatus.ERROR
        file.error = str(error)
        logger.error(f"failed to parse {file.name}: {error}")
        self.record_rejection(file.name, "PARSE_ERROR", str(error))

    def _source_for(self, file_id: str, source: Source | None) -> Source | None:
        if source is not None:
            return source
        return self._pending_content.pop(file_id, None)

    def ingest(self, file_id: str, source: Source | None = None) -> list[Sheet]:
        """Read and stage a spreadsheet/CSV file; parse errors mark the file ``error``."""
        file = self.files.get(file_id)
        if file is None:
            return []
        source = self._source_for(file_id, source)
        if source is None:
            raise ValueError(f"no content available for {file.name}")
        file.status = FileStatus.PROCESSING
        try:
            worksheets = self._read(file, source)
        except SheetParseError as e:
            self._parse_failed(file, e)
            return []
        return self.load_worksheets(file_id, worksheets)

    async def ingest_async(self, file_id: str, source: Source | None = None) -> list[Sheet]:
        """Like ``ingest`` but parses in a worker thread without blocking the loop."""
        file = self.files.get(file_id)
        if file is None:
            return []
        source = self._source_for(file_id, source)
        if source is None:
            raise ValueError(f"no content available for {file.name}")
        file.status = FileStatus.PROCESSING
        try:
            worksheets = await asyncio.to_thread(self._read, file, source)
        except SheetParseError as e:
            if file_id in self.files:
                self._parse_failed(file, e)
            return []
        return self.load_worksheets(file_id, worksheets)

    def ingest_path(self, path: Path) -> ImportFile | None:
        """Register and ingest a file from disk (CLI helper); None if rejected."""
        content = path.read_bytes()
        accepted, _ = self.register_files([FileCandidate(name=path.name, size=len(content))])
        if not accepted:
            return None
        file = accepted[0]
        if file.kind is InputKind.PDF:
            # PDF は OCR 済みページを PageReady で受け取る
            file.status = FileStatus.PROCESSING
            return file
        self.ingest(file.id, content)
        return file

    def add_page(self, file_id: str, page_index: int, rows: Sequence[Mapping[Any, Any]]) -> Sheet | None:
        """Stage one OCR'd page of a PDF file; unknown files are ignored."""
        file = self.files.get(file_id)
        if file is None:
            logger.debug(f"discarding page {page_index} for removed file {file_id}")
            return None
        if file.status in (FileStatus.PENDING, FileStatus.EMPTY):
            file.status = FileStatus.PROCESSING
        factory = factory_for(InputKind.PDF, threshold=self.inference_config.match_threshold)
        sheet = factory.build(file, rows, page_index)
        if sheet is None:
            return None
        self.dispatcher.dispatch(AddSheet(sheet))
        return sheet

    def complete_pages(self, file_id: str) -> None:
        file = self.files.get(file_id)
        if file is None:
            return
        has_sheets = bool(self.collection.sheets_for_file(file_id))
        file.status = FileStatus.COMPLETED if has_sheets else FileStatus.EMPTY
        logger.info(f"OCR complete for {file.name}: status={file.status.value}")

    def remove_file(self, file_id: str) -> bool:
        """Remove a file and every sheet it owns."""
        file = self.files.pop(file_id, None)
        self._pending_content.pop(file_id, None)
        if file is None:
            return False
        self.dispatcher.dispatch(RemoveSheetsByFile(file_id))
        return True

    def handle(self, event: Any) -> Any:
        """Single entry point for inbound and mutation events."""
        if isinstance(event, FilesDropped):
            return self.register_files(event.candidates)
        if isinstance(event, PageReady):
            return self.add_page(event.file_id, event.page_index, event.rows)
        if isinstance(event, PagesCompleted):
            return self.complete_pages(event.file_id)
        if isinstance(event, FileRemoved):
            return self.remove_file(event.file_id)
        return self.dispatcher.dispatch(event)

    @property
    def active_sheet_id(self) -> str | None:
        return self.collection.active_id

    def eligible_sheets(self) -> list[Sheet]:
        return [s for s in self.collection if s.is_eligible]
