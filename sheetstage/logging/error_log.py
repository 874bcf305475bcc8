from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Session error log.

Records stay in memory while the wizard runs; ``flush`` appends them to
``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC stamp fixed on the first flush), one
JSON object per line.
"""

__all__ = [
    "ErrorLogBuffer",
]

LOGS_DIR = Path("logs")
STAMP_FORMAT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Pending ErrorRecords of one import session."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def counts(self) -> Counter[str]:
        """Pending records per error_type."""
        return Counter(r.error_type for r in self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def _log_path(self) -> Path:
        if self._target is None:
            stamp = datetime.now(UTC).strftime(STAMP_FORMAT)
            self._target = self.logs_dir / f"errors-{stamp}.log"
        return self._target

    def flush(self) -> Path | None:
        """Append pending records to the log file.

        Returns:
            The log path, or None when nothing was pending (no file is created)
        """
        if not self._pending:
            return None
        path = self._log_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        body = "".join(f"{record.to_json_line()}\n" for record in self._pending)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(body)
        self._pending.clear()
        return path
