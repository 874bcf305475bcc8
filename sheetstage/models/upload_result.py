from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime

"""Upload result models for the staging engine.

These aggregate what happened during one upload batch: which sheets were
submitted, which failed or were skipped, the shared data source id and
submission timing statistics.
"""

__all__ = [
    "SheetUploadStat",
    "UploadResult",
    "SubmissionStatsAccumulator",
]


@dataclass(frozen=True)
class SheetUploadStat:
    """Per-sheet submission outcome."""
    sheet_id: str
    sheet_name: str
    file_id: str
    status: str  # uploaded / failed / skipped
    rows: int  # 送信行数 (skipped/failed でも件数は保持)
    elapsed_seconds: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class UploadResult:
    """Aggregated result of one upload batch.

    ``data_source_id`` is the id returned by the first successful submission,
    or None when no submission succeeded.
    """
    data_source_id: int | str | None
    uploaded_sheets: int
    failed_sheets: int
    skipped_sheets: int
    total_rows: int  # rows of uploaded sheets only
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    sheet_stats: list[SheetUploadStat] | None = None
    total_submissions: int = 0
    avg_submission_seconds: float = 0.0
    p95_submission_seconds: float = 0.0

    @property
    def attempted_sheets(self) -> int:
        return self.uploaded_sheets + self.failed_sheets

    @property
    def ok(self) -> bool:
        return self.failed_sheets == 0


class SubmissionStatsAccumulator:
    """Collects per-submission timings and summarises them."""

    def __init__(self) -> None:
        self.submission_times: list[float] = []

    def add_submission_time(self, elapsed_seconds: float) -> None:
        self.submission_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate submission statistics.

        Returns:
            tuple: (total_submissions, avg_seconds, p95_seconds)
        """
        if not self.submission_times:
            return (0, 0.0, 0.0)

        total = len(self.submission_times)
        avg_seconds = statistics.mean(self.submission_times)

        if total == 1:
            p95_seconds = self.submission_times[0]
        else:
            p95_seconds = statistics.quantiles(
                self.submission_times, n=20, method='inclusive'
            )[18]  # 95th percentile (19th out of 20 quantiles, 0-indexed)

        return (total, avg_seconds, p95_seconds)
