from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Upload progress bar.

One tqdm bar per upload batch, ticking once per submitted sheet and showing
running uploaded/failed counts. No bar is drawn when stdout is not a TTY, so
captured wizard output stays free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts sheet outcomes and mirrors them on a tqdm bar when interactive."""

    def __init__(self, total_sheets: int, *, description: str = "Uploading sheets") -> None:
        self.total_sheets = total_sheets
        self.description = description
        self.started = 0
        self.uploaded = 0
        self.failed = 0
        self.bar: Any | None = None
        if is_tty_enabled():
            self.bar = tqdm(
                total=total_sheets,
                desc=description,
                unit="sheet",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.bar is not None

    def start_sheet(self, sheet_name: str) -> None:
        self.started += 1
        if self.bar is not None:
            self.bar.set_description(f"{self.description} [{self.started}/{self.total_sheets}] {sheet_name}")

    def finish_sheet(self, success: bool) -> None:
        if success:
            self.uploaded += 1
        else:
            self.failed += 1
        if self.bar is not None:
            self.bar.set_postfix(uploaded=self.uploaded, failed=self.failed)
            self.bar.update(1)

    def close(self) -> None:
        if self.bar is not None:
            self.bar.set_description(self.description)
            self.bar.close()
            self.bar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
