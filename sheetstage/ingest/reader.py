from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Union

import pandas as pd

"""Worksheet reader.

Turns spreadsheet and CSV bytes into ``Worksheet`` records: a header row plus
ordered data records (column name -> raw value). pandas does the parsing
(openpyxl engine for .xlsx, xlrd for legacy .xls when installed).

Normalisation rules:
- the header is taken from ``header_row`` (0-based); data rows follow it
- rows whose cells are all empty are dropped
- NaN/NaT become None, pandas/numpy scalars become plain Python values
- strings are stripped; values in ``null_sentinels`` (upper-cased) become None
- blank header cells become ``Column_N``; duplicate names get ``_2``, ``_3``...
"""

__all__ = [
    "SheetParseError",
    "SheetHeaderError",
    "Worksheet",
    "read_workbook",
    "read_csv_body",
    "normalize_sheet",
    "read_worksheets",
]

Source = Union[Path, bytes, IO[bytes]]

SPREADSHEET_SUFFIXES = (".xlsx", ".xlsm", ".xls")
CSV_SUFFIXES = (".csv",)


class SheetParseError(Exception):
    """Raised when a file cannot be read or parsed into worksheets."""


class SheetHeaderError(SheetParseError):
    """Raised when the configured header row does not exist."""


@dataclass
class Worksheet:
    name: str
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)  # 正規化済 (列名→値)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _as_buffer(source: Source) -> Any:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def read_workbook(source: Source) -> dict[str, pd.DataFrame]:
    """Read every worksheet as a raw header-less DataFrame keyed by sheet name."""
    dfs: dict[str, pd.DataFrame] = {}
    xls = pd.ExcelFile(_as_buffer(source))
    for name in xls.sheet_names:
        # ヘッダなしで生読み (後で header_row をヘッダとして適用)
        dfs[str(name)] = xls.parse(name, header=None)
    return dfs


def read_csv_body(source: Source) -> pd.DataFrame:
    """Read a CSV body as raw strings, trying common encodings in turn."""
    raw = source.read() if hasattr(source, "read") else source
    if isinstance(raw, Path):
        raw = raw.read_bytes()
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return pd.read_csv(
                io.BytesIO(raw),
                header=None,
                dtype=str,
                encoding=encoding,
                keep_default_na=False,
                na_values=[""],
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
    raise SheetParseError("could not decode or parse CSV body") from last_exc


def _header_names(values: list[Any]) -> list[str]:
    names: list[str] = []
    seen: dict[str, int] = {}
    for i, raw in enumerate(values):
        name = "" if raw is None or pd.isna(raw) else str(raw).strip()
        if not name:
            name = f"Column_{i + 1}"
        count = seen.get(name, 0) + 1
        seen[name] = count
        names.append(name if count == 1 else f"{name}_{count}")
    return names


def _clean_value(val: Any, null_sentinels: frozenset[str] | set[str] | None) -> Any:
    if val is None:
        return None
    if isinstance(val, str):
        stripped = val.strip()
        if stripped == "":
            return None
        # NULL サニタイズ
        if null_sentinels and stripped.upper() in null_sentinels:
            return None
        return stripped
    if pd.isna(val):
        return None
    if isinstance(val, pd.Timestamp):
        return val.to_pydatetime()
    if isinstance(val, datetime):
        return val
    item = getattr(val, "item", None)
    if callable(item):
        return item()
    return val


def normalize_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    header_row: int = 0,
    null_sentinels: frozenset[str] | set[str] | None = None,
) -> Worksheet:
    """Normalize a raw header-less DataFrame into a Worksheet.

    A DataFrame with no rows at all yields an empty Worksheet (blank sheet),
    not an error.

    Raises:
        SheetHeaderError: The sheet has content but fewer rows than ``header_row + 1``
    """
    if df.shape[0] == 0:
        return Worksheet(name=sheet_name)
    if df.shape[0] <= header_row:
        raise SheetHeaderError(f"sheet '{sheet_name}' lacks header row {header_row + 1}")

    columns = _header_names(df.iloc[header_row].tolist())
    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[header_row + 1:].iterrows():
        if raw.isna().all():
            continue
        row_dict = {
            col: _clean_value(val, null_sentinels)
            for col, val in zip(columns, raw.tolist(), strict=False)
        }
        if all(v is None for v in row_dict.values()):
            continue
        rows.append(row_dict)
    return Worksheet(name=sheet_name, columns=columns, rows=rows)


def read_worksheets(
    source: Source,
    file_name: str,
    header_row: int = 0,
    null_sentinels: frozenset[str] | set[str] | None = None,
) -> list[Worksheet]:
    """Read a spreadsheet or CSV into normalized worksheets, in workbook order.

    Raises:
        SheetParseError: Unsupported extension, or the reader failed
    """
    suffix = Path(file_name).suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            raw_sheets = {Path(file_name).stem: read_csv_body(source)}
        elif suffix in SPREADSHEET_SUFFIXES:
            raw_sheets = read_workbook(source)
        else:
            raise SheetParseError(f"unsupported file type: {suffix!r}")
        return [
            normalize_sheet(df, name, header_row=header_row, null_sentinels=null_sentinels)
            for name, df in raw_sheets.items()
        ]
    except SheetParseError:
        raise
    except Exception as e:
        raise SheetParseError(f"failed to read {file_name}: {e}") from e
