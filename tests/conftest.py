# Shared pytest fixtures
from __future__ import annotations

import importlib
import io
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from sheetstage.ingest.factory import create_sheet
from sheetstage.logging.init import LOGGER_NAME, reset_logging
from sheetstage.models.import_file import ImportFile, InputKind


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("SHEETSTAGE_API_URL", raising=False)
    monkeypatch.delenv("SHEETSTAGE_API_TOKEN", raising=False)
    reset_logging()
    yield
    reset_logging()
    # capsys の stdout を掴んだ handler を残さない
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """project_id: 7
data_source_name: Quarterly sales
persistence:
  base_url: http://api.test
  token: secret
  timeout_seconds: 5
upload:
  cooldown_seconds: 0
inference:
  match_threshold: 1.0
ingest:
  header_row: 0
  null_sentinels: ["NULL", "N/A"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _xlsx_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return buf.getvalue()


@pytest.fixture()
def xlsx_bytes():
    """Build an in-memory workbook; each sheet is a list of rows (header first)."""
    return _xlsx_bytes


@pytest.fixture()
def make_file():
    def _make(file_id: str = "f1", name: str = "sales.xlsx", kind: InputKind = InputKind.WORKSHEET) -> ImportFile:
        return ImportFile(id=file_id, name=name, kind=kind)
    return _make


@pytest.fixture()
def make_sheet(make_file):
    """Sheet built through the real factory path."""
    def _make(rows=None, file_id: str = "f1", index: int = 0, label: str | None = None):
        if rows is None:
            rows = [
                {"name": "Alice", "age": "30"},
                {"name": "Bob", "age": "41"},
            ]
        file = make_file(file_id=file_id)
        return create_sheet(file, rows, label or f"Sheet{index + 1}", index)
    return _make


class FakeHttpClient:
    """Stands in for HttpPersistenceClient; fails for sheets named in ``failing``."""

    failing: set[str] = set()
    payloads: list[dict] = []

    def __init__(self, base_url, token=None, timeout=30.0):
        self.base_url = base_url

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def submit(self, payload, *, kind):
        FakeHttpClient.payloads.append(payload)
        if payload["sheet_info"]["sheet_name"] in FakeHttpClient.failing:
            raise RuntimeError("backend unavailable")
        return {"result": {"data_source_id": 42}}


@pytest.fixture()
def fake_http_client(monkeypatch):
    """Patch the CLI's persistence client; returns the fake class for assertions."""
    FakeHttpClient.failing = set()
    FakeHttpClient.payloads = []
    # sheetstage.cli.main は関数名と衝突するので module を直接取る
    cli_module = importlib.import_module("sheetstage.cli.main")
    monkeypatch.setattr(cli_module, "HttpPersistenceClient", FakeHttpClient)
    return FakeHttpClient
