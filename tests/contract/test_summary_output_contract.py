from __future__ import annotations

import re
from pathlib import Path

from sheetstage.cli import main as cli_main

SUMMARY_RE = re.compile(
    r"^SUMMARY sheets=\d+ uploaded=\d+ failed=\d+ skipped=\d+ rows=\d+ "
    r"data_source_id=(\d+|none) elapsed_sec=\d+(\.\d+)?$"
)


def _one_file(workdir: Path) -> str:
    data = workdir / "data" / "a.csv"
    data.write_text("k\nv\n", encoding="utf-8")
    return str(data)


def test_summary_line_format(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    assert cli_main(["upload", _one_file(temp_workdir)]) == 0
    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 1
    assert SUMMARY_RE.match(lines[0])


def test_summary_when_every_sheet_fails(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    fake_http_client.failing = {"a"}
    assert cli_main(["upload", _one_file(temp_workdir)]) == 2
    out = capsys.readouterr().out
    assert "data_source_id=none" in out
    assert "failed=1" in out
