from __future__ import annotations

from pathlib import Path

from sheetstage.cli import main as cli_main

"""Exit code contract tests."""

CSV_BODY = "name,amount\nAlice,10\nBob,20\n"


def _data_files(workdir: Path, *names: str) -> list[str]:
    paths = []
    for name in names:
        p = workdir / "data" / name
        p.write_text(CSV_BODY, encoding="utf-8")
        paths.append(str(p))
    return paths


def test_exit_code_fatal_missing_config(temp_workdir: Path, fake_http_client, capsys):
    code = cli_main(["upload", *_data_files(temp_workdir, "a.csv")])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config:" in out
    assert fake_http_client.payloads == []


def test_exit_code_fatal_without_base_url(temp_workdir: Path, fake_http_client, capsys):
    (temp_workdir / "config" / "import.yml").write_text(
        "project_id: 1\ndata_source_name: DS\n", encoding="utf-8"
    )
    code = cli_main(["upload", *_data_files(temp_workdir, "a.csv")])
    assert code == 1
    assert "base_url" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    code = cli_main(["upload", *_data_files(temp_workdir, "customers.csv", "orders.csv")])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY sheets=2 uploaded=2 failed=0 skipped=0 rows=4 data_source_id=42" in out
    assert [p["data_source_id"] for p in fake_http_client.payloads] == [None, 42]
    assert {p["project_id"] for p in fake_http_client.payloads} == {7}


def test_exit_code_partial_failure(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    fake_http_client.failing = {"orders"}
    code = cli_main(["upload", *_data_files(temp_workdir, "customers.csv", "orders.csv", "items.csv")])
    out = capsys.readouterr().out
    assert code == 2
    assert "uploaded=2 failed=1" in out
    assert len(fake_http_client.payloads) == 3
    assert len(list((temp_workdir / "logs").glob("errors-*.log"))) == 1


def test_exit_code_missing_input_file(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    files = _data_files(temp_workdir, "customers.csv")
    code = cli_main(["upload", *files, str(temp_workdir / "data" / "missing.csv")])
    out = capsys.readouterr().out
    assert code == 2
    assert "file not found" in out
    assert "uploaded=1" in out


def test_env_base_url_satisfies_upload(temp_workdir: Path, fake_http_client, monkeypatch):
    (temp_workdir / "config" / "import.yml").write_text(
        "project_id: 1\ndata_source_name: DS\nupload:\n  cooldown_seconds: 0\n", encoding="utf-8"
    )
    monkeypatch.setenv("SHEETSTAGE_API_URL", "http://env.test")
    assert cli_main(["upload", *_data_files(temp_workdir, "a.csv")]) == 0


def test_directory_argument_is_rejected_not_fatal(temp_workdir: Path, write_config: Path, fake_http_client, capsys):
    files = _data_files(temp_workdir, "customers.csv")
    code = cli_main(["upload", *files, str(temp_workdir / "data")])
    out = capsys.readouterr().out
    assert code == 2
    assert "not a regular file" in out
    assert "uploaded=1" in out


def test_unreadable_file_is_rejected_not_fatal(temp_workdir: Path, write_config: Path, fake_http_client, monkeypatch, capsys):
    files = _data_files(temp_workdir, "customers.csv", "locked.csv")
    original = Path.read_bytes

    def read_bytes(self):
        if self.name == "locked.csv":
            raise PermissionError(13, "Permission denied", str(self))
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", read_bytes)
    code = cli_main(["upload", *files])
    out = capsys.readouterr().out
    assert code == 2
    assert "cannot read" in out
    assert "uploaded=1" in out
