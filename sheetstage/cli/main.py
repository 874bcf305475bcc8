from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..logging.init import log_summary, set_level, setup_logging
from ..models.config_models import IngestConfig, StagingConfig
from ..models.import_file import InputKind
from ..persistence.client import HttpPersistenceClient
from ..services.summary import render_summary_line
from ..services.uploader import UploadSequencer
from ..session.session import ImportSession

"""CLI entrypoint.

inspect: stage the given files and print the inferred schema of every sheet.
upload:  stage the given files and submit every eligible sheet to the
         persistence API as one data source.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

DEFAULT_CONFIG_PATH = Path("config/import.yml")

logger = logging.getLogger(__name__)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so SHEETSTAGE_API_URL / SHEETSTAGE_API_TOKEN reach the config loader."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetstage", description="Multi-sheet tabular staging engine")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    inspect_p = sub.add_parser("inspect", help="Print inferred columns of every sheet")
    inspect_p.add_argument("files", nargs="+", type=Path)
    inspect_p.add_argument("--header-row", type=int, default=0, help="0-based header row index")

    upload_p = sub.add_parser("upload", help="Submit every eligible sheet as one data source")
    upload_p.add_argument("files", nargs="+", type=Path)
    upload_p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    return p.parse_args(argv)


def _stage(session: ImportSession, paths: list[Path]) -> None:
    for path in paths:
        if not path.is_file():
            reason = "not a regular file" if path.exists() else "file not found"
            logger.error(f"{reason}: {path}")
            error_type = "NOT_A_FILE" if path.exists() else "FILE_NOT_FOUND"
            session.record_rejection(path.name, error_type, f"{reason}: {path}")
            continue
        try:
            file = session.ingest_path(path)
        except OSError as e:
            logger.error(f"cannot read {path}: {e}")
            session.record_rejection(path.name, "FILE_UNREADABLE", str(e))
            continue
        if file is not None and file.kind is InputKind.PDF:
            logger.warning(f"{path.name}: PDF pages are delivered by the OCR pipeline; nothing staged")


def _inspect(args: argparse.Namespace) -> int:
    session = ImportSession(ingest=IngestConfig(header_row=args.header_row))
    _stage(session, args.files)
    for file in session.files.values():
        print(f"FILE: {file.name} status={file.status.value}")
        for sheet in session.collection.sheets_for_file(file.id):
            print(f"  SHEET: {sheet.name} id={sheet.id} rows={sheet.metadata.row_count}")
            for column in sheet.columns:
                print(f"    {column.key}: {column.type.value} width={column.width}")
    rejected = session.take_rejected()
    if rejected:
        print(f"REJECTED: {', '.join(rejected)}")
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


async def _upload(session: ImportSession, cfg: StagingConfig) -> int:
    async with HttpPersistenceClient(
        cfg.persistence.base_url or "",
        token=cfg.persistence.token,
        timeout=cfg.persistence.timeout_seconds,
    ) as client:
        sequencer = UploadSequencer(
            client,
            session.files,
            project_id=cfg.project_id,
            data_source_name=cfg.data_source_name,
            cooldown_seconds=cfg.upload.cooldown_seconds,
            error_log=session.error_log,
        )
        result = await sequencer.upload_all(session.collection.sheets)

    log_summary(render_summary_line(result))
    if result.failed_sheets > 0 or session.rejected:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger_ = setup_logging()

    # 空リスト [] のときに sys.argv が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_level(logging.DEBUG)
        logger_.debug("debug mode enabled")

    if args.command == "inspect":
        return _inspect(args)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger_.error(f"config: {e}")
        return EXIT_FATAL
    if not cfg.persistence.base_url:
        logger_.error("config: persistence.base_url (or SHEETSTAGE_API_URL) is required for upload")
        return EXIT_FATAL

    session = ImportSession(ingest=cfg.ingest, inference=cfg.inference)
    _stage(session, args.files)
    try:
        return asyncio.run(_upload(session, cfg))
    finally:
        counts = session.error_log.counts()
        path = session.error_log.flush()
        if path is not None:
            breakdown = " ".join(f"{k}={v}" for k, v in sorted(counts.items()))
            logger_.info(f"error log written: {path} ({breakdown})")
