from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_NULL_SENTINELS,
    IngestConfig,
    InferenceConfig,
    PersistenceConfig,
    StagingConfig,
    UploadConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML import config
- Validate it against the packaged JSON schema
- Apply defaults for missing sections
- Let SHEETSTAGE_API_URL / SHEETSTAGE_API_TOKEN override persistence settings
"""

SCHEMA_PATH = Path(__file__).parent / "schema.json"

ENV_API_URL = "SHEETSTAGE_API_URL"
ENV_API_TOKEN = "SHEETSTAGE_API_TOKEN"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (missing required keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def build_config(data: dict[str, Any], env: Mapping[str, str] | None = None) -> StagingConfig:
    """Build a StagingConfig from already-parsed config data."""
    _validate_config_schema(data)
    if env is None:
        env = os.environ

    p_raw = data.get("persistence", {})
    persistence = PersistenceConfig(
        base_url=env.get(ENV_API_URL) or p_raw.get("base_url"),
        token=env.get(ENV_API_TOKEN) or p_raw.get("token"),
        timeout_seconds=float(p_raw.get("timeout_seconds", 30.0)),
    )
    u_raw = data.get("upload", {})
    upload = UploadConfig(cooldown_seconds=float(u_raw.get("cooldown_seconds", 1.0)))
    i_raw = data.get("inference", {})
    inference = InferenceConfig(match_threshold=float(i_raw.get("match_threshold", 1.0)))

    g_raw = data.get("ingest", {})
    sentinels_raw = g_raw.get("null_sentinels")
    if sentinels_raw is None:
        sentinels = DEFAULT_NULL_SENTINELS
    else:
        sentinels = frozenset(s.strip().upper() for s in sentinels_raw)
    ingest = IngestConfig(
        header_row=g_raw.get("header_row", 0),
        null_sentinels=sentinels,
        max_file_bytes=g_raw.get("max_file_bytes"),
    )

    return StagingConfig(
        project_id=data["project_id"],
        data_source_name=data["data_source_name"],
        persistence=persistence,
        upload=upload,
        inference=inference,
        ingest=ingest,
    )


def load_config(path: Path, env: Mapping[str, str] | None = None) -> StagingConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return build_config(data, env)
