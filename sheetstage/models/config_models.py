from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the staging engine.

These are the typed results of ``sheetstage.config.loader.load_config``.
Defaults here are the values applied when a key is missing from the YAML file.
"""

DEFAULT_NULL_SENTINELS: frozenset[str] = frozenset({"NULL", "N/A", "#N/A", "-"})


@dataclass(frozen=True)
class PersistenceConfig:
    """Where finished sheets are submitted.

    Environment variables (SHEETSTAGE_API_URL / SHEETSTAGE_API_TOKEN) take
    precedence over these values.
    """
    base_url: str | None = None
    token: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class UploadConfig:
    cooldown_seconds: float = 1.0  # submission 間の待機 (rate limit 配慮)


@dataclass(frozen=True)
class InferenceConfig:
    """Type inference tuning.

    ``match_threshold`` is the share of non-empty values that must satisfy a
    type predicate. 1.0 (every value) is the default; 0.8 reproduces the
    looser behaviour some import wizards used.
    """
    match_threshold: float = 1.0


@dataclass(frozen=True)
class IngestConfig:
    header_row: int = 0  # 0-based index of the header row in each worksheet
    null_sentinels: frozenset[str] = DEFAULT_NULL_SENTINELS  # 大文字化済
    max_file_bytes: int | None = None


@dataclass(frozen=True)
class StagingConfig:
    """Root configuration object for an import session and its upload."""
    project_id: int
    data_source_name: str
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
