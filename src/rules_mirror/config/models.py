from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator


class FileRotationSettings(BaseModel):
    """
    Date-based rotation settings (daily).

    This maps cleanly to Python's standard library TimedRotatingFileHandler behavior.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backup_count: int = 7


class FileLoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = ""
    rotation: FileRotationSettings = FileRotationSettings()


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = "INFO"
    file: FileLoggingSettings = FileLoggingSettings()


class RepositorySettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    ref: Optional[str] = None
    cache_dir: str = "data/cache/rules-repo"
    cache_ttl_seconds: float = 3600.0
    git_executable: str = "git"

    # None disables the timeout; a hung git process then blocks its callers.
    fetch_timeout_seconds: Optional[float] = None

    @field_validator("url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("repository.url must not be empty")
        return value.strip()

    @field_validator("ref")
    @classmethod
    def _blank_ref_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _non_negative_ttl(cls, value: float) -> float:
        if value < 0:
            raise ValueError("repository.cache_ttl_seconds must be >= 0")
        return value


class RulesSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Checked in order; the first existing entry becomes the rules root.
    root_candidates: Sequence[str] = (".cursor/rules", "rules", ".cursorrules", ".")
    extensions: Sequence[str] = (".mdc", ".md", ".txt")

    @field_validator("extensions")
    @classmethod
    def _dotted_extensions(cls, value: Sequence[str]) -> Sequence[str]:
        normalized = []
        for ext in value:
            ext = ext.strip()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("rules.extensions must contain at least one extension")
        return tuple(normalized)


class ServerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "rules-mirror"


class AppConfig(BaseModel):
    """Effective runtime configuration after applying all precedence rules."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    logging: LoggingSettings = LoggingSettings()
    repository: RepositorySettings
    rules: RulesSettings = RulesSettings()
    server: ServerSettings = ServerSettings()


@dataclass(frozen=True, slots=True)
class ConfigLoadRequest:
    """
    Optional inputs for a configuration loader.

    Implementations may use these to control where configuration is read from.
    """

    yaml_path: str = "data/config/config.yaml"
    env_prefix: str = "RULES_MIRROR__"
    dotenv_path: Optional[str] = "data/.env"
