"""Configuration models and the YAML loader."""

from rules_mirror.config.loader import ConfigError, YamlConfigLoader
from rules_mirror.config.models import (
    AppConfig,
    ConfigLoadRequest,
    LoggingSettings,
    RepositorySettings,
    RulesSettings,
    ServerSettings,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigLoadRequest",
    "LoggingSettings",
    "RepositorySettings",
    "RulesSettings",
    "ServerSettings",
    "YamlConfigLoader",
]
