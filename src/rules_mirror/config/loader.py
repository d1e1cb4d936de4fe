from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Any, MutableMapping, Optional, Sequence, Type, Union, get_args, get_origin

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from rules_mirror.config.models import (
    AppConfig,
    ConfigLoadRequest,
)


class ConfigError(ValueError):
    """Raised when the config file is malformed or unreadable."""


def _read_yaml_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        _ensure_default_config(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping, got: {type(data).__name__}")
    return data


def _ensure_default_config(target_path: Path) -> None:
    example_path = Path("examples/config.yaml")
    if not example_path.exists():
        return
    target_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(example_path, target_path)


def _load_dotenv_if_present(dotenv_path: Path) -> None:
    if not dotenv_path.exists():
        return
    load_dotenv(dotenv_path=dotenv_path, override=False)


def _env_var_name_to_segments(env_var_name: str, prefix: str) -> Sequence[str]:
    remainder = env_var_name[len(prefix) :]
    parts = [p for p in remainder.split("__") if p]
    if not parts:
        raise ConfigError(f"Invalid environment variable override name: {env_var_name}")
    return [p.lower() for p in parts]


def _nested_model(annotation: Any) -> Optional[Type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _is_text_annotation(annotation: Any) -> bool:
    if annotation is str:
        return True
    if get_origin(annotation) is Union:
        return all(arg is str or arg is type(None) for arg in get_args(annotation))
    return False


def _check_key_path(path: Sequence[str]) -> Any:
    """Reject override paths that do not name a leaf setting of AppConfig. Returns the leaf annotation."""
    dotted = ".".join(path)
    model: Optional[Type[BaseModel]] = AppConfig
    annotation: Any = None
    for segment in path:
        if model is None:
            raise ConfigError(f"Configuration key path does not point to a mapping: {dotted}")
        field = model.model_fields.get(segment)
        if field is None:
            raise ConfigError(f"Unknown configuration key path: {dotted}")
        annotation = field.annotation
        model = _nested_model(annotation)
    if model is not None:
        raise ConfigError(f"Configuration key path points to a section, not a value: {dotted}")
    return annotation


def _get_parent_mapping(config: MutableMapping[str, Any], path: Sequence[str]) -> MutableMapping[str, Any]:
    cur: MutableMapping[str, Any] = config
    for segment in path[:-1]:
        next_value = cur.setdefault(segment, {})
        if not isinstance(next_value, dict):
            dotted = ".".join(path)
            raise ConfigError(f"Configuration key path does not point to a mapping: {dotted}")
        cur = next_value
    return cur


def _apply_env_overrides(config: MutableMapping[str, Any], env_prefix: str) -> None:
    for name, value in os.environ.items():
        if not name.startswith(env_prefix):
            continue

        segments = _env_var_name_to_segments(name, env_prefix)
        annotation = _check_key_path(segments)
        parent = _get_parent_mapping(config, segments)

        # Text settings take the raw value; "2024" stays a string.
        if _is_text_annotation(annotation):
            parent[segments[-1]] = value
            continue
        # Other values are read as YAML: lists, numbers and null.
        try:
            parent[segments[-1]] = yaml.safe_load(value)
        except yaml.YAMLError:
            parent[segments[-1]] = value


class YamlConfigLoader:
    async def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> AppConfig:
        yaml_path = Path(request.yaml_path)
        config = _read_yaml_config(yaml_path)

        if request.dotenv_path is not None:
            _load_dotenv_if_present(Path(request.dotenv_path))

        _apply_env_overrides(config, request.env_prefix)
        return AppConfig.model_validate(config)
