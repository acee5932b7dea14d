"""Configuration loading, validation, and access."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from metastock_catalog.core.exceptions import ConfigurationError
from metastock_catalog.core.models import MAX_IDENTIFIER, MIN_IDENTIFIER


class OutputConfig(BaseModel):
    """Report rendering configuration."""

    model_config = ConfigDict(frozen=True)

    separator: str = "\t"
    format: str | int = "all"
    header: bool = False

    @field_validator("separator")
    @classmethod
    def separator_single_char(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"separator must be a single character, got {v!r}")
        return v


class FilterConfig(BaseModel):
    """Entry selection applied before writing a report."""

    model_config = ConfigDict(frozen=True)

    file_number: int | None = None
    exclude_older_than: str | None = None
    exclude_newer_than: str | None = None

    @field_validator("file_number")
    @classmethod
    def file_number_in_range(cls, v: int | None) -> int | None:
        if v is not None and not MIN_IDENTIFIER <= v <= MAX_IDENTIFIER:
            raise ValueError(
                f"file_number must be between {MIN_IDENTIFIER} and {MAX_IDENTIFIER}"
            )
        return v

    @field_validator("exclude_older_than", "exclude_newer_than", mode="before")
    @classmethod
    def timestamp_parses(cls, v: object) -> object:
        if v is None:
            return v
        # YAML turns unquoted dates into date objects.
        text = str(v)
        from metastock_catalog.catalog.filters import parse_timestamp

        try:
            parse_timestamp(text)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e
        return text


class DecodersConfig(BaseModel):
    """Where to find the concrete index and quote decoders."""

    model_config = ConfigDict(frozen=True)

    factory: str | None = None

    @field_validator("factory")
    @classmethod
    def factory_is_import_path(cls, v: str | None) -> str | None:
        if v is not None and ":" not in v:
            raise ValueError("factory must look like 'package.module:attribute'")
        return v


class LoggingConfig(BaseModel):
    """Diagnostic output configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def level_is_known(cls, v: str) -> str:
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v!r}")
        return name


class CatalogConfig(BaseModel):
    """Root configuration for metastock-catalog."""

    model_config = ConfigDict(frozen=True)

    output: OutputConfig = OutputConfig()
    filters: FilterConfig = FilterConfig()
    decoders: DecodersConfig = DecodersConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "METASTOCK_CATALOG_",
) -> CatalogConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (METASTOCK_CATALOG_OUTPUT__SEPARATOR, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        METASTOCK_CATALOG_OUTPUT__HEADER=true  ->  output.header = True
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return CatalogConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigurationError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("METASTOCK_CATALOG_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigurationError(
                f"Config file from METASTOCK_CATALOG_CONFIG not found: {env_path}",
                context={"field": "METASTOCK_CATALOG_CONFIG", "value": env_path},
            )
        return p

    default = Path("metastock-catalog.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        # Separators such as "," or a tab must stay strings.
        cast_value = value if parts[-1] == "separator" else _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            else:
                target[part] = dict(target[part])
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
