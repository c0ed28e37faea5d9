"""Runtime configuration.

Settings are layered, later layers winning:

1. ``RouterConfig`` defaults
2. ``<project>/.claude/prompt-router.yaml`` (optional)
3. environment variables
4. explicit overrides (e.g. CLI options)

The protocol version is deliberately not read from the YAML file: the
fast filter picks matcher files before this module is ever imported, and
it only sees the environment.

Classes
-------
- ConfigError   — invalid configuration
- RouterConfig  — validated settings

Functions
---------
- load_config     — layered settings, strict
- default_config  — fallback settings when loading fails
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import prompt_router_filter as _filter
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from prompt_router.errors import PromptRouterError
from prompt_router.protocol import SchemaVersion

CONFIG_FILE_NAME: str = "prompt-router.yaml"

ENV_PROTOCOL: str = _filter.PROTOCOL_ENV
ENV_TIMEOUT: str = "PROMPT_ROUTER_TIMEOUT"
ENV_LOG_LEVEL: str = "PROMPT_ROUTER_LOG_LEVEL"

_FILE_KEYS: frozenset[str] = frozenset({"plugin_timeout", "concurrent", "log_level"})


class ConfigError(PromptRouterError, ValueError):
    """Raised when configuration values or the config file are invalid."""


class RouterConfig(BaseModel):
    """Settings for one pipeline run.

    Parameters
    ----------
    project_dir:
        Project root whose ``.claude`` directory is searched first.
    home_dir:
        User root whose ``.claude`` directory is searched second.
    protocol_version:
        Active matcher protocol.  Default: the current protocol.
    plugin_timeout:
        Seconds allowed per matcher (load plus call).  Default: 5.0.
    concurrent:
        Run matchers concurrently.  Default: True.
    log_level:
        Level name for the CLI's stderr log handler.  Default: WARNING.
    """

    project_dir: Path = Field(default_factory=Path.cwd)
    home_dir: Path = Field(default_factory=Path.home)
    protocol_version: str = SchemaVersion.CURRENT
    plugin_timeout: float = Field(default=5.0, gt=0.0)
    concurrent: bool = True
    log_level: str = "WARNING"

    model_config = {"frozen": True}

    @field_validator("protocol_version")
    @classmethod
    def _known_protocol(cls, value: str) -> str:
        if not SchemaVersion.is_supported(value):
            supported = ", ".join(sorted(SchemaVersion.SUPPORTED))
            raise ValueError(f"unsupported protocol version {value!r} (supported: {supported})")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


def config_path(project_dir: str | Path) -> Path:
    """Return the config file location for a project."""
    return Path(project_dir) / _filter.CONFIG_DIR_NAME / CONFIG_FILE_NAME


def read_config_file(path: Path) -> dict[str, Any]:
    """Return the recognised settings from a YAML config file.

    A missing file yields an empty dict.

    Raises
    ------
    ConfigError
        If the file is not valid YAML, is not a mapping, or has unknown keys.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    unknown = set(data) - _FILE_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown keys in {path}: {', '.join(sorted(unknown))} "
            f"(allowed: {', '.join(sorted(_FILE_KEYS))})"
        )
    return data


def _from_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if environ.get(ENV_PROTOCOL):
        values["protocol_version"] = environ[ENV_PROTOCOL]
    if environ.get(ENV_TIMEOUT):
        values["plugin_timeout"] = environ[ENV_TIMEOUT]
    if environ.get(ENV_LOG_LEVEL):
        values["log_level"] = environ[ENV_LOG_LEVEL]
    return values


def load_config(
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> RouterConfig:
    """Build a ``RouterConfig`` from file, environment, and *overrides*.

    Overrides whose value is ``None`` are ignored, so CLI options can be
    passed straight through.

    Raises
    ------
    ConfigError
        If any layer supplies an invalid value.
    """
    env = os.environ if environ is None else environ
    project_dir, home_dir = _filter.default_roots(dict(env))
    explicit = {key: value for key, value in overrides.items() if value is not None}

    base: dict[str, Any] = {"project_dir": Path(project_dir), "home_dir": Path(home_dir)}
    base.update({key: explicit[key] for key in ("project_dir", "home_dir") if key in explicit})

    values = dict(base)
    values.update(read_config_file(config_path(values["project_dir"])))
    values.update(_from_environment(env))
    values.update(explicit)

    try:
        return RouterConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def default_config(
    environ: Mapping[str, str] | None = None,
    protocol_version: str | None = None,
) -> RouterConfig:
    """Return default settings, keeping the roots and a usable protocol.

    Used when ``load_config`` fails and the caller must still answer.  The
    protocol is the first supported value of *protocol_version* and
    ``$PROMPT_ROUTER_PROTOCOL``, since the fast filter already picked
    matcher files for it.
    """
    env = os.environ if environ is None else environ
    project_dir, home_dir = _filter.default_roots(dict(env))
    candidates = (protocol_version, env.get(ENV_PROTOCOL))
    protocol = next(
        (value for value in candidates if value and SchemaVersion.is_supported(value)),
        SchemaVersion.CURRENT,
    )
    return RouterConfig(
        project_dir=Path(project_dir), home_dir=Path(home_dir), protocol_version=protocol
    )
