"""Configuration: resolve once, freeze, then flow.

Settings are layered with the precedence
``defaults < [tool.failable] in pyproject.toml < FAILABLE_* env < overrides``
and validated through a single pydantic schema. The result is an immutable
``FrozenConfig``. Builders read the ambient config set by ``config_scope``
or, outside any scope, a default resolution cached for the process. The
default skips ``.env`` loading and falls back to defaults on invalid input.

Example:
    with config_scope(debug_aborts=True):
        result = failable(body)
"""

from __future__ import annotations

from collections.abc import Generator, Mapping
from contextlib import contextmanager
import contextvars
from dataclasses import dataclass, fields
from enum import Enum
import functools
import logging
import os
from pathlib import Path
import tomllib
from typing import Any, Literal, overload

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from failable.errors import HINTS, ConfigurationError

log = logging.getLogger(__name__)

ENV_PREFIX = "FAILABLE_"
CONFIG_TOOL_NAME = "failable"
PYPROJECT_PATH_ENV = "FAILABLE_PYPROJECT_PATH"

# Control variables that steer resolution but aren't config fields
META_ENV_FIELDS = {"pyproject_path"}


class Settings(BaseModel):
    """Pydantic schema: the single source of truth for fields and defaults."""

    model_config = ConfigDict(extra="forbid")

    # Reject builders that return something other than Success/Failure
    validate_returns: bool = Field(default=True)
    # Log every abort-to-failure conversion at DEBUG
    debug_aborts: bool = Field(default=False)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable, validated configuration consumed by the builders."""

    validate_returns: bool = True
    debug_aborts: bool = False


class Origin(str, Enum):
    """Where a resolved field value came from."""

    DEFAULT = "default"
    PROJECT = "project"
    ENV = "env"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class FieldOrigin:
    """Origin of a configuration field value, with its locator."""

    origin: Origin
    env_key: str | None = None  # e.g. "FAILABLE_DEBUG_ABORTS"
    file: str | None = None  # e.g. "/work/pyproject.toml"


SourceMap = dict[str, FieldOrigin]

_AMBIENT: contextvars.ContextVar[FrozenConfig | None] = contextvars.ContextVar(
    "ambient_failable_config", default=None
)

_DOTENV_LOADED: bool = False


def _try_load_dotenv() -> None:
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    load_dotenv()
    _DOTENV_LOADED = True


# --- Loaders (plain dicts, no validation) ---


def load_env() -> dict[str, Any]:
    """Read ``FAILABLE_*`` variables as raw strings keyed by field name."""
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        config[field_name] = value
    return config


def get_pyproject_path() -> Path:
    """Return the pyproject path, honouring ``FAILABLE_PYPROJECT_PATH``."""
    override = os.environ.get(PYPROJECT_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / "pyproject.toml"


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def load_pyproject(path: Path | None = None) -> dict[str, Any]:
    """Return the ``[tool.failable]`` table, or an empty dict."""
    data = _read_toml(path or get_pyproject_path())
    section = data.get("tool", {}).get(CONFIG_TOOL_NAME, {})
    return dict(section) if isinstance(section, Mapping) else {}


def _resolve_layers(
    *,
    overrides: Mapping[str, Any],
    env: Mapping[str, Any],
    project: Mapping[str, Any],
    project_file: str,
) -> tuple[dict[str, Any], SourceMap]:
    merged: dict[str, Any] = {}
    sources: SourceMap = {
        name: FieldOrigin(Origin.DEFAULT) for name in Settings.model_fields
    }

    for key, value in project.items():
        merged[key] = value
        sources[key] = FieldOrigin(Origin.PROJECT, file=project_file)
    for key, value in env.items():
        merged[key] = value
        sources[key] = FieldOrigin(Origin.ENV, env_key=f"{ENV_PREFIX}{key.upper()}")
    for key, value in overrides.items():
        merged[key] = value
        sources[key] = FieldOrigin(Origin.OVERRIDES)

    return merged, sources


# --- Public resolution API ---


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[True],
) -> tuple[FrozenConfig, SourceMap]: ...


@overload
def resolve_config(
    overrides: Mapping[str, Any] | None = ...,
    *,
    explain: Literal[False] = ...,
) -> FrozenConfig: ...


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    explain: bool = False,
) -> FrozenConfig | tuple[FrozenConfig, SourceMap]:
    """Resolve configuration from all layers into a ``FrozenConfig``.

    Args:
        overrides: Programmatic values; highest precedence.
        explain: If True, also return the field-to-origin map.

    Raises:
        ConfigurationError: If a layer supplies an unknown field or a value
            the schema rejects.
    """
    _try_load_dotenv()
    return _resolve(overrides, explain=explain)


def _resolve(
    overrides: Mapping[str, Any] | None, *, explain: bool = False
) -> FrozenConfig | tuple[FrozenConfig, SourceMap]:
    project_path = get_pyproject_path()
    merged, sources = _resolve_layers(
        overrides=overrides or {},
        env=load_env(),
        project=load_pyproject(project_path),
        project_file=str(project_path),
    )

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        raise ConfigurationError(
            f"Configuration validation failed: {loc}: {err.get('msg')}",
            hint=HINTS["invalid_setting"],
        ) from e

    frozen = FrozenConfig(
        **{f.name: getattr(settings, f.name) for f in fields(FrozenConfig)}
    )
    log.debug(
        "Resolved %s from %s",
        frozen,
        {name: where.origin.value for name, where in sources.items()},
    )
    return (frozen, sources) if explain else frozen


@functools.cache
def _default_config() -> FrozenConfig:
    # Builder hot path: no .env loading, invalid input falls back to defaults
    try:
        return _resolve(None)  # type: ignore[return-value]
    except ConfigurationError as e:
        log.warning("Ignoring invalid configuration, using defaults: %s", e)
        return FrozenConfig()


def reset_config_cache() -> None:
    """Forget the cached default so the next read resolves again."""
    _default_config.cache_clear()


def current_config() -> FrozenConfig:
    """Return the ambient config, falling back to the cached default."""
    ambient = _AMBIENT.get()
    if ambient is not None:
        return ambient
    return _default_config()


@contextmanager
def config_scope(
    cfg_or_overrides: Mapping[str, Any] | FrozenConfig | None = None,
    **overrides: object,
) -> Generator[FrozenConfig]:
    """Run a block with a specific configuration.

    Uses a ``ContextVar``, so the scope is isolated per thread and per
    asyncio task and nests cleanly.

    Args:
        cfg_or_overrides: A ``FrozenConfig`` to use as-is, or a mapping of
            overrides resolved on top of the other layers.
        **overrides: Extra overrides merged over a mapping argument.
    """
    if isinstance(cfg_or_overrides, FrozenConfig):
        cfg = cfg_or_overrides
    else:
        cfg = resolve_config(overrides={**(cfg_or_overrides or {}), **overrides})

    token = _AMBIENT.set(cfg)
    try:
        yield cfg
    finally:
        _AMBIENT.reset(token)


__all__ = [
    "FieldOrigin",
    "FrozenConfig",
    "Origin",
    "Settings",
    "SourceMap",
    "config_scope",
    "current_config",
    "reset_config_cache",
    "resolve_config",
]
