"""Configuration for lock timing, lock placement and file creation.

A single ``IniConfig`` instance is passed explicitly to every component.
It can be built from defaults, a YAML file, or ``INILOCK_*`` environment
variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from inilock.errors import ConfigError

DEFAULT_STALE_AFTER = 120.0
DEFAULT_RETRIES = 10
DEFAULT_RETRY_WAIT = 0.1

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "INILOCK_STALE_AFTER": "stale_after",
    "INILOCK_RETRIES": "retries",
    "INILOCK_RETRY_WAIT": "retry_wait",
    "INILOCK_LOCK_DIR": "fallback_lock_dir",
}


@dataclass(frozen=True)
class IniConfig:
    """Settings shared by the lock manager, the mutator and the CLI."""

    stale_after: float = DEFAULT_STALE_AFTER  # seconds before a lock counts as abandoned
    retries: int = DEFAULT_RETRIES
    retry_wait: float = DEFAULT_RETRY_WAIT  # seconds between lock attempts
    fallback_lock_dir: str = "/tmp"  # used when the target's directory is read-only
    lock_prefix: str = "ini_manager"
    encoding: str = "utf-8"
    new_file_mode: int = 0o644  # mode of a target created by the first write
    value_convert: bool = False

    def __post_init__(self) -> None:
        if self.retries < 1:
            raise ConfigError(f"retries must be at least 1, got {self.retries}")
        if self.retry_wait < 0:
            raise ConfigError(f"retry_wait cannot be negative, got {self.retry_wait}")
        if self.stale_after <= 0:
            raise ConfigError(f"stale_after must be positive, got {self.stale_after}")
        if not self.lock_prefix:
            raise ConfigError("lock_prefix cannot be empty")

    @property
    def max_wait(self) -> float:
        """Worst-case time spent waiting for a contended lock."""
        return self.retries * self.retry_wait

    def with_overrides(self, **overrides: object) -> IniConfig:
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - _field_names()
        if unknown:
            raise ConfigError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        try:
            return replace(self, **_coerce(changes))
        except (TypeError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> IniConfig:
        """Build a config from defaults overlaid with ``INILOCK_*`` variables."""
        env = os.environ if environ is None else environ
        overrides = {field: env[var] for var, field in ENV_VARS.items() if env.get(var)}
        return cls().with_overrides(**overrides)


def load_config(path: str | Path, base: IniConfig | None = None) -> IniConfig:
    """Load a config from a YAML mapping, layered over *base* (or defaults)."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return (base or IniConfig()).with_overrides(**data)


def _field_names() -> set[str]:
    return {f.name for f in fields(IniConfig)}


def _coerce(values: dict[str, object]) -> dict[str, object]:
    """Convert raw YAML/env values to the field types of IniConfig."""
    types = {f.name: f.type for f in fields(IniConfig)}
    out: dict[str, object] = {}
    for name, value in values.items():
        kind = types[name]
        if kind == "bool":
            if isinstance(value, str):
                value = value.strip().lower() in ("1", "true", "yes", "on")
            elif not isinstance(value, bool):
                raise ConfigError(f"{name} must be a boolean, got {value!r}")
        elif kind == "int":
            if isinstance(value, bool):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if isinstance(value, str) and name == "new_file_mode":
                value = int(value, 8)
            else:
                value = int(value)
        elif kind == "float":
            if isinstance(value, bool):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            value = float(value)
        elif kind == "str":
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {value!r}")
        out[name] = value
    return out
