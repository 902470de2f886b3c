"""Configuration for redisview."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from redisview.exceptions import ConfigError
from redisview.keys import DATABASE_COUNT

ENV_PREFIX = "REDISVIEW_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class ViewerConfig:
    """Connection and session settings.

    Values come from ``REDISVIEW_*`` environment variables; keyword
    overrides passed to ``load()`` take precedence over the environment.
    """

    host: str = "localhost"
    port: int = 6379
    username: str | None = None
    password: str | None = None
    ssl: bool = False
    db: int = 0
    history_size: int = 100
    log_file: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.db < DATABASE_COUNT:
            raise ConfigError(f"db must be between 0 and {DATABASE_COUNT - 1}, got {self.db}")
        if self.history_size < 0:
            raise ConfigError(f"history_size must not be negative, got {self.history_size}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def load(cls, **overrides: Any) -> ViewerConfig:
        """Build a config from the environment, then apply non-None overrides."""
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = os.environ.get(ENV_PREFIX + f.name.upper())
            if raw is not None:
                values[f.name] = _coerce(f.name, f.type, raw)
        for name, value in overrides.items():
            if name not in {f.name for f in fields(cls)}:
                raise ConfigError(f"Unknown config option: {name}")
            if value is not None:
                values[name] = value
        return cls(**values)


def _coerce(name: str, type_name: Any, raw: str) -> Any:
    # Annotations are strings under postponed evaluation.
    type_name = str(type_name)
    if type_name == "int":
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(
                f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}"
            ) from None
    if type_name == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError(f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}")
    return raw
