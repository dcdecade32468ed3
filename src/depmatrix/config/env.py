"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError

ENV_PREFIX = "DEPMATRIX_"


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def float_from_env(name: str, default: float) -> float:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float for {name}: {raw!r}") from exc


def int_from_env(name: str, default: int) -> int:
    raw = optional_env_var(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {raw!r}") from exc
