"""Environment-driven settings."""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_RULE_CACHE_TTL = 30.0
DEFAULT_PAYMENT_MAX_ATTEMPTS = 3
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the engine and CLI."""

    database_path: Optional[str] = None
    rule_cache_ttl: float = DEFAULT_RULE_CACHE_TTL
    payment_max_attempts: int = DEFAULT_PAYMENT_MAX_ATTEMPTS
    log_level: str = DEFAULT_LOG_LEVEL


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got '{raw}'")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number of seconds, got '{raw}'")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got '{raw}'")
    return value


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got '{raw}'")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from environment variables.

    Reads FURNLEDGER_DB_PATH, FURNLEDGER_RULE_CACHE_TTL,
    FURNLEDGER_PAYMENT_MAX_ATTEMPTS and FURNLEDGER_LOG_LEVEL.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ValueError: If a variable holds an invalid value
    """
    if environ is None:
        environ = os.environ

    return Settings(
        database_path=environ.get("FURNLEDGER_DB_PATH") or None,
        rule_cache_ttl=_read_float(environ, "FURNLEDGER_RULE_CACHE_TTL", DEFAULT_RULE_CACHE_TTL),
        payment_max_attempts=_read_int(
            environ, "FURNLEDGER_PAYMENT_MAX_ATTEMPTS", DEFAULT_PAYMENT_MAX_ATTEMPTS
        ),
        log_level=(environ.get("FURNLEDGER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
