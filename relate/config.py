# =============================================================================
# relate/config.py  —  Environment-sourced settings
# =============================================================================
#
# Every option is read from the process environment.  The entry points call
# dotenv.load_dotenv() first, so a local .env file works too.
#
#   DATA_API_URL               upstream GraphQL endpoint
#   ACCESS_TOKEN               optional Authorization token
#   PORT                       HTTP bind port            (HTTP transports only)
#   RELATE_HOST                HTTP bind host            (HTTP transports only)
#   RELATE_TRANSPORT           stdio | streamable-http | http | sse
#   RELATE_REQUEST_TIMEOUT     upstream deadline, seconds
#   RELATE_CACHE_TTL           cache entry lifetime, seconds
#   RELATE_SWEEP_INTERVAL      proactive sweep period, seconds (< TTL)
#   RELATE_CACHE_MAX_ENTRIES   optional cache size cap
#   RELATE_COALESCE            true → single-flight concurrent misses
#   LOG_LEVEL                  logging level name
#
# A bad value raises ConfigError at startup; the server refuses to start.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping

from relate.cache import DEFAULT_SWEEP_INTERVAL_SECONDS, DEFAULT_TTL_SECONDS
from relate.upstream import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT_SECONDS


TRANSPORTS = ("stdio", "streamable-http", "http", "sse")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """An environment variable holds a value the server cannot use."""


def _get(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _positive_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = _get(environ, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _positive_int(environ: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = _get(environ, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be true or false, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the server and the lookup pipeline."""

    endpoint_url: str = DEFAULT_ENDPOINT
    access_token: str | None = None
    host: str = "127.0.0.1"
    port: int = 3000
    transport: str = "stdio"
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    cache_ttl: float = DEFAULT_TTL_SECONDS
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    cache_max_entries: int | None = None
    coalesce_inflight: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ConfigError(
                f"RELATE_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {self.transport!r}"
            )
        if self.sweep_interval >= self.cache_ttl:
            raise ConfigError(
                f"RELATE_SWEEP_INTERVAL ({self.sweep_interval:g}s) must be shorter than "
                f"RELATE_CACHE_TTL ({self.cache_ttl:g}s)"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build Settings from `environ` (defaults to os.environ)."""
        env = os.environ if environ is None else environ
        return cls(
            endpoint_url=_get(env, "DATA_API_URL") or DEFAULT_ENDPOINT,
            access_token=_get(env, "ACCESS_TOKEN"),
            host=_get(env, "RELATE_HOST") or "127.0.0.1",
            port=_positive_int(env, "PORT", 3000),
            transport=(_get(env, "RELATE_TRANSPORT") or "stdio").lower(),
            request_timeout=_positive_float(env, "RELATE_REQUEST_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            cache_ttl=_positive_float(env, "RELATE_CACHE_TTL", DEFAULT_TTL_SECONDS),
            sweep_interval=_positive_float(env, "RELATE_SWEEP_INTERVAL", DEFAULT_SWEEP_INTERVAL_SECONDS),
            cache_max_entries=_positive_int(env, "RELATE_CACHE_MAX_ENTRIES", None),
            coalesce_inflight=_flag(env, "RELATE_COALESCE", False),
            log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
        )
