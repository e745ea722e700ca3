# ABOUTME: Runtime settings for bibresolve, read from environment variables.
# ABOUTME: Holds the HTTP timeout/user agent, film-catalog API keys, and the completion endpoint.

import os
from collections.abc import Mapping
from dataclasses import dataclass

from bibresolve.metadata.errors import ConfigurationError
from bibresolve.metadata.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one process."""

    openai_api_key: str = ""
    omdb_api_key: str = ""
    tmdb_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"BIBRESOLVE_TIMEOUT must be a number, got {raw!r}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"BIBRESOLVE_TIMEOUT must be positive, got {raw!r}")
    return timeout


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (or an explicit mapping, for tests).

    Blank variables fall back to the defaults.

    Raises:
        ConfigurationError: If BIBRESOLVE_TIMEOUT is not a positive number.
    """
    env = os.environ if environ is None else environ

    def get(key: str) -> str:
        return env.get(key, "").strip()

    timeout_raw = get("BIBRESOLVE_TIMEOUT")
    return Settings(
        openai_api_key=get("OPENAI_API_KEY"),
        omdb_api_key=get("OMDB_API_KEY"),
        tmdb_api_key=get("TMDB_API_KEY"),
        openai_model=get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        openai_base_url=(get("OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL).rstrip("/"),
        timeout=_parse_timeout(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT,
        user_agent=get("BIBRESOLVE_USER_AGENT") or DEFAULT_USER_AGENT,
    )
