"""Environment configuration for the Supabase Auth client."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from supabase_auth.errors import AuthError

logger = logging.getLogger(__name__)

SUPABASE_URL_ENV = "SUPABASE_URL"
SUPABASE_API_KEY_ENV = "SUPABASE_API_KEY"
SUPABASE_JWT_SECRET_ENV = "SUPABASE_JWT_SECRET"


def env_var(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Read a required environment variable.

    Args:
        name: Variable name
        environ: Mapping to read from, defaults to ``os.environ``

    Raises:
        AuthError: ``INVALID_ENVIRONMENT_VARIABLE`` wrapping the lookup failure
    """
    environ = os.environ if environ is None else environ
    try:
        return environ[name]
    except KeyError as e:
        logger.debug(f"Environment variable {name} is not set")
        raise AuthError.from_env_error(e) from e


@dataclass(frozen=True)
class SupabaseConfig:
    """Connection settings for a Supabase project."""

    url: str
    api_key: str
    jwt_secret: str | None = None
    timeout: float = 30.0

    def __post_init__(self) -> None:
        _validate_url(self.url)

    @property
    def auth_url(self) -> str:
        """Base URL of the Auth (GoTrue) API."""
        return f"{self.url.rstrip('/')}/auth/v1"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SupabaseConfig:
        """Build config from ``SUPABASE_URL``, ``SUPABASE_API_KEY`` and
        the optional ``SUPABASE_JWT_SECRET``.

        Raises:
            AuthError: ``INVALID_ENVIRONMENT_VARIABLE`` if a required variable
                is missing, ``PARSE_URL_ERROR`` if the URL is malformed
        """
        environ = os.environ if environ is None else environ
        return cls(
            url=env_var(SUPABASE_URL_ENV, environ),
            api_key=env_var(SUPABASE_API_KEY_ENV, environ),
            jwt_secret=environ.get(SUPABASE_JWT_SECRET_ENV),
        )


def _validate_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise AuthError.parse_url_error() from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        logger.debug(f"Rejected Supabase URL {url!r}")
        raise AuthError.parse_url_error()
