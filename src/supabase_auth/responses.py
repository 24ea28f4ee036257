"""Boundary helpers between httpx and the error taxonomy.

Builds request headers with header-encoding failures lifted into
``AuthError`` and classifies non-2xx Supabase Auth responses.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from supabase_auth.config import SupabaseConfig
from supabase_auth.errors import AuthError, RemoteErrorPayload

logger = logging.getLogger(__name__)

# Keys GoTrue and its OAuth endpoints use for a human-readable reason
_MESSAGE_KEYS = ("msg", "message", "error_description", "error")


def header_value(name: str, value: str) -> str:
    """Validate a value for use as an HTTP header.

    httpx encodes header values as ASCII and the wire format forbids line
    breaks inside a value.

    Raises:
        AuthError: ``INVALID_HEADER_VALUE`` wrapping the encoding failure
    """
    try:
        if not isinstance(value, str):
            raise TypeError(
                f"Header {name} must be str, not {type(value).__name__}"
            )
        value.encode("ascii")
        if "\r" in value or "\n" in value:
            raise ValueError(f"Header {name} contains a line break")
    except (TypeError, ValueError) as e:
        logger.debug(f"Invalid value for header {name}: {e}")
        raise AuthError.from_header_error(e) from e
    return value


def build_headers(
    config: SupabaseConfig, access_token: str | None = None
) -> dict[str, str]:
    """Default headers for Supabase Auth requests.

    Args:
        config: Project configuration providing the API key
        access_token: Optional user access token for ``Authorization``
    """
    headers = {
        "apikey": header_value("apikey", config.api_key),
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    if access_token is not None:
        headers["Authorization"] = header_value(
            "Authorization", f"Bearer {access_token}"
        )

    return headers


def error_from_response(response: httpx.Response) -> AuthError:
    """Classify a failed response into an ``AuthError``.

    A body matching the Supabase error shape becomes ``ErrorKind.SUPABASE``.
    Anything else becomes ``ErrorKind.AUTH_ERROR`` carrying the status code
    and the best message available.
    """
    status = response.status_code

    try:
        body = response.json()
    except ValueError:
        # Non-JSON body (proxy error page, empty body, ...)
        message = response.text or response.reason_phrase
        logger.warning(f"Supabase Auth request failed with {status}: {message}")
        return AuthError.http_status(status, message)

    if isinstance(body, dict):
        try:
            payload = RemoteErrorPayload.model_validate(body)
        except ValidationError:
            logger.debug(f"Error body for {status} is not a Supabase error payload")
        else:
            logger.warning(f"Supabase Auth request failed: {payload.to_json()}")
            return AuthError.supabase(payload)

    message = _message_from_body(body) or response.text
    logger.warning(f"Supabase Auth request failed with {status}: {message}")
    return AuthError.http_status(status, message)


def raise_for_response(response: httpx.Response) -> None:
    """Raise the classified ``AuthError`` unless the response is 2xx."""
    if response.is_success:
        return
    raise error_from_response(response)


def _message_from_body(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in _MESSAGE_KEYS:
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None
