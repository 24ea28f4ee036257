"""Error taxonomy for Supabase Auth client operations.

Every failure the client can hit is surfaced as a single exception type,
``AuthError``, tagged with an ``ErrorKind``. Errors coming from the transport,
JSON, header and environment layers are lifted into it with their original
exception kept as the cause.

The most common kind is ``ErrorKind.SUPABASE``, which wraps the structured
error body returned by the service (``RemoteErrorPayload``).
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Closed set of failure kinds. Values are the display messages."""

    ALREADY_SIGNED_UP = "User Already Exists"
    WRONG_CREDENTIALS = "Invalid Credentials"
    USER_NOT_FOUND = "User Not Found"
    NOT_AUTHENTICATED = "Supabase Client not Authenticated"
    MISSING_REFRESH_TOKEN = "Missing Refresh Token"
    WRONG_TOKEN = "JWT Is Invalid"
    INTERNAL_ERROR = "Internal Error"
    NETWORK_ERROR = "Network Error"
    PARSE_ERROR = "Failed to Parse"
    INVALID_HEADER_VALUE = "Header Value is Invalid"
    INVALID_ENVIRONMENT_VARIABLE = "Environment Variable Unreadable"
    PARSE_URL_ERROR = "Failed to parse URL"
    SUPABASE = "Supabase"
    AUTH_ERROR = "Auth Error"


class RemoteErrorPayload(BaseModel):
    """Error body returned by Supabase Auth on a non-2xx response.

    The wire key for ``message`` is ``msg``. Unknown keys are ignored and
    absent optional fields are left out when serialized again.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    code: int
    error_code: str | None = None
    message: str = Field(alias="msg")
    internal_error: Any | None = None
    internal_message: Any | None = None
    error_id: str | None = None

    @classmethod
    def from_json(cls, data: str | bytes) -> RemoteErrorPayload:
        """Parse a JSON error body.

        Raises:
            AuthError: ``PARSE_ERROR`` wrapping the validation failure
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise AuthError.from_parse_error(e) from e

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        rendered = f"Status Code {self.code}"

        if self.error_code is not None:
            rendered += f" ({self.error_code})"

        if self.error_id is not None:
            rendered += f" [Error ID: {self.error_id}]"

        if self.internal_message is not None:
            rendered += f"\nInternal message: {_render_value(self.internal_message)}"

        if self.internal_error is not None:
            rendered += f"\nInternal error: {_render_value(self.internal_error)}"

        return rendered + f"\nMessage: {self.message}"


def _render_value(value: Any) -> str:
    # Opaque JSON values print as compact JSON
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class AuthError(Exception):
    """The single error type raised by the Supabase Auth client.

    Build instances through the named constructors rather than directly;
    each constructor produces exactly one ``ErrorKind``. Kinds that wrap a
    foreign error keep it in ``source`` (and ``__cause__``) unchanged.

    Attributes:
        kind: Which failure this is
        source: Wrapped foreign exception, if any
        payload: Remote error body for ``ErrorKind.SUPABASE``
        status: HTTP status code for ``ErrorKind.AUTH_ERROR``
        message: Free-text message for ``ErrorKind.AUTH_ERROR``
    """

    def __init__(
        self,
        kind: ErrorKind,
        source: BaseException | None = None,
        payload: RemoteErrorPayload | None = None,
        status: int | None = None,
        message: str | None = None,
    ):
        self._kind = kind
        self._source = source
        self._payload = payload
        self._status = status
        self._message = message
        super().__init__(self._render())
        if source is not None:
            self.__cause__ = source

    def __reduce__(self):
        # Rebuild from the stored fields; args only holds the rendered text
        return (
            self.__class__,
            (self._kind, self._source, self._payload, self._status, self._message),
        )

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def source(self) -> BaseException | None:
        return self._source

    @property
    def payload(self) -> RemoteErrorPayload | None:
        return self._payload

    @property
    def status(self) -> int | None:
        return self._status

    @property
    def message(self) -> str | None:
        return self._message

    def _render(self) -> str:
        if self.kind is ErrorKind.SUPABASE:
            return str(self.payload)
        if self.kind is ErrorKind.AUTH_ERROR:
            return f"Error: {self.status}: {self.message}"
        return self.kind.value

    def __str__(self) -> str:
        return self._render()

    def __repr__(self) -> str:
        if self.kind is ErrorKind.SUPABASE:
            return f"AuthError({self.kind.name}, payload={self.payload!r})"
        if self.kind is ErrorKind.AUTH_ERROR:
            return (
                f"AuthError({self.kind.name}, status={self.status}, "
                f"message={self.message!r})"
            )
        if self.source is not None:
            return f"AuthError({self.kind.name}, source={self.source!r})"
        return f"AuthError({self.kind.name})"

    @classmethod
    def already_signed_up(cls) -> AuthError:
        return cls(ErrorKind.ALREADY_SIGNED_UP)

    @classmethod
    def wrong_credentials(cls) -> AuthError:
        return cls(ErrorKind.WRONG_CREDENTIALS)

    @classmethod
    def user_not_found(cls) -> AuthError:
        return cls(ErrorKind.USER_NOT_FOUND)

    @classmethod
    def not_authenticated(cls) -> AuthError:
        return cls(ErrorKind.NOT_AUTHENTICATED)

    @classmethod
    def missing_refresh_token(cls) -> AuthError:
        return cls(ErrorKind.MISSING_REFRESH_TOKEN)

    @classmethod
    def wrong_token(cls) -> AuthError:
        return cls(ErrorKind.WRONG_TOKEN)

    @classmethod
    def internal_error(cls) -> AuthError:
        return cls(ErrorKind.INTERNAL_ERROR)

    @classmethod
    def parse_url_error(cls) -> AuthError:
        return cls(ErrorKind.PARSE_URL_ERROR)

    @classmethod
    def supabase(cls, payload: RemoteErrorPayload) -> AuthError:
        """Wrap a structured error body returned by the service."""
        return cls(ErrorKind.SUPABASE, payload=payload)

    @classmethod
    def http_status(cls, status: int, message: str) -> AuthError:
        """Failed remote call described only by a status and a message."""
        return cls(ErrorKind.AUTH_ERROR, status=int(status), message=message)

    @classmethod
    def from_network_error(cls, error: httpx.HTTPError) -> AuthError:
        """Lift a transport failure (connect, TLS, timeout, protocol)."""
        return cls(ErrorKind.NETWORK_ERROR, source=error)

    @classmethod
    def from_parse_error(
        cls, error: json.JSONDecodeError | UnicodeDecodeError | ValidationError
    ) -> AuthError:
        """Lift a body that failed to decode or validate."""
        return cls(ErrorKind.PARSE_ERROR, source=error)

    @classmethod
    def from_header_error(cls, error: ValueError | TypeError) -> AuthError:
        """Lift a value that cannot be encoded as an HTTP header."""
        return cls(ErrorKind.INVALID_HEADER_VALUE, source=error)

    @classmethod
    def from_env_error(cls, error: KeyError | UnicodeError) -> AuthError:
        """Lift a failed environment variable lookup."""
        return cls(ErrorKind.INVALID_ENVIRONMENT_VARIABLE, source=error)


@contextmanager
def lift_errors() -> Iterator[None]:
    """Convert transport and codec failures raised in the block to ``AuthError``.

    Only the listed foreign kinds are converted; anything else propagates
    unchanged.

    Example:
        with lift_errors():
            response = client.post(url, json=body)
            data = response.json()
    """
    try:
        yield
    except AuthError:
        raise
    except httpx.InvalidURL as e:
        logger.debug(f"Invalid URL: {e}")
        raise AuthError.parse_url_error() from e
    except httpx.HTTPError as e:
        logger.debug(f"Transport failure: {e!r}")
        raise AuthError.from_network_error(e) from e
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        logger.debug(f"Failed to parse response body: {e}")
        raise AuthError.from_parse_error(e) from e
