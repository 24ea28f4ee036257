"""Tests for header construction and failed-response classification."""

import httpx
import pytest

from supabase_auth.config import SupabaseConfig
from supabase_auth.errors import AuthError, ErrorKind, RemoteErrorPayload
from supabase_auth.responses import (
    build_headers,
    error_from_response,
    header_value,
    raise_for_response,
)


class TestHeaders:
    """Test header validation and default headers."""

    def setup_method(self):
        self.config = SupabaseConfig(url="https://project.supabase.co", api_key="anon")

    def test_build_headers_without_token(self):
        """Test default headers without an access token."""
        headers = build_headers(self.config)

        assert headers == {
            "apikey": "anon",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def test_build_headers_with_token(self):
        """Test the access token is sent as a Bearer token."""
        headers = build_headers(self.config, access_token="jwt-abc")

        assert headers["Authorization"] == "Bearer jwt-abc"

    def test_non_ascii_value_raises_invalid_header_value(self):
        """Test non-ASCII values raise INVALID_HEADER_VALUE."""
        # Act
        with pytest.raises(AuthError) as exc_info:
            header_value("apikey", "clé")

        # Assert
        assert exc_info.value.kind is ErrorKind.INVALID_HEADER_VALUE
        assert isinstance(exc_info.value.source, UnicodeEncodeError)

    def test_line_break_raises_invalid_header_value(self):
        """Test values with line breaks raise INVALID_HEADER_VALUE."""
        with pytest.raises(AuthError) as exc_info:
            build_headers(self.config, access_token="abc\r\nX-Injected: 1")

        assert exc_info.value.kind is ErrorKind.INVALID_HEADER_VALUE
        assert "line break" in str(exc_info.value.source)

    def test_non_string_raises_invalid_header_value(self):
        """Test non-string values raise INVALID_HEADER_VALUE."""
        with pytest.raises(AuthError) as exc_info:
            header_value("apikey", None)

        assert isinstance(exc_info.value.source, TypeError)


class TestErrorFromResponse:
    """Test classification of failed responses."""

    def test_supabase_error_body(self):
        """Test a Supabase error body becomes a SUPABASE error."""
        # Arrange
        response = httpx.Response(
            400,
            json={
                "code": 400,
                "error_code": "invalid_credentials",
                "msg": "Invalid login credentials",
            },
        )

        # Act
        error = error_from_response(response)

        # Assert
        assert error.kind is ErrorKind.SUPABASE
        assert error.payload == RemoteErrorPayload(
            code=400, error_code="invalid_credentials", message="Invalid login credentials"
        )
        assert str(error) == (
            "Status Code 400 (invalid_credentials)\nMessage: Invalid login credentials"
        )

    def test_oauth_style_body_uses_description(self):
        """Test OAuth-style bodies use error_description as the message."""
        response = httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Refresh Token Not Found"},
        )

        error = error_from_response(response)

        assert error.kind is ErrorKind.AUTH_ERROR
        assert str(error) == "Error: 400: Refresh Token Not Found"

    def test_non_json_body_uses_text(self):
        """Test non-JSON bodies use the raw text as the message."""
        response = httpx.Response(502, text="Bad Gateway from proxy")

        error = error_from_response(response)

        assert error.kind is ErrorKind.AUTH_ERROR
        assert error.status == 502
        assert error.message == "Bad Gateway from proxy"

    def test_empty_body_uses_reason_phrase(self):
        """Test empty bodies fall back to the reason phrase."""
        error = error_from_response(httpx.Response(503))

        assert str(error) == "Error: 503: Service Unavailable"

    def test_json_list_body_falls_back_to_text(self):
        """Test JSON bodies that are not objects use the raw text."""
        response = httpx.Response(500, json=["unexpected"])

        error = error_from_response(response)

        assert error.kind is ErrorKind.AUTH_ERROR
        assert error.message == '["unexpected"]'


class TestRaiseForResponse:
    """Test raising on non-2xx responses."""

    def test_success_does_not_raise(self):
        """Test 2xx responses do not raise."""
        raise_for_response(httpx.Response(200, json={"access_token": "x"}))

    def test_failure_raises_classified_error(self):
        """Test non-2xx responses raise the classified error."""
        response = httpx.Response(422, json={"code": 422, "msg": "User already registered"})

        with pytest.raises(AuthError) as exc_info:
            raise_for_response(response)

        assert exc_info.value.kind is ErrorKind.SUPABASE
        assert exc_info.value.payload.message == "User already registered"
