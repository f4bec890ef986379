"""Tests for akoolgen.core.errors — the shared error taxonomy."""

from __future__ import annotations

import pytest

from akoolgen.core.errors import (
    AccountBanned,
    AkoolgenError,
    AuthenticationExpired,
    GenerationFailed,
    ProviderError,
    TransportError,
    Unauthenticated,
    ValidationError,
    user_message,
)


class TestProviderErrorFromCode:
    """ProviderError.from_code picks a subclass by provider code."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            (1101, AuthenticationExpired),
            (1108, GenerationFailed),
            (1200, AccountBanned),
        ],
    )
    def test_known_codes(self, code, expected):
        error = ProviderError.from_code(code, "provider said no")
        assert type(error) is expected
        assert error.code == code

    def test_unknown_code_is_plain_provider_error(self):
        error = ProviderError.from_code(1003, "Not found", data={"x": 1})
        assert type(error) is ProviderError
        assert error.code == 1003
        assert error.message == "Not found"
        assert error.data == {"x": 1}

    def test_message_passed_through_unchanged(self):
        error = ProviderError.from_code(1101, "token expired at 12:00")
        assert error.message == "token expired at 12:00"
        assert str(error) == "token expired at 12:00"

    def test_missing_message_falls_back_to_default(self):
        assert ProviderError.from_code(1108).message == "Image generation error"
        assert ProviderError.from_code(42).message == "Request failed"


class TestUserMessage:
    """user_message() returns the text shown in the UI."""

    def test_known_codes_have_friendly_messages(self):
        assert user_message(ProviderError.from_code(1101, "x")) == (
            "Authentication expired. Please login again."
        )
        assert user_message(ProviderError.from_code(1108, "x")) == (
            "Image generation error. Please try again later."
        )
        assert user_message(ProviderError.from_code(1200, "x")) == "Account has been banned."

    def test_unknown_code_shows_provider_message(self):
        assert user_message(ProviderError.from_code(1003, "Not found")) == "Not found"

    def test_other_errors_use_their_text(self):
        assert user_message(ValidationError("Prompt is required")) == "Prompt is required"
        assert user_message(Unauthenticated()) == "Not authenticated"

    def test_empty_error_falls_back_to_class_name(self):
        assert user_message(TransportError()) == "TransportError"


class TestHierarchy:
    """Every application error derives from AkoolgenError."""

    @pytest.mark.parametrize(
        "error_cls",
        [ValidationError, Unauthenticated, TransportError, ProviderError, AccountBanned],
    )
    def test_subclasses(self, error_cls):
        assert issubclass(error_cls, AkoolgenError)
