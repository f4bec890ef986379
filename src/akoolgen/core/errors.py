"""Error taxonomy shared by the backend, the HTTP client and the UI.

Every failure a user action can run into maps onto one of these classes:

- :class:`ValidationError` — missing or malformed input, raised before any
  network call.
- :class:`Unauthenticated` — no active auth context.
- :class:`AuthError` — the provider rejected a credential exchange.
- :class:`ProviderError` — the provider answered with a non-success code.
  The codes Akool documents get their own subclasses.
- :class:`TransportError` — the request never produced a provider answer.

None of them is fatal to the process; they are scoped to the action (or the
single polling cycle) that triggered them.
"""

from __future__ import annotations

SUCCESS_CODE = 1000


class AkoolgenError(Exception):
    """Base class for all application errors.

    The message is intended to be displayed directly to the user.
    """


class ValidationError(AkoolgenError):
    """Missing or malformed user input."""


class Unauthenticated(AkoolgenError):
    """An operation required an auth context and none is active."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AuthError(AkoolgenError):
    """The provider rejected a credential exchange."""


class TransportError(AkoolgenError):
    """A network-level failure: connection refused, timeout, bad payload."""


class ProviderError(AkoolgenError):
    """Non-success response code reported by the provider.

    Attributes:
        code: Provider response code, if one was reported.
        message: Provider message (or our fallback when it sent none).
        data: The provider's ``data`` payload accompanying the failure.
    """

    default_message = "Request failed"

    def __init__(self, message: str | None = None, code: int | None = None, data=None):
        self.code = code
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Message to show in the UI."""
        return self.message

    @classmethod
    def from_code(cls, code: int | None, message: str | None = None, data=None) -> ProviderError:
        """Build the most specific error for a provider response code.

        Args:
            code: Provider response code (anything but 1000).
            message: Provider message, passed through unchanged.
            data: Optional provider ``data`` payload.

        Returns:
            A :class:`ProviderError` or one of its known-code subclasses.
        """
        error_cls = _KNOWN_CODES.get(code, ProviderError)
        return error_cls(message, code=code, data=data)


class AuthenticationExpired(ProviderError):
    """Provider code 1101: the token or key is no longer valid."""

    default_message = "Authentication expired"

    @property
    def user_message(self) -> str:
        return "Authentication expired. Please login again."


class GenerationFailed(ProviderError):
    """Provider code 1108: the image generation itself failed."""

    default_message = "Image generation error"

    @property
    def user_message(self) -> str:
        return "Image generation error. Please try again later."


class AccountBanned(ProviderError):
    """Provider code 1200: the account has been banned."""

    default_message = "Account has been banned"

    @property
    def user_message(self) -> str:
        return "Account has been banned."


_KNOWN_CODES: dict[int | None, type[ProviderError]] = {
    1101: AuthenticationExpired,
    1108: GenerationFailed,
    1200: AccountBanned,
}


def user_message(error: Exception) -> str:
    """Return the text a user should see for *error*."""
    if isinstance(error, ProviderError):
        return error.user_message
    return str(error) or error.__class__.__name__
