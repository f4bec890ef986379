"""Auth gateway: credential modes, auth contexts and the login exchange.

Akool accepts two kinds of credentials:

- an API key, sent as the ``x-api-key`` header, and
- a client id + secret pair, exchanged once at ``/getToken`` for a bearer
  token that is then sent as ``Authorization: Bearer <token>``.

:class:`AuthGateway` owns exactly one :class:`AuthContext` at a time.  The
context is a plain immutable value: the provider wrapper never looks at
the gateway, it receives the context explicitly on every call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.errors import SUCCESS_CODE, AuthError, Unauthenticated, ValidationError

logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    """Credential modes, valued by their ``authType`` wire names."""

    API_KEY = "apikey"
    CLIENT_CREDENTIALS = "token"


@dataclass(frozen=True)
class ApiKeyCredentials:
    """An Akool API key, accepted as-is and validated lazily by the provider."""

    key: str
    mode: AuthMode = AuthMode.API_KEY


@dataclass(frozen=True)
class ClientCredentials:
    """A client id / secret pair exchanged for a bearer token at login."""

    client_id: str
    client_secret: str
    mode: AuthMode = AuthMode.CLIENT_CREDENTIALS


Credentials = ApiKeyCredentials | ClientCredentials


@dataclass(frozen=True)
class AuthContext:
    """The credential material attached to every provider call.

    Attributes:
        mode: Which credential mode established this context.
        api_key: The API key (``API_KEY`` mode only).
        token: The bearer token (``CLIENT_CREDENTIALS`` mode only).
        client_id: The client id the token was issued for.
    """

    mode: AuthMode
    api_key: str | None = None
    token: str | None = None
    client_id: str | None = None

    def headers(self) -> dict[str, str]:
        """Return the authentication headers for this context."""
        if self.mode is AuthMode.API_KEY:
            return {"x-api-key": self.api_key or ""}
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        # Never leak credential material into logs.
        return f"AuthContext(mode={self.mode.value}, client_id={self.client_id!r})"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login."""

    mode: AuthMode
    message: str = "Authentication successful"
    token: str | None = None


def credentials_from_login_payload(
    auth_type: str | None,
    api_key: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
) -> Credentials:
    """Validate the wire form of a login request and build credentials.

    Args:
        auth_type: ``"apikey"`` or ``"token"``.
        api_key: Required in ``apikey`` mode.
        client_id: Required in ``token`` mode.
        client_secret: Required in ``token`` mode.

    Returns:
        The matching credentials value.

    Raises:
        ValidationError: If the mode is unknown or its required fields are missing.
    """
    if auth_type == AuthMode.API_KEY.value:
        if not api_key:
            raise ValidationError("API key is required")
        return ApiKeyCredentials(key=api_key)
    if auth_type == AuthMode.CLIENT_CREDENTIALS.value:
        if not client_id or not client_secret:
            raise ValidationError("Client ID and Client Secret are required")
        return ClientCredentials(client_id=client_id, client_secret=client_secret)
    raise ValidationError('Invalid authType. Must be "apikey" or "token"')


class AuthGateway:
    """Holds the current auth context and performs the login exchange.

    Args:
        http_client: Shared async HTTP client used for the token exchange.
        cfg: Configuration (defaults to the global instance).
    """

    def __init__(self, http_client: httpx.AsyncClient, cfg: AkoolgenConfig | None = None):
        self._http = http_client
        self._config = cfg or config
        self._context: AuthContext | None = None

    @property
    def context(self) -> AuthContext | None:
        """The active auth context, or ``None`` when logged out."""
        return self._context

    @property
    def token_url(self) -> str:
        return f"{self._config.provider_base_url.rstrip('/')}/getToken"

    def require_context(self) -> AuthContext:
        """Return the active context or raise :class:`Unauthenticated`."""
        if self._context is None:
            raise Unauthenticated()
        return self._context

    async def login(self, credentials: Credentials) -> AuthResult:
        """Establish a new auth context, replacing any previous one.

        Args:
            credentials: API key or client credentials.

        Returns:
            The login outcome; ``token`` is set for client credentials.

        Raises:
            ValidationError: If a required credential field is empty.
            AuthError: If the token exchange is rejected or fails in transport.
        """
        if isinstance(credentials, ApiKeyCredentials):
            if not credentials.key:
                raise ValidationError("API key is required")
            self._context = AuthContext(mode=AuthMode.API_KEY, api_key=credentials.key)
            logger.info("Logged in with API key")
            return AuthResult(mode=AuthMode.API_KEY)

        if not credentials.client_id or not credentials.client_secret:
            raise ValidationError("Client ID and Client Secret are required")

        token = await self._exchange_token(credentials)
        self._context = AuthContext(
            mode=AuthMode.CLIENT_CREDENTIALS,
            token=token,
            client_id=credentials.client_id,
        )
        logger.info(f"Logged in with client credentials (client_id={credentials.client_id})")
        return AuthResult(mode=AuthMode.CLIENT_CREDENTIALS, token=token)

    async def _exchange_token(self, credentials: ClientCredentials) -> str:
        try:
            response = await self._http.post(
                self.token_url,
                json={
                    "clientId": credentials.client_id,
                    "clientSecret": credentials.client_secret,
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"Token request failed: {e}")
            raise AuthError(f"Authentication failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        token = body.get("token")
        if response.is_success and body.get("code") == SUCCESS_CODE and token:
            return token

        logger.warning(f"Token request rejected (code={body.get('code')})")
        raise AuthError(body.get("msg") or "Invalid credentials")

    def logout(self) -> None:
        """Clear the auth context.  Safe to call when already logged out."""
        if self._context is not None:
            logger.info("Logged out")
        self._context = None

    def check_status(self) -> dict:
        """Report whether a context is active, and in which mode."""
        if self._context is None:
            return {"authenticated": False}
        return {"authenticated": True, "authType": self._context.mode.value}
