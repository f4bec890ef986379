"""HTTP client for the backend ``/api`` surface.

:class:`BackendClient` is what the presentation layer talks to.  It keeps
the session cookie issued by ``POST /api/login`` in its cookie jar, so a
single instance corresponds to a single browser-style session.

Failure bodies from the backend are mapped back onto the shared error
taxonomy:

=======================================  ==================================
Backend answer                           Raised
=======================================  ==================================
401 from ``/login``                      :class:`AuthError`
401 from any other route                 :class:`Unauthenticated`
400 with a provider ``code``             :class:`ProviderError` (by code)
400 without a ``code`` member            :class:`ValidationError`
400 with ``"code": null``, 5xx           :class:`TransportError`
network failure, non-JSON body           :class:`TransportError`
=======================================  ==================================
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import httpx

from akoolgen.core.auth import AuthMode, AuthResult, Credentials
from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.errors import (
    AuthError,
    ProviderError,
    TransportError,
    Unauthenticated,
    ValidationError,
)
from akoolgen.core.schemas import JobHandle, JobStatusSnapshot, validate_action_code

logger = logging.getLogger(__name__)


class BackendClient:
    """Async client for the demo backend.

    Args:
        base_url: Backend ``/api`` root (defaults to ``config.api_base_url``).
        transport: Optional httpx transport (tests pass a mock transport).
        cfg: Configuration (defaults to the global instance).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        cfg: AkoolgenConfig | None = None,
    ):
        self._config = cfg or config
        self._client = httpx.AsyncClient(
            base_url=(base_url or self._config.api_base_url).rstrip("/") + "/",
            timeout=self._config.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- auth ----------------------------------------------------------------

    async def login(self, credentials: Credentials) -> AuthResult:
        """Log the session in.

        Raises:
            ValidationError: If the backend rejects the credential shape.
            AuthError: If the provider rejects the credentials.
            TransportError: On network failure.
        """
        if credentials.mode is AuthMode.API_KEY:
            payload = {"authType": credentials.mode.value, "apiKey": credentials.key}
        else:
            payload = {
                "authType": credentials.mode.value,
                "clientId": credentials.client_id,
                "clientSecret": credentials.client_secret,
            }
        body = await self._call("POST", "login", json=payload, is_login=True)
        return AuthResult(
            mode=AuthMode(body.get("authType", credentials.mode.value)),
            message=body.get("message") or "Authentication successful",
            token=body.get("token"),
        )

    async def logout(self) -> None:
        await self._call("POST", "logout")
        self._client.cookies.clear()

    async def check_auth(self) -> dict:
        """Return ``{"authenticated": bool, "authType"?: str}``."""
        return await self._call("GET", "auth/check")

    # -- generation ----------------------------------------------------------

    async def create_from_prompt(
        self,
        prompt_text: str,
        aspect_ratio: str | None = None,
        source_image: str | None = None,
    ) -> JobHandle:
        if not prompt_text or not prompt_text.strip():
            raise ValidationError("Prompt is required")
        scale = aspect_ratio or self._config.default_aspect_ratio
        payload = {"prompt": prompt_text, "scale": scale}
        if source_image:
            payload["source_image"] = source_image
        body = await self._call("POST", "generate", json=payload)
        return JobHandle.from_payload(body.get("data"), aspect_ratio=scale)

    async def create_from_action(self, job_id: str, action_code: str) -> JobHandle:
        if not job_id or not action_code:
            raise ValidationError("_id and button are required")
        validate_action_code(action_code)
        body = await self._call("POST", "variant", json={"_id": job_id, "button": action_code})
        return JobHandle.from_payload(
            body.get("data"), aspect_ratio=self._config.default_aspect_ratio
        )

    async def get_status(self, job_id: str) -> JobStatusSnapshot:
        if not job_id:
            raise ValidationError("Image model ID is required")
        body = await self._call("GET", f"status/{job_id}")
        return JobStatusSnapshot.from_payload(body.get("data"))

    # -- downloads -----------------------------------------------------------

    async def download_image(self, url: str, downloads_dir: Path | None = None) -> Path:
        """Fetch a result image and store it locally.

        Returns:
            Path of the saved file, named ``akool-image-<millis>.png``.

        Raises:
            TransportError: If the image cannot be fetched.
        """
        downloads_dir = downloads_dir or self._config.downloads_dir
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Download of {url} failed: {e}")
            raise TransportError(f"Download failed: {e}") from e

        downloads_dir.mkdir(parents=True, exist_ok=True)
        path = downloads_dir / f"akool-image-{int(time.time() * 1000)}.png"
        path.write_bytes(response.content)
        logger.info(f"Saved {url} to {path}")
        return path

    # -- plumbing ------------------------------------------------------------

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        is_login: bool = False,
    ) -> dict:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise TransportError(f"Backend request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Backend returned a non-JSON response (HTTP {response.status_code})"
            ) from e
        if not isinstance(body, dict):
            raise TransportError(f"Unexpected backend response (HTTP {response.status_code})")

        if response.is_success and body.get("success", True):
            return body

        error = body.get("error") or f"HTTP {response.status_code}"
        message = body.get("message")

        if response.status_code == 401:
            if is_login:
                raise AuthError(message or error)
            raise Unauthenticated(error)
        if response.status_code == 400:
            if "code" not in body:
                raise ValidationError(error)
            if body["code"] is not None:
                raise ProviderError.from_code(body["code"], error, data=body.get("data"))
        raise TransportError(f"{error}: {message}" if message else error)
