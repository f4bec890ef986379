"""Typed wrapper around the Akool image generation endpoints.

Three operations are exposed, each taking the caller's :class:`AuthContext`
explicitly:

========================  ==============================================
Operation                 Provider endpoint
========================  ==============================================
``create_from_prompt``    ``POST /content/image/createbyprompt``
``create_from_action``    ``POST /content/image/createbybutton``
``get_status``            ``GET  /content/image/infobymodelid``
========================  ==============================================

Akool wraps every answer in ``{"code": ..., "msg": ..., "data": ...}``;
``code == 1000`` means success.  Anything else becomes a
:class:`~akoolgen.core.errors.ProviderError` (or one of its known-code
subclasses).  Network failures and non-2xx replies that carry no provider
``code`` become :class:`~akoolgen.core.errors.TransportError`.  The
wrapper keeps no state between calls.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from akoolgen.core.auth import AuthContext
from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.errors import (
    SUCCESS_CODE,
    ProviderError,
    TransportError,
    Unauthenticated,
    ValidationError,
)
from akoolgen.core.schemas import JobHandle, JobStatusSnapshot, validate_action_code

logger = logging.getLogger(__name__)


class AkoolProvider:
    """Stateless client for the Akool image endpoints.

    Args:
        http_client: Shared async HTTP client.
        cfg: Configuration (defaults to the global instance).
    """

    def __init__(self, http_client: httpx.AsyncClient, cfg: AkoolgenConfig | None = None):
        self._http = http_client
        self._config = cfg or config

    def _url(self, path: str) -> str:
        return f"{self._config.provider_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def create_from_prompt(
        self,
        ctx: AuthContext | None,
        prompt_text: str,
        aspect_ratio: str | None = None,
        source_image: str | None = None,
        webhook_url: str | None = None,
    ) -> JobHandle:
        """Start a text-to-image (or image-to-image) generation.

        Args:
            ctx: Active auth context.
            prompt_text: The prompt; must not be blank.
            aspect_ratio: Provider ``scale`` (defaults to the configured ratio).
            source_image: Optional source image URL for image-to-image.
            webhook_url: Optional webhook (defaults to the configured one).

        Returns:
            Handle for the new job.

        Raises:
            Unauthenticated: If *ctx* is ``None``.
            ValidationError: If *prompt_text* is empty.
            ProviderError: On a non-success provider code.
            TransportError: On network failure.
        """
        if ctx is None:
            raise Unauthenticated()
        if not prompt_text or not prompt_text.strip():
            raise ValidationError("Prompt is required")

        scale = aspect_ratio or self._config.default_aspect_ratio
        body: dict[str, Any] = {
            "prompt": prompt_text,
            "scale": scale,
            "webhookUrl": webhook_url or self._config.webhook_url,
        }
        if source_image:
            body["source_image"] = source_image

        data = await self._request(ctx, "POST", "content/image/createbyprompt", json=body)
        handle = JobHandle.from_payload(data, aspect_ratio=scale)
        logger.info(f"Created job {handle.id} from prompt (scale={handle.aspect_ratio})")
        return handle

    async def create_from_action(
        self,
        ctx: AuthContext | None,
        job_id: str,
        action_code: str,
        webhook_url: str | None = None,
    ) -> JobHandle:
        """Request a variant (``V1``-``V4``) or upscale (``U1``-``U4``) of a job.

        Raises:
            Unauthenticated: If *ctx* is ``None``.
            ValidationError: If either argument is missing or the code is malformed.
            ProviderError: On a non-success provider code.
            TransportError: On network failure.
        """
        if ctx is None:
            raise Unauthenticated()
        if not job_id or not action_code:
            raise ValidationError("_id and button are required")
        validate_action_code(action_code)

        body = {
            "_id": job_id,
            "button": action_code,
            "webhookUrl": webhook_url or self._config.webhook_url,
        }
        data = await self._request(ctx, "POST", "content/image/createbybutton", json=body)
        handle = JobHandle.from_payload(data, aspect_ratio=self._config.default_aspect_ratio)
        logger.info(f"Created job {handle.id} from {action_code} on {job_id}")
        return handle

    async def get_status(self, ctx: AuthContext | None, job_id: str) -> JobStatusSnapshot:
        """Fetch the current status of a job.

        Raises:
            Unauthenticated: If *ctx* is ``None``.
            ValidationError: If *job_id* is empty.
            ProviderError: On a non-success provider code.
            TransportError: On network failure.
        """
        if ctx is None:
            raise Unauthenticated()
        if not job_id:
            raise ValidationError("Image model ID is required")

        data = await self._request(
            ctx, "GET", "content/image/infobymodelid", params={"image_model_id": job_id}
        )
        return JobStatusSnapshot.from_payload(data)

    async def _request(
        self,
        ctx: AuthContext,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Issue one authenticated request and unwrap the provider envelope.

        Returns:
            The envelope's ``data`` member.
        """
        try:
            response = await self._http.request(
                method,
                self._url(path),
                json=json,
                params=params,
                headers=ctx.headers(),
                timeout=self._config.request_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed in transport: {e}")
            raise TransportError(f"Provider request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Provider returned a non-JSON response (HTTP {response.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise TransportError(f"Unexpected provider response (HTTP {response.status_code})")

        code = body.get("code")
        if code == SUCCESS_CODE:
            return body.get("data")

        if not response.is_success and not isinstance(code, int):
            logger.warning(f"{method} {path} failed with HTTP {response.status_code}")
            raise TransportError(
                f"Provider returned HTTP {response.status_code}: "
                f"{body.get('msg') or body.get('message') or response.reason_phrase}"
            )

        logger.warning(f"{method} {path} rejected by provider (code={code})")
        raise ProviderError.from_code(code, body.get("msg"), data=body.get("data"))
