"""Pydantic request models for the backend API.

These models define the JSON schema for every API endpoint that takes a
body.  Field names are snake_case; aliases keep the wire names used by the
frontend (``authType``, ``apiKey``, ``_id``, ``webhookUrl``...).

Required-ness is checked by the route handlers rather than by Pydantic so
that a missing field produces the API's ``{"success": false, "error": ...}``
failure body with a 400, not a 422 validation report.

Models
------
LoginRequest
    Payload for ``POST /api/login``.
GenerateRequest
    Payload for ``POST /api/generate``.
VariantRequest
    Payload for ``POST /api/variant``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for the ``POST /api/login`` endpoint.

    Attributes:
        auth_type: ``"apikey"`` or ``"token"`` (client credentials).
        api_key: Akool API key (``apikey`` mode).
        client_id: Akool client id (``token`` mode).
        client_secret: Akool client secret (``token`` mode).
    """

    model_config = ConfigDict(populate_by_name=True)

    auth_type: str | None = Field(
        default=None,
        alias="authType",
        description="Authentication mode: 'apikey' or 'token'.",
    )
    api_key: str | None = Field(
        default=None,
        alias="apiKey",
        description="API key (required when authType='apikey').",
    )
    client_id: str | None = Field(
        default=None,
        alias="clientId",
        description="Client id (required when authType='token').",
    )
    client_secret: str | None = Field(
        default=None,
        alias="clientSecret",
        description="Client secret (required when authType='token').",
    )


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Text prompt.  Required.
        scale: Aspect ratio, e.g. ``"16:9"``.  Defaults to the configured ratio.
        source_image: Optional source image URL (image-to-image).
        webhook_url: Optional webhook forwarded to the provider.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = Field(
        default=None,
        description="Text prompt describing the image.",
    )
    scale: str | None = Field(
        default=None,
        description="Aspect ratio (e.g. '1:1', '16:9').",
    )
    source_image: str | None = Field(
        default=None,
        description="Source image URL for image-to-image generation.",
    )
    webhook_url: str | None = Field(
        default=None,
        alias="webhookUrl",
        description="Webhook URL forwarded to the provider.",
    )


class VariantRequest(BaseModel):
    """Request body for the ``POST /api/variant`` endpoint.

    Attributes:
        id: Id of the completed job to derive from.
        button: Action code, ``U1``-``U4`` (upscale) or ``V1``-``V4`` (variant).
        webhook_url: Optional webhook forwarded to the provider.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(
        default=None,
        alias="_id",
        description="Source job id.",
    )
    button: str | None = Field(
        default=None,
        description="Action code: U1-U4 or V1-V4.",
    )
    webhook_url: str | None = Field(
        default=None,
        alias="webhookUrl",
        description="Webhook URL forwarded to the provider.",
    )
