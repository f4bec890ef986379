"""Akool image generation demo — FastAPI application.

This module defines the backend proxy: a small session-authenticated REST
surface that forwards requests to the Akool open API, the ``create_app()``
factory, the module-level ``app`` instance and the ``main()`` CLI function
that launches the uvicorn server.

Architecture
------------
- **Sessions** are kept in memory (:class:`~akoolgen.api.sessions.SessionStore`),
  keyed by an opaque cookie.  Each session owns one
  :class:`~akoolgen.core.auth.AuthGateway`; credentials never leave the server.
- **Provider calls** go through the stateless
  :class:`~akoolgen.core.provider.AkoolProvider`, which receives the
  session's auth context explicitly on every call.
- **Failures** always answer ``{"success": false, "error": ...}`` with a
  status chosen by error class (see :func:`_error_response`).
- **The Gradio UI** is mounted at ``/ui`` by default; ``GET /`` redirects there.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
POST      ``/api/login``                API key or client-credentials login
POST      ``/api/generate``             Create a job from a prompt
POST      ``/api/variant``              Create a variant/upscale job
GET       ``/api/status/{id}``          Status and results of a job
POST      ``/api/logout``               Drop the session
GET       ``/api/auth/check``           Report whether the session is authenticated
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    akoolgen

Direct invocation::

    python -m akoolgen.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from akoolgen import __version__
from akoolgen.api.models import GenerateRequest, LoginRequest, VariantRequest
from akoolgen.api.sessions import SessionStore
from akoolgen.core.auth import AuthContext, AuthGateway, credentials_from_login_payload
from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.errors import (
    AkoolgenError,
    AuthError,
    ProviderError,
    TransportError,
    Unauthenticated,
    ValidationError,
)
from akoolgen.core.provider import AkoolProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Request helpers.
# ---------------------------------------------------------------------------


def _settings(request: Request) -> AkoolgenConfig:
    return request.app.state.config


def _sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def _provider(request: Request) -> AkoolProvider:
    return request.app.state.provider


def _session_id(request: Request) -> str | None:
    return request.cookies.get(_settings(request).session_cookie_name)


def _auth_context(request: Request) -> AuthContext:
    """Return the session's auth context.

    Raises:
        Unauthenticated: If the request has no session or the session is logged out.
    """
    gateway = _sessions(request).get(_session_id(request))
    if gateway is None:
        raise Unauthenticated()
    return gateway.require_context()


def _error_response(error: AkoolgenError, fallback: str) -> JSONResponse:
    """Translate an application error into the API's failure body.

    =====================  ======  =========================================
    Error                  Status  Body
    =====================  ======  =========================================
    ``ValidationError``    400     ``error``
    ``Unauthenticated``    401     ``error``
    ``AuthError``          401     ``error``, ``message``
    ``ProviderError``      400     ``error``, ``code``, ``data``
    ``TransportError``     500     ``error``, ``message``
    =====================  ======  =========================================

    A ``ProviderError`` without a code is answered like a transport failure.
    """
    if isinstance(error, ValidationError):
        return JSONResponse(status_code=400, content={"success": False, "error": str(error)})
    if isinstance(error, Unauthenticated):
        return JSONResponse(status_code=401, content={"success": False, "error": str(error)})
    if isinstance(error, AuthError):
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": "Authentication failed", "message": str(error)},
        )
    if isinstance(error, ProviderError) and error.code is not None:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": error.message or fallback,
                "code": error.code,
                "data": error.data,
            },
        )
    if isinstance(error, (TransportError, ProviderError)):
        logger.error(f"{fallback}: {error}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": fallback, "message": str(error)},
        )
    logger.error(f"{fallback}: {error}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "message": str(error)},
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.post("/login")
async def login(req: LoginRequest, request: Request, response: Response):
    """Authenticate the session with an API key or client credentials.

    Reuses the caller's session when one exists, so a new login replaces
    the previous auth context.

    Returns:
        ``{"success": true, "authType", "message", "token"?}`` and a session cookie.
    """
    settings = _settings(request)
    sessions = _sessions(request)
    try:
        credentials = credentials_from_login_payload(
            req.auth_type, req.api_key, req.client_id, req.client_secret
        )
        session_id = _session_id(request)
        gateway = sessions.get(session_id)
        if gateway is None:
            gateway = AuthGateway(request.app.state.http, settings)
            session_id = None
        result = await gateway.login(credentials)
    except AkoolgenError as e:
        return _error_response(e, "Authentication failed")

    if session_id is None:
        session_id = sessions.create(gateway)
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        httponly=True,
        samesite="lax",
    )

    body = {"success": True, "authType": result.mode.value, "message": result.message}
    if result.token:
        body["token"] = result.token
    return body


@router.post("/generate")
async def generate(req: GenerateRequest, request: Request):
    """Start an image generation from a prompt (and optional source image)."""
    try:
        ctx = _auth_context(request)
        handle = await _provider(request).create_from_prompt(
            ctx,
            req.prompt or "",
            aspect_ratio=req.scale,
            source_image=req.source_image,
            webhook_url=req.webhook_url,
        )
    except AkoolgenError as e:
        return _error_response(e, "Failed to generate image")
    return {"success": True, "data": handle.data}


@router.post("/variant")
async def variant(req: VariantRequest, request: Request):
    """Start an upscale (``U1``-``U4``) or variation (``V1``-``V4``) of a job."""
    try:
        ctx = _auth_context(request)
        handle = await _provider(request).create_from_action(
            ctx,
            req.id or "",
            req.button or "",
            webhook_url=req.webhook_url,
        )
    except AkoolgenError as e:
        return _error_response(e, "Failed to create variant")
    return {"success": True, "data": handle.data}


@router.get("/status/{image_id}")
async def status(image_id: str, request: Request):
    """Return the provider's status payload for a job."""
    try:
        ctx = _auth_context(request)
        snapshot = await _provider(request).get_status(ctx, image_id)
    except AkoolgenError as e:
        return _error_response(e, "Failed to get status")
    return {"success": True, "data": snapshot.data}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Drop the session and its auth context."""
    _sessions(request).drop(_session_id(request))
    response.delete_cookie(_settings(request).session_cookie_name)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/auth/check")
async def auth_check(request: Request) -> dict:
    """Report whether the session is authenticated, and in which mode."""
    gateway = _sessions(request).get(_session_id(request))
    if gateway is None:
        return {"authenticated": False}
    return gateway.check_status()


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    cfg: AkoolgenConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    mount_ui: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cfg: Configuration (defaults to the global instance).
        transport: Optional httpx transport for outbound provider calls
            (tests pass an ``httpx.MockTransport``).
        mount_ui: Mount the Gradio UI at ``/ui``.

    Returns:
        Configured FastAPI application.
    """
    cfg = cfg or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the shared HTTP client on startup and close it on shutdown."""
        app.state.http = httpx.AsyncClient(timeout=cfg.request_timeout, transport=transport)
        app.state.provider = AkoolProvider(app.state.http, cfg)
        logger.info(f"Forwarding to {cfg.provider_base_url}")

        yield  # Application runs here.

        await app.state.http.aclose()
        logger.info("HTTP client closed on shutdown.")

    app = FastAPI(
        title="Akool Image Generation Demo",
        description="Session-authenticated proxy for the Akool image generation API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.sessions = SessionStore()

    # The UI may be served from a different port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def index() -> RedirectResponse:
        return RedirectResponse(url="/ui")

    if mount_ui:
        import gradio as gr

        from akoolgen.ui.app import create_ui

        app = gr.mount_gradio_app(app, create_ui(cfg), path="/ui")

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~akoolgen.core.config.config` (which
    loads from ``AKOOLGEN_SERVER_HOST`` and ``AKOOLGEN_SERVER_PORT``
    environment variables).  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``akoolgen`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "akoolgen.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
