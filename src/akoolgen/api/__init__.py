"""Akool image generation demo — FastAPI REST API layer.

This package contains the backend proxy between the UI and the Akool open
API.

Modules
-------
main
    FastAPI application factory, all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request validation.
sessions
    In-memory session store mapping cookies to auth gateways.
"""
