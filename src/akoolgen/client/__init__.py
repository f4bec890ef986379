"""Client for the backend API, used by the presentation layer."""

from akoolgen.client.backend import BackendClient

__all__ = ["BackendClient"]
