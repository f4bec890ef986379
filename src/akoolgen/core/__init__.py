"""Core functionality for the Akool image generation demo.

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with AKOOLGEN_ in .env files

2. **Error Taxonomy** (errors.py):
   - ValidationError, Unauthenticated, AuthError, TransportError
   - ProviderError and its known-code subclasses (1101, 1108, 1200)

3. **Auth Gateway** (auth.py):
   - API key and client-credentials login
   - One immutable AuthContext at a time

4. **Generation Client** (provider.py, schemas.py):
   - Create-by-prompt, create-by-button, status lookups
   - Typed JobHandle / JobStatusSnapshot views of provider payloads

Usage Example
-------------
    import httpx
    from akoolgen.core import AkoolProvider, ApiKeyCredentials, AuthGateway

    async with httpx.AsyncClient() as http:
        gateway = AuthGateway(http)
        await gateway.login(ApiKeyCredentials(key="..."))
        provider = AkoolProvider(http)
        handle = await provider.create_from_prompt(gateway.context, "a lighthouse at dusk")
        snapshot = await provider.get_status(gateway.context, handle.id)
"""

from akoolgen.core.auth import (
    ApiKeyCredentials,
    AuthContext,
    AuthGateway,
    AuthMode,
    ClientCredentials,
)
from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.provider import AkoolProvider
from akoolgen.core.schemas import JobHandle, JobStatus, JobStatusSnapshot

__all__ = [
    "AkoolgenConfig",
    "AkoolProvider",
    "ApiKeyCredentials",
    "AuthContext",
    "AuthGateway",
    "AuthMode",
    "ClientCredentials",
    "JobHandle",
    "JobStatus",
    "JobStatusSnapshot",
    "config",
]
