"""Configuration management for the Akool image generation demo.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the AKOOLGEN_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (AKOOLGEN_* prefix)
2. .env file in the project root
3. Default values defined in AkoolgenConfig

Example .env file:
    AKOOLGEN_PROVIDER_BASE_URL=https://openapi.akool.com/api/open/v3
    AKOOLGEN_POLL_INTERVAL=3.0
    AKOOLGEN_SERVER_PORT=7860
    AKOOLGEN_DOWNLOADS_DIR=downloads

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Components that need configuration accept an explicit instance as well, so
tests can inject their own without touching the environment.

Usage Example
-------------
    from akoolgen.core.config import config

    print(config.provider_base_url)
    print(config.poll_interval)

Credentials are never part of the configuration: they are supplied by the
user at login time and live only in the session's auth context.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AkoolgenConfig(BaseSettings):
    """Main configuration for the Akool image generation demo.

    Attributes
    ----------
    Provider Settings:
        provider_base_url : str
            Root of the Akool open API (v3)
        request_timeout : float
            Timeout in seconds for every outbound HTTP request
        webhook_url : str
            Webhook forwarded to the provider with generation requests

    Generation Settings:
        default_aspect_ratio : str
            Aspect ratio ("scale") used when a prompt request omits one
        poll_interval : float
            Seconds between two status polls of the same job

    Server Settings:
        server_host : str
            Bind address for the uvicorn server
        server_port : int
            Port for the uvicorn server (1024-65535)
        api_base_url : str
            Base URL of the backend ``/api`` surface, used by the UI client
        session_cookie_name : str
            Name of the cookie carrying the backend session id

    Paths:
        downloads_dir : Path
            Directory where downloaded result images are stored

    Notes
    -----
    - downloads_dir is created automatically if it doesn't exist
    - api_base_url defaults to the local server on server_port
    - To modify config, set environment variables and restart the application
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AKOOLGEN_",
        case_sensitive=False,
    )

    # Provider settings
    provider_base_url: str = Field(
        default="https://openapi.akool.com/api/open/v3",
        description="Root URL of the Akool open API",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for outbound HTTP requests",
        gt=0,
    )
    webhook_url: str = Field(
        default="",
        description="Webhook URL forwarded with generation requests (empty to disable)",
    )

    # Generation settings
    default_aspect_ratio: str = Field(
        default="1:1",
        description="Aspect ratio used when a request does not supply one",
    )
    poll_interval: float = Field(
        default=3.0,
        description="Seconds between status polls of a single job",
        gt=0,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    api_base_url: str = Field(
        default="http://127.0.0.1:7860/api",
        description="Backend API root used by the UI client (follows server_port unless set)",
    )
    session_cookie_name: str = Field(
        default="akoolgen_session",
        description="Cookie name carrying the backend session id",
    )

    # Paths
    downloads_dir: Path = Field(
        default=Path("downloads"),
        description="Directory to save downloaded result images",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and fill in derived defaults.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        if "api_base_url" not in self.model_fields_set:
            self.api_base_url = f"http://127.0.0.1:{self.server_port}/api"

        self.downloads_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (AKOOLGEN_* prefix) and .env file.
config = AkoolgenConfig()
