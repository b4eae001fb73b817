"""Configuration for the OpenGrok MCP server."""

import os
from typing import Optional

from dotenv import load_dotenv

from opengrok_mcp.backends.models import BackendMode

load_dotenv()

TRANSPORTS = ("stdio", "http")


class ServerConfig:
    """Server configuration."""

    def __init__(self) -> None:
        """Initialize server configuration from environment variables."""
        # OpenGrok upstream
        self.base_url = os.getenv("OPENGROK_URL", "http://localhost:8080/source").rstrip("/")
        self.backend = os.getenv("OPENGROK_BACKEND", BackendMode.REST.value).lower()
        if self.backend not in {mode.value for mode in BackendMode}:
            raise ValueError(
                "Invalid option for OPENGROK_BACKEND. Valid options are [rest|html] "
            )
        self.default_project = self._get_optional_env("OPENGROK_DEFAULT_PROJECT")
        self.username = self._get_optional_env("OPENGROK_USERNAME")
        self.password = self._get_optional_env("OPENGROK_PASSWORD")
        self.cookie_string = os.getenv("OPENGROK_COOKIES", "")
        self.use_oauth = os.getenv("OPENGROK_USE_OAUTH", "false").lower() == "true"
        self.timeout = float(os.getenv("OPENGROK_TIMEOUT", "30"))

        # MCP transport
        self.transport = os.getenv("MCP_TRANSPORT", "stdio").lower()
        if self.transport not in TRANSPORTS:
            raise ValueError("Invalid option for MCP_TRANSPORT. Valid options are [stdio|http] ")
        self.host = os.getenv("MCP_HOST", "0.0.0.0")
        self.sse_port = int(os.getenv("MCP_SSE_PORT", "8000"))
        self.streamable_http_port = int(os.getenv("MCP_STREAMABLE_HTTP_PORT", "8080"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Langfuse configuration (optional)
        self.langfuse_enabled = os.getenv("LANGFUSE_ENABLED", "false").lower() == "true"
        if self.langfuse_enabled:
            self.langfuse_public_key = self._get_required_env("LANGFUSE_PUBLIC_KEY")
            self.langfuse_secret_key = self._get_required_env("LANGFUSE_SECRET_KEY")
            self.langfuse_host = self._get_required_env("LANGFUSE_HOST")
        else:
            self.langfuse_public_key = ""
            self.langfuse_secret_key = ""
            self.langfuse_host = ""

    @property
    def use_cookies(self) -> bool:
        """Whether session cookies (SSO) rather than basic auth authenticate requests."""
        return self.use_oauth or not (self.username and self.password)

    @staticmethod
    def _get_optional_env(key: str) -> Optional[str]:
        return os.getenv(key) or None

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value
