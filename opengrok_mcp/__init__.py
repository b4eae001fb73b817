"""OpenGrok code search exposed as MCP tools."""

from .backends import BackendMode, OpenGrokClientFactory
from .credentials import CredentialSet
from .errors import (
    AuthenticationExpiredError,
    InvalidArgumentError,
    MalformedUpstreamResponseError,
    OpenGrokError,
    UnsupportedOperationError,
    UpstreamError,
    UpstreamUnavailableError,
)

__version__ = "1.0.0"

__all__ = [
    "BackendMode",
    "OpenGrokClientFactory",
    "CredentialSet",
    "OpenGrokError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "AuthenticationExpiredError",
    "UpstreamUnavailableError",
    "UpstreamError",
    "MalformedUpstreamResponseError",
]
