"""Failure taxonomy shared by the OpenGrok backends and the tool server."""

from typing import Optional


class OpenGrokError(Exception):
    """Base class for every failure surfaced by an OpenGrok client."""


class InvalidArgumentError(OpenGrokError):
    """A required parameter is missing or invalid. Raised before any network call."""


class UnsupportedOperationError(OpenGrokError):
    """The active backend mode has no way to serve the requested operation."""


class AuthenticationExpiredError(OpenGrokError):
    """Upstream answered 401/403, the session cookies or credentials are no longer valid."""

    def __init__(self, message: str, status_code: int, remediation: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.remediation = remediation

    def __str__(self) -> str:
        message = super().__str__()
        if self.remediation:
            return f"{message}\n{self.remediation}"
        return message


class UpstreamUnavailableError(OpenGrokError):
    """Transport-level failure: timeout, refused connection, DNS, too many redirects."""


class UpstreamError(OpenGrokError):
    """Upstream answered with a status code the operation does not accept."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedUpstreamResponseError(OpenGrokError):
    """Response body does not have the shape the active pipeline expects."""
