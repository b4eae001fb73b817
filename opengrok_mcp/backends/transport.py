"""HTTP transports for the OpenGrok web interface and REST API."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from opengrok_mcp.credentials import CredentialSet
from opengrok_mcp.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
MAX_REDIRECTS = 10


class AbstractTransport(ABC):
    """Abstract base class for OpenGrok transports.

    Status codes are never turned into exceptions here; the facade inspects
    them. Only transport-level failures raise.
    """

    default_headers: Dict[str, str] = {}

    def __init__(
        self,
        base_url: str,
        credentials: Optional[CredentialSet] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: OpenGrok base URL, e.g. http://host:8080/source
            credentials: Cookie set for SSO-protected instances
            username: Basic-auth user, used only without credentials
            password: Basic-auth password, used only without credentials
            timeout: Per-call timeout in seconds
            session: Session to use instead of a new one
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.credentials = credentials
        self.session = session or requests.Session()
        self.session.headers.update(self.default_headers)
        self.session.max_redirects = MAX_REDIRECTS

        if credentials is not None:
            self.session.cookies = credentials.jar
        elif username and password:
            self.session.auth = (username, password)

    @property
    @abstractmethod
    def root(self) -> str:
        """URL every request path is appended to."""
        pass

    def url(self, path: str) -> str:
        return f"{self.root}{path}"

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request and return the response whatever its status.

        Raises:
            UpstreamUnavailableError: On timeout, connection or redirect failures
        """
        url = self.url(path)
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise UpstreamUnavailableError(
                f"OpenGrok did not answer within {self.timeout:g}s ({method} {url})"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise UpstreamUnavailableError(f"Cannot reach OpenGrok at {url}: {exc}") from exc

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def get(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> requests.Response:
        return self.request("DELETE", path, **kwargs)


class HtmlTransport(AbstractTransport):
    """Transport for the browser-facing web interface."""

    default_headers = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    }

    @property
    def root(self) -> str:
        return self.base_url


class RestTransport(AbstractTransport):
    """Transport for the versioned REST API."""

    api_prefix = "/api/v1"
    default_headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": "Mozilla/5.0 (compatible; OpenGrokMCP/1.0)",
    }

    @property
    def root(self) -> str:
        return f"{self.base_url}{self.api_prefix}"
