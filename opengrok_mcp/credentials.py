"""Session cookie holder for SSO-protected OpenGrok instances."""

import logging
from typing import List
from urllib.parse import urlparse

from requests.cookies import RequestsCookieJar

logger = logging.getLogger(__name__)


class CredentialSet:
    """Cookies scoped to one OpenGrok origin.

    The underlying jar is handed by reference to every transport session, so
    cookies refreshed by the upstream (Set-Cookie) are kept, and a reload is
    seen by the next outbound call. Reloading while calls are in flight needs
    external synchronization.
    """

    def __init__(self, base_url: str, cookie_string: str = "") -> None:
        """Initialize the credential set.

        Args:
            base_url: OpenGrok base URL the cookies belong to
            cookie_string: Optional ``name=value; name=value`` string to load
        """
        self.base_url = base_url.rstrip("/")
        host = urlparse(self.base_url).hostname or ""
        # cookielib keys dotless hosts (localhost) as "<host>.local"
        self.domain = host if "." in host else f"{host}.local"
        self.jar = RequestsCookieJar()
        if cookie_string:
            self.load(cookie_string)

    def load(self, cookie_string: str) -> int:
        """Merge cookies from a semicolon-separated string.

        Segments that cannot be parsed are skipped and logged.

        Returns:
            Number of cookies set
        """
        loaded = 0
        for segment in cookie_string.split(";"):
            segment = segment.strip()
            if not segment:
                continue
            name, sep, value = segment.partition("=")
            name = name.strip()
            if not sep or not name:
                logger.warning(f"Skipping unparsable cookie segment ({len(segment)} chars)")
                continue
            self.jar.set(name, value.strip(), domain=self.domain, path="/")
            loaded += 1
        logger.debug(f"Loaded {loaded} cookies for {self.domain}")
        return loaded

    def reload(self, cookie_string: str) -> int:
        """Replace every held cookie with the ones in ``cookie_string``."""
        self.jar.clear()
        return self.load(cookie_string)

    def serialize(self) -> str:
        """Return the held cookies as one ``name=value; name=value`` string."""
        return "; ".join(
            f"{cookie.name}={cookie.value}" for cookie in self.jar if self._in_scope(cookie.domain)
        )

    def names(self) -> List[str]:
        return [cookie.name for cookie in self.jar if self._in_scope(cookie.domain)]

    def _in_scope(self, cookie_domain: str) -> bool:
        cookie_domain = cookie_domain.lstrip(".")
        return not cookie_domain or self.domain == cookie_domain or self.domain.endswith(
            f".{cookie_domain}"
        )

    def __len__(self) -> int:
        return len(self.names())

    def __repr__(self) -> str:
        return f"CredentialSet(domain={self.domain!r}, cookies={self.names()!r})"
