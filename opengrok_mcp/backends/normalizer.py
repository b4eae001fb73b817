"""Translate raw OpenGrok responses into the canonical result models.

Two pipelines exist, one per backend mode:

* ``HtmlResultNormalizer`` pattern-matches the markup served by the web
  interface. The expected shapes are::

      <a class="s" href="/xref/PROJECT/path/to/file#LINE"><span class="l">LINE</span>CODE</a>
      <pre ...>...escaped source with xref markup...</pre>
      <option value="PROJECT">PROJECT</option>

  A web-app context path in front of ``/xref/`` is accepted.

* ``RestResultNormalizer`` reads the JSON documents of the REST API and only
  reshapes search results; everything else is type-coerced.

Both check for authentication failures before looking at the body.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Type, TypeVar
from urllib.parse import unquote

import requests
from pydantic import BaseModel, ValidationError

from opengrok_mcp.backends.models import CrossReference, SearchHit
from opengrok_mcp.errors import (
    AuthenticationExpiredError,
    MalformedUpstreamResponseError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

AUTH_FAILURE_STATUSES = (401, 403)
UNKNOWN_PROJECT = "unknown"
FILE_CONTENT_UNAVAILABLE = "File content could not be extracted"

SEARCH_RESULT_PATTERN = re.compile(
    r'<a\s+class="s"\s+href="[^"#]*?/xref/([^"#]+)#(\d+)"[^>]*>(.*?)</a>'
)
RESULT_ANCHOR_PATTERN = re.compile(r'<a\s+class="s"')
CODE_BLOCK_PATTERN = re.compile(r"<pre[^>]*>([\s\S]*?)</pre>")
TAG_PATTERN = re.compile(r"<[^>]+>")
OPTION_PATTERN = re.compile(r'<option[^>]*value="([^"]*)"[^>]*>([^<]*)</option>')


def parse_line_number(value: Any) -> int:
    """Parse a line number, 0 when it is missing or not a non-negative integer."""
    text = str(value).strip() if value is not None else ""
    return int(text) if text.isdigit() else 0


class AbstractResultNormalizer(ABC):
    """Abstract base class for result normalizers."""

    def __init__(self, remediation: str = "") -> None:
        """Initialize the normalizer.

        Args:
            remediation: Text telling the user how to refresh credentials,
                attached to every authentication failure
        """
        self.remediation = remediation

    def check_response(
        self,
        response: requests.Response,
        operation: str,
        expected: Iterable[int] = (200,),
        hint: str = "",
    ) -> None:
        """Classify the status code of a response.

        Raises:
            AuthenticationExpiredError: On 401 or 403, whatever the body
            UpstreamError: On any other status not in ``expected``
        """
        self.check_authentication(response, operation)
        status = response.status_code
        if status not in tuple(expected):
            message = f"{operation} failed with status {status}"
            if hint:
                message = f"{message}. {hint}"
            raise UpstreamError(message, status_code=status)

    def check_authentication(self, response: requests.Response, operation: str) -> None:
        """Raise AuthenticationExpiredError on 401 or 403, whatever the body."""
        status = response.status_code
        if status in AUTH_FAILURE_STATUSES:
            logger.error(f"Authentication failed ({status}) during {operation}. Cookies may have expired.")
            raise AuthenticationExpiredError(
                f"Authentication failed ({status}). Your OpenGrok session has expired "
                f"or the credentials were rejected.",
                status_code=status,
                remediation=self.remediation,
            )

    @abstractmethod
    def payload(self, response: requests.Response) -> Any:
        """Extract the body this pipeline works on."""
        pass

    @abstractmethod
    def search_hits(self, payload: Any, project: Optional[str] = None) -> List[SearchHit]:
        """Turn a search response body into hits."""
        pass

    @abstractmethod
    def file_content(self, payload: Any) -> str:
        """Turn a file response body into plain text."""
        pass

    @abstractmethod
    def project_names(self, payload: Any) -> List[str]:
        """Turn a project listing body into project names."""
        pass

    def cross_references(self, hits: List[SearchHit], symbol: str, kind: str) -> List[CrossReference]:
        """Turn search hits for a symbol into cross references of the given kind."""
        return [
            CrossReference(symbol=symbol, file=hit.file_path, line=hit.line_number, kind=kind)
            for hit in hits
        ]


class HtmlResultNormalizer(AbstractResultNormalizer):
    """Normalizer for pages of the OpenGrok web interface."""

    def payload(self, response: requests.Response) -> str:
        return response.text

    def search_hits(self, payload: str, project: Optional[str] = None) -> List[SearchHit]:
        """Extract hits from a search results page.

        Snippets keep their highlight markup. Paths are percent-decoded,
        matching the plain paths of the REST API. Duplicate (path, line) pairs
        keep the first snippet seen.

        Raises:
            MalformedUpstreamResponseError: If result anchors exist but none
                match the expected link shape
        """
        hits: List[SearchHit] = []
        seen = set()
        match_count = 0

        for match in SEARCH_RESULT_PATTERN.finditer(payload):
            match_count += 1
            file_path, line_number = unquote(match.group(1)), int(match.group(2))
            if (file_path, line_number) in seen:
                continue
            seen.add((file_path, line_number))
            hits.append(
                SearchHit(
                    file_path=file_path,
                    line_number=line_number,
                    snippet=match.group(3),
                    project_name=project or UNKNOWN_PROJECT,
                )
            )

        if match_count:
            logger.info(f"Found {match_count} matches, returning {len(hits)} unique results")
            return hits

        anchor_count = len(RESULT_ANCHOR_PATTERN.findall(payload))
        logger.info(f"No matches with the result pattern, found {anchor_count} <a class=\"s\"> elements")
        if anchor_count:
            raise MalformedUpstreamResponseError(
                f"Search page contains {anchor_count} result links but none has the expected "
                f"/xref/<path>#<line> shape; the OpenGrok markup may have changed"
            )
        return hits

    def file_content(self, payload: str) -> str:
        match = CODE_BLOCK_PATTERN.search(payload)
        if not match:
            logger.warning("No code block found in xref page")
            return FILE_CONTENT_UNAVAILABLE
        text = TAG_PATTERN.sub("", match.group(1))
        return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&").strip()

    def project_names(self, payload: str) -> List[str]:
        projects = []
        for value, label in OPTION_PATTERN.findall(payload):
            name = (value or label).strip()
            if name:
                projects.append(name)
        return projects


class RestResultNormalizer(AbstractResultNormalizer):
    """Normalizer for REST API documents."""

    def payload(self, response: requests.Response) -> Any:
        """Parse JSON bodies, return anything else as text.

        Raises:
            MalformedUpstreamResponseError: If a JSON body does not parse
        """
        content_type = response.headers.get("Content-Type", "")
        if "json" not in content_type:
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponseError(f"Invalid JSON from {response.url}: {exc}") from exc

    def search_hits(self, payload: Any, project: Optional[str] = None) -> List[SearchHit]:
        """Flatten the path -> lines mapping of a search response.

        Order is mapping order, then line order. Nothing is deduplicated.
        """
        if not isinstance(payload, dict):
            raise MalformedUpstreamResponseError("Search response is not a JSON object")
        results = payload.get("results") or {}
        if not isinstance(results, dict):
            raise MalformedUpstreamResponseError("Search response 'results' is not a mapping")

        hits: List[SearchHit] = []
        for file_path, lines in results.items():
            if not isinstance(lines, list):
                raise MalformedUpstreamResponseError(f"Search hits for {file_path} are not a list")
            for entry in lines:
                if not isinstance(entry, dict):
                    raise MalformedUpstreamResponseError(f"Search hit for {file_path} is not an object")
                hits.append(
                    SearchHit(
                        file_path=file_path,
                        line_number=parse_line_number(entry.get("lineNumber")),
                        snippet=str(entry.get("line") or ""),
                        project_name=project or UNKNOWN_PROJECT,
                    )
                )
        logger.info(f"Search returned {len(hits)} hits in {len(results)} files")
        return hits

    def file_content(self, payload: Any) -> str:
        return self.text(payload)

    def project_names(self, payload: Any) -> List[str]:
        return [name for name in (item.strip() for item in self.string_list(payload)) if name]

    def text(self, payload: Any) -> str:
        if isinstance(payload, str):
            return payload
        if isinstance(payload, (int, float)) and not isinstance(payload, bool):
            return str(payload)
        raise MalformedUpstreamResponseError(f"Expected a text value, got {type(payload).__name__}")

    def string_list(self, payload: Any) -> List[str]:
        if not isinstance(payload, list):
            raise MalformedUpstreamResponseError(f"Expected a JSON list, got {type(payload).__name__}")
        return [str(item) for item in payload]

    def model(self, payload: Any, model: Type[M]) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise MalformedUpstreamResponseError(f"Unexpected {model.__name__} document: {exc}") from exc

    def model_list(self, payload: Any, model: Type[M]) -> List[M]:
        if not isinstance(payload, list):
            raise MalformedUpstreamResponseError(
                f"Expected a list of {model.__name__}, got {type(payload).__name__}"
            )
        return [self.model(item, model) for item in payload]
