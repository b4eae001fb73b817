"""OpenGrok clients for the web interface and the REST API."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests

from opengrok_mcp.backends.models import (
    AcceptedRequest,
    Annotation,
    BackendMode,
    CrossReference,
    DirectoryEntry,
    FileContent,
    FileDefinition,
    HistoryResponse,
    SearchHit,
    SuggesterConfig,
    SuggesterResponse,
)
from opengrok_mcp.backends.normalizer import (
    AbstractResultNormalizer,
    HtmlResultNormalizer,
    RestResultNormalizer,
)
from opengrok_mcp.backends.transport import (
    DEFAULT_TIMEOUT,
    AbstractTransport,
    HtmlTransport,
    RestTransport,
)
from opengrok_mcp.credentials import CredentialSet
from opengrok_mcp.errors import (
    InvalidArgumentError,
    MalformedUpstreamResponseError,
    OpenGrokError,
    UnsupportedOperationError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50
SEARCH_TYPES = ("full", "defs", "refs", "path", "hist")
SORT_ORDERS = ("relevancy", "fullpath", "lastmodtime")
XREF_KINDS = {"definition": "defs", "reference": "refs"}
SUGGEST_FIELDS = ("defs", "path", "hist", "refs", "type", "full")
MESSAGE_LEVELS = ("success", "info", "warning", "error")
FILE_PATH_TIP = (
    "Tip: Omit the 'project' parameter and use the full path from search results "
    "(e.g., 'ProjectName/path/to/file')."
)


def _segment(value: str) -> str:
    """Quote a value used as a single URL path segment."""
    return quote(value, safe="")


def _flag(value: bool) -> str:
    return "true" if value else "false"


class AbstractOpenGrokClient(ABC):
    """Operations exposed uniformly whatever the backend mode.

    Subclasses pair one transport with the matching normalizer and describe
    how logical parameters map onto their query keys.
    """

    mode: BackendMode
    search_keys: Dict[str, str] = {}
    projects_path: str = ""
    ping_path: str = ""

    def __init__(
        self,
        transport: AbstractTransport,
        normalizer: AbstractResultNormalizer,
        default_project: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Transport for this backend mode
            normalizer: Normalizer for this backend mode
            default_project: Project used by cross_references when none is given
        """
        self.transport = transport
        self.normalizer = normalizer
        self.default_project = default_project

    @staticmethod
    def _require(value: Optional[str], name: str, hint: str = "") -> str:
        if value is None or not str(value).strip():
            message = f"Parameter '{name}' is required."
            if hint:
                message = f"{message} {hint}"
            raise InvalidArgumentError(message)
        return value

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(
            f"{operation} is not available with the {self.mode.value} backend. "
            f"Set OPENGROK_BACKEND=rest to use the REST API."
        )

    @abstractmethod
    def _search_params(
        self,
        key: str,
        query: str,
        project: Optional[str],
        language: Optional[str],
        max_results: Optional[int],
        start: Optional[int],
        sort: Optional[str],
    ) -> Dict[str, str]:
        """Build the query string of a search request."""
        pass

    @abstractmethod
    def _file_request(self, path: str) -> requests.Response:
        """Fetch the raw representation of one file."""
        pass

    def _run_search(self, params: Dict[str, str], project: Optional[str], operation: str) -> List[SearchHit]:
        response = self.transport.get("/search", params=params)
        self.normalizer.check_response(response, operation)
        return self.normalizer.search_hits(self.normalizer.payload(response), project)

    def search(
        self,
        query: str,
        project: str,
        search_type: str = "full",
        language: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        start: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> List[SearchHit]:
        """Search code in one project.

        Args:
            query: Search query string
            project: Project to search in (required)
            search_type: One of full, defs, refs, path, hist
            language: Optional file type filter (java, cxx, python, ...)
            max_results: Maximum number of hits to return
            start: Optional offset of the first result
            sort: Optional order: relevancy, fullpath or lastmodtime

        Returns:
            Hits, at most ``max_results``
        """
        self._require(project, "project", "Use opengrok_list_projects to see available projects.")
        self._require(query, "query")
        if search_type not in SEARCH_TYPES:
            raise InvalidArgumentError(
                f"Invalid search type '{search_type}'. Valid types are {', '.join(SEARCH_TYPES)}."
            )
        if max_results is None or max_results < 1:
            raise InvalidArgumentError("Parameter 'max_results' must be a positive integer.")
        if sort is not None and sort not in SORT_ORDERS:
            raise InvalidArgumentError(f"Invalid sort '{sort}'. Valid values are {', '.join(SORT_ORDERS)}.")

        params = self._search_params(
            self.search_keys[search_type], query, project, language, max_results, start, sort
        )
        hits = self._run_search(params, project, "Search")
        return hits[:max_results]

    def cross_references(
        self, symbol: str, project: Optional[str] = None, kind: str = "definition"
    ) -> List[CrossReference]:
        """Find where a symbol is defined (kind="definition") or used (kind="reference")."""
        self._require(symbol, "symbol")
        if kind not in XREF_KINDS:
            raise InvalidArgumentError(f"Invalid kind '{kind}'. Valid kinds are {', '.join(XREF_KINDS)}.")
        project = project or self.default_project

        key = self.search_keys[XREF_KINDS[kind]]
        params = self._search_params(key, symbol, project, None, None, None, None)
        hits = self._run_search(params, project, "Cross-reference search")
        return self.normalizer.cross_references(hits, symbol, kind)

    def get_file_content(self, path: str, project: Optional[str] = None) -> FileContent:
        """Get the plain-text content of a file.

        The path is tried as given first. If that yields 404 and a project was
        supplied, it is retried once with the project prepended.
        """
        self._require(path, "path")
        response = self._file_request(path)
        if response.status_code == 404 and project:
            prefixed = f"{'/' if path.startswith('/') else ''}{project}/{path.lstrip('/')}"
            logger.info(f"{path} not found, retrying as {prefixed}")
            response = self._file_request(prefixed)

        self.normalizer.check_response(response, "Get file content", hint=FILE_PATH_TIP)
        content = self.normalizer.file_content(self.normalizer.payload(response))
        return FileContent(path=path, content=content, project=project or "")

    def list_projects(self) -> List[str]:
        response = self.transport.get(self.projects_path)
        self.normalizer.check_response(response, "List projects")
        return self.normalizer.project_names(self.normalizer.payload(response))

    def ping(self) -> bool:
        """Check whether the OpenGrok web application answers. Never raises."""
        try:
            response = self.transport.get(self.ping_path)
        except OpenGrokError as exc:
            logger.warning(f"Ping failed: {exc}")
            return False
        return response.status_code == 200

    def is_authenticated(self) -> bool:
        """Probe whether the current credentials are accepted."""
        try:
            response = self.transport.get(self.projects_path)
        except UpstreamUnavailableError as exc:
            logger.warning(f"Authentication probe failed: {exc}")
            return False
        return response.status_code == 200

    def get_annotation(self, path: str) -> List[Annotation]:
        raise self._unsupported("get_annotation")

    def get_history(
        self,
        path: str,
        with_files: Optional[bool] = None,
        start: Optional[int] = None,
        max_entries: Optional[int] = None,
    ) -> HistoryResponse:
        raise self._unsupported("get_history")

    def get_directory_listing(self, path: str) -> List[DirectoryEntry]:
        raise self._unsupported("get_directory_listing")

    def get_file_definitions(self, path: str) -> List[FileDefinition]:
        raise self._unsupported("get_file_definitions")

    def get_file_genre(self, path: str) -> str:
        raise self._unsupported("get_file_genre")

    def get_indexed_projects(self) -> List[str]:
        raise self._unsupported("get_indexed_projects")

    def get_project_repositories(self, project: str) -> List[str]:
        raise self._unsupported("get_project_repositories")

    def get_project_repository_types(self, project: str) -> List[str]:
        raise self._unsupported("get_project_repository_types")

    def get_project_indexed_files(self, project: str) -> List[str]:
        raise self._unsupported("get_project_indexed_files")

    def get_last_index_time(self) -> str:
        raise self._unsupported("get_last_index_time")

    def get_version(self) -> str:
        raise self._unsupported("get_version")

    def get_suggestions(
        self, query: str, project: Optional[str] = None, field: str = "full", caret: Optional[int] = None
    ) -> SuggesterResponse:
        raise self._unsupported("get_suggestions")


class HtmlOpenGrokClient(AbstractOpenGrokClient):
    """Client scraping the OpenGrok web interface."""

    mode = BackendMode.HTML
    search_keys = {"full": "full", "defs": "defs", "refs": "refs", "path": "path", "hist": "hist"}
    projects_path = "/"
    ping_path = "/"

    def _search_params(
        self,
        key: str,
        query: str,
        project: Optional[str],
        language: Optional[str],
        max_results: Optional[int],
        start: Optional[int],
        sort: Optional[str],
    ) -> Dict[str, str]:
        params = {"xrd": "", "nn": "1", key: query, "type": language or ""}
        if project:
            params["project"] = project
        if start is not None:
            params["start"] = str(start)
        if sort:
            params["sort"] = sort
        return params

    def _file_request(self, path: str) -> requests.Response:
        return self.transport.get(f"/xref/{quote(path.lstrip('/'), safe='/')}")


class RestOpenGrokClient(AbstractOpenGrokClient):
    """Client for the OpenGrok REST API (``/api/v1``)."""

    mode = BackendMode.REST
    search_keys = {"full": "full", "defs": "def", "refs": "symbol", "path": "path", "hist": "hist"}
    projects_path = "/projects"
    ping_path = "/system/ping"

    normalizer: RestResultNormalizer

    def _search_params(
        self,
        key: str,
        query: str,
        project: Optional[str],
        language: Optional[str],
        max_results: Optional[int],
        start: Optional[int],
        sort: Optional[str],
    ) -> Dict[str, str]:
        params = {key: query}
        if project:
            params["projects"] = project
        if language:
            params["type"] = language
        if max_results:
            params["maxresults"] = str(max_results)
        if start is not None:
            params["start"] = str(start)
        if sort:
            params["sort"] = sort
        return params

    def _file_request(self, path: str) -> requests.Response:
        return self.transport.get("/file/content", params={"path": path}, headers={"Accept": "text/plain"})

    def _get(self, path: str, operation: str, params: Optional[Dict[str, str]] = None) -> Any:
        response = self.transport.get(path, params=params)
        self.normalizer.check_response(response, operation)
        return self.normalizer.payload(response)

    def _accepted(self, response: requests.Response, operation: str, wait: bool) -> Optional[AcceptedRequest]:
        """Return a handle when the upstream deferred the operation (202)."""
        if response.status_code != 202:
            return None
        location = response.headers.get("Location", "")
        if not location:
            raise MalformedUpstreamResponseError(f"{operation} was accepted without a status location")
        accepted = AcceptedRequest(request_id=location.rstrip("/").rsplit("/", 1)[-1], status_url=location)
        logger.info(f"{operation} accepted, status at {location}")
        if wait:
            self.wait_for_request(accepted)
        return accepted

    # File information

    def get_annotation(self, path: str) -> List[Annotation]:
        self._require(path, "path")
        payload = self._get("/annotation", "Get annotation", params={"path": path})
        return self.normalizer.model_list(payload, Annotation)

    def get_history(
        self,
        path: str,
        with_files: Optional[bool] = None,
        start: Optional[int] = None,
        max_entries: Optional[int] = None,
    ) -> HistoryResponse:
        self._require(path, "path")
        params = {"path": path}
        if with_files is not None:
            params["withFiles"] = _flag(with_files)
        if start is not None:
            params["start"] = str(start)
        if max_entries is not None:
            params["max"] = str(max_entries)
        payload = self._get("/history", "Get history", params=params)
        return self.normalizer.model(payload, HistoryResponse)

    def get_directory_listing(self, path: str) -> List[DirectoryEntry]:
        self._require(path, "path")
        payload = self._get("/list", "Get directory listing", params={"path": path})
        return self.normalizer.model_list(payload, DirectoryEntry)

    def get_file_definitions(self, path: str) -> List[FileDefinition]:
        self._require(path, "path")
        payload = self._get("/file/defs", "Get file definitions", params={"path": path})
        return self.normalizer.model_list(payload, FileDefinition)

    def get_file_genre(self, path: str) -> str:
        self._require(path, "path")
        return self.normalizer.text(self._get("/file/genre", "Get file genre", params={"path": path}))

    # Projects

    def get_indexed_projects(self) -> List[str]:
        return self.normalizer.string_list(self._get("/projects/indexed", "Get indexed projects"))

    def get_project_repositories(self, project: str) -> List[str]:
        self._require(project, "project")
        payload = self._get(f"/projects/{_segment(project)}/repositories", "Get project repositories")
        return self.normalizer.string_list(payload)

    def get_project_repository_types(self, project: str) -> List[str]:
        self._require(project, "project")
        payload = self._get(f"/projects/{_segment(project)}/repositories/type", "Get project repository types")
        return self.normalizer.string_list(payload)

    def get_project_indexed_files(self, project: str) -> List[str]:
        self._require(project, "project")
        payload = self._get(f"/projects/{_segment(project)}/files", "Get project indexed files")
        return self.normalizer.string_list(payload)

    def get_project_property(self, project: str, name: str) -> Any:
        self._require(project, "project")
        self._require(name, "name")
        return self._get(f"/projects/{_segment(project)}/property/{_segment(name)}", "Get project property")

    def mark_project_indexed(self, project: str, wait: bool = False) -> Optional[AcceptedRequest]:
        self._require(project, "project")
        response = self.transport.put(
            f"/projects/{_segment(project)}/indexed", data="", headers={"Content-Type": "text/plain"}
        )
        self.normalizer.check_response(response, "Mark project as indexed", expected=(202, 204))
        return self._accepted(response, "Mark project as indexed", wait)

    def add_project(self, project: str) -> None:
        self._require(project, "project")
        response = self.transport.post(
            "/projects", data=project.encode("utf-8"), headers={"Content-Type": "text/plain"}
        )
        self.normalizer.check_response(response, "Add project", expected=(201,))

    def delete_project(self, project: str) -> None:
        """Remove a project together with its index data."""
        self._require(project, "project")
        response = self.transport.delete(f"/projects/{_segment(project)}")
        self.normalizer.check_response(response, "Delete project", expected=(204,))

    def delete_project_index_data(self, project: str) -> None:
        self._require(project, "project")
        response = self.transport.delete(f"/projects/{_segment(project)}/data")
        self.normalizer.check_response(response, "Delete project index data", expected=(204,))

    def delete_project_history_cache(self, project: str) -> List[str]:
        """Drop the history cache of a project.

        Returns:
            Repositories whose cache was removed
        """
        return self._delete_project_cache(project, "historycache", "Delete project history cache")

    def delete_project_annotation_cache(self, project: str) -> List[str]:
        return self._delete_project_cache(project, "annotationcache", "Delete project annotation cache")

    def _delete_project_cache(self, project: str, cache: str, operation: str) -> List[str]:
        self._require(project, "project")
        response = self.transport.delete(f"/projects/{_segment(project)}/{cache}")
        self.normalizer.check_response(response, operation)
        return self.normalizer.string_list(self.normalizer.payload(response))

    def set_project_property(self, project: str, name: str, value: str) -> None:
        self._require(project, "project")
        self._require(name, "name")
        response = self.transport.put(
            f"/projects/{_segment(project)}/property/{_segment(name)}",
            data=value.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        self.normalizer.check_response(response, "Set project property", expected=(204,))

    def get_repository_field(self, field: str, repository: Optional[str] = None) -> Any:
        self._require(field, "field")
        params = {"repository": repository} if repository else None
        return self._get(f"/repositories/property/{_segment(field)}", "Get repository field", params=params)

    # System

    def get_last_index_time(self) -> str:
        return self.normalizer.text(self._get("/system/indextime", "Get last index time"))

    def get_version(self) -> str:
        return self.normalizer.text(self._get("/system/version", "Get version"))

    def get_metrics(self) -> str:
        return self.normalizer.text(self._get("/metrics/prometheus", "Get metrics"))

    def reload_include_files(self) -> None:
        response = self.transport.put("/system/includes/reload")
        self.normalizer.check_response(response, "Reload include files", expected=(204,))

    def update_path_descriptions(self, descriptions: List[Dict[str, str]]) -> None:
        response = self.transport.post("/system/pathdesc", json=descriptions)
        self.normalizer.check_response(response, "Update path descriptions", expected=(204,))

    # Suggester

    def get_suggestions(
        self, query: str, project: Optional[str] = None, field: str = "full", caret: Optional[int] = None
    ) -> SuggesterResponse:
        """Get completion suggestions for a partial query in one field."""
        self._require(query, "query")
        if field not in SUGGEST_FIELDS:
            raise InvalidArgumentError(f"Invalid field '{field}'. Valid fields are {', '.join(SUGGEST_FIELDS)}.")
        params = {"field": field, field: query, "caret": str(len(query) if caret is None else caret)}
        if project:
            params["projects"] = project
        payload = self._get("/suggest", "Get suggestions", params=params)
        return self.normalizer.model(payload, SuggesterResponse)

    def get_suggester_config(self) -> SuggesterConfig:
        return self.normalizer.model(self._get("/suggest/config", "Get suggester config"), SuggesterConfig)

    def init_suggester_queries(self, queries: List[str]) -> None:
        """Seed suggester popularity from past search queries."""
        if not queries:
            raise InvalidArgumentError("Parameter 'queries' needs at least one query.")
        response = self.transport.post("/suggest/init/queries", json=queries)
        self.normalizer.check_response(response, "Init suggester queries", expected=(204,))

    def init_suggester_raw(self, data: List[Dict[str, Any]]) -> None:
        """Seed suggester popularity with raw entries.

        Args:
            data: Entries with ``project``, ``field``, ``token`` and ``increment`` keys
        """
        if not data:
            raise InvalidArgumentError("Parameter 'data' needs at least one entry.")
        response = self.transport.post("/suggest/init/raw", json=data)
        self.normalizer.check_response(response, "Init suggester raw data", expected=(204,))

    def get_suggester_popularity(
        self,
        project: str,
        field: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        all_entries: Optional[bool] = None,
    ) -> List[Any]:
        self._require(project, "project")
        params = {}
        if field is not None:
            params["field"] = field
        if page is not None:
            params["page"] = str(page)
        if page_size is not None:
            params["pageSize"] = str(page_size)
        if all_entries is not None:
            params["all"] = _flag(all_entries)
        payload = self._get(
            f"/suggest/popularity/{_segment(project)}", "Get suggester popularity", params=params or None
        )
        if not isinstance(payload, list):
            raise MalformedUpstreamResponseError(
                f"Expected a list of popularity entries, got {type(payload).__name__}"
            )
        return payload

    def rebuild_suggester(self, project: Optional[str] = None) -> None:
        """Rebuild suggester data for one project, or for all of them."""
        path = f"/suggest/rebuild/{_segment(project)}" if project else "/suggest/rebuild"
        response = self.transport.put(path)
        self.normalizer.check_response(response, "Rebuild suggester data", expected=(204,))

    # Configuration

    def get_configuration(self) -> Any:
        return self._get("/configuration", "Get configuration")

    def get_configuration_field(self, field: str) -> Any:
        self._require(field, "field")
        return self._get(f"/configuration/{_segment(field)}", "Get configuration field")

    def set_configuration(self, configuration: str, wait: bool = False) -> Optional[AcceptedRequest]:
        """Replace the web application configuration with an XML document."""
        self._require(configuration, "configuration")
        response = self.transport.put(
            "/configuration", data=configuration.encode("utf-8"), headers={"Content-Type": "application/xml"}
        )
        self.normalizer.check_response(response, "Set configuration", expected=(201, 202))
        return self._accepted(response, "Set configuration", wait)

    def set_configuration_field(
        self, field: str, value: str, reindex: Optional[bool] = None, wait: bool = False
    ) -> Optional[AcceptedRequest]:
        self._require(field, "field")
        params = {"reindex": _flag(reindex)} if reindex is not None else None
        response = self.transport.put(
            f"/configuration/{_segment(field)}",
            params=params,
            data=value.encode("utf-8"),
            headers={"Content-Type": "application/text"},
        )
        self.normalizer.check_response(response, "Set configuration field", expected=(202, 204))
        return self._accepted(response, "Set configuration field", wait)

    def reload_authorization(self, wait: bool = False) -> Optional[AcceptedRequest]:
        response = self.transport.post("/configuration/authorization/reload")
        self.normalizer.check_response(response, "Reload authorization framework", expected=(202, 204))
        return self._accepted(response, "Reload authorization framework", wait)

    # Messages

    def get_messages(self, tag: str) -> List[Dict[str, Any]]:
        self._require(tag, "tag")
        payload = self._get("/messages", "Get messages", params={"tag": tag})
        if not isinstance(payload, list):
            raise MalformedUpstreamResponseError(f"Expected a list of messages, got {type(payload).__name__}")
        return payload

    def add_message(
        self, text: str, tags: List[str], level: str = "info", duration: str = "PT10M"
    ) -> None:
        self._require(text, "text")
        if not tags:
            raise InvalidArgumentError("Parameter 'tags' needs at least one tag.")
        if level not in MESSAGE_LEVELS:
            raise InvalidArgumentError(f"Invalid level '{level}'. Valid levels are {', '.join(MESSAGE_LEVELS)}.")
        message = {"tags": tags, "messageLevel": level, "text": text, "duration": duration}
        response = self.transport.post("/messages", json=message)
        self.normalizer.check_response(response, "Add message", expected=(201,))

    def delete_messages(self, tag: str, text: Optional[str] = None) -> None:
        self._require(tag, "tag")
        # The webapp reads the tag from the query string, not from the path
        response = self.transport.delete(
            "/messages",
            params={"tag": tag},
            data=(text or "").encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        self.normalizer.check_response(response, "Delete messages", expected=(204,))

    # Groups

    def get_groups(self) -> List[str]:
        return self.normalizer.string_list(self._get("/groups", "Get groups"))

    def get_group_projects(self, group: str) -> List[str]:
        self._require(group, "group")
        return self.normalizer.string_list(self._get(f"/groups/{_segment(group)}/allprojects", "Get group projects"))

    def get_group_pattern(self, group: str) -> str:
        self._require(group, "group")
        return self.normalizer.text(self._get(f"/groups/{_segment(group)}/pattern", "Get group pattern"))

    def group_matches(self, group: str, project: str) -> bool:
        """Check whether a project name matches a group's pattern."""
        self._require(group, "group")
        self._require(project, "project")
        response = self.transport.post(
            f"/groups/{_segment(group)}/match",
            data=project.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        self.normalizer.check_response(response, "Check group match", expected=(200, 204))
        return response.status_code == 200

    # Deferred requests

    def check_request_status(self, request_id: str) -> int:
        """Return the status code of a deferred request (202 while running)."""
        self._require(request_id, "request_id")
        response = self.transport.get(f"/status/{_segment(request_id)}")
        self.normalizer.check_authentication(response, "Check request status")
        return response.status_code

    def delete_request_status(self, request_id: str) -> None:
        self._require(request_id, "request_id")
        response = self.transport.delete(f"/status/{_segment(request_id)}")
        self.normalizer.check_response(response, "Delete request status")

    def wait_for_request(
        self, accepted: Union[AcceptedRequest, str], timeout: float = 60.0, interval: float = 1.0
    ) -> int:
        """Block until a deferred request finishes.

        Polls the status endpoint while it answers 202, then removes the
        status record.

        Args:
            accepted: Handle returned by a 202-capable operation, or its id
            timeout: Seconds to wait before giving up
            interval: Seconds between polls

        Returns:
            Terminal status code of the request

        Raises:
            UpstreamUnavailableError: If the request is still running after ``timeout``
            UpstreamError: If the upstream does not know the request
        """
        request_id = accepted.request_id if isinstance(accepted, AcceptedRequest) else accepted
        deadline = time.monotonic() + timeout
        status = self.check_request_status(request_id)
        while status == 202:
            if time.monotonic() >= deadline:
                raise UpstreamUnavailableError(f"Request {request_id} still running after {timeout:g}s")
            time.sleep(interval)
            status = self.check_request_status(request_id)

        if status == 404:
            raise UpstreamError(f"Unknown request {request_id}", status_code=status)
        logger.info(f"Request {request_id} finished with status {status}")
        self.delete_request_status(request_id)
        return status


class OpenGrokClientFactory:
    """Factory for creating OpenGrok clients."""

    @staticmethod
    def create_client(
        backend: Union[str, BackendMode],
        base_url: str,
        credentials: Optional[CredentialSet] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        default_project: Optional[str] = None,
        remediation: str = "",
    ) -> AbstractOpenGrokClient:
        """Create a client for the given backend.

        Args:
            backend: Backend mode ('html' or 'rest')
            base_url: OpenGrok base URL
            credentials: Cookie set; when given, basic auth is not used
            username: Basic-auth user
            password: Basic-auth password
            timeout: Per-call timeout in seconds
            default_project: Project used by cross_references when none is given
            remediation: Text attached to authentication failures

        Returns:
            Client instance

        Raises:
            ValueError: If backend is not supported
        """
        try:
            mode = BackendMode(backend.lower())
        except ValueError:
            raise ValueError(f"Unsupported backend: {backend}") from None

        transport_kwargs = {
            "base_url": base_url,
            "credentials": credentials,
            "username": username,
            "password": password,
            "timeout": timeout,
        }
        if mode is BackendMode.HTML:
            return HtmlOpenGrokClient(
                HtmlTransport(**transport_kwargs), HtmlResultNormalizer(remediation), default_project
            )
        return RestOpenGrokClient(
            RestTransport(**transport_kwargs), RestResultNormalizer(remediation), default_project
        )
