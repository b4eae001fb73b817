"""Result models shared by both OpenGrok backends."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BackendMode(str, Enum):
    """Upstream integration strategy, fixed for the lifetime of a client."""

    HTML = "html"
    REST = "rest"


@dataclass
class SearchHit:
    """One matching line in a search result."""

    file_path: str
    line_number: int
    snippet: str
    project_name: str


@dataclass
class FileContent:
    """Plain-text content of a source file."""

    path: str
    content: str
    project: str = ""


@dataclass
class CrossReference:
    """Location where a symbol is defined or referenced."""

    symbol: str
    file: str
    line: int
    kind: str


@dataclass
class AcceptedRequest:
    """Handle for an upstream operation that answered 202 Accepted."""

    request_id: str
    status_url: str


class RestModel(BaseModel):
    """Base for REST payloads: field-level coercion, unknown fields kept."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="allow")


class Annotation(RestModel):
    revision: str = ""
    author: str = ""
    description: str = ""
    version: str = ""


class HistoryEntry(RestModel):
    revision: str = ""
    date: int = 0
    author: str = ""
    tags: Optional[str] = None
    message: str = ""
    files: Optional[List[str]] = None


class HistoryResponse(RestModel):
    entries: List[HistoryEntry] = Field(default_factory=list)
    start: int = 0
    count: int = 0
    total: int = 0


class DirectoryEntry(RestModel):
    path: str = ""
    num_lines: int = Field(0, alias="numLines")
    loc: int = 0
    date: int = 0
    description: Optional[str] = None
    path_description: str = Field("", alias="pathDescription")
    is_directory: bool = Field(False, alias="isDirectory")
    size: Optional[int] = None


class FileDefinition(RestModel):
    type: str = ""
    signature: str = ""
    text: str = ""
    symbol: str = ""
    line_start: int = Field(0, alias="lineStart")
    line_end: int = Field(0, alias="lineEnd")
    line: int = 0
    namespace: Optional[str] = None


class Suggestion(RestModel):
    phrase: str = ""
    projects: List[str] = Field(default_factory=list)
    score: float = 0


class SuggesterResponse(RestModel):
    time: int = 0
    suggestions: List[Suggestion] = Field(default_factory=list)
    identifier: str = ""
    query_text: str = Field("", alias="queryText")
    partial_result: bool = Field(False, alias="partialResult")


class SuggesterConfig(RestModel):
    enabled: bool = False
    max_results: int = Field(0, alias="maxResults")
    min_chars: int = Field(0, alias="minChars")
    allowed_projects: Optional[List[str]] = Field(None, alias="allowedProjects")
    max_projects: int = Field(0, alias="maxProjects")
    allowed_fields: List[str] = Field(default_factory=list, alias="allowedFields")
    allow_complex_queries: bool = Field(False, alias="allowComplexQueries")
    allow_most_popular: bool = Field(False, alias="allowMostPopular")
    show_scores: bool = Field(False, alias="showScores")
    show_projects: bool = Field(False, alias="showProjects")
    show_time: bool = Field(False, alias="showTime")
    rebuild_cron_config: str = Field("", alias="rebuildCronConfig")
    build_termination_time: int = Field(0, alias="buildTerminationTime")
    time_threshold: int = Field(0, alias="timeThreshold")
