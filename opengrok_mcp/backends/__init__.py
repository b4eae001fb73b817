"""Backend implementations for the OpenGrok web interface and REST API."""

from .client import (
    AbstractOpenGrokClient,
    HtmlOpenGrokClient,
    OpenGrokClientFactory,
    RestOpenGrokClient,
)
from .models import (
    AcceptedRequest,
    BackendMode,
    CrossReference,
    FileContent,
    SearchHit,
)
from .normalizer import (
    FILE_CONTENT_UNAVAILABLE,
    AbstractResultNormalizer,
    HtmlResultNormalizer,
    RestResultNormalizer,
)
from .transport import AbstractTransport, HtmlTransport, RestTransport

__all__ = [
    "AbstractOpenGrokClient",
    "OpenGrokClientFactory",
    "HtmlOpenGrokClient",
    "RestOpenGrokClient",
    "AbstractResultNormalizer",
    "HtmlResultNormalizer",
    "RestResultNormalizer",
    "AbstractTransport",
    "HtmlTransport",
    "RestTransport",
    "AcceptedRequest",
    "BackendMode",
    "CrossReference",
    "FileContent",
    "SearchHit",
    "FILE_CONTENT_UNAVAILABLE",
]
