"""OpenGrok MCP server."""

import asyncio
import dataclasses
import json
import logging
import signal
import uuid
from typing import Any, Callable, Dict, Literal, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import BaseModel

from opengrok_mcp.backends import AbstractOpenGrokClient, OpenGrokClientFactory
from opengrok_mcp.backends.client import DEFAULT_MAX_RESULTS
from opengrok_mcp.config import ServerConfig
from opengrok_mcp.core import PromptManager
from opengrok_mcp.credentials import CredentialSet
from opengrok_mcp.errors import OpenGrokError
from opengrok_mcp.telemetry import TelemetryManager

COOKIE_ENV = "OPENGROK_COOKIES"

config = ServerConfig()

logging.basicConfig(level=config.log_level)
logger = logging.getLogger(__name__)

telemetry = TelemetryManager(config)
tracer = telemetry.get_tracer("opengrok-mcp")
session_id = str(uuid.uuid4())

prompt_manager = PromptManager()
server = FastMCP("opengrok-mcp")

credentials: Optional[CredentialSet] = (
    CredentialSet(config.base_url, config.cookie_string) if config.use_cookies else None
)
client: AbstractOpenGrokClient = OpenGrokClientFactory.create_client(
    backend=config.backend,
    base_url=config.base_url,
    credentials=credentials,
    username=config.username,
    password=config.password,
    timeout=config.timeout,
    default_project=config.default_project,
    remediation=prompt_manager.render_prompt(
        "errors.authentication_expired", base_url=config.base_url, cookie_env=COOKIE_ENV
    ),
)
logger.info(f"Using {config.backend} OpenGrok backend at {config.base_url}")

_shutdown_requested = False


def signal_handler(sig: int, frame: Any) -> None:
    """Handle termination signals for graceful shutdown."""
    global _shutdown_requested
    logger.info(f"Received signal {sig}, initiating graceful shutdown...")
    _shutdown_requested = True


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def _format_json(value: Any) -> str:
    return json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False)


def _run_tool(name: str, arguments: Dict[str, Any], operation: Callable[[], str]) -> str:
    """Run one tool call inside a span, turning failures into tool errors."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        raise ToolError("Error: Server is shutting down")

    with tracer.start_as_current_span(f"OpenGrokMcp:{name}") as span:
        try:
            text = operation()
        except OpenGrokError as exc:
            logger.warning(f"{name} failed: {exc}")
            raise ToolError(f"Error: {exc}") from exc
        except Exception as exc:
            logger.exception(f"Unexpected error in {name}")
            raise ToolError(f"Error: {exc}") from exc

        telemetry.set_span_attributes(span, arguments, {"output": text}, session_id)
        return text


def opengrok_search(
    query: str,
    project: str,
    search_type: Literal["full", "defs", "refs", "path", "hist"] = "full",
    language: Optional[str] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> str:
    arguments = {
        "query": query,
        "project": project,
        "search_type": search_type,
        "language": language,
        "max_results": max_results,
    }
    logger.info(f"Search query: {query} (project={project}, type={search_type})")
    return _run_tool(
        "opengrok_search",
        arguments,
        lambda: _format_json(client.search(query, project, search_type, language, max_results)),
    )


def opengrok_get_file(path: str, project: Optional[str] = None) -> str:
    return _run_tool(
        "opengrok_get_file",
        {"path": path, "project": project},
        lambda: client.get_file_content(path, project).content,
    )


def opengrok_xref(
    symbol: str,
    project: Optional[str] = None,
    kind: Literal["definition", "reference"] = "definition",
) -> str:
    return _run_tool(
        "opengrok_xref",
        {"symbol": symbol, "project": project, "kind": kind},
        lambda: _format_json(client.cross_references(symbol, project, kind)),
    )


def opengrok_list_projects() -> str:
    return _run_tool("opengrok_list_projects", {}, lambda: _format_json(client.list_projects()))


def opengrok_get_annotation(path: str) -> str:
    return _run_tool(
        "opengrok_get_annotation", {"path": path}, lambda: _format_json(client.get_annotation(path))
    )


def opengrok_get_directory_listing(path: str) -> str:
    return _run_tool(
        "opengrok_get_directory_listing",
        {"path": path},
        lambda: _format_json(client.get_directory_listing(path)),
    )


def opengrok_get_history(
    path: str,
    with_files: Optional[bool] = None,
    start: Optional[int] = None,
    max_entries: Optional[int] = None,
) -> str:
    return _run_tool(
        "opengrok_get_history",
        {"path": path, "with_files": with_files, "start": start, "max_entries": max_entries},
        lambda: _format_json(client.get_history(path, with_files, start, max_entries)),
    )


def opengrok_get_file_definitions(path: str) -> str:
    return _run_tool(
        "opengrok_get_file_definitions",
        {"path": path},
        lambda: _format_json(client.get_file_definitions(path)),
    )


def opengrok_get_file_genre(path: str) -> str:
    return _run_tool("opengrok_get_file_genre", {"path": path}, lambda: client.get_file_genre(path))


def opengrok_ping() -> str:
    def ping() -> str:
        alive = client.ping()
        return f"OpenGrok server is {'alive' if alive else 'not responding'}"

    return _run_tool("opengrok_ping", {}, ping)


def opengrok_get_indexed_projects() -> str:
    return _run_tool(
        "opengrok_get_indexed_projects", {}, lambda: _format_json(client.get_indexed_projects())
    )


def opengrok_get_project_repositories(project: str) -> str:
    return _run_tool(
        "opengrok_get_project_repositories",
        {"project": project},
        lambda: _format_json(client.get_project_repositories(project)),
    )


def opengrok_get_project_repository_types(project: str) -> str:
    return _run_tool(
        "opengrok_get_project_repository_types",
        {"project": project},
        lambda: _format_json(client.get_project_repository_types(project)),
    )


def opengrok_get_project_indexed_files(project: str) -> str:
    return _run_tool(
        "opengrok_get_project_indexed_files",
        {"project": project},
        lambda: _format_json(client.get_project_indexed_files(project)),
    )


def opengrok_get_last_index_time() -> str:
    return _run_tool("opengrok_get_last_index_time", {}, lambda: client.get_last_index_time())


def opengrok_get_version() -> str:
    return _run_tool("opengrok_get_version", {}, lambda: client.get_version())


def opengrok_get_suggestions(
    query: str,
    project: Optional[str] = None,
    field: Literal["defs", "path", "hist", "refs", "type", "full"] = "full",
) -> str:
    return _run_tool(
        "opengrok_get_suggestions",
        {"query": query, "project": project, "field": field},
        lambda: _format_json(client.get_suggestions(query, project, field)),
    )


TOOLS = [
    opengrok_search,
    opengrok_get_file,
    opengrok_xref,
    opengrok_list_projects,
    opengrok_get_annotation,
    opengrok_get_directory_listing,
    opengrok_get_history,
    opengrok_get_file_definitions,
    opengrok_get_file_genre,
    opengrok_ping,
    opengrok_get_indexed_projects,
    opengrok_get_project_repositories,
    opengrok_get_project_repository_types,
    opengrok_get_project_indexed_files,
    opengrok_get_last_index_time,
    opengrok_get_version,
    opengrok_get_suggestions,
]


def _register_tools() -> None:
    """Register MCP tools with the server, descriptions come from prompts.yaml."""
    for tool in TOOLS:
        server.tool(name=tool.__name__, description=prompt_manager.tool_description(tool.__name__))(tool)
    logger.info(f"Registered {len(TOOLS)} tools")


_register_tools()


def _check_authentication() -> None:
    """Tell the user how to provide cookies when the upstream rejects us."""
    if not config.use_cookies:
        logger.info("Using basic authentication")
        return

    logger.info("Using OAuth/SSO cookie authentication")
    if client.is_authenticated():
        logger.info("Successfully authenticated with OpenGrok")
    elif not config.cookie_string:
        logger.warning(
            prompt_manager.render_prompt(
                "guides.not_authenticated", base_url=config.base_url, cookie_env=COOKIE_ENV
            )
        )
    else:
        logger.warning(f"OpenGrok did not accept the configured cookies ({len(credentials)} loaded)")
        logger.warning(client.normalizer.remediation)


async def _run_server() -> None:
    """Run the FastMCP server on stdio, or on both HTTP and SSE transports."""
    if config.transport == "stdio":
        await server.run_stdio_async()
        return

    tasks = [
        server.run_http_async(
            transport="streamable-http",
            host=config.host,
            path="/opengrok/mcp",
            port=config.streamable_http_port,
        ),
        server.run_http_async(transport="sse", host=config.host, path="/opengrok/sse", port=config.sse_port),
    ]
    await asyncio.gather(*tasks)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    _check_authentication()
    if config.default_project:
        logger.info(f"Default project: {config.default_project}")

    try:
        logger.info(f"Starting OpenGrok MCP server ({config.transport})...")
        asyncio.run(_run_server())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt (CTRL+C)")
    except Exception as exc:
        logger.error(f"Server error: {exc}")
        raise
    finally:
        logger.info("Server has shut down.")


if __name__ == "__main__":
    main()
