"""Tests for the MCP tool functions."""

import json
from unittest.mock import MagicMock

import pytest
from fastmcp.exceptions import ToolError

import opengrok_mcp.server as server_module
from opengrok_mcp.backends.client import HtmlOpenGrokClient
from opengrok_mcp.backends.models import (
    CrossReference,
    FileContent,
    HistoryEntry,
    HistoryResponse,
    SearchHit,
)
from opengrok_mcp.backends.normalizer import HtmlResultNormalizer
from opengrok_mcp.errors import (
    AuthenticationExpiredError,
    UnsupportedOperationError,
    UpstreamUnavailableError,
)


@pytest.fixture
def client(monkeypatch):
    mock_client = MagicMock()
    monkeypatch.setattr(server_module, "client", mock_client)
    return mock_client


class TestToolOutput:
    def test_search_returns_json_hits(self, client):
        client.search.return_value = [SearchHit("kernel/main.c", 12, "int <b>main</b>", "kernel")]

        result = json.loads(server_module.opengrok_search("main", "kernel", search_type="defs"))

        client.search.assert_called_once_with("main", "kernel", "defs", None, 50)
        assert result == [
            {"file_path": "kernel/main.c", "line_number": 12, "snippet": "int <b>main</b>", "project_name": "kernel"}
        ]

    def test_get_file_returns_raw_content(self, client):
        client.get_file_content.return_value = FileContent(path="main.c", content="int main() {}", project="kernel")
        assert server_module.opengrok_get_file("main.c", "kernel") == "int main() {}"

    def test_xref(self, client):
        client.cross_references.return_value = [CrossReference("main", "kernel/main.c", 12, "definition")]

        result = json.loads(server_module.opengrok_xref("main"))

        client.cross_references.assert_called_once_with("main", None, "definition")
        assert result[0]["kind"] == "definition"

    def test_models_are_serialized(self, client):
        client.get_history.return_value = HistoryResponse(
            entries=[HistoryEntry(revision="abc", author="dev", message="fix")], count=1, total=1
        )

        result = json.loads(server_module.opengrok_get_history("/kernel/main.c", max_entries=1))

        assert result["entries"][0]["revision"] == "abc"
        assert result["total"] == 1

    def test_list_projects(self, client):
        client.list_projects.return_value = ["kernel", "userland"]
        assert json.loads(server_module.opengrok_list_projects()) == ["kernel", "userland"]

    def test_plain_text_tools(self, client):
        client.get_version.return_value = "1.13.9"
        client.get_file_genre.return_value = "PLAIN"
        assert server_module.opengrok_get_version() == "1.13.9"
        assert server_module.opengrok_get_file_genre("/kernel/main.c") == "PLAIN"

    @pytest.mark.parametrize("alive,text", [(True, "alive"), (False, "not responding")])
    def test_ping(self, client, alive, text):
        client.ping.return_value = alive
        assert server_module.opengrok_ping() == f"OpenGrok server is {text}"


class TestToolErrors:
    def test_authentication_failure_includes_remediation(self, client):
        client.search.side_effect = AuthenticationExpiredError(
            "Authentication failed (401).", status_code=401, remediation="Update OPENGROK_COOKIES"
        )

        with pytest.raises(ToolError) as exc_info:
            server_module.opengrok_search("main", "kernel")

        message = str(exc_info.value)
        assert message.startswith("Error: Authentication failed (401).")
        assert "Update OPENGROK_COOKIES" in message

    def test_unsupported_operation(self, client):
        client.get_annotation.side_effect = UnsupportedOperationError("get_annotation is not available")
        with pytest.raises(ToolError, match="not available"):
            server_module.opengrok_get_annotation("/kernel/main.c")

    def test_unexpected_exception(self, client):
        client.list_projects.side_effect = RuntimeError("kaboom")
        with pytest.raises(ToolError, match="Error: kaboom"):
            server_module.opengrok_list_projects()

    def test_shutdown_declines_calls(self, client, monkeypatch):
        monkeypatch.setattr(server_module, "_shutdown_requested", True)
        with pytest.raises(ToolError, match="shutting down"):
            server_module.opengrok_list_projects()
        client.list_projects.assert_not_called()

    def test_missing_project_never_reaches_upstream(self, monkeypatch):
        transport = MagicMock()
        monkeypatch.setattr(server_module, "client", HtmlOpenGrokClient(transport, HtmlResultNormalizer()))

        with pytest.raises(ToolError, match="opengrok_list_projects"):
            server_module.opengrok_search("main", "")

        transport.get.assert_not_called()

    def test_unreachable_upstream(self, client):
        client.get_indexed_projects.side_effect = UpstreamUnavailableError("Cannot reach OpenGrok")
        with pytest.raises(ToolError, match="Cannot reach OpenGrok"):
            server_module.opengrok_get_indexed_projects()


class TestRegistration:
    def test_every_tool_has_a_description(self):
        for tool in server_module.TOOLS:
            assert server_module.prompt_manager.tool_description(tool.__name__)

    def test_tool_names(self):
        names = [tool.__name__ for tool in server_module.TOOLS]
        assert len(names) == 17
        assert len(set(names)) == 17
        assert all(name.startswith("opengrok_") for name in names)
