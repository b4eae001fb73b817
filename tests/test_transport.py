"""Tests for the HTTP transports."""

from unittest.mock import MagicMock

import pytest
import requests

from opengrok_mcp.backends.transport import (
    DEFAULT_TIMEOUT,
    MAX_REDIRECTS,
    HtmlTransport,
    RestTransport,
)
from opengrok_mcp.errors import UpstreamUnavailableError

BASE_URL = "http://opengrok.example.com/source"


class TestRoots:
    def test_html_root_is_base_url(self):
        transport = HtmlTransport(f"{BASE_URL}/")
        assert transport.root == BASE_URL
        assert transport.url("/search") == f"{BASE_URL}/search"

    def test_rest_root_has_api_prefix(self):
        transport = RestTransport(BASE_URL)
        assert transport.root == f"{BASE_URL}/api/v1"
        assert transport.url("/projects") == f"{BASE_URL}/api/v1/projects"


class TestSession:
    def test_html_sends_browser_headers(self):
        headers = HtmlTransport(BASE_URL).session.headers
        assert headers["Accept"].startswith("text/html")
        assert "Mozilla/5.0" in headers["User-Agent"]

    def test_rest_sends_json_headers(self):
        headers = RestTransport(BASE_URL).session.headers
        assert headers["Accept"] == "application/json"
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"] == "Mozilla/5.0 (compatible; OpenGrokMCP/1.0)"

    def test_redirect_limit(self):
        assert HtmlTransport(BASE_URL).session.max_redirects == MAX_REDIRECTS

    def test_sessions_are_not_shared_between_transports(self):
        assert HtmlTransport(BASE_URL).session is not HtmlTransport(BASE_URL).session

    def test_injected_session_is_used(self):
        session = requests.Session()
        assert RestTransport(BASE_URL, session=session).session is session


class TestRequest:
    def test_default_timeout_is_applied(self, make_response):
        transport = RestTransport(BASE_URL)
        transport.session.request = MagicMock(return_value=make_response(200, json_body=[]))

        transport.get("/projects", params={"a": "1"})

        transport.session.request.assert_called_once_with(
            "GET", f"{BASE_URL}/api/v1/projects", params={"a": "1"}, timeout=DEFAULT_TIMEOUT
        )

    def test_custom_timeout(self, make_response):
        transport = HtmlTransport(BASE_URL, timeout=5)
        transport.session.request = MagicMock(return_value=make_response(200))

        transport.get("/")

        assert transport.session.request.call_args.kwargs["timeout"] == 5

    @pytest.mark.parametrize("status", [404, 500, 401])
    def test_error_statuses_are_returned(self, make_response, status):
        transport = HtmlTransport(BASE_URL)
        transport.session.request = MagicMock(return_value=make_response(status))

        assert transport.get("/").status_code == status

    @pytest.mark.parametrize(
        "verb,method",
        [("get", "GET"), ("post", "POST"), ("put", "PUT"), ("delete", "DELETE")],
    )
    def test_verbs(self, make_response, verb, method):
        transport = RestTransport(BASE_URL)
        transport.session.request = MagicMock(return_value=make_response(204))

        getattr(transport, verb)("/messages")

        assert transport.session.request.call_args.args == (method, f"{BASE_URL}/api/v1/messages")

    def test_connection_error_is_unavailable(self):
        transport = HtmlTransport(BASE_URL)
        transport.session.request = MagicMock(side_effect=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(UpstreamUnavailableError, match="Cannot reach OpenGrok"):
            transport.get("/search")

    def test_timeout_is_unavailable(self):
        transport = RestTransport(BASE_URL, timeout=2)
        transport.session.request = MagicMock(side_effect=requests.exceptions.ReadTimeout("slow"))

        with pytest.raises(UpstreamUnavailableError, match="did not answer within 2s"):
            transport.get("/search")

    def test_redirect_loop_is_unavailable(self):
        transport = HtmlTransport(BASE_URL)
        transport.session.request = MagicMock(side_effect=requests.exceptions.TooManyRedirects("loop"))

        with pytest.raises(UpstreamUnavailableError):
            transport.get("/")
