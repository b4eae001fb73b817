"""Shared fixtures: canned requests.Response objects and mocked transports."""

import json
from unittest.mock import MagicMock

import pytest
import requests

BASE_URL = "http://opengrok.example.com/source"


def _build_response(status=200, text="", json_body=None, headers=None, url=BASE_URL):
    response = requests.Response()
    response.status_code = status
    response.url = url
    if json_body is not None:
        body = json.dumps(json_body)
        response.headers["Content-Type"] = "application/json"
    else:
        body = text
        response.headers["Content-Type"] = "text/html; charset=utf-8"
    response.headers.update(headers or {})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response():
    """Factory for requests.Response objects with a given status and body."""
    return _build_response


@pytest.fixture
def transport():
    """Transport double; configure .get/.post/.put/.delete per test."""
    return MagicMock()
