"""Tests for mcp.json registration."""

import json
import logging
import sys
from pathlib import Path

import pytest

from opengrok_mcp.registration import (
    SERVER_NAME,
    get_mcp_config_path,
    main,
    register_server,
    server_entry,
    validate_cookies,
)

COOKIES = "session_cookie=abc; JSESSIONID=xyz"


class TestConfigPath:
    def test_linux(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_mcp_config_path("linux") == tmp_path / ".config" / "Code" / "User" / "mcp.json"

    def test_darwin(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        expected = tmp_path / "Library" / "Application Support" / "Code" / "User" / "mcp.json"
        assert get_mcp_config_path("darwin") == expected

    def test_windows(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APPDATA", str(tmp_path))
        assert get_mcp_config_path("win32") == tmp_path / "Code" / "User" / "mcp.json"


class TestValidateCookies:
    @pytest.mark.parametrize("cookies", ["", "   "])
    def test_empty(self, cookies):
        with pytest.raises(ValueError, match="empty"):
            validate_cookies(cookies)

    def test_session_cookie_required(self):
        with pytest.raises(ValueError, match="JSESSIONID"):
            validate_cookies("session_cookie=abc")

    def test_stripped(self):
        assert validate_cookies(f"  {COOKIES}\n") == COOKIES


class TestRegisterServer:
    def test_server_entry(self):
        entry = server_entry("http://grok/source", COOKIES, command=["opengrok-mcp"])
        assert entry == {
            "command": "opengrok-mcp",
            "args": [],
            "env": {
                "OPENGROK_URL": "http://grok/source",
                "OPENGROK_USE_OAUTH": "true",
                "OPENGROK_COOKIES": COOKIES,
            },
        }

    def test_default_command_runs_module(self):
        entry = server_entry("http://grok/source", COOKIES)
        assert entry["command"] == sys.executable
        assert entry["args"] == ["-m", "opengrok_mcp.server"]

    def test_creates_file(self, tmp_path):
        config_path = tmp_path / "Code" / "User" / "mcp.json"

        register_server("http://grok/source/", COOKIES, config_path)

        data = json.loads(config_path.read_text(encoding="utf-8"))
        assert data["servers"][SERVER_NAME]["env"]["OPENGROK_URL"] == "http://grok/source"

    def test_keeps_other_servers(self, tmp_path):
        config_path = tmp_path / "mcp.json"
        config_path.write_text(
            json.dumps({"servers": {"other": {"command": "other-mcp"}}, "inputs": []}), encoding="utf-8"
        )

        register_server("http://grok/source", COOKIES, config_path)

        data = json.loads(config_path.read_text(encoding="utf-8"))
        assert data["servers"]["other"] == {"command": "other-mcp"}
        assert data["inputs"] == []
        assert SERVER_NAME in data["servers"]

    def test_replaces_unparsable_file(self, tmp_path, caplog):
        config_path = tmp_path / "mcp.json"
        config_path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.ERROR, logger="opengrok_mcp.registration"):
            register_server("http://grok/source", COOKIES, config_path)

        assert "Failed to parse" in caplog.text
        assert list(json.loads(config_path.read_text(encoding="utf-8"))["servers"]) == [SERVER_NAME]

    def test_invalid_cookies_leave_file_untouched(self, tmp_path):
        config_path = tmp_path / "mcp.json"
        with pytest.raises(ValueError):
            register_server("http://grok/source", "nothing", config_path)
        assert not config_path.exists()


class TestMain:
    def test_registers(self, tmp_path, capsys):
        config_path = tmp_path / "mcp.json"

        assert main(["--url", "http://grok/source", "--cookies", COOKIES, "--config", str(config_path)]) == 0

        assert "Registered 'opengrok'" in capsys.readouterr().out
        assert Path(config_path).exists()

    def test_bad_cookies_exit_with_usage_error(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OPENGROK_COOKIES", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "mcp.json")])
        assert exc_info.value.code == 2
