"""Register the OpenGrok MCP server in the editor's mcp.json.

Usage:
    opengrok-mcp-register --url http://opengrok.example.com/source --cookies "JSESSIONID=..."
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SERVER_NAME = "opengrok"
DEFAULT_URL = "http://localhost:8080/source"


def get_mcp_config_path(platform: str = sys.platform) -> Path:
    """Location of the editor's user-level mcp.json for the given platform."""
    home = Path(os.environ.get("HOME") or os.environ.get("USERPROFILE") or Path.home())
    if platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "Code" / "User" / "mcp.json"
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Code" / "User" / "mcp.json"
    return home / ".config" / "Code" / "User" / "mcp.json"


def validate_cookies(cookies: str) -> str:
    """Reject cookie strings that cannot carry an OpenGrok session."""
    if not cookies or not cookies.strip():
        raise ValueError("Cookies cannot be empty")
    if "JSESSIONID" not in cookies:
        raise ValueError("Cookies must include JSESSIONID")
    return cookies.strip()


def server_entry(url: str, cookies: str, command: Optional[List[str]] = None) -> Dict[str, Any]:
    """mcp.json entry starting this server with the given upstream and cookies."""
    command = command or [sys.executable, "-m", "opengrok_mcp.server"]
    return {
        "command": command[0],
        "args": command[1:],
        "env": {
            "OPENGROK_URL": url,
            "OPENGROK_USE_OAUTH": "true",
            "OPENGROK_COOKIES": cookies,
        },
    }


def register_server(url: str, cookies: str, config_path: Optional[Path] = None) -> Path:
    """Write or update the OpenGrok server entry, keeping other servers.

    Returns:
        Path of the written file
    """
    cookies = validate_cookies(cookies)
    config_path = Path(config_path) if config_path else get_mcp_config_path()

    mcp_config: Dict[str, Any] = {"servers": {}}
    if config_path.exists():
        try:
            mcp_config = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.error(f"Failed to parse {config_path}, starting a new one: {exc}")
        if not isinstance(mcp_config, dict):
            mcp_config = {"servers": {}}

    servers = mcp_config.setdefault("servers", {})
    servers[SERVER_NAME] = server_entry(url.rstrip("/"), cookies)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(mcp_config, indent=2), encoding="utf-8")
    logger.info(f"MCP configuration updated: {config_path}")
    return config_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Register the OpenGrok MCP server in mcp.json")
    parser.add_argument("--url", default=os.getenv("OPENGROK_URL", DEFAULT_URL), help="OpenGrok base URL")
    parser.add_argument(
        "--cookies",
        default=os.getenv("OPENGROK_COOKIES", ""),
        help="Session cookie string, e.g. 'session_cookie=...; JSESSIONID=...'",
    )
    parser.add_argument("--config", type=Path, default=None, help="mcp.json to update")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        path = register_server(args.url, args.cookies, args.config)
    except ValueError as exc:
        parser.error(str(exc))
    print(f"Registered '{SERVER_NAME}' in {path}. Restart the editor to apply changes.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
