from pathlib import Path
from typing import Any, Dict, Optional, Union

import jinja2
import yaml

DEFAULT_PROMPTS_PATH = Path(__file__).parent.parent / "prompts" / "prompts.yaml"
TOOL_PREFIX = "opengrok_"


class PromptManager:
    """Tool descriptions and user-facing guides kept in a YAML file.

    Keys use dot notation (``tools.search``, ``errors.authentication_expired``).
    Text values are Jinja2 templates; rendering fails on undefined variables so
    a guide never reaches the user with a blank URL in it.
    """

    def __init__(
        self, file_path: Union[str, Path] = DEFAULT_PROMPTS_PATH, section_path: Optional[str] = None
    ) -> None:
        """Load the prompts file.

        Args:
            file_path: YAML file holding tool descriptions and guides
            section_path: Optional dot-notation key of the section to use as root

        Raises:
            FileNotFoundError: If the prompt file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
            ValueError: If the section is not found
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Prompt file not found: {file_path}")

        try:
            data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {file_path}: {e}")

        self._prompt_data = self._lookup(data, section_path) if section_path else data
        self._env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
        self._templates: Dict[str, jinja2.Template] = {}

    @staticmethod
    def _lookup(data: Any, key: str) -> Any:
        node = data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                raise ValueError(f"Path '{key}' not found in prompts data")
            node = node[part]
        return node

    def load_prompt(self, prompt_name: str) -> Union[str, Dict[str, Any]]:
        """Return the raw value stored under ``prompt_name``.

        Raises:
            ValueError: If the prompt is not found
        """
        try:
            value = self._lookup(self._prompt_data, prompt_name)
        except ValueError as e:
            raise ValueError(f"Prompt '{prompt_name}' not found: {e}")
        return dict(value) if isinstance(value, dict) else value

    def _text(self, prompt_name: str) -> str:
        value = self.load_prompt(prompt_name)
        if not isinstance(value, str):
            raise ValueError(f"Prompt '{prompt_name}' is not a string")
        return value

    def tool_description(self, tool_name: str) -> str:
        """Description of an MCP tool, keyed by its name without the ``opengrok_`` prefix."""
        try:
            return self._text(f"tools.{tool_name.removeprefix(TOOL_PREFIX)}").strip()
        except ValueError as e:
            raise ValueError(f"Tool description for '{tool_name}' is not usable: {e}")

    def render_prompt(self, prompt_name: str, **prompt_args) -> str:
        """Render the template stored under ``prompt_name``.

        Raises:
            ValueError: If the prompt is missing or not text
            jinja2.TemplateError: If rendering fails, including undefined variables
        """
        source = self._text(prompt_name)
        if prompt_name not in self._templates:
            self._templates[prompt_name] = self._env.from_string(source)
        return self._templates[prompt_name].render(**prompt_args).strip()
