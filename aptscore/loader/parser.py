"""YAML/JSON document parser with line number tracking."""

import json
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError

from aptscore.core.exceptions import ParseError

JSON_SUFFIXES = {".json"}


class DocumentParser:
    """Parse scoring documents from YAML or JSON.

    YAML is parsed with ruamel.yaml in round-trip mode so that mappings and
    sequences keep their source line numbers (see ``line_of``).
    """

    def __init__(self) -> None:
        self.yaml = YAML()
        self.yaml.preserve_quotes = True

    def parse_file(self, file_path: str | Path) -> Any:
        """Parse a document file, choosing JSON or YAML by extension.

        Raises:
            ParseError: If the file is missing, empty or malformed.
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ParseError(f"File not found: {file_path}")

        content = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() in JSON_SUFFIXES:
            return self.parse_json(content, file_path=str(file_path))
        return self.parse_yaml(content, file_path=str(file_path))

    def parse_yaml(self, content: str, file_path: str | None = None) -> Any:
        """Parse YAML content.

        Raises:
            ParseError: If parsing fails or the content is empty.
        """
        try:
            data = self.yaml.load(content)
        except MarkedYAMLError as e:
            line = e.problem_mark.line + 1 if e.problem_mark else None
            raise ParseError(
                f"YAML parsing error: {e.problem}", line=line, file_path=file_path
            ) from e

        if data is None:
            raise ParseError("Empty document", file_path=file_path)
        return data

    def parse_json(self, content: str, file_path: str | None = None) -> Any:
        """Parse JSON content.

        Raises:
            ParseError: If parsing fails or the content is empty.
        """
        if not content.strip():
            raise ParseError("Empty document", file_path=file_path)
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"JSON parsing error: {e.msg}", line=e.lineno, file_path=file_path
            ) from e


def line_of(node: Any, key: Any = None) -> int | None:
    """Return the 1-based source line of a parsed node, or of one of its keys.

    Only ruamel.yaml round-trip nodes carry positions; plain JSON data
    returns None.
    """
    lc = getattr(node, "lc", None)
    if lc is None:
        return None
    if key is not None:
        try:
            return lc.key(key)[0] + 1
        except (KeyError, IndexError, TypeError):
            return None
    return lc.line + 1


def to_plain(data: Any) -> Any:
    """Convert ruamel.yaml containers and scalars into plain Python values."""
    if isinstance(data, dict):
        return {str(k): to_plain(v) for k, v in data.items()}
    if isinstance(data, list):
        return [to_plain(item) for item in data]
    if isinstance(data, bool):
        return data
    if isinstance(data, int):
        return int(data)
    if isinstance(data, float):
        return float(data)
    if isinstance(data, str):
        return str(data)
    return data
