"""Frontmatter parsing for skill and command markdown files."""

from dataclasses import dataclass
from typing import Any

import yaml

DELIMITER = "---"


class FrontmatterError(ValueError):
    """Raised when a frontmatter block is present but not a YAML mapping."""


@dataclass
class ParsedDocument:
    """A markdown file split into its metadata block and body."""

    metadata: dict[str, Any] | None = None
    body: str = ""

    @property
    def has_frontmatter(self) -> bool:
        return self.metadata is not None

    def get_str(self, key: str) -> str:
        """String value for *key*, or '' when absent or null."""
        if not self.metadata:
            return ""
        value = self.metadata.get(key)
        if value is None:
            return ""
        return str(value).strip()


def parse_document(content: str) -> ParsedDocument:
    """Split *content* into frontmatter and body.

    Frontmatter is recognised only when the very first line is '---'. An
    unterminated block takes the rest of the file as metadata.

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping.
    """
    lines = content.splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        return ParsedDocument(body=content)

    meta_lines: list[str] = []
    body_start = len(lines)
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == DELIMITER:
            body_start = i + 1
            break
        meta_lines.append(line)

    try:
        data = yaml.safe_load("\n".join(meta_lines))
    except yaml.YAMLError as e:
        msg = f"invalid frontmatter YAML: {e}"
        raise FrontmatterError(msg) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = "frontmatter must be a mapping of keys to values"
        raise FrontmatterError(msg)

    return ParsedDocument(metadata=data, body="\n".join(lines[body_start:]))


def parse_allowed_tools(value: Any) -> list[str]:
    """Normalise the allowed-tools field.

    Accepts 'Read, Write' or a YAML list; blanks are dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, list):
        parts = [str(item) for item in value]
    else:
        parts = [str(value)]
    return [part.strip() for part in parts if part.strip()]
