"""
Frontmatter Parsing.

Splits Markdown documents into their YAML frontmatter block and body, and
parses component identifiers used across a content pack:
- Commands: /namespace:command-name
- Skills and workflows: category/skill-name
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml


IDENTIFIER_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


class FrontmatterError(ValueError):
    """Raised when a document's frontmatter is missing or cannot be parsed."""

    def __init__(self, message: str, code: str = "FM_INVALID_YAML"):
        super().__init__(message)
        self.code = code


@dataclass
class ParsedDocument:
    """A Markdown document split into frontmatter data and body."""

    data: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    body_line: int = 1


@dataclass(frozen=True)
class CommandId:
    """Parsed command identifier."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return command_id(self.namespace, self.name)


@dataclass(frozen=True)
class SkillId:
    """Parsed skill (or workflow) identifier."""

    category: str
    name: str

    def __str__(self) -> str:
        return skill_id(self.category, self.name)


def split_frontmatter(content: str) -> Optional[Tuple[str, str, int]]:
    """
    Split content into raw frontmatter, body and body start line.

    The block must open on the first line with ``---`` and close on a line
    that is exactly ``---``.

    Args:
        content: Markdown document text.

    Returns:
        (frontmatter, body, body_line) or None if there is no block.
    """
    if not isinstance(content, str):
        return None

    text = content.replace("\r\n", "\n")
    lines = text.split("\n")
    if not lines or lines[0] != "---":
        return None

    for index in range(1, len(lines)):
        if lines[index] == "---":
            frontmatter = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1:])
            return frontmatter, body, index + 2

    return None


def parse_frontmatter(content: str) -> ParsedDocument:
    """
    Parse a Markdown document's frontmatter with the safe YAML loader.

    Args:
        content: Markdown document text.

    Returns:
        ParsedDocument with the frontmatter mapping and the body.

    Raises:
        FrontmatterError: If the block is missing, invalid YAML, or not a mapping.
    """
    parts = split_frontmatter(content)
    if parts is None:
        raise FrontmatterError("Missing frontmatter block (--- ... ---)", code="FM_MISSING")

    raw, body, body_line = parts
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        raise FrontmatterError(f"YAML parse error: {e}") from e

    # A block holding only comments loads as None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )

    return ParsedDocument(data=data, body=body, body_line=body_line)


def load_frontmatter(content: str) -> Optional[Dict[str, Any]]:
    """Lenient variant of parse_frontmatter: returns None instead of raising."""
    try:
        return parse_frontmatter(content).data
    except FrontmatterError:
        return None


def as_list(value: Any) -> List[str]:
    """
    Normalize a frontmatter reference field to a list of strings.

    Scalars are split on commas; None becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(value)]


def is_identifier(value: str) -> bool:
    """Check a single kebab-case identifier segment."""
    return isinstance(value, str) and bool(IDENTIFIER_PATTERN.match(value))


def normalize_id(value: Any) -> Optional[str]:
    """Normalize an identifier for comparison (trim, lowercase)."""
    if not value or not isinstance(value, str):
        return None
    return value.strip().lower()


def command_id(namespace: str, name: str) -> str:
    return f"/{namespace}:{name}"


def skill_id(category: str, name: str) -> str:
    return f"{category}/{name}"


def parse_command_id(value: Any) -> Optional[CommandId]:
    """
    Parse a command identifier of the form /namespace:command-name.

    Returns:
        CommandId, or None if the value is not a well-formed command id.
    """
    if not value or not isinstance(value, str):
        return None
    if not value.startswith("/") or value.count(":") != 1:
        return None

    namespace, name = value[1:].split(":")
    if not is_identifier(namespace) or not is_identifier(name):
        return None
    return CommandId(namespace=namespace, name=name)


def parse_skill_id(value: Any) -> Optional[SkillId]:
    """
    Parse a skill identifier of the form category/skill-name.

    Returns:
        SkillId, or None if the value is not a well-formed skill id.
    """
    if not value or not isinstance(value, str):
        return None
    if value.startswith("/") or value.count("/") != 1 or ".." in value:
        return None

    category, name = value.split("/")
    if not is_identifier(category) or not is_identifier(name):
        return None
    return SkillId(category=category, name=name)
