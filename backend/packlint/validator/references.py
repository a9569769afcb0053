"""
Reference Validation (Layer 4).

Validates cross-references between components:
- Frontmatter skills/commands/agents lists point to existing components
- /namespace:command links in document bodies resolve to commands or modes
"""

from __future__ import annotations

import re
from difflib import get_close_matches
from typing import Callable, Iterable, List, Optional, Set, Tuple

from ..config import LintConfig
from ..corpus import Corpus
from ..frontmatter import parse_command_id, parse_skill_id, is_identifier
from ..models import Component, ComponentKind
from .issues import LayerResult


# A command token is not part of a URL, path or longer word
COMMAND_REF_PATTERN = re.compile(
    r"(?<![\w/.:-])/([a-z][a-z0-9-]*):([a-z][a-z0-9-]*)(?![\w/:-])"
)
MODE_NAMESPACE = "mode"


def find_command_references(body: str) -> List[Tuple[int, str]]:
    """
    Find /namespace:command tokens in a document body.

    Returns:
        List of (line_offset, command_id), line_offset 0-based within body.
    """
    refs = []
    for offset, line in enumerate(body.split("\n")):
        for match in COMMAND_REF_PATTERN.finditer(line):
            refs.append((offset, f"/{match.group(1)}:{match.group(2)}"))
    return refs


class ReferenceValidator:
    """
    Validates cross-references (Layer 4).

    Checks:
    - REF_BAD_FORMAT: a frontmatter reference is not a well-formed id
    - REF_UNKNOWN_SKILL / REF_UNKNOWN_COMMAND / REF_UNKNOWN_AGENT:
      a frontmatter reference has no matching component
    - REF_BROKEN_LINK: a /namespace:command link in a body has no matching
      command or mode
    """

    def __init__(self, config: Optional[LintConfig] = None):
        self.config = config or LintConfig()

    def validate(self, corpus: Corpus) -> LayerResult:
        result = LayerResult()

        skills = corpus.ids(ComponentKind.SKILL)
        commands = corpus.ids(ComponentKind.COMMAND)
        agents = corpus.ids(ComponentKind.AGENT)
        modes = corpus.ids(ComponentKind.MODE)

        for component in corpus:
            if component.parse_error:
                continue
            self._check_field(
                component, "skills", skills, "REF_UNKNOWN_SKILL", "skill",
                lambda ref: parse_skill_id(ref) is not None, result,
            )
            self._check_field(
                component, "commands", commands, "REF_UNKNOWN_COMMAND", "command",
                lambda ref: parse_command_id(ref) is not None, result,
            )
            if component.kind == ComponentKind.WORKFLOW:
                self._check_field(
                    component, "agents", agents, "REF_UNKNOWN_AGENT", "agent",
                    is_identifier, result,
                )

        if self.config.check_body_references:
            for component in corpus:
                if component.error_code == "FILE_UNREADABLE":
                    continue
                self._check_body(component, commands, modes, result)

        return result

    def _check_field(
        self,
        component: Component,
        field_name: str,
        known: Set[str],
        code: str,
        label: str,
        well_formed: Callable[[str], bool],
        result: LayerResult,
    ) -> None:
        for ref in component.references(field_name):
            if not well_formed(ref):
                result.add_issue(
                    code="REF_BAD_FORMAT",
                    path=component.path,
                    message=f"Malformed {label} reference in '{field_name}': '{ref}'",
                    line=1,
                )
                continue
            if ref not in known:
                result.add_issue(
                    code=code,
                    path=component.path,
                    message=f"Referenced {label} '{ref}' does not exist",
                    line=1,
                    suggestion=_suggest(ref, known),
                )

    def _check_body(
        self,
        component: Component,
        commands: Set[str],
        modes: Set[str],
        result: LayerResult,
    ) -> None:
        for offset, ref in find_command_references(component.body):
            parsed = parse_command_id(ref)
            if parsed is None or parsed.namespace in self.config.ignore_namespaces:
                continue
            if ref in commands:
                continue
            if parsed.namespace == MODE_NAMESPACE and parsed.name in modes:
                continue
            result.add_issue(
                code="REF_BROKEN_LINK",
                path=component.path,
                message=f"Link to '{ref}' does not match any command",
                line=component.body_line + offset,
                suggestion=_suggest(ref, _mode_ids(modes) | commands),
            )


def _mode_ids(modes: Iterable[str]) -> Set[str]:
    return {f"/{MODE_NAMESPACE}:{name}" for name in modes}


def _suggest(ref: str, known: Iterable[str]) -> Optional[str]:
    matches = get_close_matches(ref, sorted(known), n=1, cutoff=0.6)
    return matches[0] if matches else None
