"""
Naming Validation (Layer 3).

Checks that component names and identifiers are well formed and unique:
- Command files in a namespace do not declare the same name
- Command ids do not collide when compared case-insensitively
- Skills in a category and agents do not share a name
- File and directory names form valid kebab-case ids
- Agent names do not repeat a command namespace or skill category
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..corpus import Corpus
from ..frontmatter import is_identifier, normalize_id, parse_command_id, parse_skill_id
from ..models import Component, ComponentKind
from .issues import LayerResult


class NamingValidator:
    """
    Validates component naming (Layer 3).

    Checks:
    - ID_FORMAT: a file or directory name cannot form a valid id
    - NAME_CONFLICT: two components in the same scope declare the same name
    - NAME_AMBIGUOUS: an agent is named like a command namespace (error)
      or a skill category (warning)
    """

    def validate(self, corpus: Corpus) -> LayerResult:
        result = LayerResult()

        for component in corpus:
            self._check_id_format(component, result)

        self._check_command_conflicts(corpus, result)
        self._check_scoped_conflicts(corpus.by_kind(ComponentKind.SKILL), "category", result)
        self._check_scoped_conflicts(corpus.by_kind(ComponentKind.AGENT), None, result)
        self._check_ambiguous_agents(corpus, result)

        return result

    def _check_ambiguous_agents(self, corpus: Corpus, result: LayerResult) -> None:
        """Agent names must not read as a command namespace or skill category."""
        namespaces = corpus.groups(ComponentKind.COMMAND)
        categories = corpus.groups(ComponentKind.SKILL)

        for agent in corpus.by_kind(ComponentKind.AGENT):
            names = {normalize_id(agent.id)}
            declared = self._declared_name(agent)
            if declared is not None:
                names.add(declared)

            for name in sorted(names & namespaces):
                result.add_issue(
                    code="NAME_AMBIGUOUS",
                    path=agent.path,
                    message=f"Agent name '{name}' is also a command namespace",
                )
            for name in sorted(names & categories):
                result.add_issue(
                    code="NAME_AMBIGUOUS",
                    path=agent.path,
                    message=f"Agent name '{name}' is also a skill category",
                    severity="warning",
                )

    def _check_id_format(self, component: Component, result: LayerResult) -> None:
        if component.kind == ComponentKind.COMMAND:
            valid = parse_command_id(component.id) is not None
            expected = "/namespace:command-name"
        elif component.kind in (ComponentKind.SKILL, ComponentKind.WORKFLOW):
            valid = parse_skill_id(component.id) is not None
            expected = "category/name"
        else:
            valid = is_identifier(component.id)
            expected = "kebab-case name"

        if not valid:
            result.add_issue(
                code="ID_FORMAT",
                path=component.path,
                message=f"Id '{component.id}' is not a valid {expected}",
            )

    def _check_command_conflicts(self, corpus: Corpus, result: LayerResult) -> None:
        """Commands conflict by declared name within a namespace, or by normalized id."""
        by_name: Dict[tuple, Component] = {}
        by_id: Dict[str, Component] = {}

        for command in corpus.by_kind(ComponentKind.COMMAND):
            normalized = normalize_id(command.id)
            if normalized in by_id:
                first = by_id[normalized]
                result.add_issue(
                    code="NAME_CONFLICT",
                    path=command.path,
                    message=f"Command id '{command.id}' conflicts with {first.path}",
                )
            else:
                by_id[normalized] = command

            declared = self._declared_name(command)
            if declared is None:
                continue
            key = (command.group, declared)
            if key in by_name:
                first = by_name[key]
                result.add_issue(
                    code="NAME_CONFLICT",
                    path=command.path,
                    message=(
                        f"Name '{declared}' in namespace '{command.group}' "
                        f"is already defined by {first.path}"
                    ),
                )
            else:
                by_name[key] = command

    def _check_scoped_conflicts(
        self,
        components: List[Component],
        scope: Optional[str],
        result: LayerResult,
    ) -> None:
        seen: Dict[tuple, Component] = {}
        for component in components:
            declared = self._declared_name(component)
            if declared is None:
                continue
            key = (component.group, declared)
            if key in seen:
                first = seen[key]
                where = f" in {scope} '{component.group}'" if scope else ""
                result.add_issue(
                    code="NAME_CONFLICT",
                    path=component.path,
                    message=f"Name '{declared}'{where} is already defined by {first.path}",
                )
            else:
                seen[key] = component

    @staticmethod
    def _declared_name(component: Component) -> Optional[str]:
        name = component.frontmatter.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        return normalize_id(name)
