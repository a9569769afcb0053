"""
Registry Sync Validation (Layer 5).

Compares registry.yaml with the components on disk and reports drift:
- Agents and workflows listed in the registry but missing on disk (orphaned)
- Agents on disk but absent from the registry
- Dependency lists that differ from the component's frontmatter
- Skill categories and command namespaces that differ from directories

Example registry.yaml:
    agents:
      planner:
        skills: [methodology/writing-plans]
        commands: [/planning:plan]
    workflows:
      development/feature:
        agents: [planner]
        skills: []
        commands: [/dev:feature]
    skill_categories: [methodology, devops]
    command_namespaces: [dev, planning]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..corpus import Corpus
from ..frontmatter import as_list
from ..models import ComponentKind
from .issues import LayerResult


logger = logging.getLogger(__name__)

STATUS_ALIGNED = "ALIGNED"
STATUS_DRIFT = "DRIFT_DETECTED"


@dataclass
class ListComparison:
    """Difference between an on-disk list and a registry list."""

    missing: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)

    @property
    def match(self) -> bool:
        return not self.missing and not self.extra


def compare_lists(actual: Iterable[str], expected: Iterable[str]) -> ListComparison:
    """
    Compare two lists as sets.

    Args:
        actual: Values found on disk.
        expected: Values listed in the registry.

    Returns:
        ListComparison with values the registry lists but disk lacks
        (missing) and values on disk the registry lacks (extra).
    """
    actual_set = set(actual or [])
    expected_set = set(expected or [])
    return ListComparison(
        missing=sorted(expected_set - actual_set),
        extra=sorted(actual_set - expected_set),
    )


@dataclass
class SyncCounts:
    """Registered vs actual count for one component kind."""

    registered: int = 0
    actual: int = 0
    synced: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"registered": self.registered, "actual": self.actual, "synced": self.synced}


@dataclass
class RegistryResult(LayerResult):
    """Registry layer result with sync counts."""

    registry_found: bool = False
    counts: Dict[str, SyncCounts] = field(default_factory=dict)

    @property
    def status(self) -> str:
        return STATUS_ALIGNED if not self.issues else STATUS_DRIFT

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["registry_found"] = self.registry_found
        data["status"] = self.status
        data["counts"] = {k: v.to_dict() for k, v in self.counts.items()}
        return data

    def summary(self) -> str:
        """Generate a human-readable health report."""
        lines = [
            "Registry Sync Report",
            "=" * 40,
            f"Status: {self.status}",
            "",
        ]
        for name, counts in self.counts.items():
            lines.append(
                f"  {name.capitalize():<18} {counts.registered} registered, "
                f"{counts.actual} actual, {counts.synced} synced"
            )

        if self.issues:
            lines.append("")
            lines.append(f"Issues ({len(self.issues)}):")
            for issue in self.issues:
                lines.append(f"  - {issue}")

        return "\n".join(lines)


class RegistryValidator:
    """
    Validates registry.yaml against the content pack (Layer 5).

    Checks:
    - REGISTRY_INVALID: the registry file cannot be parsed
    - REGISTRY_ORPHANED: registry entry without a component file
    - REGISTRY_MISSING: agent file without a registry entry
    - REGISTRY_MISMATCH: dependency, category or namespace lists differ
    """

    def validate(self, corpus: Corpus, registry_path: Optional[Path] = None) -> RegistryResult:
        """
        Compare the registry with the corpus.

        Args:
            corpus: Loaded content pack.
            registry_path: Registry file (defaults to <root>/registry.yaml).

        Returns:
            RegistryResult. A missing registry yields a valid, empty result.
        """
        result = RegistryResult()
        path = registry_path or corpus.registry_path
        relative = path.name

        if not path.is_file():
            logger.debug("No registry at %s", path)
            return result

        result.registry_found = True
        try:
            with open(path, "r", encoding="utf-8") as f:
                registry = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            result.add_issue("REGISTRY_INVALID", relative, f"Cannot read registry: {e}")
            return result

        if not isinstance(registry, dict):
            result.add_issue("REGISTRY_INVALID", relative, "Registry must be a mapping")
            return result

        self._check_agents(corpus, _mapping(registry.get("agents")), relative, result)
        self._check_workflows(corpus, _mapping(registry.get("workflows")), relative, result)
        self._check_groups(
            "skill_categories", registry.get("skill_categories"),
            corpus.groups(ComponentKind.SKILL), relative, result,
        )
        self._check_groups(
            "command_namespaces", registry.get("command_namespaces"),
            corpus.groups(ComponentKind.COMMAND), relative, result,
        )
        return result

    def _check_agents(
        self,
        corpus: Corpus,
        entries: Dict[str, Any],
        relative: str,
        result: RegistryResult,
    ) -> None:
        counts = SyncCounts(
            registered=len(entries),
            actual=len(corpus.by_kind(ComponentKind.AGENT)),
        )
        result.counts["agents"] = counts

        for name, data in entries.items():
            agent = corpus.get(ComponentKind.AGENT, name)
            if agent is None:
                result.add_issue(
                    "REGISTRY_ORPHANED", relative,
                    f"Agent '{name}' in registry but file not found",
                )
                continue

            data = _mapping(data)
            synced = True
            for field_name in ("skills", "commands"):
                comparison = compare_lists(agent.references(field_name), as_list(data.get(field_name)))
                if not comparison.match:
                    synced = False
                    _add_mismatch(result, agent.path, f"Agent '{name}' {field_name}", comparison)
            if synced:
                counts.synced += 1

        for agent in corpus.by_kind(ComponentKind.AGENT):
            if agent.id not in entries:
                result.add_issue(
                    "REGISTRY_MISSING", agent.path,
                    f"Agent '{agent.id}' exists but is not in registry",
                    severity="warning",
                )

    def _check_workflows(
        self,
        corpus: Corpus,
        entries: Dict[str, Any],
        relative: str,
        result: RegistryResult,
    ) -> None:
        counts = SyncCounts(
            registered=len(entries),
            actual=len(corpus.by_kind(ComponentKind.WORKFLOW)),
        )
        result.counts["workflows"] = counts

        # Registering every workflow is not required
        for name, data in entries.items():
            workflow = corpus.get(ComponentKind.WORKFLOW, name)
            if workflow is None:
                result.add_issue(
                    "REGISTRY_ORPHANED", relative,
                    f"Workflow '{name}' in registry but file not found",
                )
                continue

            data = _mapping(data)
            synced = True
            for field_name in ("agents", "skills", "commands"):
                comparison = compare_lists(workflow.references(field_name), as_list(data.get(field_name)))
                if not comparison.match:
                    synced = False
                    _add_mismatch(result, workflow.path, f"Workflow '{name}' {field_name}", comparison)
            if synced:
                counts.synced += 1

    def _check_groups(
        self,
        key: str,
        registered: Any,
        actual: Iterable[str],
        relative: str,
        result: RegistryResult,
    ) -> None:
        if registered is None:
            return
        registered_list = as_list(registered)
        comparison = compare_lists(actual, registered_list)
        result.counts[key] = SyncCounts(
            registered=len(registered_list),
            actual=len(set(actual)),
            synced=len(set(registered_list) & set(actual)),
        )
        if not comparison.match:
            _add_mismatch(result, relative, key, comparison)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _add_mismatch(result: RegistryResult, path: str, subject: str, comparison: ListComparison) -> None:
    details = []
    if comparison.missing:
        details.append(f"missing on disk: {', '.join(comparison.missing)}")
    if comparison.extra:
        details.append(f"not in registry: {', '.join(comparison.extra)}")
    result.add_issue(
        "REGISTRY_MISMATCH", path,
        f"{subject} differ from registry ({'; '.join(details)})",
        severity="warning",
    )
