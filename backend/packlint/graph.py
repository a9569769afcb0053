"""
Dependency Graph.

Builds a bi-directional dependency graph from component frontmatter:
- depends_on: what a component uses (forward references)
- used_by: what uses a component (reverse references)

Edges:
- agent -> skills, commands
- workflow -> agents, skills, commands
- skill -> commands
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .corpus import Corpus
from .models import Component, ComponentKind


# Target kind for each reference field
FIELD_KINDS = {
    "agents": ComponentKind.AGENT,
    "skills": ComponentKind.SKILL,
    "commands": ComponentKind.COMMAND,
}


@dataclass
class GraphNode:
    """A component with its forward and reverse references."""

    kind: ComponentKind
    id: str
    path: str
    description: str = ""
    depends_on: Dict[str, List[str]] = field(default_factory=dict)
    used_by: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_component(cls, component: Component) -> "GraphNode":
        return cls(
            kind=component.kind,
            id=component.id,
            path=component.path,
            description=component.description,
            depends_on=component.depends_on,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "description": self.description,
            "depends_on": self.depends_on,
            "used_by": self.used_by,
        }


@dataclass
class GraphStats:
    """Component and reference counts."""

    agents: int = 0
    workflows: int = 0
    skills: int = 0
    commands: int = 0
    modes: int = 0
    total_skill_refs: int = 0
    total_command_refs: int = 0
    total_agent_refs: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "agents": self.agents,
            "workflows": self.workflows,
            "skills": self.skills,
            "commands": self.commands,
            "modes": self.modes,
            "total_skill_refs": self.total_skill_refs,
            "total_command_refs": self.total_command_refs,
            "total_agent_refs": self.total_agent_refs,
        }

    def summary(self) -> str:
        return "\n".join([
            "Dependency Graph Statistics",
            "=" * 27,
            f"Agents:     {self.agents}",
            f"Workflows:  {self.workflows}",
            f"Skills:     {self.skills}",
            f"Commands:   {self.commands}",
            f"Modes:      {self.modes}",
            f"Skill Refs: {self.total_skill_refs}",
            f"Cmd Refs:   {self.total_command_refs}",
            f"Agent Refs: {self.total_agent_refs}",
        ])


@dataclass
class DependencyGraph:
    """Graph nodes by kind and id, plus statistics."""

    nodes: Dict[ComponentKind, Dict[str, GraphNode]] = field(
        default_factory=lambda: {kind: {} for kind in ComponentKind}
    )
    stats: GraphStats = field(default_factory=GraphStats)

    def get(self, kind: ComponentKind, component_id: str) -> Optional[GraphNode]:
        return self.nodes[kind].get(component_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "graph": {
                kind.plural: {node_id: node.to_dict() for node_id, node in nodes.items()}
                for kind, nodes in self.nodes.items()
                if kind != ComponentKind.MODE
            },
        }


def _empty_used_by(kind: ComponentKind) -> Dict[str, List[str]]:
    if kind == ComponentKind.AGENT:
        return {"workflows": []}
    if kind == ComponentKind.SKILL:
        return {"agents": [], "workflows": []}
    if kind == ComponentKind.COMMAND:
        return {"agents": [], "skills": [], "workflows": []}
    return {}


def build_dependency_graph(corpus: Corpus) -> DependencyGraph:
    """
    Build the dependency graph for a corpus.

    Reverse references are only recorded for targets that exist.

    Args:
        corpus: Loaded content pack.

    Returns:
        DependencyGraph with nodes and statistics.
    """
    graph = DependencyGraph()

    for component in corpus:
        node = GraphNode.from_component(component)
        node.used_by = _empty_used_by(component.kind)
        graph.nodes[component.kind][component.id] = node

    for kind in (ComponentKind.AGENT, ComponentKind.WORKFLOW, ComponentKind.SKILL):
        for source_id, source in graph.nodes[kind].items():
            for field_name, target_kind in FIELD_KINDS.items():
                for target_id in source.depends_on.get(field_name, []):
                    target = graph.nodes[target_kind].get(target_id)
                    if target is None:
                        continue
                    users = target.used_by.setdefault(kind.plural, [])
                    if source_id not in users:
                        users.append(source_id)

    agents = graph.nodes[ComponentKind.AGENT].values()
    workflows = graph.nodes[ComponentKind.WORKFLOW].values()
    graph.stats = GraphStats(
        agents=len(graph.nodes[ComponentKind.AGENT]),
        workflows=len(graph.nodes[ComponentKind.WORKFLOW]),
        skills=len(graph.nodes[ComponentKind.SKILL]),
        commands=len(graph.nodes[ComponentKind.COMMAND]),
        modes=len(graph.nodes[ComponentKind.MODE]),
        total_skill_refs=(
            sum(len(a.depends_on.get("skills", [])) for a in agents)
            + sum(len(w.depends_on.get("skills", [])) for w in workflows)
        ),
        total_command_refs=(
            sum(len(a.depends_on.get("commands", [])) for a in agents)
            + sum(len(w.depends_on.get("commands", [])) for w in workflows)
        ),
        total_agent_refs=sum(len(w.depends_on.get("agents", [])) for w in workflows),
    )
    return graph


def _branch(items: List[str], indent: str = "   ") -> List[str]:
    lines = []
    for index, item in enumerate(items):
        prefix = "`--" if index == len(items) - 1 else "|--"
        lines.append(f"{indent}{prefix} {item}")
    return lines


def _shorten(text: str, limit: int = 50) -> str:
    return text if len(text) <= limit else text[:limit].rstrip() + "..."


def format_tree(graph: DependencyGraph, kind: ComponentKind, component_id: str) -> Optional[str]:
    """
    Render a text dependency tree for one component.

    Agents and workflows show what they use; skills and commands show what
    uses them.

    Returns:
        The rendered tree, or None if the component is unknown.
    """
    node = graph.get(kind, component_id)
    if node is None:
        return None

    reverse = kind in (ComponentKind.SKILL, ComponentKind.COMMAND)
    title = "Usage Graph" if reverse else "Dependency Graph"
    lines = [
        f"{title}: {component_id}",
        "=" * 50,
        "",
        f"{kind.value.capitalize()}: {component_id}",
    ]
    if node.description:
        lines.append(f"   `-- {_shorten(node.description, 72)}")
    lines.append("")

    sections = node.used_by if reverse else node.depends_on
    heading = "Used By" if reverse else "Uses"
    for field_name, items in sections.items():
        if not items:
            continue
        lines.append(f"{heading} {field_name.capitalize()} ({len(items)}):")
        rendered = []
        for item in items:
            target_kind = FIELD_KINDS.get(field_name)
            if field_name == "workflows":
                target_kind = ComponentKind.WORKFLOW
            target = graph.get(target_kind, item) if target_kind else None
            if target is not None and target.description:
                rendered.append(f"{item} - {_shorten(target.description)}")
            elif target is None and not reverse and target_kind is not None:
                rendered.append(f"{item} (missing)")
            else:
                rendered.append(item)
        lines.extend(_branch(rendered))
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
