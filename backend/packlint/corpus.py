"""
Content Pack Discovery.

Walks a pack root and loads every command, skill, agent, workflow and mode
document into Component records:

    commands/<namespace>/<name>.md      -> /<namespace>:<name>
    skills/<category>/<name>/SKILL.md   -> <category>/<name>
    agents/<name>.md                    -> <name>
    workflows/<category>/<name>.md      -> <category>/<name>
    modes/<name>.md                     -> <name>
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set

from .config import LintConfig
from .frontmatter import FrontmatterError, command_id, parse_frontmatter, skill_id
from .models import Component, ComponentKind


logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"
REGISTRY_FILENAME = "registry.yaml"


def _sorted_dirs(path: Path) -> List[Path]:
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.is_dir())


def _sorted_markdown(path: Path) -> List[Path]:
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.is_file() and p.suffix == ".md")


class Corpus:
    """
    All components of a content pack, indexed by kind and id.

    Components are stored in discovery order (sorted paths), so iteration
    and reports are deterministic.
    """

    def __init__(self, root: Path, components: Optional[List[Component]] = None):
        self.root = root
        self._components: List[Component] = []
        self._index: Dict[ComponentKind, Dict[str, Component]] = {
            kind: {} for kind in ComponentKind
        }
        for component in components or []:
            self.add(component)

    @classmethod
    def load(cls, root: Path, config: Optional[LintConfig] = None) -> "Corpus":
        """
        Discover and read every component under a pack root.

        Missing directories contribute nothing. Files whose frontmatter fails
        to parse are kept with parse_error set.

        Args:
            root: Pack root directory.
            config: Optional config providing ignore_paths.

        Returns:
            Populated Corpus.
        """
        root = Path(root)
        corpus = cls(root)
        config = config or LintConfig()

        for kind, group, path in corpus._discover():
            relative = path.relative_to(root).as_posix()
            if config.is_ignored(relative):
                logger.debug("Ignoring %s", relative)
                continue
            corpus.add(_read_component(root, kind, group, path))

        logger.debug("Loaded %d components from %s", len(corpus), root)
        return corpus

    def _discover(self) -> Iterator[tuple]:
        root = self.root

        for namespace_dir in _sorted_dirs(root / "commands"):
            for path in _sorted_markdown(namespace_dir):
                yield ComponentKind.COMMAND, namespace_dir.name, path

        for category_dir in _sorted_dirs(root / "skills"):
            for skill_dir in _sorted_dirs(category_dir):
                skill_file = skill_dir / SKILL_FILENAME
                if skill_file.is_file():
                    yield ComponentKind.SKILL, category_dir.name, skill_file

        for path in _sorted_markdown(root / "agents"):
            yield ComponentKind.AGENT, None, path

        for category_dir in _sorted_dirs(root / "workflows"):
            for path in _sorted_markdown(category_dir):
                yield ComponentKind.WORKFLOW, category_dir.name, path

        for path in _sorted_markdown(root / "modes"):
            yield ComponentKind.MODE, None, path

    def add(self, component: Component) -> None:
        """Add a component. A later component with the same kind and id replaces the index entry."""
        self._components.append(component)
        self._index[component.kind][component.id] = component

    def get(self, kind: ComponentKind, component_id: str) -> Optional[Component]:
        return self._index[kind].get(component_id)

    def exists(self, kind: ComponentKind, component_id: str) -> bool:
        return component_id in self._index[kind]

    def by_kind(self, kind: ComponentKind) -> List[Component]:
        return [c for c in self._components if c.kind == kind]

    def ids(self, kind: ComponentKind) -> Set[str]:
        return set(self._index[kind])

    def groups(self, kind: ComponentKind) -> Set[str]:
        """Command namespaces or skill/workflow categories present on disk."""
        return {c.group for c in self.by_kind(kind) if c.group}

    def counts(self) -> Dict[str, int]:
        return {kind.plural: len(self._index[kind]) for kind in ComponentKind}

    @property
    def registry_path(self) -> Path:
        return self.root / REGISTRY_FILENAME

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)


def _component_id(kind: ComponentKind, group: Optional[str], path: Path) -> str:
    if kind == ComponentKind.COMMAND:
        return command_id(group or "", path.stem)
    if kind == ComponentKind.SKILL:
        return skill_id(group or "", path.parent.name)
    if kind == ComponentKind.WORKFLOW:
        return skill_id(group or "", path.stem)
    return path.stem


def _read_component(
    root: Path,
    kind: ComponentKind,
    group: Optional[str],
    path: Path,
) -> Component:
    """Read one document into a Component, recording read or parse errors."""
    component = Component(
        kind=kind,
        id=_component_id(kind, group, path),
        path=path.relative_to(root).as_posix(),
        group=group,
    )

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        component.parse_error = f"Cannot read file: {e}"
        component.error_code = "FILE_UNREADABLE"
        logger.debug("Unreadable file %s: %s", path, e)
        return component

    try:
        parsed = parse_frontmatter(content)
    except FrontmatterError as e:
        component.parse_error = str(e)
        component.error_code = e.code
        component.body = content
        return component

    component.frontmatter = parsed.data
    component.body = parsed.body
    component.body_line = parsed.body_line
    return component
