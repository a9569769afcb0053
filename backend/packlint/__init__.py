"""
packlint: lint and index Markdown content packs.

This package discovers the slash commands, skills, agents, workflows and
modes of a content pack, validates their frontmatter and cross-references,
and builds a dependency graph between them.
"""

__version__ = "1.0.0"

from .models import (
    ComponentKind,
    Component,
    BaseFrontmatter,
    CommandFrontmatter,
    SkillFrontmatter,
    AgentFrontmatter,
    WorkflowFrontmatter,
    ModeFrontmatter,
    model_for,
)
from .frontmatter import (
    FrontmatterError,
    ParsedDocument,
    parse_frontmatter,
    load_frontmatter,
    parse_command_id,
    parse_skill_id,
)
from .config import LintConfig, ConfigError, load_config
from .corpus import Corpus
from .graph import DependencyGraph, build_dependency_graph, format_tree

__all__ = [
    "__version__",
    # Models
    "ComponentKind",
    "Component",
    "BaseFrontmatter",
    "CommandFrontmatter",
    "SkillFrontmatter",
    "AgentFrontmatter",
    "WorkflowFrontmatter",
    "ModeFrontmatter",
    "model_for",
    # Frontmatter
    "FrontmatterError",
    "ParsedDocument",
    "parse_frontmatter",
    "load_frontmatter",
    "parse_command_id",
    "parse_skill_id",
    # Config
    "LintConfig",
    "ConfigError",
    "load_config",
    # Corpus and graph
    "Corpus",
    "DependencyGraph",
    "build_dependency_graph",
    "format_tree",
]
