"""
Content Pack Lint Engine.

This package provides multi-layer validation for content packs:
- Layer 1: Frontmatter Validation (YAML, required keys, per-kind models)
- Layer 2: Structure Validation (document body, skill sections)
- Layer 3: Naming Validation (id format, name conflicts)
- Layer 4: Reference Validation (frontmatter references, body links)
- Layer 5: Registry Sync Validation (registry.yaml drift - optional)
"""

from .issues import LintIssue, LayerResult
from .frontmatter import FrontmatterValidator
from .structure import (
    StructureValidator,
    StructureResult,
    SectionRequirement,
    SkillStructure,
)
from .naming import NamingValidator
from .references import ReferenceValidator, find_command_references
from .registry import (
    RegistryValidator,
    RegistryResult,
    compare_lists,
    STATUS_ALIGNED,
    STATUS_DRIFT,
)
from .engine import LintEngine, LintResult, lint_pack

__all__ = [
    # Shared
    "LintIssue",
    "LayerResult",
    # Layer 1: Frontmatter
    "FrontmatterValidator",
    # Layer 2: Structure
    "StructureValidator",
    "StructureResult",
    "SectionRequirement",
    "SkillStructure",
    # Layer 3: Naming
    "NamingValidator",
    # Layer 4: References
    "ReferenceValidator",
    "find_command_references",
    # Layer 5: Registry
    "RegistryValidator",
    "RegistryResult",
    "compare_lists",
    "STATUS_ALIGNED",
    "STATUS_DRIFT",
    # Engine
    "LintEngine",
    "LintResult",
    "lint_pack",
]
