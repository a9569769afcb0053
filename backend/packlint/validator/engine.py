"""
Lint Engine.

Combines all validation layers into a unified lint pipeline.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ..config import LintConfig, load_config
from ..corpus import Corpus
from .frontmatter import FrontmatterValidator
from .issues import LayerResult, LintIssue
from .naming import NamingValidator
from .references import ReferenceValidator
from .registry import RegistryResult, RegistryValidator
from .structure import (
    SECTION_DEFINITIONS,
    SectionRequirement,
    StructureResult,
    StructureValidator,
)


logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """
    Combined result from all lint layers.

    Contains results from:
    - Layer 1: Frontmatter Validation
    - Layer 2: Structure Validation
    - Layer 3: Naming Validation
    - Layer 4: Reference Validation
    - Layer 5: Registry Sync Validation (optional)
    """

    valid: bool
    root: str = ""
    component_counts: Dict[str, int] = field(default_factory=dict)
    frontmatter_result: Optional[LayerResult] = None
    structure_result: Optional[StructureResult] = None
    naming_result: Optional[LayerResult] = None
    reference_result: Optional[LayerResult] = None
    registry_result: Optional[RegistryResult] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    strict: bool = False

    def layers(self) -> Dict[str, Optional[LayerResult]]:
        return {
            "frontmatter": self.frontmatter_result,
            "structure": self.structure_result,
            "naming": self.naming_result,
            "references": self.reference_result,
            "registry": self.registry_result,
        }

    def issues(self) -> Iterator[LintIssue]:
        """Iterate over issues from every layer, in layer order."""
        for layer in self.layers().values():
            if layer:
                yield from layer.issues

    @property
    def total_errors(self) -> int:
        """Total number of errors across all layers."""
        return len(self.errors) + sum(1 for i in self.issues() if i.severity == "error")

    @property
    def total_warnings(self) -> int:
        """Total number of warnings across all layers."""
        return len(self.warnings) + sum(1 for i in self.issues() if i.severity == "warning")

    def summary(self) -> str:
        """Generate a summary of lint results."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Lint {status}")
        if self.component_counts:
            counts = ", ".join(f"{n} {kind}" for kind, n in self.component_counts.items())
            lines.append(f"  Components: {counts}")
        lines.append(f"  Errors: {self.total_errors}")
        lines.append(f"  Warnings: {self.total_warnings}")

        if self.structure_result and self.structure_result.skills:
            lines.append(f"  Skill Section Score: {self.structure_result.average_score:.0%}")

        if self.registry_result and self.registry_result.registry_found:
            lines.append(f"  Registry: {self.registry_result.status}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "root": self.root,
            "strict": self.strict,
            "component_counts": self.component_counts,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
            "errors": self.errors,
            "warnings": self.warnings,
            "layers": {
                name: layer.to_dict() if layer else None
                for name, layer in self.layers().items()
            },
        }


class LintEngine:
    """
    Unified lint engine combining all validation layers.

    Layers:
    - Layer 1: Frontmatter Validation (YAML, required keys, models)
    - Layer 2: Structure Validation (body, headings, skill sections)
    - Layer 3: Naming Validation (id format, name conflicts)
    - Layer 4: Reference Validation (frontmatter refs, body links)
    - Layer 5: Registry Sync Validation (optional)
    """

    def __init__(self, config: Optional[LintConfig] = None):
        """
        Initialize the lint engine.

        Args:
            config: Lint configuration. Defaults are used when omitted.
        """
        self.config = config or LintConfig()
        self.frontmatter_validator = FrontmatterValidator(self.config)
        self.structure_validator = StructureValidator(_section_definitions(self.config))
        self.naming_validator = NamingValidator()
        self.reference_validator = ReferenceValidator(self.config)
        self.registry_validator = RegistryValidator()

    def lint(self, corpus: Corpus, strict: Optional[bool] = None) -> LintResult:
        """
        Run all lint layers over a corpus.

        Args:
            corpus: Loaded content pack.
            strict: Override config.strict; when true warnings fail the run.

        Returns:
            LintResult with combined results from all layers.
        """
        strict = self.config.strict if strict is None else strict
        result = LintResult(
            valid=True,
            root=str(corpus.root),
            component_counts=corpus.counts(),
            strict=strict,
        )

        if len(corpus) == 0:
            result.warnings.append(f"No components found under {corpus.root}")

        result.frontmatter_result = self._run("frontmatter", self.frontmatter_validator.validate, corpus)
        result.structure_result = self._run("structure", self.structure_validator.validate, corpus)
        result.naming_result = self._run("naming", self.naming_validator.validate, corpus)
        result.reference_result = self._run("references", self.reference_validator.validate, corpus)

        if self.config.check_registry and corpus.registry_path.is_file():
            result.registry_result = self._run("registry", self.registry_validator.validate, corpus)

        result.valid = all(
            layer.valid for layer in result.layers().values() if layer is not None
        )

        # In strict mode, warnings also cause failure
        if strict and result.total_warnings > 0:
            result.valid = False

        return result

    def lint_path(self, root: Union[str, Path], strict: Optional[bool] = None) -> LintResult:
        """
        Load and lint the pack at a path.

        Args:
            root: Pack root directory.
            strict: Override config.strict.

        Returns:
            LintResult. A missing root is reported as an error, not raised.
        """
        root = Path(root)
        if not root.is_dir():
            result = LintResult(valid=False, root=str(root))
            result.errors.append(f"Pack root not found: {root}")
            return result

        corpus = Corpus.load(root, self.config)
        return self.lint(corpus, strict=strict)

    def _run(self, name: str, validate, corpus: Corpus):
        start = time.perf_counter()
        layer = validate(corpus)
        logger.debug(
            "Layer %s: %d issues in %.1fms",
            name, len(layer.issues), (time.perf_counter() - start) * 1000,
        )
        return layer


def _section_definitions(config: LintConfig) -> Dict[str, SectionRequirement]:
    """Merge configured skill sections over the built-in ones."""
    sections = dict(SECTION_DEFINITIONS)
    canonical = {name.lower(): name for name in sections}
    for name, level in config.skill_sections.items():
        sections[canonical.get(name.lower(), name)] = SectionRequirement(level)
    return sections


def lint_pack(
    root: Union[str, Path],
    strict: Optional[bool] = None,
    config: Optional[LintConfig] = None,
    config_path: Optional[Path] = None,
) -> LintResult:
    """
    Convenience function to lint a content pack.

    Args:
        root: Pack root directory.
        strict: If True, fail on warnings.
        config: Lint configuration; loaded from the pack root when omitted.
        config_path: Explicit configuration file.

    Returns:
        LintResult with combined results.

    Raises:
        ConfigError: If a configuration file is invalid.
    """
    if config is None:
        root_path = Path(root)
        config = load_config(config_path, root=root_path if root_path.is_dir() else None)
    engine = LintEngine(config)
    return engine.lint_path(root, strict=strict)
