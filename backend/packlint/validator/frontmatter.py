"""
Frontmatter Validation (Layer 1).

Checks every component's YAML frontmatter:
- The block exists and parses as a YAML mapping
- Required keys are present and non-empty
- Values match the component kind's model
- Description length is reasonable
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from ..config import LintConfig
from ..corpus import Corpus
from ..models import Component, ComponentKind, model_for
from .issues import LayerResult


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "frontmatter"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


class FrontmatterValidator:
    """
    Validates component frontmatter (Layer 1).

    Checks:
    - FM_MISSING / FM_INVALID_YAML / FILE_UNREADABLE for documents that
      could not be read or parsed
    - FM_REQUIRED for missing or empty required keys
    - FM_SCHEMA for values rejected by the kind's model
    - FM_DESCRIPTION_SHORT / FM_DESCRIPTION_LONG for description length
    - FM_NAME_MISMATCH when a skill or agent name differs from its file layout
    """

    def __init__(self, config: Optional[LintConfig] = None):
        self.config = config or LintConfig()

    def validate(self, corpus: Corpus) -> LayerResult:
        """
        Validate frontmatter of every component in the corpus.

        Args:
            corpus: Loaded content pack.

        Returns:
            LayerResult with frontmatter issues.
        """
        result = LayerResult()
        for component in corpus:
            self.validate_component(component, result)
        return result

    def validate_component(self, component: Component, result: LayerResult) -> None:
        """Validate a single component, adding issues to result."""
        if component.parse_error:
            result.add_issue(
                code=component.error_code or "FM_INVALID_YAML",
                path=component.path,
                message=component.parse_error,
                line=1,
            )
            return

        data = component.frontmatter

        missing = [
            key for key in self.config.required_for(component.kind)
            if _is_empty(data.get(key))
        ]
        for key in missing:
            result.add_issue(
                code="FM_REQUIRED",
                path=component.path,
                message=f"Missing required field: {key}",
                line=1,
            )

        if not missing:
            self._check_schema(component, result)

        self._check_description(component, result)
        self._check_name(component, result)

    def _check_schema(self, component: Component, result: LayerResult) -> None:
        model = model_for(component.kind)
        try:
            model.model_validate(component.frontmatter)
        except ValidationError as e:
            result.add_issue(
                code="FM_SCHEMA",
                path=component.path,
                message=_format_validation_error(e),
                line=1,
            )

    def _check_description(self, component: Component, result: LayerResult) -> None:
        description = component.frontmatter.get("description")
        if not isinstance(description, str) or not description.strip():
            return

        length = len(description.strip())
        max_length = self.config.max_length_for(component.kind)
        if length < self.config.min_description_length:
            result.add_issue(
                code="FM_DESCRIPTION_SHORT",
                path=component.path,
                message=f"Description is very short (< {self.config.min_description_length} chars)",
                severity="warning",
                line=1,
            )
        elif max_length and length > max_length:
            result.add_issue(
                code="FM_DESCRIPTION_LONG",
                path=component.path,
                message=f"Description is very long (> {max_length} chars)",
                severity="warning",
                line=1,
            )

    def _check_name(self, component: Component, result: LayerResult) -> None:
        if component.kind not in (ComponentKind.SKILL, ComponentKind.AGENT):
            return

        name = component.frontmatter.get("name")
        if not isinstance(name, str) or not name.strip():
            return

        if name.strip() != component.stem:
            result.add_issue(
                code="FM_NAME_MISMATCH",
                path=component.path,
                message=f"Name '{name.strip()}' does not match '{component.stem}'",
                severity="warning",
                line=1,
            )
