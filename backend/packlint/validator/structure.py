"""
Document Structure Validation (Layer 2).

Checks the Markdown body of each component:
1. Body is not empty
2. Body has at least one heading
3. Agents, skills and workflows: no leftover placeholder text
4. Skills: recommended sections (Overview, Quick Start, Best Practices, Examples)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..corpus import Corpus
from ..models import Component, ComponentKind
from .issues import LayerResult


HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
PLACEHOLDER_PATTERN = re.compile(
    r"^\s*(?:TODO|FIXME|HACK):|\[(?:INSERT\s+[^\]]+|PLACEHOLDER[^\]]*)\]",
    re.IGNORECASE,
)
PLACEHOLDER_KINDS = (ComponentKind.AGENT, ComponentKind.SKILL, ComponentKind.WORKFLOW)


class SectionRequirement(Enum):
    """Section requirement level."""
    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


@dataclass
class SectionCheck:
    """Result of checking one expected section."""
    name: str
    requirement: SectionRequirement
    present: bool
    line_number: Optional[int] = None
    has_content: bool = False


@dataclass
class SkillStructure:
    """Section analysis of one skill document."""
    skill_id: str
    path: str
    sections: List[SectionCheck] = field(default_factory=list)
    compliance_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill": self.skill_id,
            "path": self.path,
            "compliance_score": round(self.compliance_score, 2),
            "missing_sections": [s.name for s in self.sections if not s.present],
        }


@dataclass
class StructureResult(LayerResult):
    """Structure layer result with per-skill section analysis."""
    skills: List[SkillStructure] = field(default_factory=list)

    @property
    def average_score(self) -> float:
        if not self.skills:
            return 0.0
        return sum(s.compliance_score for s in self.skills) / len(self.skills)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["skills"] = [s.to_dict() for s in self.skills]
        data["average_compliance_score"] = round(self.average_score, 2)
        return data


# Section definitions with requirements
SECTION_DEFINITIONS = {
    "Overview": SectionRequirement.RECOMMENDED,
    "Quick Start": SectionRequirement.RECOMMENDED,
    "Best Practices": SectionRequirement.RECOMMENDED,
    "Examples": SectionRequirement.OPTIONAL,
}

# Maps lowercase alternative names to canonical section names
SECTION_ALIASES = {
    # Overview alternatives
    "purpose": "Overview",
    "description": "Overview",
    "about": "Overview",
    "features": "Overview",
    "key features": "Overview",
    "core concepts": "Overview",
    "when to use": "Overview",
    # Quick Start alternatives
    "getting started": "Quick Start",
    "quickstart": "Quick Start",
    "usage": "Quick Start",
    "instructions": "Quick Start",
    "how to use": "Quick Start",
    # Best Practices alternatives
    "guidelines": "Best Practices",
    "do's and don'ts": "Best Practices",
    "anti-patterns": "Best Practices",
    "common pitfalls": "Best Practices",
    # Examples alternatives
    "example": "Examples",
    "samples": "Examples",
    "patterns": "Examples",
}


def iter_prose_lines(body: str) -> Iterator[Tuple[int, str]]:
    """Yield (line_offset, line) for body lines outside fenced code blocks."""
    in_fence = False
    fence_marker = ""
    for offset, line in enumerate(body.split("\n")):
        fence = FENCE_PATTERN.match(line)
        if fence:
            if not in_fence:
                in_fence = True
                fence_marker = fence.group(1)
            elif fence.group(1) == fence_marker:
                in_fence = False
            continue
        if not in_fence:
            yield offset, line


def iter_headings(body: str) -> List[Tuple[int, int, str]]:
    """
    Find Markdown headings outside fenced code blocks.

    Returns:
        List of (line_offset, level, title), line_offset 0-based within body.
    """
    headings = []
    for offset, line in iter_prose_lines(body):
        match = HEADING_PATTERN.match(line)
        if match:
            headings.append((offset, len(match.group(1)), match.group(2).strip()))
    return headings


class StructureValidator:
    """
    Validates document bodies (Layer 2).

    Checks:
    - BODY_EMPTY: nothing after the frontmatter
    - BODY_NO_HEADINGS: no Markdown heading in the body
    - BODY_PLACEHOLDER: TODO/FIXME/HACK line or [INSERT ...] left in an
      agent, skill or workflow body
    - SECTION_MISSING: skill lacks a required or recommended section
    - SECTION_EMPTY: skill section present but (nearly) empty
    """

    def __init__(self, section_definitions: Optional[Dict[str, SectionRequirement]] = None):
        self.section_definitions = dict(section_definitions or SECTION_DEFINITIONS)
        self.section_aliases = SECTION_ALIASES.copy()

    def validate(self, corpus: Corpus) -> StructureResult:
        """Check the body of every readable component."""
        result = StructureResult()
        for component in corpus:
            if component.error_code == "FILE_UNREADABLE":
                continue
            self.validate_component(component, result)
        return result

    def validate_component(self, component: Component, result: StructureResult) -> None:
        body = component.body
        if not body.strip():
            result.add_issue(
                code="BODY_EMPTY",
                path=component.path,
                message="Document has no content after the frontmatter",
                line=component.body_line,
            )
            return

        headings = iter_headings(body)
        if not headings:
            result.add_issue(
                code="BODY_NO_HEADINGS",
                path=component.path,
                message="Document has no Markdown headings",
                severity="warning",
                line=component.body_line,
            )

        if component.kind in PLACEHOLDER_KINDS:
            self._check_placeholders(component, result)

        if component.kind == ComponentKind.SKILL:
            result.skills.append(self._check_sections(component, headings, result))

    def _check_placeholders(self, component: Component, result: StructureResult) -> None:
        for offset, line in iter_prose_lines(component.body):
            match = PLACEHOLDER_PATTERN.search(line)
            if match:
                result.add_issue(
                    code="BODY_PLACEHOLDER",
                    path=component.path,
                    message=f"Placeholder text left in document: {match.group(0).strip()}",
                    severity="warning",
                    line=component.body_line + offset,
                )

    def _check_sections(
        self,
        component: Component,
        headings: List[Tuple[int, int, str]],
        result: StructureResult,
    ) -> SkillStructure:
        lines = component.body.split("\n")
        found: Dict[str, Tuple[int, str]] = {}

        # Only h2 sections count; content runs to the next h1/h2
        top_level = [(o, lvl, t) for o, lvl, t in headings if lvl <= 2]
        for index, (offset, level, title) in enumerate(top_level):
            if level != 2:
                continue
            canonical = self._normalize_section_name(title)
            if not canonical or canonical in found:
                continue
            end = top_level[index + 1][0] if index + 1 < len(top_level) else len(lines)
            content = "\n".join(lines[offset + 1:end])
            found[canonical] = (component.body_line + offset, content)

        structure = SkillStructure(skill_id=component.id, path=component.path)
        for name, requirement in self.section_definitions.items():
            present = name in found
            line_number, content = found.get(name, (None, ""))
            has_content = len(content.strip()) > 10

            if not present and requirement != SectionRequirement.OPTIONAL:
                result.add_issue(
                    code="SECTION_MISSING",
                    path=component.path,
                    message=f"Missing {requirement.value} section: {name}",
                    severity="error" if requirement == SectionRequirement.REQUIRED else "warning",
                )
            elif present and not has_content:
                result.add_issue(
                    code="SECTION_EMPTY",
                    path=component.path,
                    message=f"Section '{name}' appears empty or minimal",
                    severity="warning",
                    line=line_number,
                )

            structure.sections.append(SectionCheck(
                name=name,
                requirement=requirement,
                present=present,
                line_number=line_number,
                has_content=has_content,
            ))

        structure.compliance_score = self._calculate_compliance_score(structure.sections)
        return structure

    def _normalize_section_name(self, name: str) -> Optional[str]:
        """Normalize section name to canonical form."""
        name_lower = name.lower().strip()

        for canonical in self.section_definitions:
            if canonical.lower() == name_lower:
                return canonical

        if name_lower in self.section_aliases:
            alias = self.section_aliases[name_lower]
            if alias in self.section_definitions:
                return alias

        for canonical in self.section_definitions:
            if canonical.lower() in name_lower:
                return canonical

        return None

    def _calculate_compliance_score(self, sections: List[SectionCheck]) -> float:
        """Score section coverage from 0.0 to 1.0."""
        weights = {
            SectionRequirement.REQUIRED: 15,
            SectionRequirement.RECOMMENDED: 7,
            SectionRequirement.OPTIONAL: 3,
        }
        total_points = 0.0
        earned_points = 0.0
        for section in sections:
            weight = weights[section.requirement]
            total_points += weight
            if section.present:
                earned_points += weight * (1.0 if section.has_content else 0.7)

        return earned_points / total_points if total_points > 0 else 1.0
