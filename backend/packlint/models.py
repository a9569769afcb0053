"""
Content Pack Models.

Pydantic models for component frontmatter, plus the Component record
produced by corpus discovery.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .frontmatter import as_list


KEBAB_CASE_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")


class ComponentKind(str, Enum):
    """Kinds of documents in a content pack."""

    COMMAND = "command"
    SKILL = "skill"
    AGENT = "agent"
    WORKFLOW = "workflow"
    MODE = "mode"

    @property
    def plural(self) -> str:
        return f"{self.value}s"


class BaseFrontmatter(BaseModel):
    """Fields shared by every component's frontmatter."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("description must not be blank")
        return v


class CommandFrontmatter(BaseFrontmatter):
    """Slash command frontmatter."""

    description: str
    allowed_tools: Optional[Any] = Field(default=None, alias="allowed-tools")
    argument_hint: Optional[str] = Field(default=None, alias="argument-hint")


class SkillFrontmatter(BaseFrontmatter):
    """Skill guide frontmatter."""

    name: str
    description: str

    @field_validator("name")
    @classmethod
    def name_is_kebab_case(cls, v: str) -> str:
        if not KEBAB_CASE_PATTERN.match(v):
            raise ValueError(f"Skill name must be kebab-case: '{v}'")
        return v


class _ReferencingFrontmatter(BaseFrontmatter):
    """Frontmatter that may reference other components."""

    skills: List[str] = Field(default_factory=list)
    commands: List[str] = Field(default_factory=list)
    mcps: List[str] = Field(default_factory=list)

    @field_validator("skills", "commands", "mcps", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> List[str]:
        return as_list(v)


class AgentFrontmatter(_ReferencingFrontmatter):
    """Agent persona frontmatter."""

    tools: Optional[Any] = None
    model: Optional[str] = None


class WorkflowFrontmatter(_ReferencingFrontmatter):
    """Workflow playbook frontmatter."""

    agents: List[str] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)

    @field_validator("agents", "prerequisites", "triggers", mode="before")
    @classmethod
    def coerce_workflow_list(cls, v: Any) -> List[str]:
        return as_list(v)


class ModeFrontmatter(BaseFrontmatter):
    """Behavior mode frontmatter."""


FRONTMATTER_MODELS: Dict[ComponentKind, Type[BaseFrontmatter]] = {
    ComponentKind.COMMAND: CommandFrontmatter,
    ComponentKind.SKILL: SkillFrontmatter,
    ComponentKind.AGENT: AgentFrontmatter,
    ComponentKind.WORKFLOW: WorkflowFrontmatter,
    ComponentKind.MODE: ModeFrontmatter,
}


def model_for(kind: ComponentKind) -> Type[BaseFrontmatter]:
    """Return the frontmatter model for a component kind."""
    return FRONTMATTER_MODELS[kind]


@dataclass
class Component:
    """
    A single document discovered in a content pack.

    Attributes:
        kind: Component kind.
        id: Component identifier (e.g. "/dev:fix", "devops/kubernetes").
        path: File path relative to the pack root (POSIX separators).
        group: Command namespace, or skill/workflow category.
        frontmatter: Parsed frontmatter mapping (empty if unparsable).
        body: Document body after the frontmatter.
        body_line: 1-based line on which the body starts.
        parse_error: Frontmatter or read error, if any.
        error_code: Lint code for parse_error (FM_MISSING, FM_INVALID_YAML, FILE_UNREADABLE).
    """

    kind: ComponentKind
    id: str
    path: str
    group: Optional[str] = None
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    body_line: int = 1
    parse_error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def stem(self) -> str:
        """Name derived from the file layout (last id segment)."""
        if self.kind == ComponentKind.COMMAND:
            return self.id.split(":", 1)[-1]
        return self.id.rsplit("/", 1)[-1]

    @property
    def name(self) -> str:
        value = self.frontmatter.get("name")
        return str(value) if value else self.stem

    @property
    def description(self) -> str:
        value = self.frontmatter.get("description")
        return str(value) if value else ""

    def references(self, field_name: str) -> List[str]:
        """Return a normalized reference list from the frontmatter."""
        if self.parse_error:
            return []
        return as_list(self.frontmatter.get(field_name))

    @property
    def depends_on(self) -> Dict[str, List[str]]:
        """Forward references declared in frontmatter, by target kind."""
        if self.kind == ComponentKind.AGENT:
            fields = ("skills", "commands", "mcps")
        elif self.kind == ComponentKind.WORKFLOW:
            fields = ("agents", "skills", "commands", "mcps")
        elif self.kind == ComponentKind.SKILL:
            fields = ("commands", "mcps")
        elif self.kind == ComponentKind.COMMAND:
            fields = ("mcps",)
        else:
            fields = ()
        return {name: self.references(name) for name in fields}
