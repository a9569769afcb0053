"""
Lint issue and per-layer result types shared by all validation layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LintIssue:
    """A single problem found in a content pack."""

    code: str
    path: str
    message: str
    severity: str = "error"
    line: Optional[int] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else self.path
        text = f"{location}: [{self.severity.upper()}] {self.code}: {self.message}"
        if self.suggestion:
            text += f" (did you mean '{self.suggestion}'?)"
        return text

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "code": self.code,
            "path": self.path,
            "message": self.message,
            "severity": self.severity,
        }
        if self.line is not None:
            result["line"] = self.line
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


@dataclass
class LayerResult:
    """Result of one validation layer."""

    valid: bool = True
    issues: List[LintIssue] = field(default_factory=list)

    def add_issue(
        self,
        code: str,
        path: str,
        message: str,
        severity: str = "error",
        line: Optional[int] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """Add an issue. Errors mark the layer invalid."""
        self.issues.append(LintIssue(
            code=code,
            path=path,
            message=message,
            severity=severity,
            line=line,
            suggestion=suggestion,
        ))
        if severity == "error":
            self.valid = False

    @property
    def errors(self) -> List[LintIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[LintIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
        }
