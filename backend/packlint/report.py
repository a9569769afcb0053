"""
Lint Report Generator.

Generates machine-consumable lint reports for CI and audit trails.
"""

from __future__ import annotations

import hashlib
import json
import os
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .corpus import Corpus
from .validator import LintResult


REPORT_VERSION = "packlint-report/1.0"
TOOL_VERSION = __version__

# Limit per section in Markdown output
MARKDOWN_ISSUE_LIMIT = 50

# (marker, provider, build id, branch, triggered by), first match wins
CI_PROVIDERS = (
    ("GITHUB_ACTIONS", "github_actions", "GITHUB_RUN_ID", "GITHUB_REF_NAME", "GITHUB_ACTOR"),
    ("GITLAB_CI", "gitlab_ci", "CI_JOB_ID", "CI_COMMIT_REF_NAME", "GITLAB_USER_LOGIN"),
    ("JENKINS_URL", "jenkins", "BUILD_NUMBER", "GIT_BRANCH", "BUILD_USER"),
    ("CIRCLECI", "circleci", "CIRCLE_BUILD_NUM", "CIRCLE_BRANCH", "CIRCLE_USERNAME"),
)


@dataclass
class AuditMetadata:
    """Metadata for audit trail."""

    report_generated_at: str
    tool_version: str
    duration_ms: int
    corpus_checksum: Optional[str] = None
    git_commit: Optional[str] = None
    ci_environment: Optional[Dict[str, str]] = None

    @classmethod
    def generate(
        cls,
        duration_ms: int,
        corpus: Optional[Corpus] = None,
    ) -> "AuditMetadata":
        """Generate audit metadata."""
        metadata = cls(
            report_generated_at=datetime.now(timezone.utc).isoformat(),
            tool_version=TOOL_VERSION,
            duration_ms=duration_ms,
        )

        if corpus is not None and len(corpus) > 0:
            metadata.corpus_checksum = compute_corpus_checksum(corpus)

        metadata.git_commit = _get_git_commit(corpus.root if corpus is not None else None)
        metadata.ci_environment = _get_ci_environment()

        return metadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "report_generated_at": self.report_generated_at,
            "tool_version": self.tool_version,
            "duration_ms": self.duration_ms,
        }

        if self.corpus_checksum:
            result["corpus_checksum"] = self.corpus_checksum
        if self.git_commit:
            result["git_commit"] = self.git_commit
        if self.ci_environment:
            result["ci_environment"] = self.ci_environment

        return result


@dataclass
class LintReport:
    """Full lint report."""

    report_version: str
    pack: Dict[str, Any]
    lint: Dict[str, Any]
    audit_metadata: AuditMetadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "report_version": self.report_version,
            "pack": self.pack,
            "lint": self.lint,
            "audit_metadata": self.audit_metadata.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_markdown(self) -> str:
        """Convert to Markdown format report."""
        lines = []
        lint = self.lint
        status = "PASSED" if lint.get("valid", False) else "FAILED"

        lines.append(f"# Lint Report: {self.pack.get('root', 'unknown')}")
        lines.append("")
        lines.append(f"**Status:** {status}")
        lines.append(f"**Errors:** {lint.get('total_errors', 0)}")
        lines.append(f"**Warnings:** {lint.get('total_warnings', 0)}")
        if lint.get("strict"):
            lines.append("**Mode:** strict")
        lines.append("")

        counts = self.pack.get("component_counts", {})
        if counts:
            lines.append("## Components")
            lines.append("")
            lines.append("| Kind | Count |")
            lines.append("|------|-------|")
            for kind, count in counts.items():
                lines.append(f"| {kind} | {count} |")
            lines.append("")

        for message in lint.get("errors", []):
            lines.append(f"- **error:** {message}")
        for message in lint.get("warnings", []):
            lines.append(f"- **warning:** {message}")
        if lint.get("errors") or lint.get("warnings"):
            lines.append("")

        layers = lint.get("layers", {})
        for name, layer in layers.items():
            if not layer:
                continue
            issues = layer.get("issues", [])
            title = name.capitalize()
            lines.append(f"## {title}")
            lines.append("")

            if name == "registry":
                lines.append(f"- **Status:** {layer.get('status', '')}")
                lines.append("")
            if name == "structure" and layer.get("skills"):
                score = layer.get("average_compliance_score", 0)
                lines.append(f"- **Skill Section Score:** {score:.0%}")
                lines.append("")

            if not issues:
                lines.append("No issues found.")
                lines.append("")
                continue

            for issue in issues[:MARKDOWN_ISSUE_LIMIT]:
                location = issue.get("path", "")
                if issue.get("line"):
                    location = f"{location}:{issue['line']}"
                lines.append(
                    f"- [{issue.get('severity', '')}] **{issue.get('code', '')}** "
                    f"`{location}`: {issue.get('message', '')}"
                )
                if issue.get("suggestion"):
                    lines.append(f"  - Suggestion: `{issue['suggestion']}`")
            if len(issues) > MARKDOWN_ISSUE_LIMIT:
                lines.append(f"- ... and {len(issues) - MARKDOWN_ISSUE_LIMIT} more")
            lines.append("")

        lines.append("## Audit Metadata")
        lines.append("")
        audit = self.audit_metadata.to_dict()
        lines.append(f"- **Generated At:** {audit.get('report_generated_at', '')}")
        lines.append(f"- **Tool Version:** {audit.get('tool_version', '')}")
        lines.append(f"- **Duration:** {audit.get('duration_ms', 0)}ms")
        if audit.get("git_commit"):
            lines.append(f"- **Git Commit:** {audit['git_commit']}")
        if audit.get("corpus_checksum"):
            lines.append(f"- **Corpus Checksum:** {audit['corpus_checksum']}")
        lines.append("")

        return "\n".join(lines)

    def save(self, output_path: Path, format: str = "json") -> None:
        """
        Save report to file.

        Args:
            output_path: Path to save the report.
            format: Output format, either 'json' or 'markdown'.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if format == "markdown":
            output_path.write_text(self.to_markdown(), encoding="utf-8")
        else:
            output_path.write_text(self.to_json(), encoding="utf-8")


def generate_lint_report(
    lint_result: LintResult,
    duration_ms: int,
    corpus: Optional[Corpus] = None,
) -> LintReport:
    """
    Generate a lint report from lint results.

    Args:
        lint_result: Result from LintEngine.
        duration_ms: Lint duration in milliseconds.
        corpus: The linted corpus, used for the checksum.

    Returns:
        LintReport ready for serialization.
    """
    pack_info = {
        "root": lint_result.root,
        "component_counts": lint_result.component_counts,
    }

    return LintReport(
        report_version=REPORT_VERSION,
        pack=pack_info,
        lint=lint_result.to_dict(),
        audit_metadata=AuditMetadata.generate(duration_ms=duration_ms, corpus=corpus),
    )


def compute_corpus_checksum(corpus: Corpus) -> str:
    """Compute an MD5 checksum over every component's path and content."""
    hasher = hashlib.md5()
    for path in sorted(c.path for c in corpus):
        hasher.update(path.encode("utf-8"))
        hasher.update(b"\0")
        try:
            with open(corpus.root / path, "rb") as f:
                for chunk in iter(lambda: f.read(8192), b""):
                    hasher.update(chunk)
        except OSError:
            hasher.update(b"<unreadable>")
        hasher.update(b"\0")
    return hasher.hexdigest()


def _get_git_commit(cwd: Optional[Path] = None) -> Optional[str]:
    """Get current git commit hash if in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=str(cwd) if cwd else None,
        )
        if result.returncode == 0:
            return result.stdout.strip()[:12]  # Short hash
    except (subprocess.SubprocessError, FileNotFoundError, NotADirectoryError):
        pass
    return None


def _get_ci_environment() -> Optional[Dict[str, str]]:
    """Detect the CI provider from its marker variable."""
    for marker, provider, build_var, branch_var, user_var in CI_PROVIDERS:
        if os.getenv(marker):
            return {
                "ci_provider": provider,
                "build_id": os.getenv(build_var, ""),
                "branch": os.getenv(branch_var, ""),
                "triggered_by": os.getenv(user_var, ""),
            }
    return None


class ReportTimer:
    """Context manager for timing a lint run."""

    def __init__(self):
        self.start_time: float = 0
        self.duration_ms: int = 0

    def __enter__(self) -> "ReportTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.duration_ms = int((time.perf_counter() - self.start_time) * 1000)
