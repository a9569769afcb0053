"""
Tests for Lint Report Generator.
"""

import json
import re
import time
from unittest.mock import patch

import pytest

from backend.packlint.corpus import Corpus
from backend.packlint.report import (
    MARKDOWN_ISSUE_LIMIT,
    REPORT_VERSION,
    TOOL_VERSION,
    AuditMetadata,
    LintReport,
    ReportTimer,
    _get_ci_environment,
    _get_git_commit,
    compute_corpus_checksum,
    generate_lint_report,
)
from backend.packlint.validator import LintEngine


def lint(root):
    corpus = Corpus.load(root)
    return corpus, LintEngine().lint(corpus)


class TestAuditMetadata:
    """Tests for AuditMetadata dataclass."""

    def test_generate_metadata(self):
        """Test generating audit metadata."""
        metadata = AuditMetadata.generate(duration_ms=150)
        assert metadata.tool_version == TOOL_VERSION
        assert metadata.duration_ms == 150
        assert metadata.report_generated_at is not None
        assert metadata.corpus_checksum is None

    def test_generate_with_corpus(self, make_pack):
        """Test generating metadata with a corpus checksum."""
        metadata = AuditMetadata.generate(duration_ms=100, corpus=Corpus.load(make_pack()))
        assert metadata.corpus_checksum is not None
        assert len(metadata.corpus_checksum) == 32  # MD5 hex

    def test_empty_corpus_has_no_checksum(self, tmp_path):
        """Test an empty pack gets no checksum."""
        metadata = AuditMetadata.generate(duration_ms=1, corpus=Corpus.load(tmp_path))
        assert metadata.corpus_checksum is None

    def test_to_dict_excludes_none_values(self):
        """Test that None values are excluded from dict."""
        metadata = AuditMetadata(
            report_generated_at="2024-01-15T10:00:00Z",
            tool_version="1.0.0",
            duration_ms=100,
        )
        data = metadata.to_dict()
        assert data["report_generated_at"] == "2024-01-15T10:00:00Z"
        assert "corpus_checksum" not in data
        assert "git_commit" not in data
        assert "ci_environment" not in data


class TestLintReport:
    """Tests for LintReport."""

    def test_to_dict(self, make_pack):
        """Test report structure."""
        corpus, result = lint(make_pack())
        report = generate_lint_report(result, 12, corpus)
        data = report.to_dict()
        assert data["report_version"] == REPORT_VERSION
        assert data["pack"]["component_counts"]["agents"] == 1
        assert data["lint"]["valid"] is True
        assert data["audit_metadata"]["duration_ms"] == 12

    def test_to_json(self, make_pack):
        """Test JSON serialization round-trips through json.loads."""
        corpus, result = lint(make_pack())
        parsed = json.loads(generate_lint_report(result, 5, corpus).to_json())
        assert parsed["lint"]["layers"]["registry"]["status"] == "ALIGNED"

    def test_markdown_passed(self, make_pack):
        """Test Markdown output for a clean pack."""
        corpus, result = lint(make_pack())
        markdown = generate_lint_report(result, 5, corpus).to_markdown()
        assert markdown.startswith("# Lint Report: ")
        assert "**Status:** PASSED" in markdown
        assert "| skills | 1 |" in markdown
        assert "No issues found." in markdown
        assert "## Audit Metadata" in markdown
        assert "- **Status:** ALIGNED" in markdown

    def test_markdown_issues(self, make_pack):
        """Test Markdown output lists issues with location and suggestion."""
        agent = "---\nname: planner\ndescription: Breaks features into plans\nskills: [devops/kubernets]\n---\n# Planner\n"
        corpus, result = lint(make_pack({"agents/planner.md": agent, "registry.yaml": None}))
        markdown = generate_lint_report(result, 5, corpus).to_markdown()
        assert "**Status:** FAILED" in markdown
        assert "**REF_UNKNOWN_SKILL** `agents/planner.md:1`" in markdown
        assert "  - Suggestion: `devops/kubernetes`" in markdown

    def test_markdown_issue_limit(self, make_pack):
        """Test long issue lists are truncated."""
        files = {
            f"commands/dev/cmd-{i:03d}.md": "---\ndescription: Short\n---\n# Cmd\n"
            for i in range(MARKDOWN_ISSUE_LIMIT + 5)
        }
        corpus, result = lint(make_pack(files))
        markdown = generate_lint_report(result, 5, corpus).to_markdown()
        assert "- ... and 5 more" in markdown

    def test_markdown_engine_errors(self, tmp_path):
        """Test run-level errors appear in Markdown."""
        result = LintEngine().lint_path(tmp_path / "missing")
        markdown = generate_lint_report(result, 1).to_markdown()
        assert "- **error:** Pack root not found" in markdown

    def test_save(self, make_pack, tmp_path):
        """Test saving JSON and Markdown."""
        corpus, result = lint(make_pack())
        report = generate_lint_report(result, 5, corpus)

        json_path = tmp_path / "out" / "report.json"
        report.save(json_path)
        assert json.loads(json_path.read_text(encoding="utf-8"))["report_version"] == REPORT_VERSION

        md_path = tmp_path / "out" / "report.md"
        report.save(md_path, format="markdown")
        assert md_path.read_text(encoding="utf-8").startswith("# Lint Report")

    def test_direct_construction(self):
        """Test a report built by hand."""
        report = LintReport(
            report_version=REPORT_VERSION,
            pack={"root": "plugin", "component_counts": {}},
            lint={"valid": True, "layers": {}},
            audit_metadata=AuditMetadata("2024-01-15T10:00:00Z", TOOL_VERSION, 1),
        )
        assert "# Lint Report: plugin" in report.to_markdown()


class TestCorpusChecksum:
    """Tests for compute_corpus_checksum."""

    def test_stable(self, make_pack):
        """Test the checksum is deterministic."""
        corpus = Corpus.load(make_pack())
        assert compute_corpus_checksum(corpus) == compute_corpus_checksum(corpus)

    def test_changes_with_content(self, make_pack):
        """Test editing a component changes the checksum."""
        root = make_pack()
        before = compute_corpus_checksum(Corpus.load(root))
        path = root / "modes" / "brainstorm.md"
        path.write_text(path.read_text(encoding="utf-8") + "\nMore.\n", encoding="utf-8")
        assert compute_corpus_checksum(Corpus.load(root)) != before

    def test_deleted_file(self, make_pack):
        """Test a file removed after loading is hashed as unreadable."""
        root = make_pack()
        corpus = Corpus.load(root)
        (root / "modes" / "brainstorm.md").unlink()
        assert len(compute_corpus_checksum(corpus)) == 32


class TestReportTimer:
    """Tests for ReportTimer context manager."""

    def test_timing(self):
        """Test that timer measures duration."""
        with ReportTimer() as timer:
            time.sleep(0.01)  # 10ms

        assert timer.duration_ms >= 10

    def test_timer_zero_without_context(self):
        """Test timer starts at zero."""
        assert ReportTimer().duration_ms == 0


class TestHelperFunctions:
    """Tests for helper functions."""

    def test_get_git_commit_returns_string_or_none(self, tmp_path):
        """Test git commit retrieval."""
        commit = _get_git_commit(tmp_path)
        if commit is not None:
            assert len(commit) == 12

    def test_get_git_commit_missing_directory(self, tmp_path):
        """Test a missing working directory yields None."""
        assert _get_git_commit(tmp_path / "missing") is None

    def test_get_ci_environment_none_outside_ci(self):
        """Test CI environment detection outside CI."""
        with patch.dict("os.environ", {}, clear=True):
            assert _get_ci_environment() is None

    @pytest.mark.parametrize("env, provider", [
        ({"GITHUB_ACTIONS": "true", "GITHUB_RUN_ID": "12345"}, "github_actions"),
        ({"GITLAB_CI": "true", "CI_JOB_ID": "67890"}, "gitlab_ci"),
        ({"JENKINS_URL": "http://jenkins.example.com"}, "jenkins"),
        ({"CIRCLECI": "true", "CIRCLE_BUILD_NUM": "999"}, "circleci"),
    ])
    def test_get_ci_environment_providers(self, env, provider):
        """Test each CI provider is detected from its marker variable."""
        with patch.dict("os.environ", env, clear=True):
            detected = _get_ci_environment()
        assert detected["ci_provider"] == provider
        assert set(detected) == {"ci_provider", "build_id", "branch", "triggered_by"}

    def test_get_ci_environment_fields(self):
        """Test build, branch and actor are read for GitHub Actions."""
        env = {
            "GITHUB_ACTIONS": "true",
            "GITHUB_RUN_ID": "12345",
            "GITHUB_REF_NAME": "main",
            "GITHUB_ACTOR": "octocat",
        }
        with patch.dict("os.environ", env, clear=True):
            detected = _get_ci_environment()
        assert detected == {
            "ci_provider": "github_actions",
            "build_id": "12345",
            "branch": "main",
            "triggered_by": "octocat",
        }

    def test_first_provider_wins(self):
        """Test provider order when several markers are set."""
        with patch.dict("os.environ", {"CIRCLECI": "true", "GITLAB_CI": "true"}, clear=True):
            assert _get_ci_environment()["ci_provider"] == "gitlab_ci"


class TestReportVersions:
    """Tests for version constants."""

    def test_report_version_format(self):
        """Test report version has correct format."""
        assert REPORT_VERSION.startswith("packlint-report/")

    def test_tool_version_is_semver(self):
        """Test tool version follows semver format."""
        assert re.match(r"^\d+\.\d+\.\d+$", TOOL_VERSION)
