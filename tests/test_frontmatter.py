"""
Tests for frontmatter parsing and identifier helpers.
"""

import pytest

from backend.packlint.frontmatter import (
    FrontmatterError,
    as_list,
    load_frontmatter,
    normalize_id,
    parse_command_id,
    parse_frontmatter,
    parse_skill_id,
    split_frontmatter,
)


class TestSplitFrontmatter:
    """Tests for split_frontmatter."""

    def test_simple_document(self):
        content = "---\nname: test\n---\n\n# Title\n"
        raw, body, body_line = split_frontmatter(content)
        assert raw == "name: test"
        assert body == "\n# Title\n"
        assert body_line == 4

    def test_empty_block(self):
        raw, body, body_line = split_frontmatter("---\n---\nbody")
        assert raw == ""
        assert body == "body"
        assert body_line == 3

    def test_windows_line_endings(self):
        raw, body, _ = split_frontmatter("---\r\nname: x\r\n---\r\nbody")
        assert raw == "name: x"
        assert body == "body"

    def test_missing_opening_delimiter(self):
        assert split_frontmatter("name: test\n---\nbody") is None

    def test_missing_closing_delimiter(self):
        assert split_frontmatter("---\nname: test\nbody") is None

    def test_delimiter_with_trailing_spaces(self):
        """Test a delimiter line must be exactly three dashes."""
        assert split_frontmatter("---   \nname: test\n---\nbody") is None
        assert split_frontmatter("---\nname: test\n---  \nbody") is None

    def test_later_exact_delimiter_closes(self):
        raw, body, body_line = split_frontmatter("---\nname: test\n--- \n---\nbody")
        assert raw == "name: test\n--- "
        assert body == "body"
        assert body_line == 5

    def test_non_string(self):
        assert split_frontmatter(None) is None


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_parses_lists(self):
        doc = parse_frontmatter("---\nname: a\nskills:\n  - x/y\n  - x/z\n---\nBody")
        assert doc.data == {"name": "a", "skills": ["x/y", "x/z"]}
        assert doc.body == "Body"

    def test_missing_block(self):
        with pytest.raises(FrontmatterError) as exc_info:
            parse_frontmatter("# Just markdown")
        assert exc_info.value.code == "FM_MISSING"

    def test_padded_delimiter_is_missing_block(self):
        """Test an opening line with trailing spaces is not frontmatter."""
        with pytest.raises(FrontmatterError) as exc_info:
            parse_frontmatter("--- \nname: a\n---\n# A\n")
        assert exc_info.value.code == "FM_MISSING"

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError) as exc_info:
            parse_frontmatter("---\nname: [unclosed\n---\n")
        assert exc_info.value.code == "FM_INVALID_YAML"

    def test_non_mapping(self):
        with pytest.raises(FrontmatterError) as exc_info:
            parse_frontmatter("---\n- a\n- b\n---\n")
        assert "mapping" in str(exc_info.value)

    def test_comment_only_block(self):
        assert parse_frontmatter("---\n# just a comment\n---\n").data == {}

    def test_rejects_python_tags(self):
        content = "---\nname: !!python/object/apply:os.system ['echo hi']\n---\n"
        with pytest.raises(FrontmatterError):
            parse_frontmatter(content)

    def test_unicode_preserved(self):
        doc = parse_frontmatter("---\ndescription: Mixed ABC 你好 123\n---\n")
        assert doc.data["description"] == "Mixed ABC 你好 123"

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_frontmatter("")


class TestLoadFrontmatter:
    """Tests for the lenient loader."""

    @pytest.mark.parametrize("content", ["", "---", "---\n: : :\n---", "\x00\x01", "---\n[\n---\n"])
    def test_never_raises(self, content):
        assert load_frontmatter(content) is None or isinstance(load_frontmatter(content), dict)

    def test_valid(self):
        assert load_frontmatter("---\ndescription: hi\n---\n") == {"description": "hi"}


class TestIdentifiers:
    """Tests for command and skill id parsing."""

    def test_valid_command_id(self):
        parsed = parse_command_id("/dev:feature")
        assert parsed.namespace == "dev"
        assert parsed.name == "feature"
        assert str(parsed) == "/dev:feature"

    @pytest.mark.parametrize("value", [
        "dev:feature",        # missing slash
        "/devfeature",        # missing colon
        "/dev:a:b",           # two colons
        "/:feature",          # empty namespace
        "/dev:",              # empty command
        "/DEV:FEATURE",       # uppercase
        None,
        42,
    ])
    def test_invalid_command_ids(self, value):
        assert parse_command_id(value) is None

    def test_valid_skill_id(self):
        parsed = parse_skill_id("devops/kubernetes")
        assert parsed.category == "devops"
        assert parsed.name == "kubernetes"
        assert str(parsed) == "devops/kubernetes"

    @pytest.mark.parametrize("value", [
        "/devops/kubernetes",
        "devops",
        "a/b/c",
        "../etc",
        "devops/Kubernetes",
        "",
    ])
    def test_invalid_skill_ids(self, value):
        assert parse_skill_id(value) is None

    def test_normalize_id(self):
        assert normalize_id("  /Dev:Fix ") == "/dev:fix"
        assert normalize_id("") is None
        assert normalize_id(None) is None


class TestAsList:
    """Tests for reference list normalization."""

    def test_list(self):
        assert as_list(["a", " b ", None, ""]) == ["a", "b"]

    def test_comma_string(self):
        assert as_list("Read, Write,Bash") == ["Read", "Write", "Bash"]

    def test_none(self):
        assert as_list(None) == []
