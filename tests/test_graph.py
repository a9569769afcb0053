"""
Tests for the dependency graph.
"""

from backend.packlint.corpus import Corpus
from backend.packlint.graph import build_dependency_graph, format_tree
from backend.packlint.models import ComponentKind


class TestBuildDependencyGraph:
    """Tests for build_dependency_graph."""

    def test_forward_references(self, make_pack):
        """Test depends_on mirrors frontmatter."""
        graph = build_dependency_graph(Corpus.load(make_pack()))
        planner = graph.get(ComponentKind.AGENT, "planner")
        assert planner.depends_on == {
            "skills": ["devops/kubernetes"],
            "commands": ["/planning:plan"],
            "mcps": [],
        }

    def test_reverse_references(self, make_pack):
        """Test used_by is filled from agents and workflows."""
        graph = build_dependency_graph(Corpus.load(make_pack()))
        skill = graph.get(ComponentKind.SKILL, "devops/kubernetes")
        assert skill.used_by == {"agents": ["planner"], "workflows": ["development/feature"]}

        command = graph.get(ComponentKind.COMMAND, "/dev:feature")
        assert command.used_by == {"agents": [], "skills": [], "workflows": ["development/feature"]}

        agent = graph.get(ComponentKind.AGENT, "planner")
        assert agent.used_by == {"workflows": ["development/feature"]}

    def test_skill_uses_command(self, make_pack):
        """Test skills can reference commands."""
        skill = (
            "---\nname: kubernetes\ndescription: Kubernetes deployment patterns\n"
            "commands: [/dev:feature]\n---\n\n# Kubernetes\n"
        )
        graph = build_dependency_graph(Corpus.load(make_pack({"skills/devops/kubernetes/SKILL.md": skill})))
        command = graph.get(ComponentKind.COMMAND, "/dev:feature")
        assert command.used_by["skills"] == ["devops/kubernetes"]

    def test_missing_targets_not_recorded(self, make_pack):
        """Test references to missing components do not create nodes."""
        agent = "---\nname: planner\ndescription: Plans\nskills: [devops/ghost]\n---\n# Planner\n"
        graph = build_dependency_graph(Corpus.load(make_pack({"agents/planner.md": agent})))
        assert graph.get(ComponentKind.SKILL, "devops/ghost") is None
        assert graph.get(ComponentKind.AGENT, "planner").depends_on["skills"] == ["devops/ghost"]

    def test_no_duplicate_users(self, make_pack):
        """Test a repeated reference is recorded once."""
        agent = (
            "---\nname: planner\ndescription: Plans\n"
            "skills: [devops/kubernetes, devops/kubernetes]\n---\n# Planner\n"
        )
        graph = build_dependency_graph(Corpus.load(make_pack({"agents/planner.md": agent})))
        assert graph.get(ComponentKind.SKILL, "devops/kubernetes").used_by["agents"] == ["planner"]

    def test_stats(self, make_pack):
        """Test component and reference counts."""
        stats = build_dependency_graph(Corpus.load(make_pack())).stats
        assert stats.to_dict() == {
            "agents": 1,
            "workflows": 1,
            "skills": 1,
            "commands": 2,
            "modes": 1,
            "total_skill_refs": 2,
            "total_command_refs": 2,
            "total_agent_refs": 1,
        }
        assert stats.summary().startswith("Dependency Graph Statistics")

    def test_to_dict_excludes_modes(self, make_pack):
        """Test JSON output groups nodes by kind."""
        data = build_dependency_graph(Corpus.load(make_pack())).to_dict()
        assert set(data["graph"]) == {"commands", "skills", "agents", "workflows"}
        assert data["graph"]["agents"]["planner"]["path"] == "agents/planner.md"

    def test_empty_corpus(self, tmp_path):
        """Test an empty pack gives an empty graph."""
        graph = build_dependency_graph(Corpus.load(tmp_path))
        assert graph.stats.agents == 0
        assert graph.to_dict()["graph"]["skills"] == {}


class TestFormatTree:
    """Tests for format_tree."""

    def test_agent_tree(self, make_pack):
        """Test an agent shows what it uses."""
        graph = build_dependency_graph(Corpus.load(make_pack()))
        tree = format_tree(graph, ComponentKind.AGENT, "planner")
        lines = tree.splitlines()
        assert lines[0] == "Dependency Graph: planner"
        assert "Agent: planner" in lines
        assert "Uses Skills (1):" in lines
        assert "Uses Commands (1):" in lines
        assert "Uses Mcps" not in tree
        assert any(line.startswith("   `-- devops/kubernetes - ") for line in lines)
        assert tree.endswith("\n")

    def test_skill_usage_tree(self, make_pack):
        """Test a skill shows what uses it."""
        graph = build_dependency_graph(Corpus.load(make_pack()))
        tree = format_tree(graph, ComponentKind.SKILL, "devops/kubernetes")
        assert tree.startswith("Usage Graph: devops/kubernetes")
        assert "Used By Agents (1):" in tree
        assert "Used By Workflows (1):" in tree

    def test_missing_dependency_marked(self, make_pack):
        """Test references to missing components are marked."""
        agent = "---\nname: planner\ndescription: Plans\nskills: [devops/ghost]\n---\n# Planner\n"
        graph = build_dependency_graph(Corpus.load(make_pack({"agents/planner.md": agent})))
        tree = format_tree(graph, ComponentKind.AGENT, "planner")
        assert "`-- devops/ghost (missing)" in tree

    def test_branch_markers(self, make_pack):
        """Test all but the last item use the middle branch marker."""
        workflow = (
            "---\nname: feature\ndescription: Feature workflow\n"
            "commands: [/dev:feature, /planning:plan]\n---\n# Feature\n"
        )
        graph = build_dependency_graph(Corpus.load(make_pack({"workflows/development/feature.md": workflow})))
        tree = format_tree(graph, ComponentKind.WORKFLOW, "development/feature")
        assert "   |-- /dev:feature - Implement a feature end to end with tests" in tree
        assert "   `-- /planning:plan - Create an implementation plan for a feature" in tree

    def test_unknown_component(self, make_pack):
        """Test unknown ids return None."""
        graph = build_dependency_graph(Corpus.load(make_pack()))
        assert format_tree(graph, ComponentKind.AGENT, "nobody") is None
