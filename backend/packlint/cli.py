"""
Command-line interface for packlint.

Usage:
    packlint lint [ROOT]                 # Lint a content pack
    packlint lint --strict --format json # Fail on warnings, JSON output
    packlint graph [ROOT]                # Dependency statistics
    packlint graph -c agent:planner      # Dependency tree for one component
    packlint registry [ROOT]             # registry.yaml drift report
    packlint list [ROOT] [KIND]          # List components
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import click

from . import __version__
from .config import ConfigError, LintConfig, load_config
from .corpus import Corpus
from .graph import build_dependency_graph, format_tree
from .models import ComponentKind
from .report import ReportTimer, generate_lint_report
from .validator import LintEngine, RegistryValidator, STATUS_ALIGNED


logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
DEFAULT_PACK_DIR = "plugin"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

KIND_CHOICES = [kind.value for kind in ComponentKind] + [kind.plural for kind in ComponentKind]


def resolve_root(root: Optional[Path]) -> Path:
    """Use ROOT when given, else ./plugin if it exists, else the current directory."""
    if root is not None:
        return root
    default = Path(DEFAULT_PACK_DIR)
    return default if default.is_dir() else Path(".")


def _parse_kind(value: str) -> ComponentKind:
    return ComponentKind(value[:-1] if value.endswith("s") else value)


def _fail(message: str, code: int = EXIT_USAGE) -> NoReturn:
    click.echo(click.style("Error: ", fg="red") + message, err=True)
    raise SystemExit(code)


def _load_config(config_path: Optional[Path], root: Path) -> LintConfig:
    try:
        return load_config(config_path, root=root if root.is_dir() else None)
    except ConfigError as e:
        _fail(str(e))


def _load_corpus(root: Path, config: Optional[LintConfig] = None) -> Corpus:
    if not root.is_dir():
        _fail(f"Pack root not found: {root}", EXIT_FAILED)
    return Corpus.load(root, config)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name="packlint")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Lint and index Markdown content packs (commands, skills, agents, workflows)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("lint")
@click.argument("root", required=False, type=click.Path(path_type=Path))
@click.option("--strict", is_flag=True, help="Fail on warnings (overrides config).")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json", "markdown"]),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Configuration file.")
@click.option("--no-registry", is_flag=True, help="Skip the registry sync check.")
def lint_cmd(
    root: Optional[Path],
    strict: bool,
    output_format: str,
    output: Optional[Path],
    config_path: Optional[Path],
    no_registry: bool,
) -> None:
    """Validate frontmatter, structure, names and cross-references."""
    root = resolve_root(root)
    config = _load_config(config_path, root)
    if no_registry:
        config.check_registry = False

    engine = LintEngine(config)
    corpus = None
    with ReportTimer() as timer:
        if root.is_dir():
            corpus = Corpus.load(root, config)
            result = engine.lint(corpus, strict=strict or None)
        else:
            result = engine.lint_path(root, strict=strict or None)

    if output_format == "text":
        text = _format_text(result)
    else:
        report = generate_lint_report(result, timer.duration_ms, corpus)
        text = report.to_json() if output_format == "json" else report.to_markdown()

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        click.echo(f"Report written to {output}")
        click.echo(result.summary())
    else:
        click.echo(text)

    raise SystemExit(EXIT_OK if result.valid else EXIT_FAILED)


def _format_text(result) -> str:
    lines = []
    for message in result.errors:
        lines.append(f"error: {message}")
    for message in result.warnings:
        lines.append(f"warning: {message}")
    for issue in result.issues():
        lines.append(str(issue))
    if lines:
        lines.append("")
    lines.append(result.summary())
    return "\n".join(lines)


@cli.command("graph")
@click.argument("root", required=False, type=click.Path(path_type=Path))
@click.option(
    "-c", "--component",
    help="Show one component as KIND:ID, e.g. agent:planner or command:/dev:fix.",
)
@click.option("--json", "as_json", is_flag=True, help="Output the full graph as JSON.")
def graph_cmd(root: Optional[Path], component: Optional[str], as_json: bool) -> None:
    """Show the dependency graph between components."""
    root = resolve_root(root)
    corpus = _load_corpus(root, _load_config(None, root))
    graph = build_dependency_graph(corpus)

    if component:
        kind_name, _, component_id = component.partition(":")
        try:
            kind = _parse_kind(kind_name)
        except ValueError:
            _fail(f"Unknown component kind '{kind_name}'. Use one of: {', '.join(k.value for k in ComponentKind)}")
        tree = format_tree(graph, kind, component_id)
        if tree is None:
            _fail(f"{kind.value} '{component_id}' not found", EXIT_FAILED)
        click.echo(tree, nl=False)
        return

    if as_json:
        click.echo(json.dumps(graph.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(graph.stats.summary())


@cli.command("registry")
@click.argument("root", required=False, type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output JSON.")
def registry_cmd(root: Optional[Path], as_json: bool) -> None:
    """Check registry.yaml against the components on disk."""
    root = resolve_root(root)
    corpus = _load_corpus(root, _load_config(None, root))
    if not corpus.registry_path.is_file():
        _fail(f"No registry.yaml in {root}", EXIT_FAILED)

    result = RegistryValidator().validate(corpus)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(result.summary())

    raise SystemExit(EXIT_OK if result.status == STATUS_ALIGNED else EXIT_FAILED)


@cli.command("list")
@click.argument("root", required=False, type=click.Path(path_type=Path))
@click.argument("kind", required=False, type=click.Choice(KIND_CHOICES))
def list_cmd(root: Optional[Path], kind: Optional[str]) -> None:
    """List components grouped by kind."""
    # "packlint list skills" names a kind, not a root
    if kind is None and root is not None and str(root) in KIND_CHOICES and not root.is_dir():
        kind, root = str(root), None
    root = resolve_root(root)
    corpus = _load_corpus(root, _load_config(None, root))
    kinds = [_parse_kind(kind)] if kind else list(ComponentKind)

    for index, component_kind in enumerate(kinds):
        components = corpus.by_kind(component_kind)
        if index:
            click.echo("")
        click.echo(click.style(f"{component_kind.plural.capitalize()} ({len(components)})", bold=True))
        for component in components:
            click.echo(f"  {component.id}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
