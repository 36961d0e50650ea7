from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Final

import typer
from click.core import ParameterSource
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from errors import DepTreeError
from loaders.config_loader import DEFAULT_CONFIG_FILE, sample_config
from loaders.yaml_loader import YamlLoader
from models.base import ModuleID
from models.graph import ModuleGraph
from pipeline import AnalysisPipeline
from tui.app import TuiApp

from .base import VERSION, CliState, files_from_args, with_default_command

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="dep-tree",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Visualize and check your project's dependency graph.",
)

console = Console()

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

FilesArgument = Annotated[
    list[Path],
    typer.Argument(help="Entry files the dependency graph is built from."),
]


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Report dep-tree errors in red and exit with code 1."""
    try:
        yield
    except DepTreeError as e:
        logger.debug("Fatal error", exc_info=True)
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from e


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"dep-tree v{VERSION}")
        raise typer.Exit()


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _pipeline(ctx: typer.Context, files: list[Path]) -> AnalysisPipeline:
    config = _state(ctx).load_config()
    return AnalysisPipeline(entry_files=files_from_args(files), config=config)


def _report_node_errors(graph: ModuleGraph) -> int:
    count = 0
    for module_id, error in graph.all_errors():
        count += 1
        typer.secho(f"{graph.relative(module_id)}: {error.message}", fg=typer.colors.YELLOW, err=True)
    return count


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help=f"Path to dep-tree's config file. (default {DEFAULT_CONFIG_FILE})",
            dir_okay=False,
        ),
    ] = None,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            help="Project root used to resolve absolute imports. (default current directory)",
            file_okay=False,
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            help="Files that match this glob pattern will be ignored. Repeatable.",
        ),
    ] = None,
    unwrap_exports: Annotated[
        bool,
        typer.Option(
            "--unwrap-exports",
            help="Trace re-exported symbols to the file where they are declared.",
        ),
    ] = False,
    js_tsconfig_paths: Annotated[
        bool,
        typer.Option(
            "--js-tsconfig-paths/--no-js-tsconfig-paths",
            help="Follow the tsconfig.json paths while resolving imports.",
        ),
    ] = True,
    js_workspaces: Annotated[
        bool,
        typer.Option(
            "--js-workspaces/--no-js-workspaces",
            help="Take the workspaces of the root package.json into account.",
        ),
    ] = True,
    python_exclude_conditional_imports: Annotated[
        bool,
        typer.Option(
            "--python-exclude-conditional-imports",
            help="Exclude imports wrapped inside if or try statements.",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option("--workers", min=1, help="Number of files processed in parallel."),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level.", case_sensitive=False),
    ] = "WARNING",
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=_print_version,
            is_eager=True,
            help="Print the version and exit.",
        ),
    ] = False,
) -> None:
    """Visualize and check your project's dependency graph."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT, force=True)

    # Flags only override the config file when given explicitly.
    def given(name: str) -> bool:
        return ctx.get_parameter_source(name) not in (ParameterSource.DEFAULT, None)

    overrides: dict[str, object] = {"root": root, "exclude": exclude, "workers": workers}
    for option, field, value in (
        ("unwrap_exports", "unwrap_re_exports", unwrap_exports),
        ("js_tsconfig_paths", "follow_path_aliases", js_tsconfig_paths),
        ("js_workspaces", "follow_workspaces", js_workspaces),
        (
            "python_exclude_conditional_imports",
            "exclude_conditional_imports",
            python_exclude_conditional_imports,
        ),
    ):
        if given(option):
            overrides[field] = value
    ctx.obj = CliState(config_path=config_path, overrides=overrides)


@app.command("render")
def render(ctx: typer.Context, files: FilesArgument) -> None:
    """Browse the dependency graph in the terminal.

    Args:
        ctx: Typer context carrying the global options.
        files: Entry files; the first one is selected initially.
    """
    with _fatal_errors():
        pipeline = _pipeline(ctx, files)
        graph = pipeline.graph
        entry = graph.entry_ids[0] if graph.entry_ids else None
        tui = TuiApp(graph=graph, selected_id=entry, config=pipeline.config.tui)
    tui.run(console=console)


@app.command("entropy")
def entropy(
    ctx: typer.Context,
    files: FilesArgument,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Only show the N highest scores."),
    ] = None,
) -> None:
    """Print the entropy of every module and of the whole graph.

    Args:
        ctx: Typer context carrying the global options.
        files: Entry files.
        limit: Maximum number of modules listed.
    """
    with _fatal_errors():
        pipeline = _pipeline(ctx, files)
        graph = pipeline.graph
        report = pipeline.entropy()
        cycles = pipeline.cycles()

    table = Table(title=f"Module entropy ({report.weighting} weighting)")
    table.add_column("Module")
    table.add_column("Entropy", justify="right")
    table.add_column("Deps", justify="right")
    table.add_column("Dependents", justify="right")
    table.add_column("Weight", justify="right")

    rows = sorted(
        report.nodes.items(), key=lambda item: (-item[1].entropy, graph.relative(item[0]))
    )
    for module_id, node in rows[:limit]:
        table.add_row(
            graph.relative(module_id),
            f"{node.entropy:.3f}",
            str(node.out_degree),
            str(node.in_degree),
            str(node.weight),
        )
    console.print(table)
    console.print(f"Graph entropy: [bold]{report.graph_entropy:.3f}[/bold]")

    if cycles:
        console.print(f"[red]{len(cycles)} circular dependencies found:[/red]")
        for cycle in cycles:
            console.print("  " + " -> ".join(graph.relative(member) for member in cycle.members))
    _report_node_errors(graph)


def _add_branch(
    branch: Tree,
    graph: ModuleGraph,
    module_id: ModuleID,
    ancestors: set[ModuleID],
    expanded: set[ModuleID],
    max_depth: int | None,
    depth: int,
) -> None:
    for dependency in graph.dependencies(module_id):
        label = graph.relative(dependency)
        if graph.node(dependency).errors:
            label = f"[yellow]![/yellow] {label}"
        if dependency in ancestors:
            branch.add(f"[red]{label} (cycle)[/red]")
            continue
        if dependency in expanded and graph.dependencies(dependency):
            branch.add(f"{label} [dim]...[/dim]")
            continue
        child = branch.add(label)
        expanded.add(dependency)
        if max_depth is None or depth < max_depth:
            _add_branch(
                child, graph, dependency, ancestors | {dependency}, expanded, max_depth, depth + 1
            )


@app.command("tree")
def tree(
    ctx: typer.Context,
    files: FilesArgument,
    depth: Annotated[
        int | None,
        typer.Option("--depth", "-d", min=1, help="Maximum depth of the printed tree."),
    ] = None,
) -> None:
    """Print the dependency tree of each entry file.

    Args:
        ctx: Typer context carrying the global options.
        files: Entry files.
        depth: Maximum depth of the printed tree.
    """
    with _fatal_errors():
        graph = _pipeline(ctx, files).graph

    for entry in graph.entry_ids:
        root = Tree(f"[bold]{graph.relative(entry)}[/bold]")
        _add_branch(root, graph, entry, {entry}, {entry}, depth, 1)
        console.print(root)
    _report_node_errors(graph)


@app.command("check")
def check(
    ctx: typer.Context,
    files: Annotated[
        list[Path] | None,
        typer.Argument(help="Entry files. Defaults to the configured check entrypoints."),
    ] = None,
) -> None:
    """Check the dependency graph against the configured rules.

    Exits with code 1 when at least one violation is found.

    Args:
        ctx: Typer context carrying the global options.
        files: Entry files, overriding ``check.entrypoints``.
    """
    with _fatal_errors():
        config = _state(ctx).load_config()
        if not files:
            root = config.root or Path.cwd()
            files = [
                path if path.is_absolute() else root / path for path in config.check.entrypoints
            ]
        pipeline = AnalysisPipeline(entry_files=files_from_args(files), config=config)
        violations = pipeline.check()
        graph = pipeline.graph

    _report_node_errors(graph)
    if not violations:
        typer.secho(
            f"No violations in {len(graph.edges)} dependencies of {len(graph)} modules",
            fg=typer.colors.GREEN,
        )
        return

    for violation in violations:
        typer.secho(
            f"{graph.relative(violation.src)} -> {graph.relative(violation.dst)}: "
            f"{violation.reason}",
            fg=typer.colors.RED,
        )
    typer.secho(f"{len(violations)} violations found", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("export")
def export(
    ctx: typer.Context,
    files: FilesArgument,
    output_path: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Path to write the YAML graph to. (default standard output)",
            file_okay=True,
            dir_okay=False,
            writable=True,
            resolve_path=True,
        ),
    ] = None,
) -> None:
    """Export the dependency graph, its cycles and entropy as YAML.

    Args:
        ctx: Typer context carrying the global options.
        files: Entry files.
        output_path: Destination file.
    """
    with _fatal_errors():
        pipeline = _pipeline(ctx, files)
        graph = pipeline.graph
        cycles = pipeline.cycles()
        report = pipeline.entropy()

    loader = YamlLoader(output_path)
    if output_path is None:
        typer.echo(loader.dumps(graph, cycles, report), nl=False)
        return
    loader.load(graph, cycles, report)
    typer.secho(
        f"Exported {len(graph)} modules and {len(graph.edges)} dependencies into {output_path}",
        fg=typer.colors.GREEN,
    )


@app.command("config")
def config(
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help=f"Write the sample into {DEFAULT_CONFIG_FILE}."),
    ] = False,
) -> None:
    """Print a sample configuration file.

    Args:
        write: Write it into the current directory instead of printing it.
    """
    content = sample_config()
    if not write:
        typer.echo(content, nl=False)
        return

    target = Path.cwd() / DEFAULT_CONFIG_FILE
    if target.exists():
        typer.secho(f"{target} already exists", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    target.write_text(content, encoding="utf-8")
    typer.secho(f"Wrote {target}", fg=typer.colors.GREEN)


def main() -> None:
    """Entry point for executing the Typer application."""
    app(args=with_default_command(sys.argv[1:]), prog_name="dep-tree")


if __name__ == "__main__":
    main()
