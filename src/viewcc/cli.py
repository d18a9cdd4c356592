"""viewcc CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from viewcc import __version__


@click.group()
@click.version_option(version=__version__, prog_name="viewcc")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """viewcc - agent, skill and command graph for Claude Code projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    # Skipped files are echoed from scan diagnostics; log records need --verbose.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_scopes(local_only: bool, global_only: bool) -> tuple[bool | None, bool | None]:
    """Map ``--local`` / ``--global`` to include flags (``None`` = use config)."""
    if local_only and global_only:
        msg = "--local and --global are mutually exclusive"
        raise click.UsageError(msg)
    if local_only:
        return True, False
    if global_only:
        return False, True
    return None, None


@main.command()
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Graph file (default: .claude/visualizer/graph-data.json).",
)
@click.option("--local", "-l", "local_only", is_flag=True, help="Scan only the project scope.")
@click.option("--global", "-g", "global_only", is_flag=True, help="Scan only ~/.claude.")
@click.option(
    "--no-heuristics",
    is_flag=True,
    default=False,
    help="Only use declared subagents/skills; skip content matching.",
)
@click.option("--json", "output_json", is_flag=True, help="Print metadata as JSON.")
@click.pass_context
def scan(
    ctx: click.Context,
    *,
    project: Path | None,
    output: Path | None,
    local_only: bool,
    global_only: bool,
    no_heuristics: bool,
    output_json: bool,
) -> None:
    """Scan agents, skills and commands and write the graph file."""
    from viewcc.config import ConfigError, load_config
    from viewcc.project import MissingRootError, build_graph, write_graph

    project_root = project or Path.cwd()
    include_local, include_global = _resolve_scopes(local_only, global_only)
    config = load_config(project_root).with_overrides(
        include_local=include_local,
        include_global=include_global,
        content_heuristics=False if no_heuristics else None,
    )

    try:
        result = build_graph(project_root, config)
    except (MissingRootError, ConfigError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    result.output_path = output or config.output_path(project_root.resolve())
    try:
        write_graph(result.graph, result.output_path)
    except OSError as exc:
        click.echo(f"Error: failed to write graph file: {exc}", err=True)
        sys.exit(1)

    meta = result.metadata
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))

    if output_json:
        click.echo(json.dumps(meta.to_dict(), ensure_ascii=False, indent=2))
    elif not quiet:
        click.echo("Scan complete")
        if config.include_local:
            click.echo(
                f"  Local:  Agents: {meta.local.agents}, "
                f"Skills: {meta.local.skills}, Commands: {meta.local.commands}"
            )
        if config.include_global:
            click.echo(
                f"  Global: Agents: {meta.global_.agents}, "
                f"Skills: {meta.global_.skills}, Commands: {meta.global_.commands}"
            )
        click.echo(f"  Edges: {meta.edge_count}")
        click.echo(f"  Output: {result.output_path}")

    if result.diagnostics and not quiet:
        click.echo("", err=output_json)
        for diag in result.diagnostics:
            click.echo(f"  [warn] {diag.path}: {diag.message}", err=output_json)


@main.command()
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Graph file (default: .claude/visualizer/graph-data.json).",
)
@click.option("--json", "output_json", is_flag=True, help="Print metadata as JSON.")
def status(*, project: Path | None, output: Path | None, output_json: bool) -> None:
    """Show the summary of an existing graph file without rescanning."""
    from viewcc.config import load_config
    from viewcc.project import load_graph_data

    project_root = project or Path.cwd()
    data_path = output or load_config(project_root).output_path(project_root)

    if not data_path.is_file():
        click.echo(f"Error: {data_path} not found. Run `viewcc scan` first.", err=True)
        sys.exit(1)

    try:
        data = load_graph_data(data_path)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    meta: dict[str, object] = data["metadata"]
    if output_json:
        click.echo(json.dumps(meta, ensure_ascii=False, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title=f"{meta.get('projectName', '')}", box=None, padding=(0, 1))
    table.add_column("scope", style="cyan")
    table.add_column("agents", justify="right")
    table.add_column("skills", justify="right")
    table.add_column("commands", justify="right")
    table.add_row(
        "local",
        str(meta.get("agentCount", 0)),
        str(meta.get("skillCount", 0)),
        str(meta.get("commandCount", 0)),
    )
    table.add_row(
        "global",
        str(meta.get("globalAgentCount", 0)),
        str(meta.get("globalSkillCount", 0)),
        str(meta.get("globalCommandCount", 0)),
    )
    console.print(table)
    console.print(f"  Edges: [bold]{meta.get('edgeCount', 0)}[/]")
    console.print(f"  Generated: {meta.get('generatedAt', '?')}")
