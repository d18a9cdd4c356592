"""Project scan: local + global scopes -> merged graph -> ``graph-data.json``.

The local scope is ``<project>/.claude``; the global scope is ``~/.claude``
(see :func:`viewcc.config.default_global_dir`).  Each requested scope is
scanned independently, merged per kind with local entries winning on id
collision, and the relationship engine runs once over the merged nodes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from viewcc.config import LOCAL_DIR_NAME, ScanConfig
from viewcc.graph.relations import find_relationships
from viewcc.scanner.entities import scan_agents, scan_commands, scan_skills
from viewcc.scanner.models import (
    AgentNode,
    CommandNode,
    GraphData,
    GraphMetadata,
    Node,
    ScanDiagnostic,
    ScopeCounts,
    SkillNode,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from viewcc.scanner.models import Scope

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", bound=Node)


class MissingRootError(FileNotFoundError):
    """No requested ``.claude`` directory exists."""

    def __init__(self, message: str, *, local_root: Path, global_root: Path) -> None:
        super().__init__(message)
        self.local_root = local_root
        self.global_root = global_root


@dataclass
class ScopeScan:
    """Pre-merge scan results for one scope."""

    agents: list[AgentNode] = field(default_factory=list)
    skills: list[SkillNode] = field(default_factory=list)
    commands: list[CommandNode] = field(default_factory=list)
    diagnostics: list[ScanDiagnostic] = field(default_factory=list)

    @property
    def counts(self) -> ScopeCounts:
        return ScopeCounts(
            agents=len(self.agents), skills=len(self.skills), commands=len(self.commands)
        )


@dataclass
class ScanResult:
    """A finished scan: the graph plus every file that was skipped."""

    graph: GraphData
    diagnostics: list[ScanDiagnostic] = field(default_factory=list)
    output_path: Path | None = None

    @property
    def metadata(self) -> GraphMetadata:
        return self.graph.metadata


def merge_nodes(local: Sequence[NodeT], global_: Sequence[NodeT]) -> list[NodeT]:
    """Local nodes, then global nodes whose id is not already local."""
    local_ids = {n.id for n in local}
    return [*local, *(n for n in global_ if n.id not in local_ids)]


def scan_scope(claude_root: Path, scope: Scope, base: Path, config: ScanConfig) -> ScopeScan:
    """Run the three entity scanners over one ``.claude`` root."""
    agents = scan_agents(claude_root, scope, base, prompt_limit=config.prompt_limit)
    skills = scan_skills(claude_root, scope, base, max_triggers=config.max_triggers)
    commands = scan_commands(claude_root, scope, base)
    result = ScopeScan(
        agents=agents.nodes,
        skills=skills.nodes,
        commands=commands.nodes,
        diagnostics=[*agents.diagnostics, *skills.diagnostics, *commands.diagnostics],
    )
    logger.info(
        "Scanned %s scope %s: %d agents, %d skills, %d commands",
        scope,
        claude_root,
        len(result.agents),
        len(result.skills),
        len(result.commands),
    )
    return result


def _check_roots(
    project: Path, local_root: Path, global_root: Path, config: ScanConfig
) -> tuple[bool, bool]:
    has_local = local_root.is_dir()
    has_global = global_root.is_dir()

    msg = ""
    if config.include_local and not has_local and not config.include_global:
        msg = f"No {LOCAL_DIR_NAME} folder found in {project}"
    elif config.include_global and not has_global and not config.include_local:
        msg = f"No global {LOCAL_DIR_NAME} folder found at {global_root}"
    elif not has_local and not has_global:
        msg = (
            f"No {LOCAL_DIR_NAME} folder found "
            f"(local: {project}, global: {global_root})"
        )
    if msg:
        raise MissingRootError(msg, local_root=local_root, global_root=global_root)
    return has_local, has_global


def _timestamp() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_graph(project_root: Path, config: ScanConfig | None = None) -> ScanResult:
    """Scan the requested scopes of *project_root* and infer relationships.

    Raises :class:`~viewcc.config.ConfigError` when both scopes are excluded
    and :class:`MissingRootError` when no requested root exists.
    """
    config = config or ScanConfig()
    config.validate()

    project = project_root.resolve()
    local_root = project / LOCAL_DIR_NAME
    global_root = config.global_root()
    has_local, has_global = _check_roots(project, local_root, global_root, config)

    local = ScopeScan()
    if config.include_local and has_local:
        local = scan_scope(local_root, "local", project, config)

    global_ = ScopeScan()
    if config.include_global and has_global:
        global_ = scan_scope(global_root, "global", global_root, config)

    agents = merge_nodes(local.agents, global_.agents)
    skills = merge_nodes(local.skills, global_.skills)
    commands = merge_nodes(local.commands, global_.commands)

    edges = find_relationships(
        agents,
        skills,
        commands,
        project,
        global_root=global_root if has_global else None,
        content_heuristics=config.content_heuristics,
    )

    nodes: list[Node] = [*agents, *skills, *commands]
    metadata = GraphMetadata(
        generated_at=_timestamp(),
        project_path=str(project),
        project_name=project.name,
        local=local.counts,
        global_=global_.counts,
        edge_count=len(edges),
        node_count=len(nodes),
    )
    return ScanResult(
        graph=GraphData(nodes=nodes, edges=edges, metadata=metadata),
        diagnostics=[*local.diagnostics, *global_.diagnostics],
    )


def write_graph(graph: GraphData, output_path: Path) -> None:
    """Serialise *graph* to *output_path*, replacing any previous file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(graph.to_dict(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def scan_project(
    project_root: Path,
    config: ScanConfig | None = None,
    *,
    output_path: Path | None = None,
) -> ScanResult:
    """Build the graph for *project_root* and write it to disk.

    *output_path* defaults to ``config.output`` resolved against the project
    root.  Write failures propagate.
    """
    config = config or ScanConfig()
    result = build_graph(project_root, config)
    target = output_path or config.output_path(project_root.resolve())
    write_graph(result.graph, target)
    result.output_path = target
    logger.info(
        "Wrote %d nodes and %d edges to %s",
        result.metadata.node_count,
        result.metadata.edge_count,
        target,
    )
    return result


def load_graph_data(path: Path) -> dict[str, Any]:
    """Read a previously written ``graph-data.json``."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("metadata"), dict):
        msg = f"{path} is not a graph data file"
        raise ValueError(msg)
    return data
