"""Relationship inference between scanned agents, skills and commands.

Edges come from two independent passes that share one collector:

1. **Declared** -- an agent's ``subagents`` and ``skills`` front matter lists,
   resolved case-insensitively against node names and id slugs.
2. **Mentioned** -- a plain substring search for every skill and command name
   in the agent's source file.  There is no word-boundary check, so
   ``"git"`` matches inside ``"digital"``.  Disable with
   ``content_heuristics=False``.

The collector keeps the first edge seen for each ``(source, target)`` pair, so
a declared ``calls`` edge is never replaced by a later ``uses`` mention.
Names that match no node produce no edge.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from viewcc.scanner.models import Edge
from viewcc.scanner.paths import global_relative

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from viewcc.scanner.models import AgentNode, CommandNode, EdgeType, Node, SkillNode

logger = logging.getLogger(__name__)


class EdgeCollector:
    """Ordered edge list deduplicated on ``(source, target)``."""

    def __init__(self) -> None:
        self._edges: list[Edge] = []
        self._seen: set[tuple[str, str]] = set()

    def add(self, source: str, target: str, edge_type: EdgeType) -> bool:
        """Add an edge; return False if the pair already exists."""
        key = (source, target)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._edges.append(Edge(source=source, target=target, type=edge_type))
        return True

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._edges)


def build_lookup(nodes: Iterable[Node]) -> dict[str, str]:
    """Map lowercased display names and id slugs to node ids."""
    lookup: dict[str, str] = {}
    for node in nodes:
        lookup[node.name.lower()] = node.id
        lookup[node.slug.lower()] = node.id
    return lookup


def add_declared_edges(
    collector: EdgeCollector,
    agents: Sequence[AgentNode],
    skills: Sequence[SkillNode],
) -> None:
    """Emit edges for subagents and skills named in agent front matter."""
    agent_ids = build_lookup(agents)
    skill_ids = build_lookup(skills)

    for agent in agents:
        for name in agent.subagents:
            target = agent_ids.get(name.strip().lower())
            if target is not None:
                collector.add(agent.id, target, "calls")
            else:
                logger.debug("%s: unknown subagent %r", agent.id, name)

        for name in agent.skills:
            target = skill_ids.get(name.strip().lower())
            if target is not None:
                collector.add(agent.id, target, "uses")
            else:
                logger.debug("%s: unknown skill %r", agent.id, name)


def agent_file(agent: AgentNode, project_root: Path, global_root: Path | None) -> Path | None:
    """Locate an agent's definition file.

    The path the scanner read is used when known; otherwise the file is
    found from the display path and scope.
    """
    if agent.source_path is not None:
        return agent.source_path
    if agent.scope == "local":
        return project_root / agent.file_path
    relative = global_relative(agent.file_path)
    if global_root is None or relative is None:
        return None
    return global_root / relative


def _mentioned(text: str, node: Node) -> bool:
    return node.name.lower() in text or node.slug.lower() in text


def add_mentioned_edges(
    collector: EdgeCollector,
    agents: Sequence[AgentNode],
    skills: Sequence[SkillNode],
    commands: Sequence[CommandNode],
    project_root: Path,
    global_root: Path | None = None,
) -> None:
    """Emit ``uses`` edges for skills and commands named in agent files.

    An agent whose file cannot be read is skipped for this pass only.
    """
    for agent in agents:
        path = agent_file(agent, project_root, global_root)
        if path is None:
            continue
        try:
            text = path.read_text(encoding="utf-8").lower()
        except (OSError, ValueError):
            logger.debug("Skipping content scan for %s: cannot read %s", agent.id, path)
            continue

        for skill in skills:
            if _mentioned(text, skill):
                collector.add(agent.id, skill.id, "uses")
        for command in commands:
            if _mentioned(text, command):
                collector.add(agent.id, command.id, "uses")


def find_relationships(
    agents: Sequence[AgentNode],
    skills: Sequence[SkillNode],
    commands: Sequence[CommandNode],
    project_root: Path,
    *,
    global_root: Path | None = None,
    content_heuristics: bool = True,
) -> list[Edge]:
    """Infer all edges for the merged node set, in first-insertion order."""
    collector = EdgeCollector()
    add_declared_edges(collector, agents, skills)
    declared = len(collector)
    if content_heuristics:
        add_mentioned_edges(collector, agents, skills, commands, project_root, global_root)
    logger.debug(
        "Inferred %d edge(s): %d declared, %d from content",
        len(collector),
        declared,
        len(collector) - declared,
    )
    return collector.edges
