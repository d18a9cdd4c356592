"""Typed records produced by the scanners and consumed by the graph builder.

Every record has a ``to_dict()`` that yields the camelCase shape written to
``graph-data.json``.  The visualizer reads that file as-is, so field names in
the serialised form are part of the contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Literal

if TYPE_CHECKING:
    from pathlib import Path

Scope = Literal["local", "global"]
EdgeType = Literal["uses", "calls"]


@dataclass
class Node:
    """Fields shared by every scanned entity."""

    kind: ClassVar[str] = "node"

    id: str
    name: str
    description: str
    file_path: str
    scope: Scope
    # Real path the definition was read from; never serialised.
    source_path: Path | None = field(default=None, repr=False, compare=False)

    @property
    def slug(self) -> str:
        """Identifier without the ``<kind>:`` prefix."""
        return self.id.split(":", 1)[1] if ":" in self.id else self.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "name": self.name,
            "description": self.description,
            "filePath": self.file_path,
            "scope": self.scope,
        }


@dataclass
class AgentNode(Node):
    """An agent definition from ``agents/<name>.md``."""

    kind: ClassVar[str] = "agent"

    tools: list[str] = field(default_factory=list)
    model: str = ""
    subagents: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    system_prompt: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            tools=list(self.tools),
            model=self.model,
            subagents=list(self.subagents),
            skills=list(self.skills),
            systemPrompt=self.system_prompt,
        )
        return data


@dataclass
class SkillNode(Node):
    """A skill directory containing ``SKILL.md``."""

    kind: ClassVar[str] = "skill"

    triggers: list[str] = field(default_factory=list)
    has_scripts: bool = False
    has_webapp: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            triggers=list(self.triggers),
            hasScripts=self.has_scripts,
            hasWebapp=self.has_webapp,
        )
        return data


@dataclass
class CommandNode(Node):
    """A slash command from ``commands/<name>.md``."""

    kind: ClassVar[str] = "command"

    argument_hint: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["argumentHint"] = self.argument_hint
        return data


@dataclass(frozen=True)
class Edge:
    """Directed relationship between two node ids."""

    source: str
    target: str
    type: EdgeType

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target, "type": self.type}


@dataclass(frozen=True)
class ScanDiagnostic:
    """A file that was skipped during a scan, with the reason."""

    path: str
    message: str
    scope: Scope


@dataclass
class ScopeCounts:
    """Pre-merge entity counts for one scope."""

    agents: int = 0
    skills: int = 0
    commands: int = 0


@dataclass
class GraphMetadata:
    """Summary block written alongside nodes and edges."""

    generated_at: str
    project_path: str
    project_name: str
    local: ScopeCounts = field(default_factory=ScopeCounts)
    global_: ScopeCounts = field(default_factory=ScopeCounts)
    edge_count: int = 0
    node_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "projectPath": self.project_path,
            "projectName": self.project_name,
            "agentCount": self.local.agents,
            "skillCount": self.local.skills,
            "commandCount": self.local.commands,
            "edgeCount": self.edge_count,
            "globalAgentCount": self.global_.agents,
            "globalSkillCount": self.global_.skills,
            "globalCommandCount": self.global_.commands,
            "nodeCount": self.node_count,
        }


@dataclass
class GraphData:
    """The full artifact: merged nodes, inferred edges and metadata."""

    nodes: list[Node]
    edges: list[Edge]
    metadata: GraphMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "metadata": self.metadata.to_dict(),
        }
