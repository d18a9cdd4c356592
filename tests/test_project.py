"""Tests for viewcc.project — scope merge, orchestration and output."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from viewcc.config import ConfigError, ScanConfig
from viewcc.project import (
    MissingRootError,
    build_graph,
    load_graph_data,
    merge_nodes,
    scan_project,
    write_graph,
)
from viewcc.scanner.models import AgentNode

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _node(slug: str, scope: str, description: str = "") -> AgentNode:
    return AgentNode(
        id=f"agent:{slug}",
        name=slug,
        description=description,
        file_path=f"{slug}.md",
        scope=scope,  # type: ignore[arg-type]
    )


def _setup_e2e(project: Path) -> None:
    """One agent calling ``helper`` and using skill ``search``."""
    claude = project / ".claude"
    _write(
        claude / "agents" / "main.md",
        "---\nname: main\nsubagents:\n  - helper\nskills:\n  - search\n---\n"
        "Coordinate the work.\n",
    )
    _write(claude / "agents" / "helper.md", "---\nname: helper\n---\nHelp out.\n")
    _write(claude / "skills" / "search" / "SKILL.md", "---\nname: search\n---\n")


# ---------------------------------------------------------------------------
# merge_nodes
# ---------------------------------------------------------------------------


class TestMergeNodes:
    def test_local_wins_on_collision(self) -> None:
        local = [_node("a", "local", "mine")]
        global_ = [_node("a", "global", "theirs"), _node("b", "global")]

        merged = merge_nodes(local, global_)

        assert [n.id for n in merged] == ["agent:a", "agent:b"]
        assert merged[0].scope == "local"
        assert merged[0].description == "mine"

    def test_empty_inputs(self) -> None:
        assert merge_nodes([], []) == []
        only_global = [_node("g", "global")]
        assert merge_nodes([], only_global) == only_global


# ---------------------------------------------------------------------------
# build_graph
# ---------------------------------------------------------------------------


class TestBuildGraph:
    def test_end_to_end(self, tmp_project: Path) -> None:
        _setup_e2e(tmp_project)

        result = build_graph(tmp_project)
        graph = result.graph

        kinds = [n.kind for n in graph.nodes]
        assert kinds.count("agent") == 2
        assert kinds.count("skill") == 1
        assert kinds.count("command") == 0
        edges = [(e.source, e.target, e.type) for e in graph.edges]
        assert ("agent:main", "agent:helper", "calls") in edges
        assert ("agent:main", "skill:search", "uses") in edges
        assert len(edges) == 2

        meta = graph.metadata.to_dict()
        assert meta["agentCount"] == 2
        assert meta["skillCount"] == 1
        assert meta["commandCount"] == 0
        assert meta["edgeCount"] == 2
        assert meta["globalAgentCount"] == 0
        assert meta["nodeCount"] == 3
        assert meta["projectName"] == "proj"
        assert meta["projectPath"] == str(tmp_project.resolve())
        assert result.diagnostics == []

    def test_precedence_and_counts(self, tmp_project: Path, global_claude: Path) -> None:
        _write(tmp_project / ".claude" / "agents" / "dup.md", "---\ndescription: local\n---\n")
        _write(global_claude / "agents" / "dup.md", "---\ndescription: global\n---\n")
        _write(global_claude / "agents" / "only-global.md", "global only")

        graph = build_graph(tmp_project).graph

        agents = {n.id: n for n in graph.nodes}
        assert set(agents) == {"agent:dup", "agent:only-global"}
        assert agents["agent:dup"].scope == "local"
        assert agents["agent:dup"].description == "local"
        assert graph.metadata.local.agents == 1
        assert graph.metadata.global_.agents == 2
        assert graph.metadata.node_count == 2

    def test_global_edges_resolve_against_local_nodes(
        self, tmp_project: Path, global_claude: Path
    ) -> None:
        _write(
            global_claude / "agents" / "boss.md",
            "---\nsubagents: worker\n---\nAsk the worker.\n",
        )
        _write(tmp_project / ".claude" / "agents" / "worker.md", "work")

        edges = build_graph(tmp_project).graph.edges

        assert [(e.source, e.target, e.type) for e in edges] == [
            ("agent:boss", "agent:worker", "calls")
        ]

    def test_idempotent(self, tmp_project: Path) -> None:
        _setup_e2e(tmp_project)
        _write(tmp_project / ".claude" / "commands" / "go.md", "---\ndescription: go\n---\n")

        first = build_graph(tmp_project).graph.to_dict()
        second = build_graph(tmp_project).graph.to_dict()

        assert first["nodes"] == second["nodes"]
        assert first["edges"] == second["edges"]

    def test_local_only_ignores_global(self, tmp_project: Path, global_claude: Path) -> None:
        _write(global_claude / "agents" / "g.md", "g")
        _write(tmp_project / ".claude" / "agents" / "l.md", "l")

        graph = build_graph(tmp_project, ScanConfig(include_global=False)).graph

        assert [n.id for n in graph.nodes] == ["agent:l"]
        assert graph.metadata.global_.agents == 0

    def test_global_only_ignores_local(self, tmp_project: Path, global_claude: Path) -> None:
        _write(global_claude / "agents" / "g.md", "g")
        _write(tmp_project / ".claude" / "agents" / "l.md", "l")

        graph = build_graph(tmp_project, ScanConfig(include_local=False)).graph

        assert [n.id for n in graph.nodes] == ["agent:g"]
        assert graph.nodes[0].file_path == "~/.claude/agents/g.md"
        assert graph.metadata.local.agents == 0

    def test_global_fallback_when_local_missing(
        self, tmp_path: Path, global_claude: Path
    ) -> None:
        _write(global_claude / "skills" / "s" / "SKILL.md", "s")
        project = tmp_path / "bare"
        project.mkdir()

        graph = build_graph(project).graph

        assert [n.id for n in graph.nodes] == ["skill:s"]

    def test_diagnostics_collected(self, tmp_project: Path) -> None:
        (tmp_project / ".claude" / "agents" / "bad.md").write_bytes(b"\xff\xfe\xfa")
        _write(tmp_project / ".claude" / "agents" / "good.md", "good")

        result = build_graph(tmp_project)

        assert [n.id for n in result.graph.nodes] == ["agent:good"]
        assert [d.path for d in result.diagnostics] == ["bad.md"]

    def test_content_heuristics_toggle(self, tmp_project: Path) -> None:
        _write(tmp_project / ".claude" / "agents" / "a.md", "Run /ship when done.")
        _write(tmp_project / ".claude" / "commands" / "ship.md", "ship")

        with_text = build_graph(tmp_project).graph.edges
        without = build_graph(tmp_project, ScanConfig(content_heuristics=False)).graph.edges

        assert [(e.source, e.target) for e in with_text] == [("agent:a", "command:ship")]
        assert without == []


class TestMissingRoots:
    def test_nothing_exists(self, tmp_path: Path) -> None:
        project = tmp_path / "bare"
        project.mkdir()
        with pytest.raises(MissingRootError, match="local: .*global: "):
            build_graph(project)

    def test_local_requested_but_missing(self, tmp_path: Path, global_claude: Path) -> None:
        project = tmp_path / "bare"
        project.mkdir()
        with pytest.raises(MissingRootError, match="No .claude folder found in") as excinfo:
            build_graph(project, ScanConfig(include_global=False))
        assert excinfo.value.local_root == project.resolve() / ".claude"

    def test_global_requested_but_missing(self, tmp_project: Path) -> None:
        with pytest.raises(MissingRootError, match="No global .claude folder"):
            build_graph(tmp_project, ScanConfig(include_local=False))

    def test_both_scopes_excluded(self, tmp_project: Path) -> None:
        with pytest.raises(ConfigError):
            build_graph(tmp_project, ScanConfig(include_local=False, include_global=False))

    def test_missing_root_is_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            build_graph(tmp_path)


# ---------------------------------------------------------------------------
# scan_project / write_graph
# ---------------------------------------------------------------------------


class TestScanProject:
    def test_writes_default_output(self, tmp_project: Path) -> None:
        _setup_e2e(tmp_project)

        result = scan_project(tmp_project)

        out = tmp_project.resolve() / ".claude" / "visualizer" / "graph-data.json"
        assert result.output_path == out
        data = json.loads(out.read_text(encoding="utf-8"))
        assert {"nodes", "edges", "metadata"} <= set(data)
        types = {n["id"]: n["type"] for n in data["nodes"]}
        assert types == {
            "agent:main": "agent",
            "agent:helper": "agent",
            "skill:search": "skill",
        }
        main = next(n for n in data["nodes"] if n["id"] == "agent:main")
        assert main["subagents"] == ["helper"]
        assert main["systemPrompt"] == "Coordinate the work."
        assert "source_path" not in main
        assert data["metadata"]["generatedAt"].endswith("Z")

    def test_explicit_output_creates_directories(self, tmp_project: Path, tmp_path: Path) -> None:
        out = tmp_path / "a" / "b" / "graph.json"

        scan_project(tmp_project, output_path=out)

        assert out.is_file()

    def test_overwrites_previous_file(self, tmp_project: Path, tmp_path: Path) -> None:
        out = tmp_path / "graph.json"
        out.write_text("stale content that is not json", encoding="utf-8")

        scan_project(tmp_project, output_path=out)

        assert json.loads(out.read_text(encoding="utf-8"))["nodes"] == []

    def test_write_failure_propagates(self, tmp_project: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a dir", encoding="utf-8")

        with pytest.raises(OSError):
            scan_project(tmp_project, output_path=blocker / "graph.json")

    def test_config_output_relative_to_project(self, tmp_project: Path) -> None:
        config = ScanConfig(output=ScanConfig().output.parent / "custom.json")

        result = scan_project(tmp_project, config)

        expected = tmp_project.resolve() / ".claude" / "visualizer" / "custom.json"
        assert result.output_path == expected


class TestLoadGraphData:
    def test_round_trip_metadata(self, tmp_project: Path, tmp_path: Path) -> None:
        result = build_graph(tmp_project)
        out = tmp_path / "g.json"
        write_graph(result.graph, out)

        data = load_graph_data(out)

        assert data["metadata"]["projectName"] == "proj"

    def test_rejects_other_json(self, tmp_path: Path) -> None:
        path = tmp_path / "x.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="not a graph data file"):
            load_graph_data(path)

    def test_rejects_non_mapping_metadata(self, tmp_path: Path) -> None:
        path = tmp_path / "x.json"
        path.write_text('{"metadata": [1]}', encoding="utf-8")
        with pytest.raises(ValueError, match="not a graph data file"):
            load_graph_data(path)
