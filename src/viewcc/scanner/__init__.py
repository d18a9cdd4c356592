"""Scanner domain — front matter, filesystem helpers, entity scanners."""

from viewcc.scanner.entities import (
    ScanBatch,
    extract_triggers,
    scan_agents,
    scan_commands,
    scan_skills,
    truncate_prompt,
)
from viewcc.scanner.frontmatter import (
    FrontMatter,
    extract_body,
    parse_frontmatter,
    parse_list_field,
)
from viewcc.scanner.models import (
    AgentNode,
    CommandNode,
    Edge,
    GraphData,
    GraphMetadata,
    Node,
    ScanDiagnostic,
    ScopeCounts,
    SkillNode,
)
from viewcc.scanner.paths import resolve_symlink

__all__ = [
    "AgentNode",
    "CommandNode",
    "Edge",
    "FrontMatter",
    "GraphData",
    "GraphMetadata",
    "Node",
    "ScanBatch",
    "ScanDiagnostic",
    "ScopeCounts",
    "SkillNode",
    "extract_body",
    "extract_triggers",
    "parse_frontmatter",
    "parse_list_field",
    "resolve_symlink",
    "scan_agents",
    "scan_commands",
    "scan_skills",
    "truncate_prompt",
]
