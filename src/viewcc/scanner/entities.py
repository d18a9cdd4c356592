"""Scanners that turn a ``.claude`` tree into agent, skill and command nodes.

Each scanner looks at one subdirectory of a scope root:

- ``agents/*.md``          -> :class:`AgentNode`
- ``skills/<name>/SKILL.md`` -> :class:`SkillNode`
- ``commands/*.md``        -> :class:`CommandNode`

A missing subdirectory yields no nodes.  A file that cannot be read is
logged, recorded as a :class:`ScanDiagnostic` and skipped; its siblings are
still scanned.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Generic, TypeVar

from viewcc.scanner.frontmatter import FrontMatter, extract_body
from viewcc.scanner.models import AgentNode, CommandNode, Node, ScanDiagnostic, SkillNode
from viewcc.scanner.paths import display_path, resolve_symlink

if TYPE_CHECKING:
    from viewcc.scanner.models import Scope

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT", bound=Node)

DEFAULT_PROMPT_LIMIT = 500
DEFAULT_MAX_TRIGGERS = 5
TRUNCATION_MARKER = "..."
SKILL_FILE = "SKILL.md"

# "## Triggers", "## Trigger", "## 사용 시점" (when to use); runs to the next "##".
_TRIGGER_SECTION_RE = re.compile(
    r"##\s*(?:Triggers?|사용\s*시점).*?\n(.*?)(?=\n##|\Z)",
    re.IGNORECASE | re.DOTALL,
)


@dataclass
class ScanBatch(Generic[NodeT]):
    """Nodes found by one scanner plus the files it had to skip."""

    nodes: list[NodeT] = field(default_factory=list)
    diagnostics: list[ScanDiagnostic] = field(default_factory=list)

    def skip(self, path: Path | str, exc: Exception, scope: Scope) -> None:
        logger.warning("Skipping %s: %s", path, exc)
        self.diagnostics.append(ScanDiagnostic(path=str(path), message=str(exc), scope=scope))


def truncate_prompt(body: str, limit: int = DEFAULT_PROMPT_LIMIT) -> str:
    """Cap *body* at *limit* characters, appending a marker when cut."""
    if len(body) > limit:
        return body[:limit] + TRUNCATION_MARKER
    return body


def extract_triggers(body: str, limit: int = DEFAULT_MAX_TRIGGERS) -> list[str]:
    """Collect up to *limit* bullet items from the trigger section of *body*."""
    match = _TRIGGER_SECTION_RE.search(body)
    if match is None:
        return []

    triggers: list[str] = []
    for line in match.group(1).strip().splitlines():
        stripped = line.strip()
        if not stripped.startswith("-"):
            continue
        triggers.append(stripped[1:].strip())
        if len(triggers) >= limit:
            break
    return triggers


def _markdown_files(directory: Path) -> list[Path]:
    return sorted(
        p for p in directory.iterdir() if p.suffix == ".md" and not p.name.startswith(".")
    )


def scan_agents(
    claude_root: Path,
    scope: Scope,
    base: Path,
    *,
    prompt_limit: int = DEFAULT_PROMPT_LIMIT,
) -> ScanBatch[AgentNode]:
    """Scan ``<claude_root>/agents/*.md`` (non-recursive)."""
    batch: ScanBatch[AgentNode] = ScanBatch()
    agents_dir = claude_root / "agents"
    if not agents_dir.is_dir():
        return batch

    try:
        paths = _markdown_files(agents_dir)
    except OSError as exc:
        batch.skip(agents_dir, exc, scope)
        return batch

    for path in paths:
        try:
            real_path = resolve_symlink(path)
            content = real_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            batch.skip(path.name, exc, scope)
            continue

        meta = FrontMatter.from_text(content)
        stem = path.stem
        batch.nodes.append(
            AgentNode(
                id=f"agent:{stem}",
                name=meta.get_str("name", stem),
                description=meta.get_str("description"),
                file_path=display_path(
                    path, scope=scope, base=base, section="agents", relative=path.name
                ),
                scope=scope,
                source_path=real_path,
                tools=meta.get_list("tools"),
                model=meta.get_str("model"),
                subagents=meta.get_list("subagents"),
                skills=meta.get_list("skills"),
                system_prompt=truncate_prompt(extract_body(content), prompt_limit),
            )
        )

    logger.debug("Found %d %s agent(s) in %s", len(batch.nodes), scope, agents_dir)
    return batch


def _is_skill_dir(entry: Path) -> bool:
    if entry.is_symlink():
        try:
            return Path(os.path.realpath(entry, strict=True)).is_dir()
        except OSError:
            return False
    return entry.is_dir()


def scan_skills(
    claude_root: Path,
    scope: Scope,
    base: Path,
    *,
    max_triggers: int = DEFAULT_MAX_TRIGGERS,
) -> ScanBatch[SkillNode]:
    """Scan ``<claude_root>/skills/<name>/SKILL.md``.

    Entries that are not directories (after following symlinks) and
    directories without ``SKILL.md`` are skipped without a diagnostic.
    """
    batch: ScanBatch[SkillNode] = ScanBatch()
    skills_dir = claude_root / "skills"
    if not skills_dir.is_dir():
        return batch

    try:
        entries = sorted(skills_dir.iterdir())
    except OSError as exc:
        batch.skip(skills_dir, exc, scope)
        return batch

    for entry in entries:
        if not _is_skill_dir(entry):
            continue

        real_dir = resolve_symlink(entry)
        skill_file = real_dir / SKILL_FILE
        if not skill_file.is_file():
            continue

        try:
            content = skill_file.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            batch.skip(skill_file, exc, scope)
            continue

        meta = FrontMatter.from_text(content)
        body = extract_body(content)
        batch.nodes.append(
            SkillNode(
                id=f"skill:{entry.name}",
                name=meta.get_str("name", entry.name),
                description=meta.get_str("description"),
                file_path=display_path(
                    entry / SKILL_FILE,
                    scope=scope,
                    base=base,
                    section="skills",
                    relative=f"{entry.name}/{SKILL_FILE}",
                ),
                scope=scope,
                source_path=skill_file,
                triggers=extract_triggers(body, max_triggers),
                has_scripts=(real_dir / "scripts").exists(),
                has_webapp=(real_dir / "webapp").exists(),
            )
        )

    logger.debug("Found %d %s skill(s) in %s", len(batch.nodes), scope, skills_dir)
    return batch


def scan_commands(claude_root: Path, scope: Scope, base: Path) -> ScanBatch[CommandNode]:
    """Scan ``<claude_root>/commands/*.md`` (non-recursive)."""
    batch: ScanBatch[CommandNode] = ScanBatch()
    commands_dir = claude_root / "commands"
    if not commands_dir.is_dir():
        return batch

    try:
        paths = _markdown_files(commands_dir)
    except OSError as exc:
        batch.skip(commands_dir, exc, scope)
        return batch

    for path in paths:
        try:
            real_path = resolve_symlink(path)
            content = real_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            batch.skip(path.name, exc, scope)
            continue

        meta = FrontMatter.from_text(content)
        stem = path.stem
        batch.nodes.append(
            CommandNode(
                id=f"command:{stem}",
                name=f"/{stem}",
                description=meta.get_str("description"),
                file_path=display_path(
                    path, scope=scope, base=base, section="commands", relative=path.name
                ),
                scope=scope,
                source_path=real_path,
                argument_hint=meta.get_str("argument-hint"),
            )
        )

    logger.debug("Found %d %s command(s) in %s", len(batch.nodes), scope, commands_dir)
    return batch
