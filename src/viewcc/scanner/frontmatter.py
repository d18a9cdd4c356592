"""Line-oriented front matter reader for agent, skill and command markdown.

Definitions only ever use flat ``key: value`` pairs and short lists, so the
block is read with a handful of line rules instead of a YAML parser::

    ---
    name: reviewer
    description: "Reviews pull requests"
    tools:
      - Read
      - Grep
    ---

Quirks worth knowing:

- A key with an empty value and no list items after it is dropped.
- Lines that are neither ``key: value`` nor an indented ``- item`` are ignored.
- Keys may contain hyphens (``argument-hint``); read them with
  :meth:`FrontMatter.get_str` using the exact key.
"""

from __future__ import annotations

import re
from typing import Union

FrontMatterValue = Union[str, list[str]]

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(?P<block>.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)
_LIST_ITEM_RE = re.compile(r"^\s+-\s+(.+)$")
_KEY_VALUE_RE = re.compile(r"^([\w-]+):\s*(.*)$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def parse_frontmatter(content: str) -> dict[str, FrontMatterValue]:
    """Parse the leading ``---`` block of *content* into a flat mapping.

    Returns an empty dict when the document has no front matter.
    """
    match = _FRONTMATTER_RE.match(content)
    if match is None:
        return {}

    result: dict[str, FrontMatterValue] = {}
    pending_key: str | None = None
    pending_items: list[str] = []

    for line in (match.group("block") or "").splitlines():
        if not line.strip():
            continue

        item = _LIST_ITEM_RE.match(line)
        if item and pending_key is not None:
            pending_items.append(item.group(1).strip())
            continue

        kv = _KEY_VALUE_RE.match(line)
        if kv is None:
            continue

        if pending_key is not None and pending_items:
            result[pending_key] = pending_items
        pending_items = []

        key = kv.group(1)
        value = kv.group(2).strip()
        if value:
            result[key] = _unquote(value)
            pending_key = None
        else:
            pending_key = key

    if pending_key is not None and pending_items:
        result[pending_key] = pending_items

    return result


def extract_body(content: str) -> str:
    """Return *content* without its front matter block, stripped."""
    return _FRONTMATTER_RE.sub("", content, count=1).strip()


def parse_list_field(value: object) -> list[str]:
    """Normalise a list value or a comma-separated string to a list of names."""
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


class FrontMatter:
    """Read-only view over parsed front matter with typed accessors."""

    def __init__(self, data: dict[str, FrontMatterValue]) -> None:
        self._data = data

    @classmethod
    def from_text(cls, content: str) -> FrontMatter:
        return cls(parse_frontmatter(content))

    def get_str(self, key: str, default: str = "") -> str:
        """Scalar value for *key* matched by exact string; lists yield *default*."""
        value = self._data.get(key)
        if isinstance(value, str) and value:
            return value
        return default

    def get_list(self, key: str) -> list[str]:
        return parse_list_field(self._data.get(key))
