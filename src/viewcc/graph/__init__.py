"""Graph domain — relationship inference between scanned nodes."""

from viewcc.graph.relations import (
    EdgeCollector,
    add_declared_edges,
    add_mentioned_edges,
    build_lookup,
    find_relationships,
)

__all__ = [
    "EdgeCollector",
    "add_declared_edges",
    "add_mentioned_edges",
    "build_lookup",
    "find_relationships",
]
