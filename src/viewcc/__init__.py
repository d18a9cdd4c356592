"""viewcc - agent, skill and command graph for Claude Code projects."""

__version__ = "1.0.0"
