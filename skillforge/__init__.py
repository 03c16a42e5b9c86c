"""
Skillforge - Cross-provider build system for design commands and skills.

This package provides tools for:
- Loading canonical command, skill and pattern definitions from a source tree
- Transforming them into Cursor, Claude Code, Gemini and Codex layouts
- Packaging each provider tree into deterministic download archives
- Orchestrating the whole build as a single fail-fast run
"""

__version__ = "0.1.0"
