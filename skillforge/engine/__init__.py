"""Core engine components for the Skillforge build."""

from skillforge.engine.orchestrator import BuildOrchestrator, build

__all__ = [
    "BuildOrchestrator",
    "build",
]
