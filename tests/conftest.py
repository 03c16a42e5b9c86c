from pathlib import Path

import pytest

from skillforge.engine.orchestrator import BuildOrchestrator
from skillforge.store.mirror import MirrorSync
from skillforge.store.packaging import PackagingService
from skillforge.store.source_repository import SourceRepository

from tests.helpers import write_definition, write_patterns


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """A small but complete definition store."""
    root = tmp_path / "source"
    commands = root / "commands"
    skills = root / "skills"

    write_definition(
        commands,
        "audit.md",
        {
            "name": "audit",
            "description": "Find problems",
            "category": "diagnostic",
            "steps": ["Scan", "Report"],
            "leads_to": ["polish", "ghost"],
            "argument_hint": "[area]",
        },
        "Audit $ARGUMENTS for issues.\n\n{{patterns}}",
    )
    write_definition(
        commands,
        "bolder.md",
        {
            "name": "bolder",
            "description": "Amplify a timid design",
            "category": "intensity",
            "pairs": "quieter",
            "combines_with": ["polish"],
        },
        "Make $ARGUMENTS bolder.",
    )
    write_definition(
        commands,
        "polish.md",
        {"name": "polish", "description": "Final pass", "category": "quality"},
    )
    write_definition(
        commands,
        "quieter.md",
        {
            "name": "quieter",
            "description": "Tone down an aggressive design",
            "category": "intensity",
            "pairs": "bolder",
            "ready": False,
        },
        "Make it calmer.",
    )
    write_definition(
        skills,
        "ux-writing.md",
        {
            "name": "ux-writing",
            "description": "Write clear interface copy",
            "focus_areas": [
                {"area": "Labels", "detail": "Verbs over nouns"},
                {"area": "Errors", "detail": "Say how to fix it"},
            ],
        },
        "Use plain language.",
    )
    write_patterns(
        root,
        patterns=[
            {"name": "diagnostic", "items": ["Check contrast"]},
            {"name": "typography", "items": ["Use a type scale"]},
        ],
        antipatterns=[
            {"name": "diagnostic", "items": ["Skip review"]},
            {"name": "color", "items": ["Pure black on white"]},
        ],
    )
    return root


@pytest.fixture
def model(source_root: Path):
    return SourceRepository(source_root).load()


@pytest.fixture
def make_orchestrator(tmp_path: Path, source_root: Path):
    """Factory for an orchestrator writing everything under tmp_path."""

    def _make(**kwargs) -> BuildOrchestrator:
        options = dict(
            repository=SourceRepository(source_root),
            packaging=PackagingService(
                dist_dir=tmp_path / "dist",
                download_dir=tmp_path / "dist" / "downloads",
            ),
            mirror=MirrorSync(tmp_path / "mirror"),
            include_pending=True,
            parallel=False,
            sync_mirror=True,
        )
        options.update(kwargs)
        return BuildOrchestrator(**options)

    return _make
