"""
Provider transformers.

Each provider is bound to one pure function (CanonicalModel) -> ArtifactTree
through a flat dispatch table.
"""

from typing import Callable, Dict

from skillforge.errors import TransformError
from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import CanonicalModel, EntryKind
from skillforge.providers.claude_code import transform_claude_code
from skillforge.providers.codex import transform_codex
from skillforge.providers.cursor import transform_cursor
from skillforge.providers.gemini import transform_gemini

Transformer = Callable[[CanonicalModel], ArtifactTree]

TRANSFORMERS: Dict[Provider, Transformer] = {
    Provider.CURSOR: transform_cursor,
    Provider.CLAUDE_CODE: transform_claude_code,
    Provider.GEMINI: transform_gemini,
    Provider.CODEX: transform_codex,
}


def check_coverage(model: CanonicalModel, tree: ArtifactTree) -> None:
    """Every command and skill in the model must have output in the tree."""
    if not model.is_empty and tree.is_empty:
        raise TransformError("produced no files for a non-empty model", provider=tree.provider.value)
    for kind, ids in ((EntryKind.COMMAND, model.command_ids), (EntryKind.SKILL, model.skill_ids)):
        produced = set(tree.entry_ids(kind))
        for entry_id in ids:
            if entry_id not in produced:
                raise TransformError(
                    f"{kind.value} was omitted from the output",
                    provider=tree.provider.value,
                    entity_id=entry_id,
                )


def transform(provider: Provider, model: CanonicalModel) -> ArtifactTree:
    """Run one provider's transformer and verify it covered the whole model."""
    tree = TRANSFORMERS[Provider(provider)](model)
    check_coverage(model, tree)
    return tree


__all__ = [
    "TRANSFORMERS",
    "Transformer",
    "check_coverage",
    "transform",
    "transform_claude_code",
    "transform_codex",
    "transform_cursor",
    "transform_gemini",
]
