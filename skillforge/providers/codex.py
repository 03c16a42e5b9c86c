"""
Codex CLI transformer.

- commands -> .codex/prompts/<id>.md (custom prompts)
- skills   -> .codex/skills/<id>/SKILL.md

Codex frontmatter forces explicit single-quoted scalars. Relationships are
dropped.
"""

from typing import Any, Dict

from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import CanonicalModel, CommandDefinition, EntryKind, SkillDefinition
from skillforge.providers.base import (
    add_entry,
    check_entry_id,
    command_prompt,
    skill_instructions,
)
from skillforge.providers.encoders import QuotedFrontmatterCodec

PROVIDER = Provider.CODEX
PROMPTS_DIR = ".codex/prompts"
SKILLS_DIR = ".codex/skills"

codec = QuotedFrontmatterCodec(PROVIDER.value)


def render_command(command: CommandDefinition, model: CanonicalModel) -> str:
    metadata: Dict[str, Any] = {"description": command.description}
    if command.argument_hint:
        metadata["argument-hint"] = command.argument_hint
    if command.process_steps:
        metadata["steps"] = list(command.process_steps)
    body = command_prompt(command, list(model.pattern_pairs))
    return codec.encode(metadata, body, entity_id=command.id)


def render_skill(skill: SkillDefinition, model: CanonicalModel) -> str:
    metadata = {"name": skill.id, "description": skill.description}
    body = skill_instructions(skill, list(model.pattern_pairs))
    return codec.encode(metadata, body, entity_id=skill.id)


def transform_codex(model: CanonicalModel) -> ArtifactTree:
    """Map the canonical model onto the Codex CLI layout."""
    tree = ArtifactTree(PROVIDER)
    for command in model.commands:
        check_entry_id(PROVIDER, EntryKind.COMMAND, command.id)
        add_entry(tree, f"{PROMPTS_DIR}/{command.id}.md", render_command(command, model),
                  EntryKind.COMMAND, command.id)
    for skill in model.skills:
        check_entry_id(PROVIDER, EntryKind.SKILL, skill.id)
        add_entry(tree, f"{SKILLS_DIR}/{skill.id}/SKILL.md", render_skill(skill, model),
                  EntryKind.SKILL, skill.id)
    return tree
