"""
Claude Code transformer - the full-featured target.

- commands -> .claude/commands/<id>.md with YAML frontmatter
- skills   -> .claude/skills/<id>/SKILL.md with YAML frontmatter

Process steps and resolved relationships are kept as structured frontmatter.
"""

from typing import Any, Dict

from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import CanonicalModel, CommandDefinition, EntryKind, SkillDefinition
from skillforge.providers.base import (
    add_entry,
    check_entry_id,
    command_prompt,
    resolve_relationships,
    skill_instructions,
)
from skillforge.providers.encoders import YamlFrontmatterCodec

PROVIDER = Provider.CLAUDE_CODE
COMMANDS_DIR = ".claude/commands"
SKILLS_DIR = ".claude/skills"

codec = YamlFrontmatterCodec(PROVIDER.value)


def command_metadata(command: CommandDefinition, model: CanonicalModel) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"description": command.description}
    if command.argument_hint:
        metadata["argument-hint"] = command.argument_hint
    metadata["category"] = command.category.value
    if command.process_steps:
        metadata["steps"] = list(command.process_steps)

    relationships = resolve_relationships(model, command)
    if relationships.combines_with:
        metadata["combines-with"] = list(relationships.combines_with)
    if relationships.leads_to:
        metadata["leads-to"] = list(relationships.leads_to)
    if relationships.pairs:
        metadata["pairs-with"] = relationships.pairs
    return metadata


def render_command(command: CommandDefinition, model: CanonicalModel) -> str:
    body = command_prompt(command, list(model.pattern_pairs))
    return codec.encode(command_metadata(command, model), body)


def render_skill(skill: SkillDefinition, model: CanonicalModel) -> str:
    metadata = {"name": skill.id, "description": skill.description}
    return codec.encode(metadata, skill_instructions(skill, list(model.pattern_pairs)))


def transform_claude_code(model: CanonicalModel) -> ArtifactTree:
    """Map the canonical model onto the Claude Code layout."""
    tree = ArtifactTree(PROVIDER)
    for command in model.commands:
        check_entry_id(PROVIDER, EntryKind.COMMAND, command.id)
        add_entry(tree, f"{COMMANDS_DIR}/{command.id}.md", render_command(command, model),
                  EntryKind.COMMAND, command.id)
    for skill in model.skills:
        check_entry_id(PROVIDER, EntryKind.SKILL, skill.id)
        add_entry(tree, f"{SKILLS_DIR}/{skill.id}/SKILL.md", render_skill(skill, model),
                  EntryKind.SKILL, skill.id)
    return tree
