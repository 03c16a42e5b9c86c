"""
Gemini CLI transformer.

- commands -> .gemini/commands/<id>.toml (description, steps, prompt)
- skills   -> .gemini/skills/<id>/SKILL.md with YAML frontmatter, as Claude Code

$ARGUMENTS becomes {{args}}. Relationships are dropped.
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
from skillforge.providers.encoders import TomlCodec, YamlFrontmatterCodec

PROVIDER = Provider.GEMINI
COMMANDS_DIR = ".gemini/commands"
SKILLS_DIR = ".gemini/skills"
ARGS_TOKEN = "{{args}}"

codec = TomlCodec(PROVIDER.value)
skill_codec = YamlFrontmatterCodec(PROVIDER.value)


def render_command(command: CommandDefinition, model: CanonicalModel) -> str:
    fields: Dict[str, Any] = {"description": command.description}
    if command.process_steps:
        fields["steps"] = list(command.process_steps)
    fields["prompt"] = command_prompt(command, list(model.pattern_pairs), ARGS_TOKEN)
    return codec.encode(fields, entity_id=command.id)


def render_skill(skill: SkillDefinition, model: CanonicalModel) -> str:
    metadata = {"name": skill.id, "description": skill.description}
    body = skill_instructions(skill, list(model.pattern_pairs), ARGS_TOKEN)
    return skill_codec.encode(metadata, body)


def transform_gemini(model: CanonicalModel) -> ArtifactTree:
    """Map the canonical model onto the Gemini CLI layout."""
    tree = ArtifactTree(PROVIDER)
    for command in model.commands:
        check_entry_id(PROVIDER, EntryKind.COMMAND, command.id)
        add_entry(tree, f"{COMMANDS_DIR}/{command.id}.toml", render_command(command, model),
                  EntryKind.COMMAND, command.id)
    for skill in model.skills:
        check_entry_id(PROVIDER, EntryKind.SKILL, skill.id)
        add_entry(tree, f"{SKILLS_DIR}/{skill.id}/SKILL.md", render_skill(skill, model),
                  EntryKind.SKILL, skill.id)
    return tree
