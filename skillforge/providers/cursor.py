"""
Cursor transformer.

Cursor has no metadata headers, no argument substitution and no per-skill
directories, so everything is flattened into plain Markdown:
- commands -> .cursor/commands/<id>.md
- skills   -> .cursor/rules/<id>.md

The id survives as the file name; description and process steps are folded
into the body. Relationships are dropped.
"""

from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import CanonicalModel, CommandDefinition, EntryKind, SkillDefinition
from skillforge.providers.base import (
    add_entry,
    check_entry_id,
    expand_body,
    focus_area_section,
)

PROVIDER = Provider.CURSOR
COMMANDS_DIR = ".cursor/commands"
RULES_DIR = ".cursor/rules"

# Cursor commands take no arguments
ARGUMENTS_PHRASE = "the user's target"


def render_command(command: CommandDefinition, model: CanonicalModel) -> str:
    sections = [f"# /{command.id}", command.description]
    if command.process_steps:
        steps = "\n".join(f"{i}. {step}" for i, step in enumerate(command.process_steps, start=1))
        sections.append(f"## Process\n\n{steps}")
    body = expand_body(command.body, list(model.pattern_pairs), ARGUMENTS_PHRASE)
    if body:
        sections.append(body)
    return "\n\n".join(sections) + "\n"


def render_skill(skill: SkillDefinition, model: CanonicalModel) -> str:
    sections = [f"# {skill.display_name}", skill.description]
    focus = focus_area_section(skill)
    if focus:
        sections.append(focus)
    body = expand_body(skill.body, list(model.pattern_pairs), ARGUMENTS_PHRASE)
    if body:
        sections.append(body)
    return "\n\n".join(sections) + "\n"


def transform_cursor(model: CanonicalModel) -> ArtifactTree:
    """Map the canonical model onto the Cursor layout."""
    tree = ArtifactTree(PROVIDER)
    for command in model.commands:
        check_entry_id(PROVIDER, EntryKind.COMMAND, command.id)
        add_entry(tree, f"{COMMANDS_DIR}/{command.id}.md", render_command(command, model),
                  EntryKind.COMMAND, command.id)
    for skill in model.skills:
        check_entry_id(PROVIDER, EntryKind.SKILL, skill.id)
        add_entry(tree, f"{RULES_DIR}/{skill.id}.md", render_skill(skill, model),
                  EntryKind.SKILL, skill.id)
    return tree
