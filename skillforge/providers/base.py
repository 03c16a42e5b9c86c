"""
Helpers shared by the provider transformers.

Nothing here holds state; every function maps canonical data to text.
"""

import re
from typing import List, Optional

from jinja2 import Template

from skillforge.errors import DanglingReferenceError, TransformError
from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import (
    CanonicalModel,
    CommandDefinition,
    EntryKind,
    PatternPair,
    Relationships,
    SkillDefinition,
)


SAFE_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
PATTERNS_PLACEHOLDER_RE = re.compile(r"\{\{\s*patterns\s*\}\}")
ARGUMENTS_TOKEN = "$ARGUMENTS"

PATTERNS_TEMPLATE = Template(
    """\
## Design Patterns
{% for pair in pairs %}

### {{ pair.name }}
{% if pair.patterns %}

**Do:**
{% for item in pair.patterns %}
- {{ item }}
{% endfor %}
{% endif %}
{% if pair.antipatterns %}

**Don't:**
{% for item in pair.antipatterns %}
- {{ item }}
{% endfor %}
{% endif %}
{% endfor %}
""",
    trim_blocks=True,
    lstrip_blocks=True,
)


def check_entry_id(provider: Provider, kind: EntryKind, entry_id: str) -> None:
    """Ids become file or directory names in every layout."""
    if not SAFE_ID_RE.match(entry_id) or ".." in entry_id:
        raise TransformError(
            f"{kind.value} id {entry_id!r} is not a valid file name",
            provider=provider.value,
            entity_id=entry_id,
        )


def add_entry(
    tree: ArtifactTree,
    path: str,
    content: str,
    kind: EntryKind,
    entry_id: str,
) -> None:
    try:
        tree.add(path, content, kind=kind, entry_id=entry_id)
    except ValueError as e:
        raise TransformError(str(e), provider=tree.provider.value, entity_id=entry_id) from e


def find_dangling_references(model: CanonicalModel) -> List[DanglingReferenceError]:
    """Every relationship reference that does not name a known command."""
    known = set(model.command_ids)
    dangling = []
    for command in model.commands:
        rel = command.relationships
        for relation, ids in (("combines_with", rel.combines_with), ("leads_to", rel.leads_to)):
            for ref in ids:
                if ref not in known:
                    dangling.append(DanglingReferenceError(command.id, ref, relation))
        if rel.pairs and rel.pairs not in known:
            dangling.append(DanglingReferenceError(command.id, rel.pairs, "pairs"))
    return dangling


def resolve_relationships(model: CanonicalModel, command: CommandDefinition) -> Relationships:
    """Copy of the command's relationships with unknown ids removed."""
    known = set(model.command_ids)
    rel = command.relationships
    return Relationships(
        combines_with=tuple(r for r in rel.combines_with if r in known),
        leads_to=tuple(r for r in rel.leads_to if r in known),
        pairs=rel.pairs if rel.pairs in known else None,
    )


def render_patterns(pairs) -> str:
    pairs = list(pairs)
    if not pairs:
        return ""
    return PATTERNS_TEMPLATE.render(pairs=pairs).strip()


def expand_body(body: str, pairs: List[PatternPair], arguments: Optional[str] = None) -> str:
    """
    Resolve body placeholders.

    Args:
        body: Canonical body text
        pairs: Pattern pairs rendered in place of {{patterns}}
        arguments: Replacement for $ARGUMENTS, or None to keep it
    """
    if arguments is not None:
        body = body.replace(ARGUMENTS_TOKEN, arguments)
    if PATTERNS_PLACEHOLDER_RE.search(body):
        rendered = render_patterns(pairs)
        body = PATTERNS_PLACEHOLDER_RE.sub(lambda _m: rendered, body)
    return body.strip()


def command_prompt(command: CommandDefinition, pairs: List[PatternPair], arguments: Optional[str] = None) -> str:
    """Command instructions; falls back to the description when there is no body."""
    body = expand_body(command.body, pairs, arguments)
    return body or command.description


def focus_area_section(skill: SkillDefinition) -> str:
    if not skill.focus_areas:
        return ""
    lines = ["## Focus Areas", ""]
    for focus in skill.focus_areas:
        if focus.detail:
            lines.append(f"- **{focus.area}**: {focus.detail}")
        else:
            lines.append(f"- **{focus.area}**")
    return "\n".join(lines)


def skill_instructions(skill: SkillDefinition, pairs: List[PatternPair], arguments: Optional[str] = None) -> str:
    """Focus areas followed by the skill body, description when both are empty."""
    parts = [focus_area_section(skill), expand_body(skill.body, pairs, arguments)]
    text = "\n\n".join(p for p in parts if p)
    return text or skill.description
