"""
Canonical definition models.

This module defines the provider-independent source of truth: commands,
skills and the paired pattern/antipattern lists. A CanonicalModel is built
once per run and never mutated afterwards.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import re


KEBAB_ID_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CommandCategory(str, Enum):
    """Closed set of command categories."""
    DIAGNOSTIC = "diagnostic"
    QUALITY = "quality"
    INTENSITY = "intensity"
    ADAPTATION = "adaptation"
    ENHANCEMENT = "enhancement"
    SYSTEM = "system"


class EntryKind(str, Enum):
    """Kind of a downloadable entry."""
    COMMAND = "command"
    SKILL = "skill"


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


class Relationships(BaseModel):
    """Links from one command to others."""
    model_config = ConfigDict(frozen=True)

    combines_with: Tuple[str, ...] = Field(default_factory=tuple, description="Commands that work well alongside")
    leads_to: Tuple[str, ...] = Field(default_factory=tuple, description="Commands often run next")
    pairs: Optional[str] = Field(None, description="The opposite command")

    @field_validator("combines_with", "leads_to", mode="before")
    @classmethod
    def normalize_id_set(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError("expected a list of ids")
        return _dedupe(str(item) for item in v)

    @property
    def is_empty(self) -> bool:
        return not self.combines_with and not self.leads_to and self.pairs is None

    def referenced_ids(self) -> List[str]:
        """All ids referenced, in declaration order."""
        ids = list(self.combines_with) + list(self.leads_to)
        if self.pairs:
            ids.append(self.pairs)
        return ids


class CommandDefinition(BaseModel):
    """A single slash command."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique kebab-case identifier")
    description: str = Field(..., min_length=1, description="One-line summary")
    category: CommandCategory = Field(..., description="Command category")
    process_steps: Tuple[str, ...] = Field(default_factory=tuple, description="Ordered process labels")
    relationships: Relationships = Field(default_factory=Relationships, description="Links to other commands")
    ready: bool = Field(True, description="Whether the command is finished")
    argument_hint: Optional[str] = Field(None, description="Hint shown by providers that accept arguments")
    body: str = Field("", description="Long-form instructions")

    @field_validator("id")
    @classmethod
    def validate_id_format(cls, v: str) -> str:
        if not KEBAB_ID_RE.match(v):
            raise ValueError(f"Invalid command id: {v!r}. Expected kebab-case")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class FocusArea(BaseModel):
    """A skill focus area."""
    model_config = ConfigDict(frozen=True)

    area: str = Field(..., min_length=1)
    detail: str = Field("")


class SkillDefinition(BaseModel):
    """A single skill."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique identifier")
    description: str = Field(..., min_length=1, description="One-line summary")
    focus_areas: Tuple[FocusArea, ...] = Field(default_factory=tuple, description="Ordered focus areas")
    ready: bool = Field(True, description="Whether the skill is finished")
    body: str = Field("", description="Long-form instructions")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v

    @property
    def display_name(self) -> str:
        """Human title, e.g. "ux-writing" -> "UX Writing"."""
        words = []
        for word in self.id.split("-"):
            if word.lower() == "ux":
                words.append("UX")
            else:
                words.append(word[:1].upper() + word[1:])
        return " ".join(words)


class PatternCategory(BaseModel):
    """One named list of style patterns."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    items: Tuple[str, ...] = Field(default_factory=tuple)


class PatternPair(BaseModel):
    """The do/don't lists sharing one category name."""
    model_config = ConfigDict(frozen=True)

    name: str
    patterns: Tuple[str, ...] = Field(default_factory=tuple)
    antipatterns: Tuple[str, ...] = Field(default_factory=tuple)


def pair_patterns(
    patterns: Iterable[PatternCategory],
    antipatterns: Iterable[PatternCategory],
) -> Tuple[PatternPair, ...]:
    """
    Join the two pattern lists by category name.

    A name present on only one side gets an empty list for the other. Order
    follows the "do" list, then antipattern-only names in their own order.
    """
    do_map: Dict[str, List[str]] = {}
    for category in patterns:
        do_map.setdefault(category.name, []).extend(category.items)
    dont_map: Dict[str, List[str]] = {}
    for category in antipatterns:
        dont_map.setdefault(category.name, []).extend(category.items)

    names = list(do_map)
    names.extend(name for name in dont_map if name not in do_map)

    return tuple(
        PatternPair(
            name=name,
            patterns=tuple(do_map.get(name, [])),
            antipatterns=tuple(dont_map.get(name, [])),
        )
        for name in names
    )


class CanonicalModel(BaseModel):
    """
    The immutable aggregate for one build.

    Produced by the SourceRepository and shared read-only by every provider
    transform.
    """
    model_config = ConfigDict(frozen=True)

    commands: Tuple[CommandDefinition, ...] = Field(default_factory=tuple)
    skills: Tuple[SkillDefinition, ...] = Field(default_factory=tuple)
    pattern_pairs: Tuple[PatternPair, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "CanonicalModel":
        for kind, items in (("command", self.commands), ("skill", self.skills)):
            seen = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"Duplicate {kind} id: {item.id}")
                seen.add(item.id)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.commands and not self.skills

    @property
    def command_ids(self) -> List[str]:
        return [c.id for c in self.commands]

    @property
    def skill_ids(self) -> List[str]:
        return [s.id for s in self.skills]

    def get_command(self, command_id: str) -> Optional[CommandDefinition]:
        """Get a command by its ID."""
        for command in self.commands:
            if command.id == command_id:
                return command
        return None

    def get_skill(self, skill_id: str) -> Optional[SkillDefinition]:
        """Get a skill by its ID."""
        for skill in self.skills:
            if skill.id == skill_id:
                return skill
        return None

    def ready_only(self) -> "CanonicalModel":
        """Return a copy holding only finished commands and skills."""
        return CanonicalModel(
            commands=tuple(c for c in self.commands if c.ready),
            skills=tuple(s for s in self.skills if s.ready),
            pattern_pairs=self.pattern_pairs,
        )
