"""
Source Repository - Loads canonical definitions from the definition store.

Directory structure:
source/
  commands/
    audit.md        YAML frontmatter + Markdown body
  skills/
    ux-writing.md
  patterns.yaml     {patterns: [...], antipatterns: [...]}

A single malformed definition aborts the whole load; no partial model is
ever returned.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import frontmatter
import yaml
from pydantic import ValidationError

from skillforge.config import config
from skillforge.errors import ParseError
from skillforge.models.definitions import (
    CanonicalModel,
    CommandDefinition,
    PatternCategory,
    SkillDefinition,
    pair_patterns,
)

logger = logging.getLogger(__name__)

COMMANDS_DIR = "commands"
SKILLS_DIR = "skills"
PATTERNS_FILE = "patterns.yaml"
REQUIRED_FIELDS = ("name", "description")


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts)


class SourceRepository:
    """
    Read-only loader for the canonical definition store.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize the SourceRepository.

        Args:
            base_dir: Definition store root. Defaults to config.source_dir.
        """
        self.base_dir = base_dir or config.source_dir

    def load(self, source_root: Optional[Path] = None) -> CanonicalModel:
        """
        Load every definition into one CanonicalModel.

        Args:
            source_root: Optional override of the store root

        Returns:
            The immutable CanonicalModel

        Raises:
            ParseError: If any definition is missing a required field or
                cannot be decoded
        """
        root = Path(source_root or self.base_dir)
        if not root.is_dir():
            raise ParseError(f"Source directory not found: {root}")

        commands = [self._load_command(path) for path in self.list_files(root / COMMANDS_DIR)]
        skills = [self._load_skill(path) for path in self.list_files(root / SKILLS_DIR)]
        self._check_unique("command", commands)
        self._check_unique("skill", skills)

        patterns, antipatterns = self._load_patterns(root / PATTERNS_FILE)

        try:
            model = CanonicalModel(
                commands=tuple(commands),
                skills=tuple(skills),
                pattern_pairs=pair_patterns(patterns, antipatterns),
            )
        except ValidationError as e:
            raise ParseError(f"Invalid definition store ({_format_validation_error(e)})") from e
        logger.info(
            "Loaded %d commands, %d skills and %d pattern categories from %s",
            len(model.commands), len(model.skills), len(model.pattern_pairs), root,
        )
        return model

    def list_files(self, directory: Path) -> List[Path]:
        """
        List definition files in a directory, sorted by filename.

        A missing directory yields no files.
        """
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob("*.md") if p.is_file())

    def _read_post(self, path: Path) -> frontmatter.Post:
        try:
            post = frontmatter.loads(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            raise ParseError(f"{path.name}: not valid UTF-8 ({e})") from e
        except (yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            raise ParseError(f"{path.name}: frontmatter cannot be decoded ({e})") from e

        if not isinstance(post.metadata, dict):
            raise ParseError(f"{path.name}: frontmatter must be a mapping")
        for field_name in REQUIRED_FIELDS:
            value = post.metadata.get(field_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ParseError(
                    f"{path.name}: missing required field '{field_name}'",
                    entity_id=post.metadata.get("name") or path.stem,
                )
        return post

    def _load_command(self, path: Path) -> CommandDefinition:
        post = self._read_post(path)
        meta: Dict[str, Any] = post.metadata
        raw_relationships = meta.get("relationships") or {}
        if not isinstance(raw_relationships, dict):
            raise ParseError(
                f"{path.name}: relationships must be a mapping",
                entity_id=str(meta["name"]),
            )
        relationships = dict(raw_relationships)
        for key in ("combines_with", "leads_to", "pairs"):
            if key in meta:
                relationships[key] = meta[key]

        data = {
            "id": str(meta["name"]),
            "description": str(meta["description"]),
            "category": meta.get("category"),
            "process_steps": meta.get("steps") or [],
            "relationships": relationships,
            "ready": meta.get("ready", True),
            "argument_hint": meta.get("argument_hint"),
            "body": post.content,
        }
        try:
            return CommandDefinition.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"{path.name}: invalid command definition ({_format_validation_error(e)})",
                entity_id=data["id"],
            ) from e

    def _load_skill(self, path: Path) -> SkillDefinition:
        post = self._read_post(path)
        meta: Dict[str, Any] = post.metadata
        data = {
            "id": str(meta["name"]),
            "description": str(meta["description"]),
            "focus_areas": meta.get("focus_areas") or [],
            "ready": meta.get("ready", True),
            "body": post.content,
        }
        try:
            return SkillDefinition.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"{path.name}: invalid skill definition ({_format_validation_error(e)})",
                entity_id=data["id"],
            ) from e

    def _load_patterns(self, path: Path):
        """Load the do/don't lists; a missing file means no patterns."""
        if not path.is_file():
            return [], []
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ParseError(f"{path.name}: cannot be decoded ({e})") from e

        if not isinstance(data, dict):
            raise ParseError(f"{path.name}: top level must be a mapping")

        return (
            self._pattern_list(path, data.get("patterns") or []),
            self._pattern_list(path, data.get("antipatterns") or []),
        )

    def _pattern_list(self, path: Path, raw: Any) -> List[PatternCategory]:
        if not isinstance(raw, list):
            raise ParseError(f"{path.name}: pattern lists must be sequences")
        categories = []
        for entry in raw:
            try:
                categories.append(PatternCategory.model_validate(entry))
            except ValidationError as e:
                raise ParseError(
                    f"{path.name}: invalid pattern category ({_format_validation_error(e)})"
                ) from e
        return categories

    @staticmethod
    def _check_unique(kind: str, items) -> None:
        seen = set()
        for item in items:
            if item.id in seen:
                raise ParseError(f"Duplicate {kind} id", entity_id=item.id)
            seen.add(item.id)
