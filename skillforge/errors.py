"""
Error taxonomy for the build pipeline.

ParseError, TransformError and PackagingError are fatal and abort the run.
DanglingReferenceError describes a relationship that points at an unknown id;
it is recoverable and only ever logged.
"""

from typing import Optional


class SkillforgeError(Exception):
    """Base class for all build errors."""

    def __init__(self, message: str, entity_id: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id
        self.stage = stage

    def __str__(self) -> str:
        if self.entity_id:
            return f"{self.message} (entity: {self.entity_id})"
        return self.message


class ParseError(SkillforgeError):
    """A source definition is missing a required field or cannot be decoded."""


class DanglingReferenceError(SkillforgeError):
    """A relationship references an id that does not exist in the model."""

    def __init__(self, owner_id: str, missing_id: str, relation: str):
        super().__init__(
            f"{relation} reference '{missing_id}' does not resolve",
            entity_id=owner_id,
        )
        self.missing_id = missing_id
        self.relation = relation


class TransformError(SkillforgeError):
    """A provider-specific encoding invariant was violated."""

    def __init__(self, message: str, provider: str, entity_id: Optional[str] = None):
        super().__init__(f"[{provider}] {message}", entity_id=entity_id)
        self.provider = provider


class PackagingError(SkillforgeError):
    """An artifact tree could not be written or archived."""
