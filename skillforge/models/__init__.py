"""Data models for the Skillforge build."""

from skillforge.models.definitions import (
    CanonicalModel,
    CommandCategory,
    CommandDefinition,
    EntryKind,
    FocusArea,
    PatternCategory,
    PatternPair,
    Relationships,
    SkillDefinition,
    pair_patterns,
)
from skillforge.models.artifacts import (
    ArchiveHandle,
    ArtifactTree,
    Provider,
    WrittenTree,
)
from skillforge.models.build import (
    ArchiveSummary,
    BuildResult,
    BuildStage,
    BuildStatus,
    StageRecord,
)

__all__ = [
    # Definition models
    "CanonicalModel",
    "CommandCategory",
    "CommandDefinition",
    "EntryKind",
    "FocusArea",
    "PatternCategory",
    "PatternPair",
    "Relationships",
    "SkillDefinition",
    "pair_patterns",
    # Artifact models
    "ArchiveHandle",
    "ArtifactTree",
    "Provider",
    "WrittenTree",
    # Build models
    "ArchiveSummary",
    "BuildResult",
    "BuildStage",
    "BuildStatus",
    "StageRecord",
]
