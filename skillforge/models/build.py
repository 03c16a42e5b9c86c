"""
Build run data models.

A BuildResult is the audit trail of one orchestrator run: the stages it
completed, the archives it produced, and the first failure if any.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class BuildStage(str, Enum):
    """Linear states of a build run."""
    IDLE = "idle"
    LOADED = "loaded"
    TRANSFORMED = "transformed"
    PACKAGED = "packaged"
    MIRRORED = "mirrored"
    DONE = "done"
    FAILED = "failed"


class BuildStatus(str, Enum):
    """Final outcome of a run."""
    SUCCESS = "success"
    FAILURE = "failure"


class StageRecord(BaseModel):
    """One completed stage."""
    stage: BuildStage = Field(..., description="Stage reached")
    started_at: datetime = Field(default_factory=datetime.now, description="Start time")
    ended_at: Optional[datetime] = Field(None, description="End time")
    details: Dict[str, Any] = Field(default_factory=dict, description="Counts and paths produced")


class ArchiveSummary(BaseModel):
    """Serializable view of a produced archive."""
    provider: str
    path: Path
    entry_count: int
    sha256: str
    kind: Optional[str] = None
    entry_id: Optional[str] = None


class BuildResult(BaseModel):
    """Outcome of one BuildOrchestrator run."""
    status: BuildStatus = Field(BuildStatus.FAILURE, description="Overall result")
    stage: BuildStage = Field(BuildStage.IDLE, description="Last state reached")
    failed_stage: Optional[BuildStage] = Field(None, description="Stage that was running when the build failed")
    error: Optional[str] = Field(None, description="First error encountered")
    error_type: Optional[str] = Field(None, description="Class name of the first error")
    entity_id: Optional[str] = Field(None, description="Offending command or skill id")
    stages: List[StageRecord] = Field(default_factory=list, description="Completed stages in order")
    archives: List[ArchiveSummary] = Field(default_factory=list, description="Whole-provider archives")
    extracts: List[ArchiveSummary] = Field(default_factory=list, description="Per-entry archives")
    warnings: List[str] = Field(default_factory=list, description="Recoverable problems")

    @property
    def ok(self) -> bool:
        return self.status == BuildStatus.SUCCESS

    def diagnostic(self) -> str:
        """One human-readable line describing the outcome."""
        if self.ok:
            return (
                f"Build complete: {len(self.archives)} bundles, "
                f"{len(self.extracts)} entry downloads"
            )
        stage = self.failed_stage.value if self.failed_stage else "unknown"
        entity = f" [{self.entity_id}]" if self.entity_id else ""
        return f"Build failed during {stage}{entity}: {self.error_type}: {self.error}"
