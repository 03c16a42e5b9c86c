"""
Configuration management for the Skillforge build.

Loads configuration from environment variables and .env file.
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class SkillforgeConfig(BaseSettings):
    """Configuration settings for the Skillforge build."""

    # Directories
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Repository root the build runs against"
    )
    source_dir: Optional[Path] = Field(None, description="Canonical definition store")
    dist_dir: Optional[Path] = Field(None, description="Root of the per-provider output trees")
    download_dir: Optional[Path] = Field(None, description="Root of the generated archives")
    mirror_dir: Optional[Path] = Field(None, description="Local development mirror for Claude Code output")

    # Build policy
    include_pending: bool = Field(
        True,
        description="Ship entries marked not-ready; when false they are removed before transforming"
    )
    parallel_transforms: bool = Field(False, description="Run the provider transforms in a thread pool")
    sync_mirror: bool = Field(True, description="Synchronize the local mirror after packaging")

    # Logging
    log_level: str = Field("INFO", description="Root log level used by the CLI")

    model_config = {
        "env_prefix": "SKILLFORGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def model_post_init(self, __context) -> None:
        """Initialize derived paths after loading config."""
        if self.source_dir is None:
            self.source_dir = self.project_root / "source"
        if self.dist_dir is None:
            self.dist_dir = self.project_root / "dist"
        if self.download_dir is None:
            self.download_dir = self.dist_dir / "downloads"
        if self.mirror_dir is None:
            self.mirror_dir = self.project_root / ".claude"


# Global config instance - loaded from environment
config = SkillforgeConfig()
