"""
Mirror Sync - Copies selected subtrees of a written provider tree into a
local development directory.

Each named subtree is deleted and then copied fresh. Anything else in the
mirror root (local settings, for instance) is left alone.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from skillforge.config import config
from skillforge.errors import PackagingError
from skillforge.models.artifacts import WrittenTree

logger = logging.getLogger(__name__)

DEFAULT_SUBTREES = ("commands", "skills")


class MirrorSync:
    """Directory-replace synchronization into the local mirror."""

    def __init__(self, mirror_dir: Optional[Path] = None, source_prefix: str = ".claude"):
        """
        Initialize the MirrorSync.

        Args:
            mirror_dir: Mirror root. Defaults to config.mirror_dir.
            source_prefix: Directory inside the written tree holding the subtrees
        """
        self.mirror_dir = Path(mirror_dir or config.mirror_dir)
        self.source_prefix = source_prefix

    def sync(self, written: WrittenTree, subtrees: Sequence[str] = DEFAULT_SUBTREES) -> List[Path]:
        """
        Replace each subtree of the mirror with the freshly written one.

        Returns:
            The mirror directories that now exist
        """
        synced = []
        for name in subtrees:
            src = written.root / self.source_prefix / name
            dest = self.mirror_dir / name
            try:
                # Step 1: delete the old subtree
                if dest.is_dir() and not dest.is_symlink():
                    shutil.rmtree(dest)
                elif dest.exists() or dest.is_symlink():
                    dest.unlink()
                # Step 2: copy the fresh one
                if src.is_dir():
                    shutil.copytree(src, dest)
                    synced.append(dest)
            except OSError as e:
                raise PackagingError(f"Failed to sync {name} into {self.mirror_dir}: {e}") from e
        logger.info("Synced %s into %s", ", ".join(subtrees), self.mirror_dir)
        return synced
