"""Storage components for the Skillforge build."""

from skillforge.store.source_repository import SourceRepository
from skillforge.store.packaging import PackagingService
from skillforge.store.downloads import DownloadIndex
from skillforge.store.mirror import MirrorSync

__all__ = [
    "SourceRepository",
    "PackagingService",
    "DownloadIndex",
    "MirrorSync",
]
