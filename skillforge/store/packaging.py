"""
Packaging Service - Writes artifact trees to disk and zips them.

Every write is a full replace of the provider's subtree. Archives are
byte-reproducible: entries are sorted, timestamps and permissions fixed.
"""

import hashlib
import io
import logging
import shutil
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from skillforge.config import config
from skillforge.errors import PackagingError
from skillforge.models.artifacts import ArchiveHandle, ArtifactTree, Provider, WrittenTree
from skillforge.models.definitions import EntryKind
from skillforge.store.downloads import DownloadIndex

logger = logging.getLogger(__name__)

# Earliest timestamp the zip format can store
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644
UNIX_SYSTEM = 3


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def build_zip(root: Path, paths: Iterable[str]) -> Tuple[bytes, int]:
    """
    Zip the given relative paths under root into memory.

    Returns:
        Tuple of (archive bytes, entry count)
    """
    buffer = io.BytesIO()
    count = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for rel_path in sorted(paths):
            info = zipfile.ZipInfo(rel_path, date_time=FIXED_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.create_system = UNIX_SYSTEM
            info.external_attr = (0o100000 | FILE_MODE) << 16
            zf.writestr(info, (root / rel_path).read_bytes())
            count += 1
    return buffer.getvalue(), count


class PackagingService:
    """
    Materializes ArtifactTrees and produces download archives.

    Layout:
    dist/<provider>/...               written tree (provider install layout)
    downloads/<provider>.zip          whole-provider bundle
    downloads/<provider>/<kind>/<id>.zip
    """

    def __init__(self, dist_dir: Optional[Path] = None, download_dir: Optional[Path] = None):
        """
        Initialize the PackagingService.

        Args:
            dist_dir: Root of the written trees. Defaults to config.dist_dir.
            download_dir: Root of the archives. Defaults to config.download_dir.
        """
        self.dist_dir = Path(dist_dir or config.dist_dir)
        self.downloads = DownloadIndex(download_dir or config.download_dir)

    @property
    def download_dir(self) -> Path:
        return self.downloads.base_dir

    def package(self, tree: ArtifactTree, output_root: Optional[Path] = None) -> WrittenTree:
        """
        Write every file of the tree under <output_root>/<provider>/.

        Any previous contents of that provider directory are removed first.

        Raises:
            PackagingError: If the tree is empty or a write fails
        """
        if tree.is_empty:
            raise PackagingError(f"Refusing to package an empty artifact tree for {tree.provider.value}")

        root = Path(output_root or self.dist_dir) / tree.provider.value
        try:
            _remove(root)
            for rel_path, content in tree.items():
                target = root / rel_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
        except OSError as e:
            raise PackagingError(f"Failed to write {tree.provider.value} tree: {e}") from e

        entries = {
            key: tuple(tree.entry_paths(*key))
            for key in tree.entry_keys()
        }
        logger.info("Wrote %d files to %s", len(tree), root)
        return WrittenTree(
            provider=tree.provider,
            root=root,
            paths=tuple(tree.paths),
            entries=entries,
        )

    def archive(self, written: WrittenTree) -> ArchiveHandle:
        """Zip the whole written tree into the provider bundle."""
        target = self.downloads.bundle_path(written.provider)
        return self._write_archive(written, written.paths, target)

    def extract_entry(self, written: WrittenTree, kind: EntryKind, entry_id: str) -> ArchiveHandle:
        """Zip the files of one command or skill, as laid out in the written tree."""
        paths = written.entry_paths(kind, entry_id)
        if not paths:
            raise PackagingError(
                f"No {kind.value} files in the {written.provider.value} tree",
                entity_id=entry_id,
            )
        target = self.downloads.entry_path(written.provider, kind, entry_id)
        return self._write_archive(written, paths, target, kind=kind, entry_id=entry_id)

    def extract_all(self, written: WrittenTree) -> List[ArchiveHandle]:
        """Replace the provider's per-entry extracts with fresh ones."""
        entries_dir = self.downloads.provider_entries_dir(written.provider)
        try:
            _remove(entries_dir)
        except OSError as e:
            raise PackagingError(f"Failed to clear {entries_dir}: {e}") from e
        return [
            self.extract_entry(written, kind, entry_id)
            for kind, entry_id in sorted(written.entries, key=lambda k: (k[0].value, k[1]))
        ]

    def _write_archive(
        self,
        written: WrittenTree,
        paths: Iterable[str],
        target: Path,
        kind: Optional[EntryKind] = None,
        entry_id: Optional[str] = None,
    ) -> ArchiveHandle:
        try:
            data, count = build_zip(written.root, paths)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise PackagingError(f"Failed to write archive {target}: {e}", entity_id=entry_id) from e

        if count == 0:
            raise PackagingError(f"Archive {target.name} would be empty", entity_id=entry_id)

        return ArchiveHandle(
            provider=Provider(written.provider),
            path=target,
            entry_count=count,
            sha256=hashlib.sha256(data).hexdigest(),
            kind=kind,
            entry_id=entry_id,
        )
