"""
Download Index - Maps the serving contract onto archive files.

Directory structure:
downloads/
  claude-code.zip              whole-provider bundle
  claude-code/
    command/audit.zip          single-entry extract
    skill/ux-writing.zip
  manifest.json                archives of the last successful build
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from skillforge.config import config
from skillforge.errors import PackagingError
from skillforge.models.artifacts import Provider
from skillforge.models.build import ArchiveSummary
from skillforge.models.definitions import EntryKind
from skillforge.providers.base import SAFE_ID_RE

ARCHIVE_SUFFIX = ".zip"
MANIFEST_FILE = "manifest.json"


def _provider(value: Union[str, Provider]) -> Provider:
    try:
        return Provider(value)
    except ValueError as e:
        raise PackagingError(f"Unknown provider: {value}") from e


def _kind(value: Union[str, EntryKind]) -> EntryKind:
    try:
        return EntryKind(value)
    except ValueError as e:
        raise PackagingError(f"Unknown entry kind: {value}") from e


class DownloadIndex:
    """
    Resolves bundle and single-entry download keys to archive paths.

    Lookups never transform anything; they only point at files written by
    the PackagingService.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize the DownloadIndex.

        Args:
            base_dir: Download root. Defaults to config.download_dir.
        """
        self.base_dir = Path(base_dir or config.download_dir)

    def bundle_path(self, provider: Union[str, Provider]) -> Path:
        """Where the whole-provider archive lives (whether or not it exists yet)."""
        return self.base_dir / f"{_provider(provider).value}{ARCHIVE_SUFFIX}"

    def provider_entries_dir(self, provider: Union[str, Provider]) -> Path:
        return self.base_dir / _provider(provider).value

    def entry_path(self, provider: Union[str, Provider], kind: Union[str, EntryKind], entry_id: str) -> Path:
        """Where a single command or skill extract lives."""
        if not SAFE_ID_RE.match(entry_id) or ".." in entry_id:
            raise PackagingError(f"Invalid entry id: {entry_id!r}")
        return self.provider_entries_dir(provider) / _kind(kind).value / f"{entry_id}{ARCHIVE_SUFFIX}"

    def resolve(self, key: str) -> Path:
        """
        Resolve "<provider>" or "<provider>/<kind>/<id>" to an existing archive.

        Raises:
            PackagingError: If the key is malformed or the archive is missing
        """
        parts = [p for p in key.strip("/").split("/") if p]
        if len(parts) == 1:
            path = self.bundle_path(parts[0])
        elif len(parts) == 3:
            path = self.entry_path(parts[0], parts[1], parts[2])
        else:
            raise PackagingError(f"Malformed download key: {key!r}")

        if not path.is_file():
            raise PackagingError(f"No archive for {key!r}; run a build first")
        return path

    @property
    def manifest_path(self) -> Path:
        return self.base_dir / MANIFEST_FILE

    def write_manifest(self, archives: Sequence[ArchiveSummary], extracts: Sequence[ArchiveSummary]) -> Path:
        """
        Record the archives of a successful build.

        The manifest holds no timestamps, so identical builds write identical
        manifests.
        """
        def _entry(summary: ArchiveSummary) -> Dict[str, Any]:
            data = summary.model_dump(mode='json', exclude_none=True)
            data["path"] = Path(summary.path).relative_to(self.base_dir).as_posix()
            return data

        data = {
            "bundles": [_entry(a) for a in archives],
            "entries": [_entry(e) for e in extracts],
        }
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with open(self.manifest_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
                f.write("\n")
        except OSError as e:
            raise PackagingError(f"Failed to write download manifest: {e}") from e
        return self.manifest_path

    def load_manifest(self) -> Optional[Dict[str, Any]]:
        """The manifest of the last successful build, or None after a failure."""
        if not self.manifest_path.is_file():
            return None
        with open(self.manifest_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def clear_manifest(self) -> None:
        if self.manifest_path.exists():
            self.manifest_path.unlink()
