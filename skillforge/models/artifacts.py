"""
Artifact models shared by the transformers and the packaging service.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Optional, Tuple, Union

from skillforge.models.definitions import EntryKind


class Provider(str, Enum):
    """The consumer tool ecosystems a build targets."""
    CURSOR = "cursor"
    CLAUDE_CODE = "claude-code"
    GEMINI = "gemini"
    CODEX = "codex"


EntryKey = Tuple[EntryKind, str]


class ArtifactTree:
    """
    Ordered mapping from relative output path to file bytes for one provider.

    Paths iterate in sorted order so packaging is reproducible no matter in
    which order a transformer added them. Each path may also be tagged with
    the command or skill it belongs to, for per-entry extracts.
    """

    def __init__(self, provider: Provider):
        self.provider = provider
        self._files: Dict[str, bytes] = {}
        self._entries: Dict[EntryKey, List[str]] = {}

    def add(
        self,
        path: str,
        content: Union[str, bytes],
        kind: Optional[EntryKind] = None,
        entry_id: Optional[str] = None,
    ) -> None:
        """Add one file. Raises ValueError on a duplicate or non-relative path."""
        normalized = PurePosixPath(path)
        if normalized.is_absolute() or ".." in normalized.parts:
            raise ValueError(f"Artifact path must be relative: {path}")
        key = normalized.as_posix()
        if key in self._files:
            raise ValueError(f"Duplicate artifact path: {key}")
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[key] = content
        if kind is not None and entry_id is not None:
            self._entries.setdefault((kind, entry_id), []).append(key)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: str) -> bool:
        return path in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    @property
    def is_empty(self) -> bool:
        return not self._files

    @property
    def paths(self) -> List[str]:
        return sorted(self._files)

    def items(self) -> List[Tuple[str, bytes]]:
        return [(path, self._files[path]) for path in self.paths]

    def get(self, path: str) -> Optional[bytes]:
        return self._files.get(path)

    def text(self, path: str) -> str:
        """Decoded content of one path; KeyError when absent."""
        return self._files[path].decode("utf-8")

    def entry_keys(self) -> List[EntryKey]:
        return sorted(self._entries, key=lambda k: (k[0].value, k[1]))

    def entry_paths(self, kind: EntryKind, entry_id: str) -> List[str]:
        return sorted(self._entries.get((kind, entry_id), []))

    def entry_ids(self, kind: EntryKind) -> List[str]:
        return sorted(entry_id for k, entry_id in self._entries if k == kind)


@dataclass(frozen=True)
class WrittenTree:
    """An ArtifactTree materialized under a directory on disk."""
    provider: Provider
    root: Path
    paths: Tuple[str, ...]
    entries: Dict[EntryKey, Tuple[str, ...]] = field(default_factory=dict)

    def entry_paths(self, kind: EntryKind, entry_id: str) -> Tuple[str, ...]:
        return self.entries.get((kind, entry_id), ())


@dataclass(frozen=True)
class ArchiveHandle:
    """A produced zip archive."""
    provider: Provider
    path: Path
    entry_count: int
    sha256: str
    kind: Optional[EntryKind] = None
    entry_id: Optional[str] = None

    @property
    def is_bundle(self) -> bool:
        return self.kind is None
