import io
import zipfile
from pathlib import Path

import pytest

from skillforge.engine.orchestrator import _summary
from skillforge.errors import PackagingError
from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.definitions import EntryKind
from skillforge.providers import transform
from skillforge.store.downloads import DownloadIndex
from skillforge.store.mirror import MirrorSync
from skillforge.store.packaging import PackagingService


@pytest.fixture
def service(tmp_path: Path) -> PackagingService:
    return PackagingService(dist_dir=tmp_path / "dist", download_dir=tmp_path / "downloads")


def _zip_names(path: Path):
    with zipfile.ZipFile(path) as zf:
        return zf.namelist()


def test_package_writes_tree_under_provider_dir(service, model):
    tree = transform(Provider.CLAUDE_CODE, model)

    written = service.package(tree)

    assert written.root == service.dist_dir / "claude-code"
    for rel_path, content in tree.items():
        assert (written.root / rel_path).read_bytes() == content
    assert written.entry_paths(EntryKind.SKILL, "ux-writing") == (".claude/skills/ux-writing/SKILL.md",)


def test_package_replaces_previous_output(service, model):
    stale = service.dist_dir / "cursor" / ".cursor" / "commands" / "removed.md"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")

    service.package(transform(Provider.CURSOR, model))

    assert not stale.exists()
    assert (service.dist_dir / "cursor" / ".cursor" / "commands" / "audit.md").is_file()


def test_package_refuses_empty_tree(service):
    with pytest.raises(PackagingError, match="empty"):
        service.package(ArtifactTree(Provider.GEMINI))


def test_bundle_matches_written_tree(service, model):
    written = service.package(transform(Provider.GEMINI, model))

    bundle = service.archive(written)

    assert bundle.is_bundle
    assert bundle.path == service.download_dir / "gemini.zip"
    assert bundle.entry_count == len(written.paths)
    with zipfile.ZipFile(bundle.path) as zf:
        assert zf.namelist() == sorted(written.paths)
        for rel_path in written.paths:
            assert zf.read(rel_path) == (written.root / rel_path).read_bytes()


def test_archives_are_byte_identical_across_builds(tmp_path, model):
    digests = []
    for run in ("a", "b"):
        service = PackagingService(dist_dir=tmp_path / run / "dist", download_dir=tmp_path / run / "downloads")
        written = service.package(transform(Provider.CODEX, model))
        bundle = service.archive(written)
        digests.append((bundle.sha256, bundle.path.read_bytes()))

    assert digests[0] == digests[1]


def test_archive_entries_use_fixed_metadata(service, model):
    bundle = service.archive(service.package(transform(Provider.CURSOR, model)))

    with zipfile.ZipFile(io.BytesIO(bundle.path.read_bytes())) as zf:
        for info in zf.infolist():
            assert info.date_time == (1980, 1, 1, 0, 0, 0)
            assert info.external_attr >> 16 == 0o100644
            assert info.compress_type == zipfile.ZIP_DEFLATED


def test_entry_extracts_hold_only_their_files(service, model):
    written = service.package(transform(Provider.CLAUDE_CODE, model))

    extracts = service.extract_all(written)

    keys = [(e.kind, e.entry_id) for e in extracts]
    assert keys == [
        (EntryKind.COMMAND, "audit"),
        (EntryKind.COMMAND, "bolder"),
        (EntryKind.COMMAND, "polish"),
        (EntryKind.COMMAND, "quieter"),
        (EntryKind.SKILL, "ux-writing"),
    ]
    skill = extracts[-1]
    assert skill.path == service.download_dir / "claude-code" / "skill" / "ux-writing.zip"
    assert _zip_names(skill.path) == [".claude/skills/ux-writing/SKILL.md"]


def test_extract_all_drops_extracts_of_removed_entries(service, model):
    old = service.download_dir / "codex" / "command" / "retired.zip"
    old.parent.mkdir(parents=True)
    old.write_bytes(b"stale")

    service.extract_all(service.package(transform(Provider.CODEX, model)))

    assert not old.exists()


def test_extract_of_unknown_entry_fails(service, model):
    written = service.package(transform(Provider.CURSOR, model))

    with pytest.raises(PackagingError) as excinfo:
        service.extract_entry(written, EntryKind.COMMAND, "missing")
    assert excinfo.value.entity_id == "missing"


def test_download_index_resolves_bundles_and_entries(service, model):
    written = service.package(transform(Provider.CLAUDE_CODE, model))
    service.archive(written)
    service.extract_all(written)
    index = DownloadIndex(service.download_dir)

    assert index.resolve("claude-code") == service.download_dir / "claude-code.zip"
    assert index.resolve("claude-code/command/audit") == (
        service.download_dir / "claude-code" / "command" / "audit.zip"
    )


@pytest.mark.parametrize(
    "key, message",
    [
        ("claude-code/command", "Malformed"),
        ("vim", "Unknown provider"),
        ("cursor/prompt/audit", "Unknown entry kind"),
        ("cursor/command/..", "Invalid entry id"),
        ("cursor", "run a build first"),
    ],
)
def test_download_index_rejects_bad_keys(tmp_path, key, message):
    with pytest.raises(PackagingError, match=message):
        DownloadIndex(tmp_path).resolve(key)


def test_manifest_is_written_and_cleared(service, model):
    written = service.package(transform(Provider.CURSOR, model))
    bundle = service.archive(written)
    index = service.downloads

    index.write_manifest([_summary(bundle)], [])

    manifest = index.load_manifest()
    assert manifest["bundles"][0]["path"] == "cursor.zip"
    assert manifest["bundles"][0]["sha256"] == bundle.sha256
    assert manifest["entries"] == []

    index.clear_manifest()
    assert index.load_manifest() is None


def test_mirror_replaces_subtrees_and_keeps_the_rest(service, model, tmp_path):
    mirror_dir = tmp_path / "mirror"
    (mirror_dir / "commands").mkdir(parents=True)
    (mirror_dir / "commands" / "old.md").write_text("old", encoding="utf-8")
    (mirror_dir / "settings.local.json").write_text("{}", encoding="utf-8")

    written = service.package(transform(Provider.CLAUDE_CODE, model))
    synced = MirrorSync(mirror_dir).sync(written)

    assert synced == [mirror_dir / "commands", mirror_dir / "skills"]
    assert not (mirror_dir / "commands" / "old.md").exists()
    assert (mirror_dir / "commands" / "audit.md").read_bytes() == (
        written.root / ".claude" / "commands" / "audit.md"
    ).read_bytes()
    assert (mirror_dir / "skills" / "ux-writing" / "SKILL.md").is_file()
    assert (mirror_dir / "settings.local.json").read_text(encoding="utf-8") == "{}"
