from pathlib import Path

from skillforge.config import SkillforgeConfig


def test_paths_derive_from_project_root(tmp_path: Path):
    settings = SkillforgeConfig(project_root=tmp_path)

    assert settings.source_dir == tmp_path / "source"
    assert settings.dist_dir == tmp_path / "dist"
    assert settings.download_dir == tmp_path / "dist" / "downloads"
    assert settings.mirror_dir == tmp_path / ".claude"


def test_explicit_dist_dir_moves_downloads(tmp_path: Path):
    settings = SkillforgeConfig(project_root=tmp_path, dist_dir=tmp_path / "out")

    assert settings.download_dir == tmp_path / "out" / "downloads"


def test_environment_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("SKILLFORGE_INCLUDE_PENDING", "false")
    monkeypatch.setenv("SKILLFORGE_PARALLEL_TRANSFORMS", "1")
    monkeypatch.setenv("SKILLFORGE_SOURCE_DIR", str(tmp_path / "defs"))

    settings = SkillforgeConfig()

    assert settings.include_pending is False
    assert settings.parallel_transforms is True
    assert settings.source_dir == tmp_path / "defs"
