from pathlib import Path

import yaml


def write_definition(directory: Path, filename: str, metadata: dict, body: str = "") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    header = yaml.safe_dump(metadata, sort_keys=False, allow_unicode=True).rstrip()
    path = directory / filename
    path.write_text(f"---\n{header}\n---\n\n{body}\n", encoding="utf-8")
    return path


def write_patterns(root: Path, patterns: list, antipatterns: list) -> Path:
    path = root / "patterns.yaml"
    path.write_text(
        yaml.safe_dump({"patterns": patterns, "antipatterns": antipatterns}, sort_keys=False),
        encoding="utf-8",
    )
    return path
