import pytest
from pydantic import ValidationError

from skillforge.errors import DanglingReferenceError, ParseError, TransformError
from skillforge.models.artifacts import ArtifactTree, Provider
from skillforge.models.build import BuildResult, BuildStage, BuildStatus
from skillforge.models.definitions import (
    CanonicalModel,
    CommandDefinition,
    EntryKind,
    PatternCategory,
    Relationships,
    SkillDefinition,
    pair_patterns,
)


def test_artifact_tree_sorts_paths_and_tracks_entries():
    tree = ArtifactTree(Provider.CURSOR)
    tree.add("b/two.md", "2", kind=EntryKind.COMMAND, entry_id="two")
    tree.add("a/one.md", b"1", kind=EntryKind.COMMAND, entry_id="one")
    tree.add("README.md", "shared")

    assert tree.paths == ["README.md", "a/one.md", "b/two.md"]
    assert tree.get("a/one.md") == b"1"
    assert tree.text("b/two.md") == "2"
    assert tree.entry_ids(EntryKind.COMMAND) == ["one", "two"]
    assert tree.entry_paths(EntryKind.COMMAND, "two") == ["b/two.md"]
    assert len(tree) == 3


@pytest.mark.parametrize("path", ["a/one.md", "/etc/passwd", "../outside.md"])
def test_artifact_tree_rejects_bad_paths(path):
    tree = ArtifactTree(Provider.CURSOR)
    tree.add("a/one.md", "x")

    with pytest.raises(ValueError):
        tree.add(path, "y")


def test_pairing_orders_do_list_first():
    pairs = pair_patterns(
        [PatternCategory(name="layout", items=["Grid"]), PatternCategory(name="color", items=["Contrast"])],
        [PatternCategory(name="motion", items=["Bounce"]), PatternCategory(name="color", items=["Neon"])],
    )

    assert [p.name for p in pairs] == ["layout", "color", "motion"]
    assert pairs[0].antipatterns == ()
    assert pairs[1].antipatterns == ("Neon",)
    assert pairs[2].patterns == ()


def test_relationships_dedupe_and_accept_single_string():
    rel = Relationships(combines_with="polish", leads_to=["a", "b", "a"])

    assert rel.combines_with == ("polish",)
    assert rel.leads_to == ("a", "b")
    assert rel.referenced_ids() == ["polish", "a", "b"]
    assert Relationships().is_empty


def test_command_requires_non_blank_description():
    with pytest.raises(ValidationError):
        CommandDefinition(id="audit", description="   ", category="diagnostic")


def test_canonical_model_rejects_duplicate_ids():
    skill = SkillDefinition(id="copy", description="x")

    with pytest.raises(ValidationError, match="Duplicate skill id"):
        CanonicalModel(skills=(skill, skill))


def test_ready_only_keeps_patterns(model):
    filtered = model.ready_only()

    assert filtered.command_ids == ["audit", "bolder", "polish"]
    assert filtered.pattern_pairs == model.pattern_pairs


def test_build_result_diagnostic_on_failure():
    result = BuildResult(
        failed_stage=BuildStage.TRANSFORMED,
        stage=BuildStage.FAILED,
        error="[codex] bad value (entity: audit)",
        error_type="TransformError",
        entity_id="audit",
    )

    assert not result.ok
    assert result.status == BuildStatus.FAILURE
    assert result.diagnostic() == (
        "Build failed during transformed [audit]: TransformError: [codex] bad value (entity: audit)"
    )


def test_error_messages_carry_entity_and_provider():
    assert str(ParseError("missing description", entity_id="audit")) == "missing description (entity: audit)"
    assert str(TransformError("bad", provider="gemini")) == "[gemini] bad"

    dangling = DanglingReferenceError("audit", "ghost", "leads_to")
    assert dangling.missing_id == "ghost"
    assert str(dangling) == "leads_to reference 'ghost' does not resolve (entity: audit)"
