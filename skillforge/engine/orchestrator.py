"""
Build Orchestrator - Pipeline orchestration for the Skillforge build.

Coordinates the flow through all pipeline stages:
load -> transform (x4) -> package -> mirror -> done

Any stage failure moves the run straight to FAILED; later stages never run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from skillforge.config import config
from skillforge.errors import SkillforgeError
from skillforge.models.artifacts import ArchiveHandle, ArtifactTree, Provider, WrittenTree
from skillforge.models.build import (
    ArchiveSummary,
    BuildResult,
    BuildStage,
    BuildStatus,
    StageRecord,
)
from skillforge.models.definitions import CanonicalModel
from skillforge.providers import TRANSFORMERS, Transformer, check_coverage
from skillforge.providers.base import find_dangling_references
from skillforge.store.mirror import MirrorSync
from skillforge.store.packaging import PackagingService
from skillforge.store.source_repository import SourceRepository

logger = logging.getLogger(__name__)

MIRROR_PROVIDER = Provider.CLAUDE_CODE


def _summary(handle: ArchiveHandle) -> ArchiveSummary:
    return ArchiveSummary(
        provider=handle.provider.value,
        path=handle.path,
        entry_count=handle.entry_count,
        sha256=handle.sha256,
        kind=handle.kind.value if handle.kind else None,
        entry_id=handle.entry_id,
    )


class BuildOrchestrator:
    """
    Pipeline Orchestrator for the Skillforge build.

    Owns the CanonicalModel for the duration of one run and reports a single
    pass/fail BuildResult.
    """

    def __init__(
        self,
        repository: Optional[SourceRepository] = None,
        packaging: Optional[PackagingService] = None,
        mirror: Optional[MirrorSync] = None,
        transformers: Optional[Dict[Provider, Transformer]] = None,
        include_pending: Optional[bool] = None,
        parallel: Optional[bool] = None,
        sync_mirror: Optional[bool] = None,
    ):
        """
        Initialize the BuildOrchestrator.

        Args:
            repository: SourceRepository instance
            packaging: PackagingService instance
            mirror: MirrorSync instance
            transformers: Provider dispatch table. Defaults to all four providers.
            include_pending: Ship not-ready entries. Defaults to config.include_pending.
            parallel: Run transforms in a thread pool. Defaults to config.parallel_transforms.
            sync_mirror: Run the mirror stage. Defaults to config.sync_mirror.
        """
        self.repository = repository or SourceRepository()
        self.packaging = packaging or PackagingService()
        self.mirror = mirror or MirrorSync()
        self.transformers = dict(transformers or TRANSFORMERS)
        self.include_pending = config.include_pending if include_pending is None else include_pending
        self.parallel = config.parallel_transforms if parallel is None else parallel
        self.sync_mirror = config.sync_mirror if sync_mirror is None else sync_mirror

        self._result: Optional[BuildResult] = None

    @property
    def providers(self) -> List[Provider]:
        return list(self.transformers)

    def run(self, source_root: Optional[Path] = None) -> BuildResult:
        """
        Run the whole build once.

        Args:
            source_root: Optional override of the definition store root

        Returns:
            BuildResult with status SUCCESS or FAILURE
        """
        result = BuildResult()
        self._result = result
        attempting = BuildStage.LOADED
        try:
            model = self._step_load(source_root)

            attempting = BuildStage.TRANSFORMED
            trees = self._step_transform(model)

            attempting = BuildStage.PACKAGED
            written = self._step_package(trees)

            attempting = BuildStage.MIRRORED
            self._step_mirror(written)

            attempting = BuildStage.DONE
            self.packaging.downloads.write_manifest(result.archives, result.extracts)
            result.stage = BuildStage.DONE
            result.status = BuildStatus.SUCCESS
            logger.info(result.diagnostic())
        except SkillforgeError as e:
            self._fail(result, attempting, e)
        return result

    def _fail(self, result: BuildResult, stage: BuildStage, error: SkillforgeError) -> None:
        result.status = BuildStatus.FAILURE
        result.stage = BuildStage.FAILED
        result.failed_stage = stage
        result.error = str(error)
        result.error_type = type(error).__name__
        result.entity_id = error.entity_id
        error.stage = stage.value
        # Whatever is on disk now no longer matches the source
        try:
            self.packaging.downloads.clear_manifest()
        except OSError as e:
            logger.warning("Could not clear download manifest: %s", e)
        logger.error(result.diagnostic())

    def _begin(self, stage: BuildStage) -> StageRecord:
        logger.info("Stage %s starting", stage.value)
        return StageRecord(stage=stage)

    def _complete(self, record: StageRecord, **details) -> None:
        record.ended_at = datetime.now()
        record.details.update(details)
        self._result.stages.append(record)
        self._result.stage = record.stage

    def _step_load(self, source_root: Optional[Path]) -> CanonicalModel:
        """Step 1: Load the canonical model and apply the readiness policy."""
        record = self._begin(BuildStage.LOADED)
        model = self.repository.load(source_root)

        excluded: List[str] = []
        if not self.include_pending:
            filtered = model.ready_only()
            excluded = sorted(
                set(model.command_ids + model.skill_ids)
                - set(filtered.command_ids + filtered.skill_ids)
            )
            if excluded:
                logger.info("Excluding pending entries: %s", ", ".join(excluded))
            model = filtered

        for dangling in find_dangling_references(model):
            message = f"{dangling.entity_id}: {dangling.message}; dropped"
            logger.warning(message)
            self._result.warnings.append(message)

        self._complete(
            record,
            commands=len(model.commands),
            skills=len(model.skills),
            pattern_categories=len(model.pattern_pairs),
            excluded=excluded,
        )
        return model

    def _transform_one(self, provider: Provider, model: CanonicalModel) -> ArtifactTree:
        tree = self.transformers[provider](model)
        check_coverage(model, tree)
        logger.info("Transformed %s: %d files", provider.value, len(tree))
        return tree

    def _step_transform(self, model: CanonicalModel) -> Dict[Provider, ArtifactTree]:
        """Step 2: Run every provider transform against the same model."""
        record = self._begin(BuildStage.TRANSFORMED)
        providers = self.providers
        if self.parallel and len(providers) > 1:
            with ThreadPoolExecutor(max_workers=len(providers)) as pool:
                futures = [pool.submit(self._transform_one, p, model) for p in providers]
                # Barrier; results are read in provider order so the first error is stable
                trees = [f.result() for f in futures]
        else:
            trees = [self._transform_one(p, model) for p in providers]

        by_provider = dict(zip(providers, trees))
        self._complete(record, files={p.value: len(t) for p, t in by_provider.items()})
        return by_provider

    def _step_package(self, trees: Dict[Provider, ArtifactTree]) -> Dict[Provider, WrittenTree]:
        """Step 3: Write each tree, then archive it."""
        record = self._begin(BuildStage.PACKAGED)
        written: Dict[Provider, WrittenTree] = {}
        for provider, tree in trees.items():
            written[provider] = self.packaging.package(tree)

        for provider, tree in written.items():
            bundle = self.packaging.archive(tree)
            self._result.archives.append(_summary(bundle))
            for extract in self.packaging.extract_all(tree):
                self._result.extracts.append(_summary(extract))

        self._complete(
            record,
            archives=[a.path.name for a in self._result.archives],
            extracts=len(self._result.extracts),
        )
        return written

    def _step_mirror(self, written: Dict[Provider, WrittenTree]) -> None:
        """Step 4: Replace the local mirror's commands and skills."""
        record = self._begin(BuildStage.MIRRORED)
        if not self.sync_mirror or MIRROR_PROVIDER not in written:
            self._complete(record, skipped=True)
            return
        synced = self.mirror.sync(written[MIRROR_PROVIDER])
        self._complete(record, synced=[str(p) for p in synced])


def build(
    source_root: Optional[Path] = None,
    providers: Optional[Sequence[Provider]] = None,
    **kwargs,
) -> BuildResult:
    """Convenience wrapper running one build with default collaborators."""
    transformers = None
    if providers:
        transformers = {Provider(p): TRANSFORMERS[Provider(p)] for p in providers}
    return BuildOrchestrator(transformers=transformers, **kwargs).run(source_root)
