"""
artifactory_artifacts.orchestration.replay - Replay Adapter
=============================================================

Routes archive and stash operations of a replayed pipeline to the right
build identity.

A replay re-executes a completed pipeline's script under a NEW build number
assigned by the build engine. New outputs must never overwrite the original
build's, but a step may explicitly ask to read a stash the original build
produced and the replay never re-created.

    ┌──────────────┬──────────────────────────────┐
    │ operation    │ resolved against             │
    ├──────────────┼──────────────────────────────┤
    │ archive      │ replayed build, always       │
    │ stash        │ replayed build, always       │
    │ unstash      │ replayed build (default)     │
    │              │ original build (reuse=True)  │
    └──────────────┴──────────────────────────────┘

Reuse is an explicit per-call flag; it is never inferred.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

import structlog
from pydantic import BaseModel, ConfigDict, model_validator

from artifactory_artifacts.core.models import BuildIdentity, Manifest, StashRef, Workspace
from artifactory_artifacts.orchestration.archive import ArchiveCoordinator
from artifactory_artifacts.orchestration.stash import StashCoordinator

logger = structlog.get_logger()


class ReplayContext(BaseModel):
    """The original build and the build that replays it."""

    model_config = ConfigDict(frozen=True)

    original: BuildIdentity
    replayed: BuildIdentity

    @model_validator(mode="after")
    def _same_job_new_number(self) -> ReplayContext:
        if self.original.job_full_name != self.replayed.job_full_name:
            raise ValueError("A replay must keep the job full name of the original build")
        if self.original.build_number == self.replayed.build_number:
            raise ValueError("A replay must run under a new build number")
        return self


class ReplayAdapter:
    """Archive/stash/unstash on behalf of a replayed build.

    Example:
        >>> adapter = ReplayAdapter(archive_coordinator, stash_coordinator)
        >>> ctx = adapter.new_build_context(original, build_number=2)
        >>> await adapter.unstash(ctx, "sources", workspace, reuse_original=True)
    """

    def __init__(self, archives: ArchiveCoordinator, stashes: StashCoordinator) -> None:
        self._archives = archives
        self._stashes = stashes
        self._logger = logger.bind(component="replay_adapter")

    def new_build_context(self, original: BuildIdentity, build_number: int) -> ReplayContext:
        """Build the replay context for a freshly assigned build number."""
        replayed = BuildIdentity(job_full_name=original.job_full_name, build_number=build_number)
        context = ReplayContext(original=original, replayed=replayed)
        self._logger.info(
            "replay_context_created",
            job=original.job_full_name,
            original_build=original.build_number,
            replayed_build=build_number,
        )
        return context

    @staticmethod
    def build_for_stash(context: ReplayContext, reuse_original: bool = False) -> BuildIdentity:
        return context.original if reuse_original else context.replayed

    async def archive(
        self,
        context: ReplayContext,
        files: Mapping[str, Path],
        manifest: Optional[Manifest] = None,
    ) -> Manifest:
        return await self._archives.archive(context.replayed, files, manifest)

    async def stash(
        self,
        context: ReplayContext,
        stash_name: str,
        files: Mapping[str, Path],
    ) -> StashRef:
        return await self._stashes.stash(context.replayed, stash_name, files)

    async def unstash(
        self,
        context: ReplayContext,
        stash_name: str,
        workspace: Workspace,
        reuse_original: bool = False,
    ) -> list[str]:
        """Unstash for a replayed step.

        Args:
            reuse_original: Read the bundle the ORIGINAL build stashed.
                Without it, a stash that only exists under the original
                build raises StashNotFoundError.
        """
        build = self.build_for_stash(context, reuse_original)
        if reuse_original:
            self._logger.info(
                "replay_reusing_original_stash",
                stash_name=stash_name,
                original_build=context.original.build_number,
                replayed_build=context.replayed.build_number,
            )
        return await self._stashes.unstash(build, stash_name, workspace)
