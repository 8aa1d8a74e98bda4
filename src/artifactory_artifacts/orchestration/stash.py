"""
artifactory_artifacts.orchestration.stash - Stash Coordinator
===============================================================

Moves named file sets between pipeline steps, and between execution nodes,
through the remote store.

Cross-Node Hand-Off:
    ┌─────────────┐  stash("build")   ┌──────────────┐  unstash("build")  ┌─────────────┐
    │ agent node  │ ── tar.gz PUT ──→ │ remote store │ ── GET + untar ──→ │ controller  │
    └─────────────┘                   └──────────────┘                    └─────────────┘

    Neither side talks to the other. Both resolve the bundle key on their
    own from (repository config, build identity, stash name), which is why
    the key resolution must be deterministic.

Bundle Key:
    resolve(config, build, "stash/{name}.bundle")
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import structlog

from artifactory_artifacts.core.config import RepositoryConfig
from artifactory_artifacts.core.exceptions import ObjectNotFoundError, StashNotFoundError, StashSourceError
from artifactory_artifacts.core.models import BuildIdentity, StashRef, Workspace
from artifactory_artifacts.infrastructure import bundle, path_resolver
from artifactory_artifacts.infrastructure.object_store import RemoteObjectStore

logger = structlog.get_logger()


class StashCoordinator:
    """Stashes and unstashes named bundles of workspace files.

    Example:
        >>> coordinator = StashCoordinator(repository_config, store)
        >>> await coordinator.stash(build, "sources", agent_workspace.collect(["src/**"]))
        >>> await coordinator.unstash(build, "sources", controller_workspace)
        ['src/main.c']
    """

    def __init__(self, repository: RepositoryConfig, store: RemoteObjectStore) -> None:
        self._repository = repository
        self._store = store
        self._logger = logger.bind(component="stash_coordinator")

    def key_for(self, build: BuildIdentity, stash_name: str) -> str:
        return path_resolver.resolve_stash(self._repository, build, stash_name)

    async def stash(
        self,
        build: BuildIdentity,
        stash_name: str,
        files: Mapping[str, Path],
    ) -> StashRef:
        """Pack ``files`` into one bundle and upload it.

        Stashing the same name again in the same build replaces the bundle.

        Args:
            build: Build the stash belongs to.
            stash_name: Name used by the matching unstash.
            files: Relative path inside the bundle → local source file.

        Raises:
            ValueError: ``files`` is empty.
            StashSourceError: A file cannot be read; nothing is uploaded.
            NetworkError / AuthFailureError / RemoteRejectedError: Upload failed.
        """
        if not files:
            raise ValueError(f"No files to stash for '{stash_name}'")

        key = self.key_for(build, stash_name)
        with bundle.spooled_file() as spool:
            try:
                size = bundle.pack(files, spool)
            except OSError as exc:
                self._logger.warning(
                    "stash_source_unreadable",
                    build=str(build),
                    stash_name=stash_name,
                    source=exc.filename,
                )
                raise StashSourceError(
                    stash_name=stash_name,
                    source=str(exc.filename),
                    reason=exc.strerror or str(exc),
                ) from exc
            await self._store.put(key, spool, size)

        self._logger.info(
            "stash_stored",
            build=str(build),
            stash_name=stash_name,
            key=key,
            files=len(files),
            size=size,
        )
        return StashRef(stash_name=stash_name, owning_build=build, key=key, file_count=len(files))

    async def unstash(
        self,
        build: BuildIdentity,
        stash_name: str,
        workspace: Workspace,
    ) -> list[str]:
        """Download a stash bundle and unpack it into ``workspace``.

        Returns:
            Relative paths of the restored files.

        Raises:
            StashNotFoundError: Nothing was stashed under that name for
                ``build``.
            NetworkError / AuthFailureError: Download failed.
        """
        key = self.key_for(build, stash_name)
        with bundle.spooled_file() as spool:
            try:
                await self._store.get(key, spool)
            except ObjectNotFoundError as exc:
                self._logger.warning(
                    "stash_not_found",
                    build=str(build),
                    stash_name=stash_name,
                    key=key,
                )
                raise StashNotFoundError(
                    stash_name=stash_name,
                    key=key,
                    job_full_name=build.job_full_name,
                    build_number=build.build_number,
                ) from exc
            restored = bundle.unpack(spool, workspace.root)

        self._logger.info(
            "stash_unpacked",
            build=str(build),
            stash_name=stash_name,
            node=workspace.node_name,
            files=len(restored),
        )
        return restored

    async def delete_stash(self, build: BuildIdentity, stash_name: str) -> None:
        """Remove one stash bundle.

        Raises:
            StashNotFoundError: No such stash for ``build``.
        """
        key = self.key_for(build, stash_name)
        try:
            await self._store.delete(key)
        except ObjectNotFoundError as exc:
            raise StashNotFoundError(
                stash_name=stash_name,
                key=key,
                job_full_name=build.job_full_name,
                build_number=build.build_number,
            ) from exc
        self._logger.info("stash_deleted", build=str(build), stash_name=stash_name)

    async def list_stashes(self, build: BuildIdentity) -> list[str]:
        """Names of all stashes currently stored for ``build``."""
        root = path_resolver.stash_root(self._repository, build)
        names = []
        for key in await self._store.list_keys(root):
            name = path_resolver.stash_name_of(self._repository, build, key)
            if name is not None:
                names.append(name)
        return sorted(names)

    async def clear_all_stashes(self, build: BuildIdentity) -> int:
        """Delete every stash of ``build``, typically when the build ends.

        Bundles that disappear concurrently are ignored.

        Returns:
            Number of bundles deleted.
        """
        deleted = 0
        for name in await self.list_stashes(build):
            try:
                await self._store.delete(self.key_for(build, name))
            except ObjectNotFoundError:
                continue
            deleted += 1
        self._logger.info("stashes_cleared", build=str(build), deleted=deleted)
        return deleted
