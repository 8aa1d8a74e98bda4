"""
artifactory_artifacts.orchestration.archive - Archive Coordinator
===================================================================

Uploads the files a build step archives and records where each one landed.

Policy: best-effort-all
    Every file is attempted even when an earlier one failed. Failures are
    collected and reported together at the end through PartialArchiveError;
    files that were uploaded stay stored and stay in the manifest.

    archive(build, {a, b, c})
        a → put OK    → manifest += a
        b → put FAIL  → failures += b
        c → put OK    → manifest += c
        → raise PartialArchiveError(failures=[b], manifest={a, c})

The coordinator keeps no per-build state: the manifest is owned by the
build record of the caller, so concurrent builds share nothing but the
remote store.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Mapping, Optional

import structlog

from artifactory_artifacts.core.config import RepositoryConfig
from artifactory_artifacts.core.enums import ErrorKind
from artifactory_artifacts.core.exceptions import PartialArchiveError, StoreError
from artifactory_artifacts.core.models import ArchiveFailure, BuildIdentity, Manifest, ManifestEntry
from artifactory_artifacts.infrastructure import path_resolver
from artifactory_artifacts.infrastructure.object_store import RemoteObjectStore

logger = structlog.get_logger()


class ArchiveCoordinator:
    """Archives build outputs into the remote store.

    Example:
        >>> coordinator = ArchiveCoordinator(repository_config, store)
        >>> manifest = await coordinator.archive(build, {"artifact.txt": path})
        >>> manifest.get("artifact.txt").key
        'jenkins/job/1/artifacts/artifact.txt'
    """

    def __init__(self, repository: RepositoryConfig, store: RemoteObjectStore) -> None:
        self._repository = repository
        self._store = store
        self._logger = logger.bind(component="archive_coordinator")

    async def archive(
        self,
        build: BuildIdentity,
        files: Mapping[str, Path],
        manifest: Optional[Manifest] = None,
    ) -> Manifest:
        """Upload every file and return the manifest of the build.

        Args:
            build: Build that owns the artifacts.
            files: Relative artifact path → local source file.
            manifest: Existing manifest of the build to extend; a new one
                is created when omitted.

        Returns:
            The manifest, with one entry per archived file.

        Raises:
            PartialArchiveError: At least one file failed. Raised after all
                files were attempted; carries the failures and the manifest.
            ConfigurationError: The repository configuration is unusable.
            ValueError: The job full name cannot form a key.
        """
        manifest = manifest if manifest is not None else Manifest(build=build)
        path_resolver.artifacts_root(self._repository, build)
        failures: list[ArchiveFailure] = []

        for relative_path in sorted(files):
            source = files[relative_path]
            try:
                key = path_resolver.resolve(self._repository, build, relative_path)
            except ValueError as exc:
                failures.append(ArchiveFailure(
                    relative_path=relative_path,
                    error_kind=ErrorKind.INVALID_PATH,
                    message=str(exc),
                ))
                self._logger.warning(
                    "artifact_path_rejected",
                    build=str(build),
                    relative_path=relative_path,
                )
                continue

            try:
                size = source.stat().st_size
                with source.open("rb") as stream:
                    await self._store.put(key, stream, size)
            except StoreError as exc:
                failures.append(ArchiveFailure(
                    relative_path=relative_path,
                    error_kind=exc.kind,
                    message=exc.message,
                ))
                self._logger.warning(
                    "artifact_archive_failed",
                    build=str(build),
                    relative_path=relative_path,
                    error_code=exc.error_code,
                )
                continue
            except OSError as exc:
                failures.append(ArchiveFailure(
                    relative_path=relative_path,
                    error_kind=ErrorKind.LOCAL_IO,
                    message=f"Cannot read {source}: {exc.strerror or exc}",
                ))
                self._logger.warning(
                    "artifact_source_unreadable",
                    build=str(build),
                    relative_path=relative_path,
                    source=str(source),
                )
                continue

            manifest.add(ManifestEntry(
                relative_path=relative_path,
                key=key,
                url=self._store.url_for(key),
                size=size,
            ))
            self._logger.info(
                "artifact_archived",
                build=str(build),
                relative_path=relative_path,
                key=key,
                size=size,
            )

        if failures:
            raise PartialArchiveError(failures=failures, manifest=manifest)
        return manifest

    async def download(self, build: BuildIdentity, relative_path: str, sink: BinaryIO) -> int:
        """Stream one archived artifact into ``sink``.

        Raises:
            ObjectNotFoundError: Nothing was archived under that path.
        """
        key = path_resolver.resolve(self._repository, build, relative_path)
        return await self._store.get(key, sink)

    async def exists(self, build: BuildIdentity, relative_path: str) -> bool:
        key = path_resolver.resolve(self._repository, build, relative_path)
        return await self._store.exists(key)

    async def list_remote(self, build: BuildIdentity) -> Manifest:
        """Rebuild a build's manifest from the remote listing.

        Stash bundles live under the same root and are skipped.
        """
        manifest = Manifest(build=build)
        root = path_resolver.artifacts_root(self._repository, build)
        for key in await self._store.list_keys(root):
            if path_resolver.stash_name_of(self._repository, build, key) is not None:
                continue
            relative_path = path_resolver.relative_path_of(self._repository, build, key)
            if relative_path is None:
                continue
            manifest.add(ManifestEntry(
                relative_path=relative_path,
                key=key,
                url=self._store.url_for(key),
            ))
        return manifest
