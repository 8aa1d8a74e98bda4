"""
artifactory_artifacts.facade - ArtifactManager Top-Level Facade
=================================================================

The single entry point a build-engine integration talks to. It ties the
configuration, the remote store and the coordinators together and owns the
lifecycle of the HTTP client.

Architecture Context:
    ┌──────────────────────────────────────────────────┐
    │              ArtifactManager (Facade)             │
    │                                                   │
    │  ┌─────────────────────────────────────────────┐ │
    │  │         Orchestration Layer                   │ │
    │  │  ArchiveCoordinator, StashCoordinator,       │ │
    │  │  ReplayAdapter                               │ │
    │  └─────────────────────┬───────────────────────┘ │
    │                        │                          │
    │  ┌─────────────────────▼───────────────────────┐ │
    │  │         Infrastructure Layer                  │ │
    │  │  path_resolver, RemoteObjectStore (HTTP)      │ │
    │  └─────────────────────────────────────────────┘ │
    └──────────────────────────────────────────────────┘

Usage:
    >>> async with ArtifactManager(config) as manager:
    ...     manifest = await manager.archive(build, workspace.collect(["*.txt"]))
    ...     await manager.stash(build, "sources", workspace.collect(["src/**"]))
    ...     await manager.unstash(build, "sources", other_workspace)
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Mapping, Optional

import structlog

from artifactory_artifacts.core.config import ArtifactsConfig, ensure_repository_config
from artifactory_artifacts.core.logging import configure_logging
from artifactory_artifacts.core.models import BuildIdentity, Manifest, StashRef, Workspace
from artifactory_artifacts.infrastructure.http_store import HttpObjectStore
from artifactory_artifacts.infrastructure.object_store import RemoteObjectStore
from artifactory_artifacts.infrastructure.retry import RetryPolicy
from artifactory_artifacts.orchestration.archive import ArchiveCoordinator
from artifactory_artifacts.orchestration.replay import ReplayAdapter, ReplayContext
from artifactory_artifacts.orchestration.stash import StashCoordinator

logger = structlog.get_logger()


class ArtifactManager:
    """Archive, stash and replay operations for builds of one repository.

    Lifecycle:
        1. ``ArtifactManager(config)`` - validates the repository config
        2. ``await initialize()`` - configures logging
        3. archive / stash / unstash / download / list / replay
        4. ``await shutdown()`` - closes the remote store

    Or use the async context manager:
        async with ArtifactManager(config) as manager:
            ...

    Attributes:
        _config: Full configuration.
        _store: Remote object store (HTTP unless injected).
        _archives: ArchiveCoordinator.
        _stashes: StashCoordinator.
        _replay: ReplayAdapter.
        _initialized: Whether initialize() has been called.
    """

    def __init__(
        self,
        config: Optional[ArtifactsConfig] = None,
        *,
        store: Optional[RemoteObjectStore] = None,
        configure_logs: bool = True,
    ) -> None:
        """Initialize the facade.

        Args:
            config: Configuration. Defaults to ArtifactsConfig(), which
                reads ARTIFACTORY_* environment variables.
            store: Optional custom store. Defaults to an HttpObjectStore
                built from ``config.server`` and ``config.retry``.
            configure_logs: Configure structlog on initialize().

        Raises:
            ConfigurationError: The base repository name is missing.
        """
        self._config = config or ArtifactsConfig()
        repository = ensure_repository_config(self._config.repository)

        self._store = store if store is not None else HttpObjectStore(
            self._config.server,
            repository,
            RetryPolicy.from_settings(self._config.retry),
            chunk_size=self._config.chunk_size,
        )

        self._archives = ArchiveCoordinator(repository, self._store)
        self._stashes = StashCoordinator(repository, self._store)
        self._replay = ReplayAdapter(self._archives, self._stashes)

        self._configure_logs = configure_logs
        self._initialized = False
        self._logger = logger.bind(component="artifact_manager")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> ArtifactsConfig:
        return self._config

    @property
    def store(self) -> RemoteObjectStore:
        return self._store

    @property
    def archives(self) -> ArchiveCoordinator:
        return self._archives

    @property
    def stashes(self) -> StashCoordinator:
        return self._stashes

    @property
    def replay(self) -> ReplayAdapter:
        return self._replay

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        if self._initialized:
            return
        if self._configure_logs:
            configure_logging(self._config.log_level, self._config.json_logs)
        self._initialized = True
        self._logger.info(
            "artifact_manager_initialized",
            repository=self._config.repository.base_repo_name,
            prefix=self._config.repository.prefix,
        )

    async def shutdown(self) -> None:
        await self._store.close()
        self._initialized = False
        self._logger.info("artifact_manager_shutdown")

    async def __aenter__(self) -> ArtifactManager:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()

    # =========================================================================
    # Archive
    # =========================================================================

    async def archive(
        self,
        build: BuildIdentity,
        files: Mapping[str, Path],
        manifest: Optional[Manifest] = None,
    ) -> Manifest:
        return await self._archives.archive(build, files, manifest)

    async def download(self, build: BuildIdentity, relative_path: str, sink: BinaryIO) -> int:
        return await self._archives.download(build, relative_path, sink)

    async def exists(self, build: BuildIdentity, relative_path: str) -> bool:
        return await self._archives.exists(build, relative_path)

    async def list_artifacts(self, build: BuildIdentity) -> Manifest:
        return await self._archives.list_remote(build)

    # =========================================================================
    # Stash
    # =========================================================================

    async def stash(
        self,
        build: BuildIdentity,
        stash_name: str,
        files: Mapping[str, Path],
    ) -> StashRef:
        return await self._stashes.stash(build, stash_name, files)

    async def unstash(self, build: BuildIdentity, stash_name: str, workspace: Workspace) -> list[str]:
        return await self._stashes.unstash(build, stash_name, workspace)

    async def delete_stash(self, build: BuildIdentity, stash_name: str) -> None:
        await self._stashes.delete_stash(build, stash_name)

    async def list_stashes(self, build: BuildIdentity) -> list[str]:
        return await self._stashes.list_stashes(build)

    async def clear_all_stashes(self, build: BuildIdentity) -> int:
        return await self._stashes.clear_all_stashes(build)

    # =========================================================================
    # Replay
    # =========================================================================

    def replay_context(self, original: BuildIdentity, build_number: int) -> ReplayContext:
        return self._replay.new_build_context(original, build_number)
