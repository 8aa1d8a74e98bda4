"""
artifactory-artifacts - Build Artifact Persistence
====================================================

Stores the files a build produces (archived artifacts and stashed
intermediate file sets) in a remote generic-artifact repository, under
keys derived deterministically from job name, build number and artifact
name.

Architecture Layers (top to bottom):
    1. Facade               - ArtifactManager
    2. Orchestration Layer  - ArchiveCoordinator, StashCoordinator, ReplayAdapter
    3. Infrastructure Layer - path_resolver, RemoteObjectStore (HTTP / in-memory)
    4. Core                 - config, models, enums, exceptions, logging

Quick Start:
    >>> from artifactory_artifacts import ArtifactManager
    >>> async with ArtifactManager(config) as manager:
    ...     manifest = await manager.archive(build, {"artifact.txt": path})
"""

__version__ = "0.1.0"

from artifactory_artifacts.facade import ArtifactManager

__all__ = ["ArtifactManager", "__version__"]
