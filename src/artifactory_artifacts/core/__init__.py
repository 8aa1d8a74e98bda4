"""
artifactory_artifacts.core - Foundation Layer
===============================================

Foundational building blocks every other module depends on:

    - config:      Configuration (ArtifactsConfig, RepositoryConfig, ...)
    - enums:       ErrorKind
    - models:      BuildIdentity, ArtifactRef, StashRef, Manifest, Workspace
    - exceptions:  Structured exception hierarchy
    - logging:     structlog configuration

Dependency Rule:
    core/ depends on NOTHING else in the artifactory_artifacts package.
"""

from artifactory_artifacts.core.config import (
    ArtifactsConfig,
    RepositoryConfig,
    RetrySettings,
    ServerConfig,
)
from artifactory_artifacts.core.enums import ErrorKind
from artifactory_artifacts.core.exceptions import (
    ArtifactsError,
    AuthFailureError,
    ConfigurationError,
    NetworkError,
    ObjectNotFoundError,
    PartialArchiveError,
    RemoteRejectedError,
    StashNotFoundError,
    StashSourceError,
    StoreError,
)
from artifactory_artifacts.core.models import (
    ArchiveFailure,
    ArtifactRef,
    BuildIdentity,
    Manifest,
    ManifestEntry,
    StashRef,
    Workspace,
)

__all__ = [
    # Config
    "ArtifactsConfig",
    "RepositoryConfig",
    "RetrySettings",
    "ServerConfig",
    # Enums
    "ErrorKind",
    # Models
    "ArchiveFailure",
    "ArtifactRef",
    "BuildIdentity",
    "Manifest",
    "ManifestEntry",
    "StashRef",
    "Workspace",
    # Exceptions
    "ArtifactsError",
    "AuthFailureError",
    "ConfigurationError",
    "NetworkError",
    "ObjectNotFoundError",
    "PartialArchiveError",
    "RemoteRejectedError",
    "StashNotFoundError",
    "StashSourceError",
    "StoreError",
]
