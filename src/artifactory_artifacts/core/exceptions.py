"""
artifactory_artifacts.core.exceptions - Custom Exception Hierarchy
====================================================================

Structured exceptions raised by the artifact persistence core. Components
raise and catch these specific types instead of generic Exception, and each
one carries enough context to produce a human-readable build-step failure
that names the artifact or stash and the kind of failure.

Exception Hierarchy:
    ArtifactsError (base)
        ├── ConfigurationError        - Missing/invalid repository config
        ├── StoreError                - A remote operation on one key failed
        │     ├── NetworkError        - Connection/timeout/5xx, retry exhausted
        │     ├── AuthFailureError    - Credentials rejected
        │     ├── RemoteRejectedError - Upload refused by the repository
        │     └── ObjectNotFoundError - Object absent
        │           └── StashNotFoundError - Unstash of a missing stash
        ├── StashSourceError          - A file to stash cannot be read
        └── PartialArchiveError       - Some files of an archive step failed

Propagation Policy:
    Transient errors are retried inside the store and only surface as
    NetworkError once the retry budget is exhausted. Everything else
    propagates to the invoking build step untouched.

Usage:
    >>> from artifactory_artifacts.core.exceptions import NetworkError
    >>> raise NetworkError(
    ...     message="PUT jenkins/job/1/artifacts/a.txt failed after 3 attempts",
    ...     key="jenkins/job/1/artifacts/a.txt",
    ...     details={"attempts": 3},
    ... )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from artifactory_artifacts.core.enums import ErrorKind

if TYPE_CHECKING:
    from artifactory_artifacts.core.models import ArchiveFailure, Manifest


# =============================================================================
# Base Exception
# =============================================================================
# All exceptions of this package inherit from this base class, so a build
# step can catch every persistence failure with a single except clause:
#
#   try:
#       await manager.archive(build, files)
#   except ArtifactsError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class ArtifactsError(Exception):
    """Base exception for all artifact persistence errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (UPPER_SNAKE_CASE).
        details: Arbitrary dict with additional debugging context.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary for structured logging.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
# Raised when the repository configuration is unusable. Fatal: surfaced
# immediately and never retried.
# =============================================================================
class ConfigurationError(ArtifactsError):
    """Raised when the repository configuration is invalid or missing.

    Common Causes:
        - Blank base repository name
        - Malformed YAML configuration file
        - Values rejected by validation (negative timeout, etc.)

    Example:
        >>> raise ConfigurationError(
        ...     message="Base repository name is required",
        ...     details={"field": "repository.base_repo_name"},
        ... )
    """

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Store Errors
# =============================================================================
# Raised by RemoteObjectStore implementations. Every store error is scoped
# to exactly one remote key, which is always included in the details.
# =============================================================================
class StoreError(ArtifactsError):
    """Base class for failures of a single remote object operation.

    Attributes:
        key: The remote key the failed operation addressed.
        kind: The ErrorKind classifying this failure.
    """

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        key: str,
        error_code: str = "STORE_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["key"] = key

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.key = key


class NetworkError(StoreError):
    """Raised when a remote call keeps failing transiently.

    Connection resets, timeouts and 5xx responses are retried by the
    store; this error surfaces only after the retry budget is spent.
    """

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        key: str,
        error_code: str = "NETWORK_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, key=key, error_code=error_code, details=details)


class AuthFailureError(StoreError):
    """Raised when the repository rejects the configured credentials."""

    kind = ErrorKind.AUTH_FAILURE

    def __init__(
        self,
        message: str,
        key: str,
        error_code: str = "AUTH_FAILURE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, key=key, error_code=error_code, details=details)


class RemoteRejectedError(StoreError):
    """Raised when the repository refuses a request with a non-auth 4xx."""

    kind = ErrorKind.REMOTE_REJECTED

    def __init__(
        self,
        message: str,
        key: str,
        error_code: str = "REMOTE_REJECTED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, key=key, error_code=error_code, details=details)


class ObjectNotFoundError(StoreError):
    """Raised when the addressed object does not exist.

    For ``exists`` this is not an error at all (it returns False); for
    ``get`` and ``delete`` it is raised so the caller decides.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        key: str,
        error_code: str = "NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, key=key, error_code=error_code, details=details)


class StashNotFoundError(ObjectNotFoundError):
    """Raised when unstashing a name that was never stashed for the build.

    This is a pipeline failure: the stash was never created, was already
    cleared, or the resolved build identity is not the one that stashed it
    (e.g. a replay that did not request reuse of the original stash).

    Attributes:
        stash_name: Name of the requested stash.
        job_full_name: Job of the build the key was resolved against.
        build_number: Build number the key was resolved against.
    """

    def __init__(
        self,
        stash_name: str,
        key: str,
        job_full_name: str,
        build_number: int,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["stash_name"] = stash_name
        enriched_details["job_full_name"] = job_full_name
        enriched_details["build_number"] = build_number

        super().__init__(
            message=(
                f"No stash named '{stash_name}' found for "
                f"{job_full_name} #{build_number}"
            ),
            key=key,
            error_code="STASH_NOT_FOUND",
            details=enriched_details,
        )

        self.stash_name = stash_name
        self.job_full_name = job_full_name
        self.build_number = build_number


# =============================================================================
# Stash Source Error
# =============================================================================
# Raised while packing a stash bundle, before anything is uploaded. The
# bundle is all-or-nothing, so one unreadable file fails the whole stash.
# =============================================================================
class StashSourceError(ArtifactsError):
    """Raised when a local file selected for a stash cannot be read.

    Attributes:
        stash_name: Name of the stash being packed.
        source: Local path that could not be read.
    """

    kind = ErrorKind.LOCAL_IO

    def __init__(
        self,
        stash_name: str,
        source: str,
        reason: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["stash_name"] = stash_name
        enriched_details["source"] = source

        super().__init__(
            message=f"Cannot stash '{stash_name}': {source} is unreadable ({reason})",
            error_code="STASH_SOURCE_UNREADABLE",
            details=enriched_details,
        )

        self.stash_name = stash_name
        self.source = source


# =============================================================================
# Partial Archive Error
# =============================================================================
# Raised at the END of an archive step when at least one file failed. The
# step attempted every file first, so the manifest still lists everything
# that was stored successfully.
# =============================================================================
class PartialArchiveError(ArtifactsError):
    """Raised when one or more files of a multi-file archive step failed.

    Attributes:
        failures: One ArchiveFailure per file that could not be archived.
        manifest: The manifest holding every file that WAS archived.

    Example:
        >>> try:
        ...     await coordinator.archive(build, files)
        ... except PartialArchiveError as e:
        ...     for failure in e.failures:
        ...         print(failure.relative_path, failure.error_kind)
    """

    def __init__(
        self,
        failures: list[ArchiveFailure],
        manifest: Manifest,
        error_code: str = "PARTIAL_ARCHIVE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["failed"] = [f.relative_path for f in failures]
        enriched_details["archived"] = len(manifest)

        summary = ", ".join(
            f"{f.relative_path} ({f.error_kind.value})" for f in failures
        )
        super().__init__(
            message=(
                f"Failed to archive {len(failures)} file(s) for "
                f"{manifest.build.job_full_name} #{manifest.build.build_number}: "
                f"{summary}"
            ),
            error_code=error_code,
            details=enriched_details,
        )

        self.failures = failures
        self.manifest = manifest
