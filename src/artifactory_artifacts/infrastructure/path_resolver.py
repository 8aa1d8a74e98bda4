"""
artifactory_artifacts.infrastructure.path_resolver - Remote Key Resolution
============================================================================

Pure functions mapping (repository prefix, job, build number, artifact name)
to the remote object key. No I/O, no hidden state.

Key Schema:
    {prefix}{job}/{build_number}/artifacts/{relative_path}
    {prefix}{job}/{build_number}/artifacts/stash/{stash_name}.bundle

    Every '/'-separated segment of the prefix, the job full name and the
    relative path is percent-encoded on its own (a space becomes %20) and
    the segments are joined with a literal '/'.

    Empty, '.' and '..' segments are refused: HTTP clients collapse dot
    segments, which would move a key out of its build's root.

Determinism:
    Archive, listing, download, stash and unstash may run on different
    nodes and after retries; each recomputes keys independently, so equal
    inputs must always produce equal keys.

Example:
    >>> resolve(
    ...     RepositoryConfig(base_repo_name="my-generic-repo", prefix="jenkins artifacts/"),
    ...     BuildIdentity(job_full_name="test Pipeline With spaces", build_number=1),
    ...     "my artifact.txt",
    ... )
    'jenkins%20artifacts/test%20Pipeline%20With%20spaces/1/artifacts/my%20artifact.txt'
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote, unquote

from artifactory_artifacts.core.config import RepositoryConfig, ensure_repository_config
from artifactory_artifacts.core.exceptions import ConfigurationError
from artifactory_artifacts.core.models import BuildIdentity

ARTIFACTS_SEGMENT = "artifacts"
STASH_DIRECTORY = "stash"
STASH_SUFFIX = ".bundle"
DOT_SEGMENTS = (".", "..")


def encode_path(path: str) -> str:
    """Percent-encode every '/'-separated segment independently."""
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def check_segments(path: str, what: str) -> None:
    """Raise ValueError when ``path`` has an empty, '.' or '..' segment."""
    for segment in path.split("/"):
        if not segment or segment in DOT_SEGMENTS:
            raise ValueError(f"{what} {path!r} must not contain empty or dot segments")


def build_root(config: RepositoryConfig, build: BuildIdentity) -> str:
    """Key prefix under which everything a build owns is stored.

    An empty prefix contributes nothing (no leading slash). A non-empty
    prefix is used as given, trailing slash or not.

    Raises:
        ConfigurationError: Blank repository name, or a dot segment in the
            prefix.
        ValueError: The job full name has an empty or dot segment.
    """
    ensure_repository_config(config)
    if any(segment in DOT_SEGMENTS for segment in config.prefix.split("/")):
        raise ConfigurationError(
            message=f"Repository prefix {config.prefix!r} contains a '.' or '..' segment",
            details={"field": "repository.prefix"},
        )
    check_segments(build.job_full_name, "Job full name")
    prefix = encode_path(config.prefix) if config.prefix else ""
    return f"{prefix}{encode_path(build.job_full_name)}/{build.build_number}/"


def artifacts_root(config: RepositoryConfig, build: BuildIdentity) -> str:
    return f"{build_root(config, build)}{ARTIFACTS_SEGMENT}/"


def resolve(config: RepositoryConfig, build: BuildIdentity, relative_path: str) -> str:
    """Resolve the remote key of one artifact of a build.

    Args:
        config: Repository configuration (prefix is used as given).
        build: Owning build.
        relative_path: Artifact name relative to the workspace.

    Returns:
        The remote key, relative to the base repository.

    Raises:
        ValueError: If relative_path is empty or has an empty, '.'
            or '..' segment.
        ConfigurationError: If the base repository name is blank.
    """
    if not relative_path:
        raise ValueError("Artifact relative path must not be empty")
    check_segments(relative_path, "Artifact path")
    return f"{artifacts_root(config, build)}{encode_path(relative_path)}"


def resolve_stash(config: RepositoryConfig, build: BuildIdentity, stash_name: str) -> str:
    """Resolve the remote key of a stash bundle."""
    if not stash_name:
        raise ValueError("Stash name must not be empty")
    return resolve(config, build, f"{STASH_DIRECTORY}/{stash_name}{STASH_SUFFIX}")


def stash_root(config: RepositoryConfig, build: BuildIdentity) -> str:
    return f"{artifacts_root(config, build)}{STASH_DIRECTORY}/"


def relative_path_of(
    config: RepositoryConfig,
    build: BuildIdentity,
    key: str,
) -> Optional[str]:
    """Invert ``resolve`` for a key found in a listing.

    Returns:
        The decoded relative path, or None when the key does not belong
        to the build's artifacts.
    """
    root = artifacts_root(config, build)
    if not key.startswith(root) or len(key) == len(root):
        return None
    return "/".join(unquote(segment) for segment in key[len(root):].split("/"))


def stash_name_of(config: RepositoryConfig, build: BuildIdentity, key: str) -> Optional[str]:
    """Invert ``resolve_stash``; None when the key is not a stash bundle."""
    relative = relative_path_of(config, build, key)
    if relative is None:
        return None
    head = f"{STASH_DIRECTORY}/"
    if not relative.startswith(head) or not relative.endswith(STASH_SUFFIX):
        return None
    return relative[len(head):-len(STASH_SUFFIX)]
