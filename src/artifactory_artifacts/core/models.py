"""
artifactory_artifacts.core.models - Core Data Models
======================================================

The Pydantic data models that flow through every layer of the artifact
persistence core.

Model Overview:
    BuildIdentity   → Which build owns the data? (job + build number)
    ArtifactRef     → Which archived file? (relative path)
    StashRef        → Which named stash, owned by which build?
    ManifestEntry   → Where did one archived file land remotely?
    Manifest        → Everything archived for one build
    ArchiveFailure  → Why one file of an archive step failed
    Workspace       → The files of one execution node

Design Principles:
    1. Identity models are frozen: a build's identity never changes once
       the build has started.
    2. Logical names are stored verbatim (spaces included); encoding only
       happens when a remote key is formed (see infrastructure.path_resolver).
    3. The manifest belongs to the build record that requested the archive.
       The coordinators never keep it.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from artifactory_artifacts.core.enums import ErrorKind


# =============================================================================
# Build Identity
# =============================================================================
# Assigned by the external build engine. The job full name may contain path
# separators (folders) and spaces.
# =============================================================================
class BuildIdentity(BaseModel):
    """Identity of one build execution.

    Attributes:
        job_full_name: Full name of the job, folders separated by '/'.
        build_number: Positive build number assigned by the build engine.

    Example:
        >>> build = BuildIdentity(job_full_name="team/my job", build_number=7)
        >>> str(build)
        'team/my job #7'
    """

    model_config = ConfigDict(frozen=True)

    job_full_name: str = Field(
        min_length=1,
        description="Full job name, may contain '/' and spaces",
    )
    build_number: int = Field(
        gt=0,
        description="Build number assigned by the build engine",
    )

    def __str__(self) -> str:
        return f"{self.job_full_name} #{self.build_number}"


class ArtifactRef(BaseModel):
    """One archived file, named by its path relative to the workspace."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(
        min_length=1,
        description="Artifact name relative to the workspace, may contain spaces",
    )


class StashRef(BaseModel):
    """A named, transient bundle of files owned by one build."""

    model_config = ConfigDict(frozen=True)

    stash_name: str = Field(min_length=1, description="Name given at the stash step")
    owning_build: BuildIdentity = Field(description="Build the bundle was stored under")
    key: str = Field(description="Remote key of the bundle")
    file_count: int = Field(default=0, ge=0, description="Files packed into the bundle")


# =============================================================================
# Manifest
# =============================================================================
# Accumulated by the ArchiveCoordinator, one entry per successfully
# archived file. Exposed to download/browse collaborators via `url`.
# =============================================================================
class ManifestEntry(BaseModel):
    """Where one archived file was stored.

    Attributes:
        relative_path: Logical artifact name (unencoded).
        key: Remote key the file was uploaded under.
        url: Download URL of the remote object.
        size: Size in bytes, or None when reconstructed from a listing
            that did not report it.
    """

    model_config = ConfigDict(frozen=True)

    relative_path: str
    key: str
    url: str
    size: Optional[int] = None

    @property
    def ref(self) -> ArtifactRef:
        return ArtifactRef(relative_path=self.relative_path)


class Manifest(BaseModel):
    """Mapping of every archived artifact of a build to its remote key.

    Re-archiving the same relative path replaces its entry, mirroring the
    overwrite semantics of PUT-by-key.

    Example:
        >>> manifest = Manifest(build=build)
        >>> manifest.add(entry)
        >>> [e.relative_path for e in manifest.list()]
        ['artifact.txt']
    """

    build: BuildIdentity
    entries: dict[str, ManifestEntry] = Field(default_factory=dict)

    def add(self, entry: ManifestEntry) -> None:
        self.entries[entry.relative_path] = entry

    def get(self, relative_path: str) -> Optional[ManifestEntry]:
        return self.entries.get(relative_path)

    def list(self) -> list[ManifestEntry]:
        """Return all entries sorted by relative path."""
        return [self.entries[path] for path in sorted(self.entries)]

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self.entries


class ArchiveFailure(BaseModel):
    """One file of an archive step that could not be stored."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    error_kind: ErrorKind
    message: str


# =============================================================================
# Workspace
# =============================================================================
# The "workspace handle" of an execution node: the controller or a remote
# agent. Stash and unstash may use two different workspaces; the remote
# store is the only thing they share.
#
# Patterns are Ant-style globs relative to the workspace root, e.g.
# "**/*.jar" or "target/*.txt". Default excludes drop SCM metadata and
# editor leftovers, as the stash step of the build engine does.
# =============================================================================
DEFAULT_EXCLUDES: tuple[str, ...] = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    "**/CVS/**",
    "**/.cvsignore",
    "**/.svn/**",
    "**/.DS_Store",
    "**/.git/**",
    "**/.gitattributes",
    "**/.gitignore",
    "**/.gitmodules",
    "**/.hg/**",
    "**/.hgignore",
    "**/.hgtags",
    "**/.bzr/**",
    "**/.bzrignore",
)


@lru_cache(maxsize=256)
def ant_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an Ant-style pattern to a regex over '/'-separated paths.

    ``*`` and ``?`` stay inside one path segment, ``**/`` matches any
    number of leading directories (none included), and a trailing ``/**``
    or ``/`` selects everything below a directory.
    """
    if pattern.endswith("/"):
        pattern += "**"
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == len(pattern):
            parts.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts), re.DOTALL)


def _matches(relative_path: str, patterns: Iterable[str]) -> bool:
    return any(ant_pattern(p).fullmatch(relative_path) for p in patterns)


class Workspace(BaseModel):
    """Files of one execution node, rooted at a local directory.

    Attributes:
        node_name: Name of the node ("built-in" for the controller).
        root: Workspace directory on that node.
    """

    model_config = ConfigDict(frozen=True)

    node_name: str = Field(default="built-in")
    root: Path

    @field_validator("root")
    @classmethod
    def _absolute_root(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    def path_of(self, relative_path: str) -> Path:
        return self.root.joinpath(*relative_path.split("/"))

    def collect(
        self,
        includes: Iterable[str] = ("**/*",),
        excludes: Iterable[str] = (),
        use_default_excludes: bool = True,
    ) -> dict[str, Path]:
        """Select workspace files by include/exclude patterns.

        Args:
            includes: Ant-style patterns of files to select.
            excludes: Ant-style patterns of files to drop from the selection.
            use_default_excludes: Also drop SCM metadata and editor files.

        Returns:
            Mapping of '/'-separated relative path to local file path,
            sorted by relative path.
        """
        exclude_patterns = list(excludes)
        if use_default_excludes:
            exclude_patterns.extend(DEFAULT_EXCLUDES)

        include_patterns = list(includes)
        selected: dict[str, Path] = {}
        for path in self.root.rglob("*"):
            if not path.is_file():
                continue
            relative = path.relative_to(self.root).as_posix()
            if _matches(relative, include_patterns) and not _matches(relative, exclude_patterns):
                selected[relative] = path

        return {rel: selected[rel] for rel in sorted(selected)}
