"""Stash bundle packing and unpacking.

A stash is stored as ONE gzip-compressed tar archive, not as one object per
file. Bundles are spooled to a temporary file so large stashes never sit
fully in memory.
"""

from __future__ import annotations

import tarfile
import tempfile
from pathlib import Path
from typing import BinaryIO, Mapping

import structlog

logger = structlog.get_logger()

# Bundles smaller than this stay in memory, larger ones roll over to disk.
SPOOL_MAX_SIZE = 8 * 1024 * 1024


def spooled_file() -> tempfile.SpooledTemporaryFile:
    return tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE, mode="w+b")


def pack(files: Mapping[str, Path], target: BinaryIO) -> int:
    """Write ``files`` as a tar.gz into ``target``.

    Args:
        files: Relative path inside the bundle → local source file.
        target: Seekable binary sink.

    Returns:
        Size of the written bundle in bytes.
    """
    with tarfile.open(fileobj=target, mode="w:gz") as archive:
        for relative_path in sorted(files):
            archive.add(str(files[relative_path]), arcname=relative_path, recursive=False)
    size = target.tell()
    target.seek(0)
    return size


def unpack(source: BinaryIO, destination: Path) -> list[str]:
    """Extract a bundle into ``destination``.

    Members are extracted with tarfile's ``data`` filter: absolute paths,
    '..' components and links leaving the destination are refused.
    The filter argument needs Python 3.11.4 or later.

    Returns:
        Relative paths of the extracted regular files, sorted.
    """
    source.seek(0)
    destination.mkdir(parents=True, exist_ok=True)
    with tarfile.open(fileobj=source, mode="r:gz") as archive:
        names = sorted(member.name for member in archive.getmembers() if member.isfile())
        archive.extractall(path=destination, filter="data")
    logger.debug("bundle_unpacked", destination=str(destination), files=len(names))
    return names
