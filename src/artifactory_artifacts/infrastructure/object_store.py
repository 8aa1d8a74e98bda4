"""
artifactory_artifacts.infrastructure.object_store - Remote Object Store Contract
==================================================================================

The capability interface every remote object store satisfies, plus an
in-memory implementation for tests and local development.

Architecture Context:
    The coordinators only talk to a RemoteObjectStore; they never see HTTP.

    ┌─────────────────────┐                    ┌──────────────────────┐
    │ ArchiveCoordinator  │ ── put/get ──────→ │  RemoteObjectStore   │
    │ StashCoordinator    │ ── put/get/delete →│   ├─ HttpObjectStore │
    │ ReplayAdapter       │                    │   └─ InMemoryObject- │
    └─────────────────────┘                    │       Store          │
                                               └──────────────────────┘

    RemoteObjectStore is a typing.Protocol: implementations satisfy it
    structurally, no base class is involved.

Operation Semantics:
    put(key, stream, size)  → overwrite-by-key, streamed in chunks
    get(key, sink)          → stream object into sink, ObjectNotFoundError if absent
    exists(key)             → False when absent, never raises NOT_FOUND
    delete(key)             → ObjectNotFoundError if absent (stash cleanup only)
    list_keys(prefix)       → sorted keys below prefix, [] if none
"""

from __future__ import annotations

import io
from typing import BinaryIO, Iterator, Protocol, runtime_checkable

import structlog

from artifactory_artifacts.core.exceptions import ObjectNotFoundError, RemoteRejectedError

logger = structlog.get_logger()

DEFAULT_CHUNK_SIZE = 64 * 1024


def iter_chunks(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the remaining bytes of ``stream`` in chunks."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


def rewind(stream: BinaryIO) -> None:
    """Reset a sink before a (re)download attempt."""
    stream.seek(0)
    stream.truncate()


# =============================================================================
# Capability Interface
# =============================================================================
@runtime_checkable
class RemoteObjectStore(Protocol):
    """Key-addressed object store used for artifacts and stash bundles.

    All operations are scoped to one key and hit the network for remote
    implementations. Only PUT-by-key overwrite is assumed idempotent.
    """

    async def put(self, key: str, stream: BinaryIO, size: int) -> None:
        """Upload ``size`` bytes from ``stream`` under ``key``.

        The stream must be seekable; it is rewound before every attempt.

        Raises:
            NetworkError: Transient failures exhausted the retry budget.
            AuthFailureError: Credentials rejected.
            RemoteRejectedError: Upload refused.
        """
        ...

    async def get(self, key: str, sink: BinaryIO) -> int:
        """Download ``key`` into ``sink`` and return the bytes written.

        Raises:
            ObjectNotFoundError: The object does not exist.
            NetworkError: Transient failures exhausted the retry budget.
            AuthFailureError: Credentials rejected.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Whether an object is stored under ``key``."""
        ...

    async def delete(self, key: str) -> None:
        """Remove the object under ``key``.

        Raises:
            ObjectNotFoundError: The object does not exist.
            NetworkError: Transient failures exhausted the retry budget.
        """
        ...

    async def list_keys(self, prefix: str) -> list[str]:
        """Sorted keys of all objects below ``prefix``."""
        ...

    def url_for(self, key: str) -> str:
        """Download URL (or locator) of ``key`` for manifest exposure."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


async def read_bytes(store: RemoteObjectStore, key: str) -> bytes:
    """Download a small object fully into memory."""
    buffer = io.BytesIO()
    await store.get(key, buffer)
    return buffer.getvalue()


# =============================================================================
# In-Memory Implementation
# =============================================================================
class InMemoryObjectStore:
    """Dict-backed object store for development and testing.

    Uploads are staged in a separate buffer and committed under the final
    key only once the whole stream was consumed, so an interrupted put
    leaves either the previous object or nothing.

    Tests can inject failures per key with ``fail_next`` to exercise the
    partial-failure paths of the coordinators.

    Example:
        >>> store = InMemoryObjectStore()
        >>> await store.put("a/b.txt", io.BytesIO(b"hi"), 2)
        >>> await read_bytes(store, "a/b.txt")
        b'hi'
    """

    def __init__(self, base_url: str = "memory://store") -> None:
        self._objects: dict[str, bytes] = {}
        self._failures: dict[str, list[Exception]] = {}
        self._base_url = base_url.rstrip("/")
        self.requests: list[tuple[str, str]] = []
        self._logger = logger.bind(component="in_memory_object_store")

    def fail_next(self, key: str, error: Exception, times: int = 1) -> None:
        """Make the next ``times`` operations on ``key`` raise ``error``."""
        self._failures.setdefault(key, []).extend([error] * times)

    def _record(self, method: str, key: str) -> None:
        self.requests.append((method, key))
        pending = self._failures.get(key)
        if pending:
            raise pending.pop(0)

    async def put(self, key: str, stream: BinaryIO, size: int) -> None:
        self._record("PUT", key)
        stream.seek(0)
        staged = io.BytesIO()
        for chunk in iter_chunks(stream):
            staged.write(chunk)
        if staged.tell() != size:
            raise RemoteRejectedError(
                message=f"Upload of {key} sent {staged.tell()} bytes, expected {size}",
                key=key,
                details={"expected": size, "received": staged.tell()},
            )
        self._objects[key] = staged.getvalue()
        self._logger.debug("object_stored", key=key, size=size)

    async def get(self, key: str, sink: BinaryIO) -> int:
        self._record("GET", key)
        if key not in self._objects:
            raise ObjectNotFoundError(message=f"Object not found: {key}", key=key)
        data = self._objects[key]
        rewind(sink)
        sink.write(data)
        return len(data)

    async def exists(self, key: str) -> bool:
        self._record("HEAD", key)
        return key in self._objects

    async def delete(self, key: str) -> None:
        self._record("DELETE", key)
        if key not in self._objects:
            raise ObjectNotFoundError(message=f"Object not found: {key}", key=key)
        del self._objects[key]
        self._logger.debug("object_deleted", key=key)

    async def list_keys(self, prefix: str) -> list[str]:
        return sorted(k for k in self._objects if k.startswith(prefix))

    def url_for(self, key: str) -> str:
        return f"{self._base_url}/{key}"

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._objects)
