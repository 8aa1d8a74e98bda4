"""
artifactory_artifacts.infrastructure - Storage Layer
======================================================

Key resolution and the remote object store the coordinators build on.

Architecture:
    ┌─────────────── ORCHESTRATION LAYER ─────────────────┐
    │  ArchiveCoordinator, StashCoordinator, ReplayAdapter │
    └─────────────────────┬───────────────────────────────┘
                          │ resolve keys / move bytes
                          ▼
    ┌─────────────── INFRASTRUCTURE LAYER ────────────────┐
    │  path_resolver   (pure key computation)              │
    │  RemoteObjectStore (Protocol)                        │
    │    ├── HttpObjectStore     (httpx, retry/backoff)    │
    │    └── InMemoryObjectStore (tests / local dev)       │
    │  bundle          (stash tar.gz packing)              │
    └──────────────────────────────────────────────────────┘
"""

from artifactory_artifacts.infrastructure.http_store import HttpObjectStore
from artifactory_artifacts.infrastructure.object_store import (
    InMemoryObjectStore,
    RemoteObjectStore,
    read_bytes,
)
from artifactory_artifacts.infrastructure.retry import RetryPolicy

__all__ = [
    "HttpObjectStore",
    "InMemoryObjectStore",
    "RemoteObjectStore",
    "RetryPolicy",
    "read_bytes",
]
