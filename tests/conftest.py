"""
Shared Test Fixtures for artifactory-artifacts
================================================

Reusable pytest fixtures used across the test suite, organized by layer:

    1. Configuration fixtures
    2. Build identity / workspace fixtures
    3. Infrastructure fixtures (in-memory store, fake HTTP repository)
    4. Orchestration fixtures (coordinators)
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, Union

import httpx
import pytest

from artifactory_artifacts.core.config import RepositoryConfig, ServerConfig
from artifactory_artifacts.core.models import BuildIdentity, Workspace
from artifactory_artifacts.infrastructure.http_store import HttpObjectStore
from artifactory_artifacts.infrastructure.object_store import InMemoryObjectStore
from artifactory_artifacts.infrastructure.retry import RetryPolicy
from artifactory_artifacts.orchestration.archive import ArchiveCoordinator
from artifactory_artifacts.orchestration.replay import ReplayAdapter
from artifactory_artifacts.orchestration.stash import StashCoordinator

SERVER_URL = "http://artifactory.test"
BASE_REPO = "my-generic-repo"


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def repository_config():
    """Repository config with the 'jenkins/' prefix."""
    return RepositoryConfig(base_repo_name=BASE_REPO, prefix="jenkins/")


@pytest.fixture
def server_config():
    """Server config pointing at the fake repository host."""
    return ServerConfig(url=SERVER_URL, username="ci", password="secret", timeout_seconds=5)


# =============================================================================
# Builds and Workspaces
# =============================================================================

@pytest.fixture
def build():
    """Build #1 of a job without spaces."""
    return BuildIdentity(job_full_name="testPipelineWithPrefix", build_number=1)


@pytest.fixture
def make_workspace(tmp_path) -> Callable[..., Workspace]:
    """Factory creating a workspace for a named node, pre-filled with files."""

    def _make(node_name: str = "built-in", files: dict[str, Union[str, bytes]] | None = None) -> Workspace:
        root = tmp_path / node_name
        root.mkdir(parents=True, exist_ok=True)
        for relative_path, content in (files or {}).items():
            path = root / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode("utf-8")
            path.write_bytes(content)
        return Workspace(node_name=node_name, root=root)

    return _make


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def store():
    """Fresh InMemoryObjectStore."""
    return InMemoryObjectStore()


class FakeRepository:
    """httpx.MockTransport handler emulating a generic repository.

    Objects are kept by raw request path ('/my-generic-repo/<key>').
    ``script`` queues responses (status codes or exceptions to raise) that
    are served before the normal behaviour, one per request.
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.script: list[Union[int, Exception]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.split(b"?")[0].decode("ascii")

        if self.script:
            scripted = self.script.pop(0)
            if isinstance(scripted, Exception):
                raise scripted
            return httpx.Response(scripted)

        if path.startswith("/api/storage/"):
            return self._listing(path[len("/api/storage/"):])

        if request.method == "PUT":
            body = request.content
            expected = request.headers.get("X-Checksum-Sha256")
            if expected and expected != hashlib.sha256(body).hexdigest():
                return httpx.Response(409)
            self.objects[path] = body
            return httpx.Response(201)
        if request.method == "GET":
            if path not in self.objects:
                return httpx.Response(404)
            return httpx.Response(200, content=self.objects[path])
        if request.method == "HEAD":
            return httpx.Response(200 if path in self.objects else 404)
        if request.method == "DELETE":
            if self.objects.pop(path, None) is None:
                return httpx.Response(404)
            return httpx.Response(204)
        return httpx.Response(405)

    def _listing(self, folder: str) -> httpx.Response:
        folder_path = f"/{folder.rstrip('/')}/"
        files = [
            {"uri": "/" + path[len(folder_path):], "size": len(data), "folder": False}
            for path, data in sorted(self.objects.items())
            if path.startswith(folder_path)
        ]
        if not files:
            return httpx.Response(404)
        return httpx.Response(200, json={"uri": folder_path, "files": files})

    def paths(self, method: str) -> list[str]:
        return [
            r.url.raw_path.split(b"?")[0].decode("ascii")
            for r in self.requests
            if r.method == method
        ]


@pytest.fixture
def fake_repository():
    """Fresh FakeRepository handler."""
    return FakeRepository()


@pytest.fixture
def sleeps():
    """Records back-off delays instead of sleeping."""
    return []


@pytest.fixture
def make_http_store(server_config, fake_repository, sleeps):
    """Factory for HttpObjectStore instances wired to the fake repository."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    def _make(repository: RepositoryConfig, retry_policy: RetryPolicy | None = None) -> HttpObjectStore:
        return HttpObjectStore(
            server_config,
            repository,
            retry_policy or RetryPolicy(max_attempts=3, initial_delay=0.2),
            transport=httpx.MockTransport(fake_repository),
            sleep=_sleep,
        )

    return _make


# =============================================================================
# Orchestration
# =============================================================================

@pytest.fixture
def archive_coordinator(repository_config, store):
    """ArchiveCoordinator over the in-memory store."""
    return ArchiveCoordinator(repository_config, store)


@pytest.fixture
def stash_coordinator(repository_config, store):
    """StashCoordinator over the in-memory store."""
    return StashCoordinator(repository_config, store)


@pytest.fixture
def replay_adapter(archive_coordinator, stash_coordinator):
    """ReplayAdapter over both coordinators."""
    return ReplayAdapter(archive_coordinator, stash_coordinator)


@pytest.fixture
def source_file(tmp_path) -> Callable[[str, Union[str, bytes]], Path]:
    """Write a standalone source file outside any workspace."""

    def _write(name: str, content: Union[str, bytes]) -> Path:
        path = tmp_path / "sources" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8") if isinstance(content, str) else content)
        return path

    return _write
