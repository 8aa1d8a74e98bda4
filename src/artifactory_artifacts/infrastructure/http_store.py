"""
artifactory_artifacts.infrastructure.http_store - HTTP Object Store
=====================================================================

RemoteObjectStore implementation talking to a generic repository over
HTTP with httpx.

Remote Protocol:
    PUT    {server}/{repo}/{key}   raw bytes, Content-Length + X-Checksum-Sha256
    GET    {server}/{repo}/{key}   streamed download, 404 → not found
    HEAD   {server}/{repo}/{key}   existence check, 404 → False
    DELETE {server}/{repo}/{key}   stash cleanup, 404 → not found
    GET    {server}/api/storage/{repo}/{prefix}?list&deep=1&listFolders=0
                                   recursive folder listing

Failure Handling:
    Every call runs through ``_call``: transport errors (timeouts included)
    and 5xx responses are retried with the configured RetryPolicy; 401/403
    raise AuthFailureError, other 4xx raise RemoteRejectedError, both at
    once. Cancellation is never intercepted.

Upload Integrity:
    The source stream is hashed in a first pass and the digest is sent as
    X-Checksum-Sha256 together with an exact Content-Length, so the server
    refuses a truncated or altered body and an interrupted PUT never leaves
    a partial object under the final key.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import Any, AsyncIterator, Awaitable, BinaryIO, Callable, Optional, TypeVar
from urllib.parse import quote, unquote

import httpx
import structlog

from artifactory_artifacts.core.config import RepositoryConfig, ServerConfig, ensure_repository_config
from artifactory_artifacts.core.exceptions import (
    AuthFailureError,
    NetworkError,
    ObjectNotFoundError,
    RemoteRejectedError,
)
from artifactory_artifacts.infrastructure.object_store import DEFAULT_CHUNK_SIZE, iter_chunks, rewind
from artifactory_artifacts.infrastructure.path_resolver import encode_path
from artifactory_artifacts.infrastructure.retry import RetryPolicy

logger = structlog.get_logger()

T = TypeVar("T")

CHECKSUM_HEADER = "X-Checksum-Sha256"


class _TransientResponse(Exception):
    """A retryable HTTP status, raised inside one attempt."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class HttpObjectStore:
    """Failure-aware HTTP client for a generic artifact repository.

    Attributes:
        _client: Shared httpx.AsyncClient (owned unless injected).
        _retry: RetryPolicy applied to every call.
        _sleep: Awaitable used for back-off (injectable for tests).

    Example:
        >>> store = HttpObjectStore(server_config, repository_config)
        >>> await store.put(key, open("artifact.txt", "rb"), size)
        >>> await store.close()
    """

    def __init__(
        self,
        server: ServerConfig,
        repository: RepositoryConfig,
        retry_policy: Optional[RetryPolicy] = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        ensure_repository_config(repository)

        self._server_url = server.url.rstrip("/")
        self._repo = quote(repository.base_repo_name, safe="")
        self._retry = retry_policy or RetryPolicy()
        self._chunk_size = chunk_size
        self._sleep = sleep

        self._owns_client = client is None
        if client is None:
            auth = None
            if server.username is not None:
                auth = httpx.BasicAuth(server.username, server.password or "")
            client = httpx.AsyncClient(
                auth=auth,
                timeout=httpx.Timeout(server.timeout_seconds),
                transport=transport,
            )
        self._client = client
        self._logger = logger.bind(component="http_object_store", repository=repository.base_repo_name)

    # =========================================================================
    # URLs
    # =========================================================================

    def url_for(self, key: str) -> str:
        return f"{self._server_url}/{self._repo}/{key}"

    def _listing_url(self, prefix: str) -> str:
        folder = prefix.rstrip("/")
        return f"{self._server_url}/api/storage/{self._repo}/{folder}?list&deep=1&listFolders=0"

    # =========================================================================
    # Retry Loop
    # =========================================================================

    async def _call(self, method: str, key: str, attempt: Callable[[], Awaitable[T]]) -> T:
        """Run ``attempt`` until it succeeds, fails permanently, or the budget runs out."""
        reason = ""
        attempts = 0
        for attempt_no in range(self._retry.max_attempts):
            attempts = attempt_no + 1
            try:
                return await attempt()
            except _TransientResponse as exc:
                reason = str(exc)
            except httpx.TransportError as exc:
                if not self._retry.is_retryable_exception(exc):
                    raise NetworkError(
                        message=f"{method} {key} failed: {exc}",
                        key=key,
                        details={"method": method, "attempts": attempts},
                    ) from exc
                reason = f"{type(exc).__name__}: {exc}"

            if not self._retry.should_retry(attempt_no):
                break

            delay = self._retry.calculate_delay(attempt_no)
            self._logger.warning(
                "store_retry_scheduled",
                method=method,
                key=key,
                attempt=attempts,
                delay_seconds=round(delay, 3),
                reason=reason,
            )
            await self._sleep(delay)

        self._logger.error(
            "store_retries_exhausted",
            method=method,
            key=key,
            attempts=attempts,
            reason=reason,
        )
        raise NetworkError(
            message=f"{method} {key} failed after {attempts} attempt(s): {reason}",
            key=key,
            details={"method": method, "attempts": attempts, "reason": reason},
        )

    def _check(self, response: httpx.Response, method: str, key: str) -> None:
        """Map a response status onto success or the error taxonomy."""
        status = response.status_code
        if response.is_success:
            return
        if status == 404:
            raise ObjectNotFoundError(
                message=f"Object not found: {key}",
                key=key,
                details={"method": method, "status_code": status},
            )
        if status in (401, 403):
            raise AuthFailureError(
                message=f"{method} {key} rejected credentials (HTTP {status})",
                key=key,
                details={"method": method, "status_code": status},
            )
        if self._retry.is_retryable_status(status):
            raise _TransientResponse(status)
        raise RemoteRejectedError(
            message=f"{method} {key} rejected by repository (HTTP {status})",
            key=key,
            details={"method": method, "status_code": status},
        )

    # =========================================================================
    # Operations
    # =========================================================================

    def _checksum(self, stream: BinaryIO) -> str:
        stream.seek(0)
        digest = hashlib.sha256()
        for chunk in iter_chunks(stream, self._chunk_size):
            digest.update(chunk)
        return digest.hexdigest()

    async def _body(self, stream: BinaryIO) -> AsyncIterator[bytes]:
        stream.seek(0)
        for chunk in iter_chunks(stream, self._chunk_size):
            yield chunk

    async def put(self, key: str, stream: BinaryIO, size: int) -> None:
        headers = {
            "Content-Length": str(size),
            "Content-Type": "application/octet-stream",
            CHECKSUM_HEADER: self._checksum(stream),
        }

        async def attempt() -> None:
            response = await self._client.put(
                self.url_for(key),
                content=self._body(stream),
                headers=headers,
            )
            self._check(response, "PUT", key)

        await self._call("PUT", key, attempt)
        self._logger.debug("object_uploaded", key=key, size=size)

    async def get(self, key: str, sink: BinaryIO) -> int:
        async def attempt() -> int:
            async with self._client.stream("GET", self.url_for(key)) as response:
                self._check(response, "GET", key)
                rewind(sink)
                written = 0
                async for chunk in response.aiter_bytes(self._chunk_size):
                    sink.write(chunk)
                    written += len(chunk)
                return written

        written = await self._call("GET", key, attempt)
        self._logger.debug("object_downloaded", key=key, size=written)
        return written

    async def exists(self, key: str) -> bool:
        async def attempt() -> bool:
            response = await self._client.head(self.url_for(key))
            try:
                self._check(response, "HEAD", key)
            except ObjectNotFoundError:
                return False
            return True

        return await self._call("HEAD", key, attempt)

    async def delete(self, key: str) -> None:
        async def attempt() -> None:
            response = await self._client.delete(self.url_for(key))
            self._check(response, "DELETE", key)

        await self._call("DELETE", key, attempt)
        self._logger.debug("object_deleted", key=key)

    async def list_keys(self, prefix: str) -> list[str]:
        folder = prefix.rstrip("/")

        async def attempt() -> list[str]:
            response = await self._client.get(self._listing_url(prefix))
            try:
                self._check(response, "LIST", prefix)
            except ObjectNotFoundError:
                return []
            files = response.json().get("files", [])
            keys = []
            for entry in files:
                if entry.get("folder"):
                    continue
                uri = entry["uri"].lstrip("/")
                keys.append(f"{folder}/{encode_path(unquote(uri))}" if folder else encode_path(unquote(uri)))
            return sorted(keys)

        return await self._call("LIST", prefix, attempt)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
