"""Clients for the shared remote snapshot store."""
from __future__ import annotations

import copy
import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class RemoteStoreError(RuntimeError):
    """Raised when the remote store cannot be reached or rejects a request."""


class RemoteStore(Protocol):
    """Whole-snapshot get/put contract; there is no partial update primitive."""

    async def get(self) -> dict[str, Any] | None: ...

    async def put(self, state: dict[str, Any]) -> bool: ...


class HttpRemoteStore:
    """Stores the snapshot as one JSON document behind a single URL."""

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url.startswith(("http://", "https://")):
            raise ValueError("url must include scheme and host")
        self._url = url
        self._headers = dict(headers or {})
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def get(self) -> dict[str, Any] | None:
        try:
            response = await self._client.get(self._url, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"fetch failed: {exc}") from exc

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Remote store returned malformed JSON; treating as empty")
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    async def put(self, state: dict[str, Any]) -> bool:
        try:
            response = await self._client.put(self._url, json=state, headers=self._headers)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"save failed: {exc}") from exc
        if not response.is_success:
            logger.warning("Remote store rejected snapshot with HTTP %s", response.status_code)
        return response.is_success

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class InMemoryRemoteStore:
    """Process-local stand-in for the shared store, used for offline runs and tests."""

    def __init__(self, state: dict[str, Any] | None = None) -> None:
        self._state = copy.deepcopy(state) if state is not None else None
        self.available = True
        self.puts = 0

    async def get(self) -> dict[str, Any] | None:
        if not self.available:
            raise RemoteStoreError("store unavailable")
        return copy.deepcopy(self._state)

    async def put(self, state: dict[str, Any]) -> bool:
        if not self.available:
            raise RemoteStoreError("store unavailable")
        self._state = copy.deepcopy(state)
        self.puts += 1
        return True

    async def aclose(self) -> None:
        return None


__all__ = ["HttpRemoteStore", "InMemoryRemoteStore", "RemoteStore", "RemoteStoreError"]
