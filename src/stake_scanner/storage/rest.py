"""REST key-value store (Upstash / Vercel KV style API) over httpx."""

from __future__ import annotations

import json
import logging

import httpx

from stake_scanner.interfaces.store import PersistenceError

log = logging.getLogger(__name__)


class RestKeyValueStore:
    """KeyValueStore backed by a Redis-over-HTTP service.

    ``GET {base}/get/{key}`` answers ``{"result": <string or null>}``;
    ``POST {base}/set/{key}`` takes the value as a JSON-encoded string body.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout or self.DEFAULT_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._token}"},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        assert self._client is not None, "Store not initialized. Call initialize() first."
        return self._client

    async def get(self, key: str) -> str | None:
        try:
            resp = await self.client.get(f"/get/{key}")
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PersistenceError(f"read of {key!r} failed: {exc}") from exc
        return data.get("result") if isinstance(data, dict) else None

    async def set(self, key: str, value: str) -> None:
        try:
            resp = await self.client.post(
                f"/set/{key}",
                content=json.dumps(value),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise PersistenceError(f"write of {key!r} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise PersistenceError(
                f"write of {key!r} rejected: HTTP {resp.status_code} {resp.text[:200]}"
            )
        log.debug("Stored %d bytes under %s", len(value), key)
