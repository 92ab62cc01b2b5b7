from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .errors import RecentFetchFailure


@dataclass
class ApiConfig:
    base_url: str = "https://api.spotify.com/v1"
    accounts_url: str = "https://accounts.spotify.com"
    timeout_seconds: int = 10
    max_concurrency: int = 6


class ApiClient:
    """Read-only Spotify Web API calls for a single bearer token.

    Requests are not retried; a failed call raises and the caller decides
    whether that is fatal.
    """

    def __init__(
        self,
        token: str,
        cfg: ApiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.cfg = cfg
        self._semaphore = asyncio.Semaphore(cfg.max_concurrency)
        self._client = httpx.AsyncClient(
            base_url=cfg.base_url,
            timeout=cfg.timeout_seconds,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
        )
        self._logger = None

    def set_logger(self, logger) -> None:
        self._logger = logger

    async def close(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        params = params or {}
        async with self._semaphore:
            if self._logger:
                self._logger.debug("http_request_start", extra={"extra": {"path": path, "params": params}})
            resp = await self._client.get(path, params=params)
        if resp.status_code != 200 and self._logger:
            self._logger.info(
                "http_error",
                extra={"extra": {"path": path, "status": resp.status_code, "body": resp.text[:500]}},
            )
        resp.raise_for_status()
        return resp.json()

    async def get_recently_played(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Return the most recent play events, newest first, as sent by the API."""
        try:
            data = await self.get_json("/me/player/recently-played", params={"limit": limit})
        except (httpx.HTTPError, ValueError) as exc:
            raise RecentFetchFailure(f"recently-played request failed: {exc}") from exc
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise RecentFetchFailure("recently-played response has no items list")
        if not all(isinstance(item, dict) for item in items):
            raise RecentFetchFailure("recently-played response holds items that are not objects")
        return items

    async def get_top_items(self, category: str, time_range: str, limit: int = 50) -> List[Dict[str, Any]]:
        data = await self.get_json(f"/me/top/{category}", params={"time_range": time_range, "limit": limit})
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ValueError(f"top {category} response has no items list")
        return items
