from __future__ import annotations

from typing import Optional

import httpx

from .api_client import ApiConfig
from .errors import AuthFailure

TOKEN_PATH = "/api/token"


class TokenClient:
    """Exchanges the long-lived refresh token for a short-lived access token."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        cfg: ApiConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.client_id = client_id
        self.refresh_token = refresh_token
        self._client = httpx.AsyncClient(
            base_url=cfg.accounts_url,
            timeout=cfg.timeout_seconds,
            auth=(client_id, client_secret),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_access_token(self) -> str:
        form = {"grant_type": "refresh_token", "refresh_token": self.refresh_token}
        try:
            resp = await self._client.post(TOKEN_PATH, data=form)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise AuthFailure(f"token refresh rejected: {exc.response.status_code} {exc.response.text[:200]}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthFailure(f"token refresh failed: {exc}") from exc
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthFailure("token refresh response has no access_token")
        return token
