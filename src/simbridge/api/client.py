"""Thin async HTTP client for the telemetry-ingestion service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from simbridge.api.errors import ApiError, AuthError, NetworkError

logger = logging.getLogger(__name__)


class IngestClient:
    """Bearer-authenticated wrapper around :class:`httpx.AsyncClient`.

    Every request carries ``Authorization: Bearer <token>``.  Transport
    failures surface as :class:`NetworkError`, 401/403 as :class:`AuthError`
    and any other non-2xx status as :class:`ApiError`.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._access_token = access_token
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @property
    def access_token(self) -> str:
        return self._access_token

    # -- verbs ---------------------------------------------------------------

    async def get(self, path: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, *, json: Any = None) -> httpx.Response:
        return await self._request("POST", path, json=json)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            resp = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, path, resp.status_code)
        if resp.status_code in (401, 403):
            raise AuthError(
                f"{method} {path} rejected the bearer token (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        if not resp.is_success:
            raise ApiError(
                f"{method} {path} failed (HTTP {resp.status_code}): {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    # -- lifecycle -----------------------------------------------------------

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> IngestClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
