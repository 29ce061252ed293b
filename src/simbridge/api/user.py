"""User identity endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from simbridge.models.auth import UserInfo

if TYPE_CHECKING:
    from simbridge.api.client import IngestClient


class UserAPI:
    """User-related API operations (composition over IngestClient)."""

    def __init__(self, client: IngestClient) -> None:
        self._client = client

    async def me(self) -> UserInfo:
        """Return the user the bearer token belongs to."""
        resp = await self._client.get("/api/user/me")
        return UserInfo.model_validate(resp.json())
