"""Aircraft registration and position ingestion endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from simbridge.api.errors import ApiError

if TYPE_CHECKING:
    from simbridge.api.client import IngestClient
    from simbridge.models.telemetry import PositionReport


class TelemetryAPI:
    """Telemetry ingestion operations (composition over IngestClient)."""

    def __init__(self, client: IngestClient) -> None:
        self._client = client

    async def register_aircraft(self, name: str) -> int:
        """Register *name* with the service and return its numeric id.

        The endpoint answers with a plain-text integer.
        """
        resp = await self._client.get("/api/aircraft/register", params={"name": name})
        body = resp.text.strip()
        try:
            return int(body)
        except ValueError as exc:
            raise ApiError(
                f"Aircraft registration returned a non-integer id: {body[:50]!r}",
                status_code=resp.status_code,
            ) from exc

    async def submit_position(self, report: PositionReport) -> None:
        """POST one position snapshot."""
        await self._client.post("/api/position", json=report.to_wire())
