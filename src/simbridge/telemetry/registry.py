"""Aircraft name to numeric id resolution, memoized per run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from simbridge.api.errors import SimBridgeError
from simbridge.models.telemetry import INVALID_AIRCRAFT_ID

if TYPE_CHECKING:
    from simbridge.api.telemetry import TelemetryAPI
    from simbridge.session import BridgeSession

logger = logging.getLogger(__name__)


class AircraftRegistry:
    """Resolves aircraft titles to ids, calling the service once per name.

    Results live in :attr:`BridgeSession.aircraft_ids` and are never
    invalidated.  A failed registration is cached as
    :data:`INVALID_AIRCRAFT_ID` as well, so it is not retried.
    """

    def __init__(self, api: TelemetryAPI, session: BridgeSession) -> None:
        self._api = api
        self._session = session

    async def resolve(self, name: str) -> int:
        cached = self._session.aircraft_ids.get(name)
        if cached is not None:
            return cached

        try:
            aircraft_id = await self._api.register_aircraft(name)
        except SimBridgeError as exc:
            logger.error("Registering aircraft %r failed: %s", name, exc)
            aircraft_id = INVALID_AIRCRAFT_ID
        else:
            logger.info("Aircraft %r registered as id %d", name, aircraft_id)

        self._session.aircraft_ids[name] = aircraft_id
        return aircraft_id
