"""Forwarding policy and delivery of position snapshots."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from simbridge.api.errors import AircraftResolutionError, SimBridgeError
from simbridge.models.telemetry import PositionReport

if TYPE_CHECKING:
    from simbridge.api.telemetry import TelemetryAPI
    from simbridge.telemetry.registry import AircraftRegistry
    from simbridge.telemetry.report import TelemetryReport

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class ForwardPolicy:
    """Which reports are worth sending.

    Until the simulator has a position fix it reports 0/0; anything within
    ``min_fix_degrees`` of both axes is held back.  So is any report whose
    position, altitude or heading is not a finite number.
    """

    min_fix_degrees: float = 0.1

    def accepts(self, report: TelemetryReport) -> bool:
        if not all(
            math.isfinite(value)
            for value in (report.latitude, report.longitude, report.altitude, report.heading)
        ):
            logger.warning("Holding back %s report with a non-finite value", report.title)
            return False
        return (
            abs(report.latitude) > self.min_fix_degrees
            or abs(report.longitude) > self.min_fix_degrees
        )


class TelemetryForwarder:
    """Filters decoded reports and POSTs the survivors.

    Delivery is best effort: a failed POST is logged and the report is
    dropped.  An aircraft that cannot be resolved to an id is fatal.
    """

    def __init__(
        self,
        api: TelemetryAPI,
        registry: AircraftRegistry,
        policy: ForwardPolicy | None = None,
    ) -> None:
        self._api = api
        self._registry = registry
        self._policy = policy or ForwardPolicy()
        self._forwarded = 0
        self._filtered = 0
        self._failed = 0

    async def maybe_forward(self, report: TelemetryReport) -> PositionReport | None:
        """Send *report* if the policy accepts it.

        Returns the payload that was delivered, or *None* if the report was
        filtered out or delivery failed.

        Raises:
            AircraftResolutionError: If the aircraft title has no valid id.
        """
        logger.debug(
            "REPORT: %s: GPS: %.6f,%.6f Altitude: %.0f",
            report.title,
            report.latitude,
            report.longitude,
            report.altitude,
        )
        if not self._policy.accepts(report):
            self._filtered += 1
            return None

        aircraft_id = await self._registry.resolve(report.title)
        if aircraft_id < 0:
            raise AircraftResolutionError(report.title)

        payload = PositionReport(
            aircraft_id=aircraft_id,
            altitude=int(report.altitude),
            latitude=report.latitude,
            longitude=report.longitude,
            heading=report.heading,
            timestamp=epoch_millis(),
        )
        try:
            await self._api.submit_position(payload)
        except SimBridgeError as exc:
            self._failed += 1
            logger.warning("Dropping position for aircraft %d: %s", aircraft_id, exc)
            return None

        self._forwarded += 1
        return payload

    @property
    def forwarded_count(self) -> int:
        return self._forwarded

    @property
    def filtered_count(self) -> int:
        return self._filtered

    @property
    def failed_count(self) -> int:
        return self._failed
