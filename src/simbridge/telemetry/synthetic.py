"""Synthetic report feed for exercising the ingestion service without a simulator.

Holds a fixed position and turns the heading by ``heading_step`` degrees per
report, wrapping once it passes 360.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from simbridge.telemetry.report import TelemetryReport

if TYPE_CHECKING:
    from collections.abc import Iterator

KYIV = (50.4501, 30.5234)


@dataclass(frozen=True)
class SyntheticFeed:
    title: str = "simbridge test aircraft"
    latitude: float = KYIV[0]
    longitude: float = KYIV[1]
    altitude: float = 10.0
    heading_step: float = 10.0

    def reports(self, count: int | None = None) -> Iterator[TelemetryReport]:
        """Yield *count* reports (forever when *count* is None)."""
        heading = 0.0
        produced = 0
        while count is None or produced < count:
            yield TelemetryReport(
                title=self.title,
                altitude=self.altitude,
                latitude=self.latitude,
                longitude=self.longitude,
                heading=heading,
                airspeed=0.0,
                airspeed_true=0.0,
                vertical_speed=0.0,
                flaps=0.0,
                trim=0.0,
                rudder_trim=0.0,
            )
            produced += 1
            heading += self.heading_step
            if heading > 360:
                heading -= 360
