"""Wire an authenticated session, a simulator connection and the ingestion API together."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from simbridge.api.client import IngestClient
from simbridge.api.telemetry import TelemetryAPI
from simbridge.telemetry.dispatch import DispatchLoop
from simbridge.telemetry.forwarder import ForwardPolicy, TelemetryForwarder
from simbridge.telemetry.registry import AircraftRegistry
from simbridge.telemetry.schema import REPORT_SCHEMA

if TYPE_CHECKING:
    from collections.abc import Callable

    from simbridge.models.config import AppSettings
    from simbridge.models.telemetry import PositionReport
    from simbridge.session import BridgeSession
    from simbridge.simconnect.connection import SimConnection
    from simbridge.telemetry.report import TelemetryReport
    from simbridge.telemetry.synthetic import SyntheticFeed

logger = logging.getLogger(__name__)


@dataclass
class BridgeStats:
    """Counters reported when a run ends."""

    cycles: int = 0
    messages: int = 0
    dropped: int = 0
    forwarded: int = 0
    filtered: int = 0
    failed: int = 0
    aircraft: int = 0


def build_forwarder(
    client: IngestClient, session: BridgeSession, settings: AppSettings
) -> TelemetryForwarder:
    api = TelemetryAPI(client)
    return TelemetryForwarder(
        api,
        AircraftRegistry(api, session),
        ForwardPolicy(min_fix_degrees=settings.min_fix_degrees),
    )


def _collect(
    stats: BridgeStats, forwarder: TelemetryForwarder, session: BridgeSession
) -> BridgeStats:
    stats.forwarded = forwarder.forwarded_count
    stats.filtered = forwarder.filtered_count
    stats.failed = forwarder.failed_count
    stats.aircraft = len(session.aircraft_ids)
    return stats


async def run_bridge(
    connection: SimConnection,
    session: BridgeSession,
    settings: AppSettings,
    *,
    stop: asyncio.Event | None = None,
    on_report: Callable[[TelemetryReport, PositionReport | None], None] | None = None,
) -> BridgeStats:
    """Open *connection*, poll the report schema and forward until stopped.

    Raises:
        SimConnectError: The simulator link failed.
        AircraftResolutionError: A report could not be attributed to an aircraft.
    """
    stats = BridgeStats()
    async with IngestClient(
        settings.api_url, session.token, timeout=settings.request_timeout
    ) as client:
        forwarder = build_forwarder(client, session, settings)
        loop = DispatchLoop(connection, poll_interval=settings.poll_interval)

        async def _consume(report: TelemetryReport) -> None:
            payload = await forwarder.maybe_forward(report)
            if on_report is not None:
                on_report(report, payload)

        connection.open()
        try:
            loop.subscribe(REPORT_SCHEMA, _consume)
            await loop.run(stop)
        finally:
            stats.cycles = loop.cycles
            stats.messages = loop.message_count
            stats.dropped = loop.dropped_count
            _collect(stats, forwarder, session)
            connection.close()
    logger.info(
        "Bridge stopped: %d forwarded, %d filtered, %d failed",
        stats.forwarded,
        stats.filtered,
        stats.failed,
    )
    return stats


async def run_synthetic(
    feed: SyntheticFeed,
    session: BridgeSession,
    settings: AppSettings,
    *,
    count: int | None = None,
    interval: float = 1.0,
    stop: asyncio.Event | None = None,
    on_report: Callable[[TelemetryReport, PositionReport | None], None] | None = None,
) -> BridgeStats:
    """Forward reports from *feed* through the normal forwarding path."""
    stats = BridgeStats()
    async with IngestClient(
        settings.api_url, session.token, timeout=settings.request_timeout
    ) as client:
        forwarder = build_forwarder(client, session, settings)
        for report in feed.reports(count):
            if stop is not None and stop.is_set():
                break
            stats.cycles += 1
            payload = await forwarder.maybe_forward(report)
            if on_report is not None:
                on_report(report, payload)
            if interval > 0:
                if stop is None:
                    await asyncio.sleep(interval)
                else:
                    with contextlib.suppress(TimeoutError):
                        await asyncio.wait_for(stop.wait(), timeout=interval)
        _collect(stats, forwarder, session)
    return stats
