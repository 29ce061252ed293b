"""Tests for the forwarding policy, aircraft registry and position delivery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from simbridge.api.client import IngestClient
from simbridge.api.errors import AircraftResolutionError
from simbridge.api.telemetry import TelemetryAPI
from simbridge.models.auth import TokenSource
from simbridge.models.telemetry import INVALID_AIRCRAFT_ID
from simbridge.session import BridgeSession
from simbridge.telemetry.forwarder import ForwardPolicy, TelemetryForwarder, epoch_millis
from simbridge.telemetry.registry import AircraftRegistry
from simbridge.telemetry.report import TelemetryReport

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pytest_httpx import HTTPXMock

API = "http://ingest.test"
REGISTER_URL = f"{API}/api/aircraft/register?name=C172"
POSITION_URL = f"{API}/api/position"


def _report(lat: float, lon: float, title: str = "C172") -> TelemetryReport:
    return TelemetryReport(
        title=title,
        altitude=1234.7,
        latitude=lat,
        longitude=lon,
        heading=270.0,
        airspeed=100.0,
        airspeed_true=104.0,
        vertical_speed=0.0,
        flaps=0.0,
        trim=0.0,
        rudder_trim=0.0,
    )


@pytest.fixture()
def session() -> BridgeSession:
    return BridgeSession(token="tok-1", source=TokenSource.CACHED)


@pytest.fixture()
async def api() -> AsyncIterator[TelemetryAPI]:
    async with IngestClient(API, "tok-1") as client:
        yield TelemetryAPI(client)


class TestForwardPolicy:
    @pytest.mark.parametrize(
        ("lat", "lon", "expected"),
        [
            (0.0, 0.0, False),
            (0.05, -0.1, False),
            (50.4501, 30.5234, True),
            (0.0, 0.2, True),
            (-33.9, 0.0, True),
            (float("nan"), 30.0, False),
            (50.0, float("inf"), False),
        ],
    )
    def test_accepts(self, lat: float, lon: float, expected: bool) -> None:
        assert ForwardPolicy().accepts(_report(lat, lon)) is expected


class TestAircraftRegistry:
    async def test_memoizes_per_name(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, text="17")
        registry = AircraftRegistry(api, session)

        assert await registry.resolve("C172") == 17
        assert await registry.resolve("C172") == 17
        assert len(httpx_mock.get_requests()) == 1
        assert session.aircraft_ids == {"C172": 17}
        assert len(httpx_mock.get_requests()) == 1

    async def test_failure_cached_as_invalid(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, status_code=500, text="boom")
        registry = AircraftRegistry(api, session)

        assert await registry.resolve("C172") == INVALID_AIRCRAFT_ID
        assert await registry.resolve("C172") == INVALID_AIRCRAFT_ID
        assert len(httpx_mock.get_requests()) == 1

    async def test_non_integer_body_is_invalid(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, text="not-a-number")
        registry = AircraftRegistry(api, session)
        assert await registry.resolve("C172") == INVALID_AIRCRAFT_ID


class TestTelemetryForwarder:
    async def test_no_fix_is_never_sent(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        forwarder = TelemetryForwarder(api, AircraftRegistry(api, session))
        assert await forwarder.maybe_forward(_report(0.0, 0.0)) is None
        assert forwarder.filtered_count == 1
        assert httpx_mock.get_requests() == []

    async def test_position_forwarded(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, text="17")
        httpx_mock.add_response(url=POSITION_URL, method="POST", status_code=201)
        forwarder = TelemetryForwarder(api, AircraftRegistry(api, session))

        before = epoch_millis()
        payload = await forwarder.maybe_forward(_report(50.4501, 30.5234))

        assert payload is not None
        assert payload.aircraft_id == 17
        assert payload.altitude == 1234
        assert payload.timestamp >= before
        assert forwarder.forwarded_count == 1

        post = httpx_mock.get_requests(method="POST")[0]
        assert post.headers["authorization"] == "Bearer tok-1"
        body = json.loads(post.content)
        assert body["aircraftId"] == 17
        assert body["heading"] == 270.0
        assert set(body) == {
            "aircraftId",
            "altitude",
            "latitude",
            "longitude",
            "heading",
            "timestamp",
        }

    async def test_non_finite_altitude_is_held_back(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        forwarder = TelemetryForwarder(api, AircraftRegistry(api, session))
        report = _report(50.0, 30.0)
        report.altitude = float("nan")

        assert await forwarder.maybe_forward(report) is None
        assert forwarder.filtered_count == 1
        assert httpx_mock.get_requests() == []

    async def test_post_failure_dropped(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, text="17")
        httpx_mock.add_response(url=POSITION_URL, method="POST", status_code=503)
        forwarder = TelemetryForwarder(api, AircraftRegistry(api, session))

        assert await forwarder.maybe_forward(_report(50.0, 30.0)) is None
        assert forwarder.failed_count == 1
        assert forwarder.forwarded_count == 0

    async def test_unresolved_aircraft_is_fatal(
        self, httpx_mock: HTTPXMock, api: TelemetryAPI, session: BridgeSession
    ) -> None:
        httpx_mock.add_response(url=REGISTER_URL, status_code=500)
        forwarder = TelemetryForwarder(api, AircraftRegistry(api, session))

        with pytest.raises(AircraftResolutionError, match="C172") as exc_info:
            await forwarder.maybe_forward(_report(50.0, 30.0))
        assert exc_info.value.name == "C172"
        assert httpx_mock.get_requests(method="POST") == []
