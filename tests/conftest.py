"""Shared fixtures: an in-memory SimConnect connection and dispatch buffer builders."""

from __future__ import annotations

import struct
from collections import deque
from typing import TYPE_CHECKING

import pytest

from simbridge.models.config import AppSettings
from simbridge.simconnect.constants import E_FAIL, RecvID

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from simbridge.simconnect.constants import SimObjectType
    from simbridge.telemetry.schema import RecordSchema

API_URL = "http://ingest.test"
LOGIN_URL = "http://login.test/ui/login_console"


class FakeConnection:
    """Scripted :class:`SimConnection`; returns ``E_FAIL`` once the queue is empty."""

    def __init__(self) -> None:
        self.queue: deque[tuple[bytes | None, int]] = deque()
        self.registered: list[RecordSchema] = []
        self.requests: list[tuple[int, int, SimObjectType]] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def register_schema(self, schema: RecordSchema) -> int:
        self.registered.append(schema)
        return len(self.registered)

    def request_data(self, request_id: int, define_id: int, object_type: SimObjectType) -> None:
        self.requests.append((request_id, define_id, object_type))

    def next_message(self) -> tuple[bytes | None, int]:
        if self.queue:
            return self.queue.popleft()
        return None, E_FAIL

    def close(self) -> None:
        self.closed = True

    def push(self, raw: bytes) -> None:
        self.queue.append((raw, 0))


def _frame(recv_id: int, body: bytes) -> bytes:
    return struct.pack("<III", 12 + len(body), 6, recv_id) + body


def pack_report(
    title: str = "Cessna 172",
    *,
    altitude: float = 1500.0,
    latitude: float = 50.4501,
    longitude: float = 30.5234,
    heading: float = 90.0,
) -> bytes:
    """Build a Report record in schema order: title[256] then ten float64s."""
    text = title.encode("utf-8")[:255].ljust(256, b"\x00")
    numbers = (altitude, latitude, longitude, heading, 110.0, 115.0, 0.0, 10.0, 1.5, -0.5)
    return text + struct.pack("<10d", *numbers)


def data_message(request_id: int, payload: bytes, *, define_id: int | None = None) -> bytes:
    """Wrap *payload* as a SIMOBJECT_DATA_BYTYPE dispatch buffer."""
    define = request_id if define_id is None else define_id
    body = struct.pack("<IIIIIII", request_id, 0, define, 0, 1, 1, 1) + payload
    return _frame(RecvID.SIMOBJECT_DATA_BYTYPE, body)


def event_message(event_id: int, data: int = 0) -> bytes:
    return _frame(RecvID.EVENT, struct.pack("<III", 0, event_id, data))


def quit_message() -> bytes:
    return _frame(RecvID.QUIT, b"")


def open_message(name: str = "KittyHawk") -> bytes:
    return _frame(RecvID.OPEN, name.encode("utf-8").ljust(256, b"\x00") + b"\x00" * 32)


@pytest.fixture()
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture()
def frames() -> dict[str, Callable[..., bytes]]:
    """Builders for raw dispatch buffers."""
    return {
        "report": pack_report,
        "data": data_message,
        "event": event_message,
        "quit": quit_message,
        "open": open_message,
    }


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    """Settings pointing at test hosts, an ephemeral callback port and a temp token file."""
    for key in ("SIMBRIDGE_API_URL", "SIMBRIDGE_LOGIN_URL", "SIMBRIDGE_TOKEN_FILE"):
        monkeypatch.delenv(key, raising=False)
    return AppSettings(
        api_url=API_URL,
        login_url=LOGIN_URL,
        callback_port=0,
        token_file=str(tmp_path / "token.jwt"),
        poll_interval=0,
        callback_timeout=10,
        shutdown_timeout=10,
    )
