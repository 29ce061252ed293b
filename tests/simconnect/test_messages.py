"""Tests for dispatch buffer classification."""

from __future__ import annotations

import struct
from typing import Any

import pytest

from simbridge.api.errors import DecodeError
from simbridge.simconnect.constants import RecvID
from simbridge.simconnect.messages import (
    SIMOBJECT_DATA_OFFSET,
    MessageKind,
    parse_message,
)


class TestParseMessage:
    def test_data_offset_is_forty(self) -> None:
        assert SIMOBJECT_DATA_OFFSET == 40

    def test_bytype_data(self, frames: dict[str, Any]) -> None:
        payload = frames["report"]()
        msg = parse_message(frames["data"](3, payload, define_id=5))
        assert msg.kind is MessageKind.SIMOBJECT_DATA
        assert msg.recv_id == RecvID.SIMOBJECT_DATA_BYTYPE
        assert msg.request_id == 3
        assert msg.define_id == 5
        assert msg.data == payload

    def test_plain_simobject_data_is_data(self) -> None:
        body = struct.pack("<IIIIIII", 1, 0, 1, 0, 1, 1, 1) + b"\x01\x02"
        raw = struct.pack("<III", 12 + len(body), 6, RecvID.SIMOBJECT_DATA) + body
        msg = parse_message(raw)
        assert msg.kind is MessageKind.SIMOBJECT_DATA
        assert msg.data == b"\x01\x02"

    def test_open_reads_application_name(self, frames: dict[str, Any]) -> None:
        msg = parse_message(frames["open"]("MSFS"))
        assert msg.kind is MessageKind.OPEN
        assert msg.application_name == "MSFS"
        assert msg.data == b""

    def test_event(self, frames: dict[str, Any]) -> None:
        msg = parse_message(frames["event"](42, 7))
        assert msg.kind is MessageKind.EVENT
        assert msg.event_id == 42
        assert msg.event_data == 7

    def test_exception(self) -> None:
        raw = struct.pack("<IIIIII", 24, 6, RecvID.EXCEPTION, 3, 11, 2)
        msg = parse_message(raw)
        assert msg.kind is MessageKind.EXCEPTION
        assert (msg.exception, msg.send_id, msg.index) == (3, 11, 2)

    def test_quit(self, frames: dict[str, Any]) -> None:
        assert parse_message(frames["quit"]()).kind is MessageKind.QUIT

    def test_unknown_id(self) -> None:
        msg = parse_message(struct.pack("<III", 12, 6, 77))
        assert msg.kind is MessageKind.UNKNOWN
        assert msg.recv_id == 77

    def test_short_header_raises(self) -> None:
        with pytest.raises(DecodeError, match="header"):
            parse_message(b"\x00" * 8)

    def test_truncated_data_header_raises(self) -> None:
        raw = struct.pack("<III", 20, 6, RecvID.SIMOBJECT_DATA_BYTYPE) + b"\x00" * 8
        with pytest.raises(DecodeError, match="SimObjectData"):
            parse_message(raw)
