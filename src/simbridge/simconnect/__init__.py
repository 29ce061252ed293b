"""SimConnect message model and connection handles."""

from __future__ import annotations

from simbridge.simconnect.connection import SimConnection
from simbridge.simconnect.constants import E_FAIL, S_OK, DataType, RecvID, SimObjectType
from simbridge.simconnect.messages import DispatchMessage, MessageKind, parse_message

__all__ = [
    "E_FAIL",
    "S_OK",
    "DataType",
    "DispatchMessage",
    "MessageKind",
    "RecvID",
    "SimConnection",
    "SimObjectType",
    "parse_message",
]
