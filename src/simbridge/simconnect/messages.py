"""Classify raw SimConnect dispatch buffers into :class:`DispatchMessage`.

Every buffer starts with ``SIMCONNECT_RECV``::

    DWORD dwSize; DWORD dwVersion; DWORD dwID;

followed by a kind-specific body.  Only the fields the bridge routes on are
parsed; the full buffer is kept in ``raw``.

``SIMCONNECT_RECV_SIMOBJECT_DATA`` (and ``_BYTYPE``)::

    RECV header (12) | dwRequestID | dwObjectID | dwDefineID | dwFlags
    | dwentrynumber | dwoutof | dwDefineCount | data...   (data at offset 40)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import StrEnum

from simbridge.api.errors import DecodeError
from simbridge.simconnect.constants import RecvID

_HEADER = struct.Struct("<III")
_EXCEPTION = struct.Struct("<III")
_EVENT = struct.Struct("<III")
_SIMOBJECT = struct.Struct("<IIIIIII")
_APP_NAME_SIZE = 256

HEADER_SIZE = _HEADER.size
SIMOBJECT_DATA_OFFSET = HEADER_SIZE + _SIMOBJECT.size


class MessageKind(StrEnum):
    OPEN = "open"
    EXCEPTION = "exception"
    EVENT = "event"
    SIMOBJECT_DATA = "simobject_data"
    QUIT = "quit"
    UNKNOWN = "unknown"


_KIND_BY_ID: dict[int, MessageKind] = {
    RecvID.OPEN: MessageKind.OPEN,
    RecvID.EXCEPTION: MessageKind.EXCEPTION,
    RecvID.EVENT: MessageKind.EVENT,
    RecvID.SIMOBJECT_DATA: MessageKind.SIMOBJECT_DATA,
    RecvID.SIMOBJECT_DATA_BYTYPE: MessageKind.SIMOBJECT_DATA,
    RecvID.QUIT: MessageKind.QUIT,
}


@dataclass(frozen=True)
class DispatchMessage:
    """One message delivered by the connection; consumed immediately."""

    kind: MessageKind
    recv_id: int
    raw: bytes
    request_id: int | None = None
    define_id: int | None = None
    object_id: int | None = None
    event_id: int | None = None
    event_data: int | None = None
    exception: int | None = None
    send_id: int | None = None
    index: int | None = None
    application_name: str | None = None

    @property
    def data(self) -> bytes:
        """Record payload of a SimObjectData message (empty for other kinds)."""
        if self.kind is not MessageKind.SIMOBJECT_DATA:
            return b""
        return self.raw[SIMOBJECT_DATA_OFFSET:]


def _cstring(raw: bytes) -> str:
    end = raw.find(b"\x00")
    if end >= 0:
        raw = raw[:end]
    return raw.decode("utf-8", errors="replace")


def _body(raw: bytes, layout: struct.Struct, what: str) -> tuple[int, ...]:
    if len(raw) < HEADER_SIZE + layout.size:
        raise DecodeError(
            f"{what} message is {len(raw)} bytes; need at least {HEADER_SIZE + layout.size}"
        )
    return layout.unpack_from(raw, HEADER_SIZE)


def parse_message(raw: bytes) -> DispatchMessage:
    """Classify *raw* by its ``dwID`` and extract the routing fields.

    Raises:
        DecodeError: If the buffer is shorter than its kind requires.
    """
    if len(raw) < HEADER_SIZE:
        raise DecodeError(f"Dispatch buffer is {len(raw)} bytes; header needs {HEADER_SIZE}")
    _size, _version, recv_id = _HEADER.unpack_from(raw)
    kind = _KIND_BY_ID.get(recv_id, MessageKind.UNKNOWN)

    if kind is MessageKind.SIMOBJECT_DATA:
        request_id, object_id, define_id, *_rest = _body(raw, _SIMOBJECT, "SimObjectData")
        return DispatchMessage(
            kind=kind,
            recv_id=recv_id,
            raw=raw,
            request_id=request_id,
            object_id=object_id,
            define_id=define_id,
        )
    if kind is MessageKind.EVENT:
        _group_id, event_id, event_data = _body(raw, _EVENT, "Event")
        return DispatchMessage(
            kind=kind, recv_id=recv_id, raw=raw, event_id=event_id, event_data=event_data
        )
    if kind is MessageKind.EXCEPTION:
        exception, send_id, index = _body(raw, _EXCEPTION, "Exception")
        return DispatchMessage(
            kind=kind,
            recv_id=recv_id,
            raw=raw,
            exception=exception,
            send_id=send_id,
            index=index,
        )
    if kind is MessageKind.OPEN:
        name = _cstring(raw[HEADER_SIZE : HEADER_SIZE + _APP_NAME_SIZE])
        return DispatchMessage(kind=kind, recv_id=recv_id, raw=raw, application_name=name)
    return DispatchMessage(kind=kind, recv_id=recv_id, raw=raw)
