"""SimConnect constants used by the bridge.

Values mirror ``SimConnect.h`` from the MSFS SDK; only the subset the
bridge needs is listed.
"""

from __future__ import annotations

from enum import IntEnum

# HRESULTs as returned (signed) by the SimConnect API.
S_OK: int = 0
E_FAIL: int = -0x7FFFBFFB  # 0x80004005: "no message currently available"


class RecvID(IntEnum):
    """``SIMCONNECT_RECV_ID``: the kind tag of every dispatched message."""

    NULL = 0
    EXCEPTION = 1
    OPEN = 2
    QUIT = 3
    EVENT = 4
    EVENT_OBJECT_ADDREMOVE = 5
    EVENT_FILENAME = 6
    EVENT_FRAME = 7
    SIMOBJECT_DATA = 8
    SIMOBJECT_DATA_BYTYPE = 9


class DataType(IntEnum):
    """``SIMCONNECT_DATATYPE``: wire representation of one data-definition field."""

    INVALID = 0
    INT32 = 1
    INT64 = 2
    FLOAT32 = 3
    FLOAT64 = 4
    STRING8 = 5
    STRING32 = 6
    STRING64 = 7
    STRING128 = 8
    STRING256 = 9
    STRING260 = 10


class SimObjectType(IntEnum):
    """``SIMCONNECT_SIMOBJECT_TYPE``: target selector for by-type data requests."""

    USER = 0
    ALL = 1
    AIRCRAFT = 2
    HELICOPTER = 3
    BOAT = 4
    GROUND = 5


# Fixed-width string types and their byte length.
STRING_SIZES: dict[DataType, int] = {
    DataType.STRING8: 8,
    DataType.STRING32: 32,
    DataType.STRING64: 64,
    DataType.STRING128: 128,
    DataType.STRING256: 256,
    DataType.STRING260: 260,
}

# Numeric types and their little-endian struct format.
NUMERIC_FORMATS: dict[DataType, str] = {
    DataType.INT32: "<i",
    DataType.INT64: "<q",
    DataType.FLOAT32: "<f",
    DataType.FLOAT64: "<d",
}
