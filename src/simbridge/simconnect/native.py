"""ctypes binding to ``SimConnect.dll`` implementing :class:`SimConnection`.

Only the five calls the bridge needs are bound.  The DLL ships with the
MSFS SDK; point ``SIMBRIDGE_SIMCONNECT_DLL`` at it when it is not on the
DLL search path.
"""

from __future__ import annotations

import ctypes
import logging
import sys
from typing import TYPE_CHECKING, Any

from simbridge.api.errors import ConfigError, SimConnectError
from simbridge.simconnect.constants import S_OK, SimObjectType

if TYPE_CHECKING:
    from simbridge.telemetry.schema import RecordSchema

logger = logging.getLogger(__name__)

DEFAULT_DLL = "SimConnect.dll"
_UNUSED = 0xFFFFFFFF


def _load_library(path: str) -> Any:
    if sys.platform != "win32":
        raise ConfigError("SimConnect is only available on Windows")
    try:
        lib = ctypes.WinDLL(path)  # type: ignore[attr-defined]
    except OSError as exc:
        raise ConfigError(f"Cannot load {path}: {exc}") from exc

    handle_p = ctypes.POINTER(ctypes.c_void_p)

    lib.SimConnect_Open.argtypes = [
        handle_p,
        ctypes.c_char_p,
        ctypes.c_void_p,
        ctypes.c_uint32,
        ctypes.c_void_p,
        ctypes.c_uint32,
    ]
    lib.SimConnect_Close.argtypes = [ctypes.c_void_p]
    lib.SimConnect_AddToDataDefinition.argtypes = [
        ctypes.c_void_p,
        ctypes.c_uint32,
        ctypes.c_char_p,
        ctypes.c_char_p,
        ctypes.c_uint32,
        ctypes.c_float,
        ctypes.c_uint32,
    ]
    lib.SimConnect_RequestDataOnSimObjectType.argtypes = [
        ctypes.c_void_p,
        ctypes.c_uint32,
        ctypes.c_uint32,
        ctypes.c_uint32,
        ctypes.c_uint32,
    ]
    lib.SimConnect_GetNextDispatch.argtypes = [
        ctypes.c_void_p,
        ctypes.POINTER(ctypes.c_void_p),
        ctypes.POINTER(ctypes.c_uint32),
    ]
    for fn in (
        lib.SimConnect_Open,
        lib.SimConnect_Close,
        lib.SimConnect_AddToDataDefinition,
        lib.SimConnect_RequestDataOnSimObjectType,
        lib.SimConnect_GetNextDispatch,
    ):
        fn.restype = ctypes.c_long
    return lib


class NativeSimConnection:
    """A SimConnect session opened through the SDK's DLL."""

    def __init__(self, app_name: str, dll_path: str = DEFAULT_DLL) -> None:
        self._app_name = app_name
        self._dll_path = dll_path
        self._lib: Any = None
        self._handle = ctypes.c_void_p()
        self._define_ids: dict[RecordSchema, int] = {}
        self._next_define_id = 1

    def _check(self, hr: int, call: str) -> None:
        if hr < S_OK:
            raise SimConnectError(f"{call} failed (HRESULT 0x{hr & 0xFFFFFFFF:08X})", status=hr)

    def open(self) -> None:
        self._lib = _load_library(self._dll_path)
        hr = self._lib.SimConnect_Open(
            ctypes.byref(self._handle), self._app_name.encode("utf-8"), None, 0, None, 0
        )
        self._check(hr, "SimConnect_Open")
        logger.info("Connected to Flight Simulator as %r", self._app_name)

    def register_schema(self, schema: RecordSchema) -> int:
        existing = self._define_ids.get(schema)
        if existing is not None:
            return existing

        define_id = self._next_define_id
        for spec in schema.fields:
            unit = spec.unit.encode("utf-8") if spec.unit else None
            hr = self._lib.SimConnect_AddToDataDefinition(
                self._handle,
                define_id,
                spec.sim_var.encode("utf-8"),
                unit,
                int(spec.kind),
                0.0,
                _UNUSED,
            )
            self._check(hr, f"SimConnect_AddToDataDefinition({spec.sim_var})")

        self._next_define_id += 1
        self._define_ids[schema] = define_id
        return define_id

    def request_data(self, request_id: int, define_id: int, object_type: SimObjectType) -> None:
        hr = self._lib.SimConnect_RequestDataOnSimObjectType(
            self._handle, request_id, define_id, 0, int(object_type)
        )
        self._check(hr, "SimConnect_RequestDataOnSimObjectType")

    def next_message(self) -> tuple[bytes | None, int]:
        data = ctypes.c_void_p()
        size = ctypes.c_uint32()
        hr = int(
            self._lib.SimConnect_GetNextDispatch(
                self._handle, ctypes.byref(data), ctypes.byref(size)
            )
        )
        if hr < S_OK or not data.value:
            return None, hr
        # The DLL owns the buffer only until the next call; copy it out.
        return ctypes.string_at(data.value, size.value), hr

    def close(self) -> None:
        if self._lib is None or not self._handle.value:
            return
        hr = self._lib.SimConnect_Close(self._handle)
        self._handle = ctypes.c_void_p()
        self._check(hr, "SimConnect_Close")
        logger.info("SimConnect closed")
