"""Decode SimObjectData payloads against the schema they were requested with.

Fields are packed back-to-back, little-endian, in declaration order::

    TITLE           char[256]   NUL-terminated, rest undefined
    INDICATED ALT   float64
    PLANE LATITUDE  float64
    ...

The decoder walks the schema with a cursor and bounds-checks every read.
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Any

from simbridge.api.errors import DecodeError

if TYPE_CHECKING:
    from simbridge.telemetry.schema import FieldSpec, RecordSchema

logger = logging.getLogger(__name__)


class _Cursor:
    """Forward-only reader over a byte buffer."""

    def __init__(self, buf: bytes) -> None:
        self._buf = memoryview(buf)
        self.pos = 0

    def take(self, n: int, what: str) -> memoryview:
        end = self.pos + n
        if end > len(self._buf):
            raise DecodeError(
                f"Buffer ends at {len(self._buf)} bytes; {what} needs bytes {self.pos}..{end}"
            )
        chunk = self._buf[self.pos : end]
        self.pos = end
        return chunk


class RecordDecoder:
    """Reconstructs typed records from raw SimObjectData payloads."""

    def decode(self, raw: bytes, schema: RecordSchema) -> Any:
        """Decode *raw* into ``schema.record_type``.

        Args:
            raw: The record bytes (the SimObjectData body after its header).
            schema: The schema the data was requested with.

        Returns:
            An instance of ``schema.record_type`` (a :class:`dict` when the
            schema has none).

        Raises:
            DecodeError: If *raw* is shorter than ``schema.size``.
        """
        return schema.build(self.decode_values(raw, schema))

    def decode_values(self, raw: bytes, schema: RecordSchema) -> dict[str, Any]:
        """Decode *raw* into a ``{field name: value}`` dict."""
        if len(raw) < schema.size:
            raise DecodeError(
                f"{schema.name} payload is {len(raw)} bytes; schema needs {schema.size}"
            )
        if len(raw) > schema.size:
            logger.debug(
                "%s payload has %d trailing bytes", schema.name, len(raw) - schema.size
            )

        cursor = _Cursor(raw)
        values: dict[str, Any] = {}
        for spec in schema.fields:
            values[spec.name] = self._read_field(cursor, spec)
        return values

    @staticmethod
    def _read_field(cursor: _Cursor, spec: FieldSpec) -> Any:
        chunk = cursor.take(spec.size, spec.name)
        if spec.is_text:
            return _decode_text(bytes(chunk))
        return struct.unpack(spec.struct_format, chunk)[0]


def _decode_text(raw: bytes) -> str:
    """Cut a fixed-size text field at its NUL terminator.

    A field with no terminator uses its full width.
    """
    end = raw.find(b"\x00")
    if end >= 0:
        raw = raw[:end]
    return raw.decode("utf-8", errors="replace")
