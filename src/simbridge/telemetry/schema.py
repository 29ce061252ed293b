"""Record schemas and their registration with the simulator connection.

A :class:`RecordSchema` is the static, ordered field table of one record
type.  The simulator writes the fields back-to-back in exactly the
registration order, so the decoder must walk the same table.  Reordering
fields in a schema without re-registering it silently corrupts every field
after the first mismatch; nothing detects that at runtime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from simbridge.api.errors import SchemaError
from simbridge.simconnect.constants import NUMERIC_FORMATS, STRING_SIZES, DataType
from simbridge.telemetry.report import TelemetryReport

if TYPE_CHECKING:
    from simbridge.simconnect.connection import SimConnection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    """One field of a data definition."""

    name: str
    sim_var: str
    unit: str | None
    kind: DataType = DataType.FLOAT64

    @property
    def size(self) -> int:
        if self.kind in STRING_SIZES:
            return STRING_SIZES[self.kind]
        if self.kind in (DataType.INT64, DataType.FLOAT64):
            return 8
        if self.kind in (DataType.INT32, DataType.FLOAT32):
            return 4
        raise SchemaError(f"Field {self.name!r} has unsupported type {self.kind!r}")

    @property
    def is_text(self) -> bool:
        return self.kind in STRING_SIZES

    @property
    def struct_format(self) -> str:
        return NUMERIC_FORMATS[self.kind]


@dataclass(frozen=True)
class FieldLayout:
    spec: FieldSpec
    offset: int


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field table for one record type.

    Validated on construction: at least one field, every field named,
    names unique, every type fixed-width.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    record_type: type[Any] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("Schema name must not be empty")
        if not self.fields:
            raise SchemaError(f"Schema {self.name!r} has no fields")
        seen: set[str] = set()
        for spec in self.fields:
            if not spec.name or not spec.sim_var:
                raise SchemaError(f"Schema {self.name!r} has a field without a name")
            if spec.name in seen:
                raise SchemaError(f"Schema {self.name!r} declares {spec.name!r} twice")
            seen.add(spec.name)
            _ = spec.size  # rejects variable-width types

    @cached_property
    def layout(self) -> tuple[FieldLayout, ...]:
        """Each field with its byte offset from the start of the record."""
        offset = 0
        result: list[FieldLayout] = []
        for spec in self.fields:
            result.append(FieldLayout(spec=spec, offset=offset))
            offset += spec.size
        return tuple(result)

    @property
    def size(self) -> int:
        """Total record size in bytes."""
        last = self.layout[-1]
        return last.offset + last.spec.size

    def build(self, values: dict[str, Any]) -> Any:
        """Turn decoded field values into the schema's record type."""
        if self.record_type is None:
            return values
        return self.record_type(**values)


# ---------------------------------------------------------------------------
# The aircraft report polled by the bridge
# ---------------------------------------------------------------------------

REPORT_SCHEMA = RecordSchema(
    name="Report",
    record_type=TelemetryReport,
    fields=(
        FieldSpec("title", "TITLE", None, DataType.STRING256),
        # PLANE ALTITUDE or PLANE ALT ABOVE GROUND are alternatives
        FieldSpec("altitude", "INDICATED ALTITUDE", "feet"),
        FieldSpec("latitude", "PLANE LATITUDE", "degrees"),
        FieldSpec("longitude", "PLANE LONGITUDE", "degrees"),
        FieldSpec("heading", "PLANE HEADING DEGREES TRUE", "degrees"),
        FieldSpec("airspeed", "AIRSPEED INDICATED", "knot"),
        FieldSpec("airspeed_true", "AIRSPEED TRUE", "knot"),
        FieldSpec("vertical_speed", "VERTICAL SPEED", "ft/min"),
        FieldSpec("flaps", "TRAILING EDGE FLAPS LEFT ANGLE", "degrees"),
        FieldSpec("trim", "ELEVATOR TRIM PCT", "percent"),
        FieldSpec("rudder_trim", "RUDDER TRIM PCT", "percent"),
    ),
)


class SchemaRegistry:
    """Registers each schema with the connection exactly once.

    Registering the same schema again returns the id from the first call
    without touching the connection.  A different schema under an
    already-registered name is rejected.
    """

    def __init__(self, connection: SimConnection) -> None:
        self._connection = connection
        self._ids: dict[RecordSchema, int] = {}
        self._by_name: dict[str, RecordSchema] = {}
        self._by_id: dict[int, RecordSchema] = {}

    def register(self, schema: RecordSchema) -> int:
        existing = self._ids.get(schema)
        if existing is not None:
            return existing

        if schema.name in self._by_name:
            raise SchemaError(
                f"A different schema named {schema.name!r} is already registered"
            )

        define_id = self._connection.register_schema(schema)
        if define_id in self._by_id:
            raise SchemaError(
                f"Connection returned define id {define_id} for {schema.name!r},"
                f" already used by {self._by_id[define_id].name!r}"
            )

        self._ids[schema] = define_id
        self._by_name[schema.name] = schema
        self._by_id[define_id] = schema
        logger.info(
            "Registered schema %s as define id %d (%d fields, %d bytes)",
            schema.name,
            define_id,
            len(schema.fields),
            schema.size,
        )
        return define_id

    def schema_for(self, define_id: int) -> RecordSchema | None:
        return self._by_id.get(define_id)

    def __len__(self) -> int:
        return len(self._ids)
