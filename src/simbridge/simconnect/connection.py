"""Contract the bridge expects from a simulator connection handle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from simbridge.simconnect.constants import SimObjectType
    from simbridge.telemetry.schema import RecordSchema


class SimConnection(Protocol):
    """A single long-lived connection to the simulator.

    ``next_message`` never blocks: it returns ``(buffer, S_OK)`` when a
    message is queued, ``(None, E_FAIL)`` when nothing is available yet,
    and any other negative status when the link is broken.
    """

    def open(self) -> None: ...

    def register_schema(self, schema: RecordSchema) -> int:
        """Declare *schema* as a data definition and return its define id."""
        ...

    def request_data(
        self, request_id: int, define_id: int, object_type: SimObjectType
    ) -> None: ...

    def next_message(self) -> tuple[bytes | None, int]: ...

    def close(self) -> None: ...
