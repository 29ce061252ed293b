"""Poll the simulator connection and route each message by kind and request id.

SimConnect data requests issued with ``RequestDataOnSimObjectType`` are
single-shot: each delivery must be followed by a new request or the data
stops.  The loop re-issues the request right after handing the decoded
record to its consumer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from simbridge.api.errors import DecodeError, SimConnectError
from simbridge.simconnect.constants import E_FAIL, SimObjectType
from simbridge.simconnect.messages import DispatchMessage, MessageKind, parse_message
from simbridge.telemetry.decoder import RecordDecoder
from simbridge.telemetry.schema import SchemaRegistry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from simbridge.simconnect.connection import SimConnection
    from simbridge.telemetry.schema import RecordSchema

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_DRAIN = 64


class LoopState(StrEnum):
    POLLING = "polling"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass
class Subscription:
    """A schema being polled and the consumer of its decoded records."""

    schema: RecordSchema
    define_id: int
    consumer: Callable[[Any], Awaitable[object]]
    object_type: SimObjectType = SimObjectType.USER

    @property
    def request_id(self) -> int:
        # One request per schema, so the define id doubles as the request id.
        return self.define_id


class DispatchLoop:
    """Single-consumer poll loop over one :class:`SimConnection`.

    ``E_FAIL`` from ``next_message`` means "nothing queued yet" and is not
    an error.  Any other negative status raises :class:`SimConnectError`.
    """

    def __init__(
        self,
        connection: SimConnection,
        *,
        registry: SchemaRegistry | None = None,
        decoder: RecordDecoder | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_drain: int = DEFAULT_MAX_DRAIN,
    ) -> None:
        self._connection = connection
        self._registry = registry or SchemaRegistry(connection)
        self._decoder = decoder or RecordDecoder()
        self._poll_interval = poll_interval
        self._max_drain = max_drain
        self._subscriptions: dict[int, Subscription] = {}
        self._event_handlers: dict[int, Callable[[DispatchMessage], Awaitable[object]]] = {}
        self._stop = asyncio.Event()
        self.state = LoopState.STOPPED
        self._cycles = 0
        self._messages = 0
        self._dropped = 0

    # -- setup ---------------------------------------------------------------

    def subscribe(
        self,
        schema: RecordSchema,
        consumer: Callable[[Any], Awaitable[object]],
        object_type: SimObjectType = SimObjectType.USER,
    ) -> Subscription:
        """Register *schema*, route its records to *consumer*, and issue the first request."""
        define_id = self._registry.register(schema)
        sub = Subscription(
            schema=schema, define_id=define_id, consumer=consumer, object_type=object_type
        )
        self._subscriptions[sub.request_id] = sub
        self._request(sub)
        return sub

    def on_event(
        self, event_id: int, handler: Callable[[DispatchMessage], Awaitable[object]]
    ) -> None:
        """Route Event messages carrying *event_id* to *handler*."""
        self._event_handlers[event_id] = handler

    def stop(self) -> None:
        """Ask the loop to drain and exit at the start of its next cycle."""
        self._stop.set()

    # -- main loop -----------------------------------------------------------

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until *stop* (or :meth:`stop`) is set, then drain and return.

        Raises:
            SimConnectError: If the connection reports a fatal status.
        """
        self.state = LoopState.POLLING
        logger.info("Dispatch loop started (%d subscriptions)", len(self._subscriptions))
        try:
            while self.state is LoopState.POLLING:
                if self._stop.is_set() or (stop is not None and stop.is_set()):
                    self.state = LoopState.DRAINING
                    break
                self._cycles += 1
                await self.poll_once()
                if self.state is LoopState.POLLING:
                    await self._sleep(stop)

            await self._drain()
        finally:
            self.state = LoopState.STOPPED
            logger.info(
                "Dispatch loop stopped after %d cycles (%d messages, %d dropped)",
                self._cycles,
                self._messages,
                self._dropped,
            )

    async def poll_once(self) -> bool:
        """Fetch and dispatch at most one message. Returns *False* if none was queued."""
        raw, status = self._connection.next_message()
        if status == E_FAIL:
            return False
        if status < 0:
            raise SimConnectError(
                f"GetNextDispatch failed (HRESULT 0x{status & 0xFFFFFFFF:08X})", status=status
            )
        if raw is None:
            return False

        self._messages += 1
        try:
            message = parse_message(raw)
        except DecodeError as exc:
            self._dropped += 1
            logger.warning("Skipping malformed dispatch buffer: %s", exc)
            return True

        await self._route(message)
        return True

    async def _sleep(self, stop: asyncio.Event | None) -> None:
        """Wait one poll interval, waking early when either stop signal is set."""
        waiters = {asyncio.ensure_future(self._stop.wait())}
        if stop is not None:
            waiters.add(asyncio.ensure_future(stop.wait()))
        _done, pending = await asyncio.wait(
            waiters, timeout=self._poll_interval, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()

    async def _drain(self) -> None:
        if self.state is not LoopState.DRAINING:
            return
        logger.info("Draining queued simulator messages")
        for _ in range(self._max_drain):
            if not await self.poll_once():
                break

    # -- routing -------------------------------------------------------------

    async def _route(self, message: DispatchMessage) -> None:
        if message.kind is MessageKind.SIMOBJECT_DATA:
            await self._on_data(message)
        elif message.kind is MessageKind.OPEN:
            logger.info("SimConnect open: %s", message.application_name)
        elif message.kind is MessageKind.EXCEPTION:
            logger.warning(
                "SimConnect exception %s (send id %s, index %s)",
                message.exception,
                message.send_id,
                message.index,
            )
        elif message.kind is MessageKind.EVENT:
            await self._on_event(message)
        elif message.kind is MessageKind.QUIT:
            logger.warning("Simulator closed the connection")
            if self.state is LoopState.POLLING:
                self.state = LoopState.DRAINING
        else:
            logger.debug("Ignoring unknown message id %d", message.recv_id)

    async def _on_event(self, message: DispatchMessage) -> None:
        assert message.event_id is not None
        handler = self._event_handlers.get(message.event_id)
        if handler is None:
            logger.info("Unhandled simulator event %d", message.event_id)
            return
        await handler(message)

    async def _on_data(self, message: DispatchMessage) -> None:
        assert message.request_id is not None
        sub = self._subscriptions.get(message.request_id)
        if sub is None:
            self._dropped += 1
            logger.warning("Dropping data for unknown request id %d", message.request_id)
            return
        if self._registry.schema_for(message.define_id or 0) is not sub.schema:
            self._dropped += 1
            logger.warning(
                "Dropping %s data tagged with define id %s", sub.schema.name, message.define_id
            )
        else:
            await self._deliver(sub, message)

        if self.state is LoopState.POLLING:
            self._request(sub)

    async def _deliver(self, sub: Subscription, message: DispatchMessage) -> None:
        try:
            record = self._decoder.decode(message.data, sub.schema)
        except DecodeError as exc:
            self._dropped += 1
            logger.warning("Dropping undecodable %s record: %s", sub.schema.name, exc)
            return
        await sub.consumer(record)

    def _request(self, sub: Subscription) -> None:
        self._connection.request_data(sub.request_id, sub.define_id, sub.object_type)

    # -- stats ---------------------------------------------------------------

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def message_count(self) -> int:
        return self._messages

    @property
    def dropped_count(self) -> int:
        return self._dropped
