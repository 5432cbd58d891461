"""
Signaling router: connection lifecycle, roster broadcast and message relay.

The router owns a ClientRegistry and is the only component that sends
roster and relay envelopes. Payloads are never inspected beyond the
`recipient` field.
"""

import asyncio
import uuid
from typing import Any, Iterable

from pydantic_core import PydanticSerializationError

from signaling_relay.exceptions import DuplicateClientError, MalformedMessageError
from signaling_relay.logging import logger
from signaling_relay.managers.client_registry import ClientRegistry
from signaling_relay.protocols import ClientConnection
from signaling_relay.schemas.request import (
    BroadcastMessage,
    InboundMessage,
    UnicastMessage,
    parse_inbound,
)
from signaling_relay.schemas.response import (
    ClientListEnvelope,
    RosterSnapshot,
    SignalEnvelope,
)
from signaling_relay.settings import app_settings
from signaling_relay.utils.metrics import MetricsCollector

# Fresh ids to try before giving up on a connection
MAX_ID_ATTEMPTS = 3


class SendResult:
    """
    Outcome of one send to one client.

    Attributes:
        client_id: Target of the send.
        error: Exception raised by the send, None on success.
    """

    __slots__ = ("client_id", "error")

    def __init__(self, client_id: str, error: Exception | None = None) -> None:
        self.client_id = client_id
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        return f"SendResult(client_id={self.client_id!r}, error={self.error!r})"


class DeliveryReport:
    """
    Aggregated outcome of a fan-out.

    Every target gets a SendResult; a failed send never prevents the
    remaining ones from being attempted.
    """

    __slots__ = ("results",)

    def __init__(self, results: Iterable[SendResult] = ()) -> None:
        self.results: tuple[SendResult, ...] = tuple(results)

    @property
    def delivered(self) -> list[str]:
        """Ids of clients that received the envelope."""
        return [r.client_id for r in self.results if r.ok]

    @property
    def failed(self) -> list[str]:
        """Ids of clients whose send raised or timed out."""
        return [r.client_id for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __repr__(self) -> str:
        return (
            f"DeliveryReport(delivered={self.delivered!r}, "
            f"failed={self.failed!r})"
        )


class SignalingRouter:
    """
    Routes signaling traffic between connected clients.

    Lifecycle per connection is OPEN -> CLOSED: `connect` registers the
    connection under a fresh id and announces the new roster, `disconnect`
    removes it and announces the reduced roster. Inbound messages are
    relayed with `handle_message` (raw frames) or `relay` (parsed).

    Example:
        >>> router = SignalingRouter()
        >>> client_id = await router.connect(websocket)
        >>> await router.handle_message(client_id, '{"recipient": "...", "sdp": "..."}')
        >>> await router.disconnect(client_id)
    """

    def __init__(
        self,
        registry: ClientRegistry | None = None,
        send_timeout: float | None = None,
    ) -> None:
        """
        Args:
            registry: Registry to own; a new empty one when omitted.
            send_timeout: Seconds allowed per send, defaults to
                WS_SEND_TIMEOUT.
        """
        self.registry = ClientRegistry() if registry is None else registry
        self.send_timeout = (
            app_settings.WS_SEND_TIMEOUT
            if send_timeout is None
            else send_timeout
        )

    @staticmethod
    def generate_client_id() -> str:
        return str(uuid.uuid4())

    async def connect(self, connection: ClientConnection) -> str:
        """
        Register a newly opened connection and broadcast the roster.

        Args:
            connection: Connection that just completed its upgrade.

        Returns:
            The id assigned to the connection.

        Raises:
            DuplicateClientError: If no fresh id could be registered.
        """
        for _ in range(MAX_ID_ATTEMPTS):
            client_id = self.generate_client_id()
            if await self.registry.register(client_id, connection):
                break
        else:
            raise DuplicateClientError(client_id)

        logger.info(f"Client {client_id} connected")
        MetricsCollector.record_ws_connection_accepted()

        await self.broadcast_roster(client_id)
        return client_id

    async def disconnect(self, client_id: str) -> DeliveryReport | None:
        """
        Unregister a closed connection and broadcast the reduced roster.

        Repeated close events for the same id are no-ops.

        Returns:
            Report of the roster broadcast, or None if the id was not
            registered.
        """
        if not await self.registry.unregister(client_id):
            logger.debug(f"Client {client_id} already unregistered")
            return None

        logger.info(f"Client {client_id} disconnected")
        MetricsCollector.record_ws_disconnection()

        return await self.broadcast_roster(client_id)

    async def broadcast_roster(self, current_id: str) -> DeliveryReport:
        """
        Send the current client list to every registered connection.

        Args:
            current_id: Client whose connect or disconnect triggered the
                broadcast.
        """
        targets = await self.registry.connections()
        snapshot = RosterSnapshot(client_ids=tuple(cid for cid, _ in targets))

        envelope = ClientListEnvelope.from_snapshot(current_id, snapshot)
        return await self._fan_out(envelope, targets)

    async def relay(
        self, sender_id: str, message: InboundMessage
    ) -> DeliveryReport:
        """
        Forward a message to its recipient, or to everyone but the sender.

        An unknown recipient drops the message; the sender is not told.

        Args:
            sender_id: Id of the client the message came from.
            message: Parsed inbound message.

        Raises:
            MalformedMessageError: If the payload cannot be encoded for
                delivery.
        """
        envelope = SignalEnvelope(sender=sender_id, message=message.payload)

        match message:
            case UnicastMessage(recipient=recipient):
                connection = await self.registry.lookup(recipient)
                if connection is None:
                    logger.warning(
                        f"Recipient {recipient} not found, dropping message "
                        f"from client {sender_id}"
                    )
                    MetricsCollector.record_ws_message_dropped(
                        "unknown_recipient"
                    )
                    return DeliveryReport()

                logger.debug(f"Sending message from {sender_id} to {recipient}")
                targets = [(recipient, connection)]
            case BroadcastMessage():
                targets = await self.registry.connections(exclude=sender_id)

        return await self._fan_out(envelope, targets)

    async def handle_message(
        self, sender_id: str, raw: str | bytes | Any
    ) -> DeliveryReport | None:
        """
        Parse an inbound frame and relay it.

        Malformed frames are logged and dropped; the connection stays open.

        Returns:
            Report of the relay, or None if the frame was dropped as
            malformed.
        """
        MetricsCollector.record_ws_message_received()

        try:
            message = parse_inbound(raw)
            logger.debug(
                f"Message received from client {sender_id}: {message.payload}"
            )
            return await self.relay(sender_id, message)
        except MalformedMessageError as ex:
            logger.warning(
                f"Dropping malformed message from client {sender_id}: {ex}"
            )
            MetricsCollector.record_ws_message_dropped("malformed")
            return None

    async def _fan_out(
        self,
        envelope: ClientListEnvelope | SignalEnvelope,
        targets: list[tuple[str, ClientConnection]],
    ) -> DeliveryReport:
        """
        Serialize once and send to all targets concurrently.

        Each send is isolated: its failure or timeout is captured in its own
        SendResult and never interrupts the others.

        Raises:
            MalformedMessageError: If the envelope cannot be encoded as
                UTF-8 JSON (e.g. a payload string holding a lone surrogate).
        """
        if not targets:
            return DeliveryReport()

        try:
            text = envelope.model_dump_json()
        except PydanticSerializationError as ex:
            raise MalformedMessageError(
                f"Payload cannot be encoded: {ex}"
            ) from ex

        results = await asyncio.gather(
            *[
                self._send(client_id, connection, text, envelope.type)
                for client_id, connection in targets
            ]
        )

        report = DeliveryReport(results)
        MetricsCollector.record_ws_delivery(
            envelope.type, len(report.delivered), len(report.failed)
        )
        return report

    async def _send(
        self,
        client_id: str,
        connection: ClientConnection,
        text: str,
        envelope_type: str,
    ) -> SendResult:
        try:
            await asyncio.wait_for(
                connection.send_text(text), timeout=self.send_timeout
            )
        except TimeoutError as ex:
            logger.warning(
                f"Timed out sending {envelope_type} to client {client_id} "
                f"after {self.send_timeout}s"
            )
            return SendResult(client_id, ex)
        except Exception as ex:
            # WebSocketDisconnect, RuntimeError on a closed socket,
            # ConnectionError from the transport, ...
            logger.warning(
                f"Error sending {envelope_type} to client {client_id}: {ex!r}"
            )
            return SendResult(client_id, ex)

        return SendResult(client_id)
