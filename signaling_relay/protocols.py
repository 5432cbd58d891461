"""
Protocol classes for structural subtyping (duck typing with type safety).

Protocols define interfaces without requiring explicit inheritance. Any class
that implements the required methods is considered compatible, so the
registry and router work with Starlette's WebSocket in production and with
plain mocks in tests.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClientConnection(Protocol):
    """
    Protocol for the outbound side of one client connection.

    The connection's read loop belongs to the transport; the relay only
    ever pushes text frames through it.
    """

    async def send_text(self, data: str) -> None:
        """
        Send one text frame to the client.

        Args:
            data: Serialized envelope.

        Raises:
            Exception: Any transport error; callers treat it as a failed send.
        """
        ...
