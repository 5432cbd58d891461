import asyncio

from signaling_relay.exceptions import DuplicateClientError
from signaling_relay.logging import logger
from signaling_relay.protocols import ClientConnection
from signaling_relay.schemas.response import RosterSnapshot


class ClientRegistry:
    """
    Registry of connected clients.

    Maps client ids to their live connections. All reads and writes go
    through a single asyncio lock, so a snapshot never shows a partially
    applied register or unregister.

    Example:
        >>> registry = ClientRegistry()
        >>> await registry.register("a1", websocket)
        >>> (await registry.snapshot()).client_ids
        ('a1',)
    """

    def __init__(self) -> None:
        # dict keeps insertion order, which becomes roster order
        self._connections: dict[str, ClientConnection] = {}
        self._lock = asyncio.Lock()

    async def add(self, client_id: str, connection: ClientConnection) -> None:
        """
        Insert a new mapping.

        Args:
            client_id: Id generated for the connection.
            connection: Live connection handle.

        Raises:
            DuplicateClientError: If the id is already registered.
        """
        async with self._lock:
            if client_id in self._connections:
                raise DuplicateClientError(client_id)
            self._connections[client_id] = connection

    async def register(
        self, client_id: str, connection: ClientConnection
    ) -> bool:
        """
        Register a connection, logging instead of raising on duplicates.

        Args:
            client_id: Id generated for the connection.
            connection: Live connection handle.

        Returns:
            True if the connection was added, False if the id was taken.
        """
        try:
            await self.add(client_id, connection)
        except DuplicateClientError as ex:
            logger.error(f"Refusing to register connection: {ex}")
            return False

        logger.debug(
            f"connection object ({id(connection)}) registered "
            f"with id {client_id}"
        )
        return True

    async def unregister(self, client_id: str) -> bool:
        """
        Remove a connection by id. Unknown ids are ignored.

        Args:
            client_id: Id to remove.

        Returns:
            True if an entry was removed, False if none was present.
        """
        async with self._lock:
            connection = self._connections.pop(client_id, None)

        if connection is None:
            return False

        logger.debug(
            f"connection object ({id(connection)}) removed "
            f"for id {client_id}"
        )
        return True

    async def lookup(self, client_id: str) -> ClientConnection | None:
        """
        Get connection by client id.

        Returns:
            Connection if registered, None otherwise.
        """
        async with self._lock:
            return self._connections.get(client_id)

    async def snapshot(self) -> RosterSnapshot:
        """Current membership, in registration order."""
        async with self._lock:
            return RosterSnapshot(client_ids=tuple(self._connections))

    async def connections(
        self, exclude: str | None = None
    ) -> list[tuple[str, ClientConnection]]:
        """
        Point-in-time list of (id, connection) pairs for fan-out.

        Args:
            exclude: Optional id to leave out (the sender of a broadcast).
        """
        async with self._lock:
            return [
                (client_id, connection)
                for client_id, connection in self._connections.items()
                if client_id != exclude
            ]

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._connections
