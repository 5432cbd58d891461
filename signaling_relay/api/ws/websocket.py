import asyncio
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketState

from signaling_relay.exceptions import DuplicateClientError
from signaling_relay.logging import clear_log_context, logger, set_log_context
from signaling_relay.managers.signaling_router import SignalingRouter


class SignalingWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bound to the application's SignalingRouter.

    Drives one connection through OPEN -> CLOSED: registers it with the
    router once the upgrade is accepted, hands every inbound frame to the
    router, and unregisters it when the transport reports a close or an
    error. Errors on one connection never propagate to the server.
    """

    encoding = None  # Accept both text and binary frames
    websocket_class: type[WebSocket] = WebSocket
    client_id: str | None = None

    @property
    def router(self) -> SignalingRouter:
        """Router created by the application lifespan."""
        return self.scope["app"].state.signaling_router

    async def dispatch(self) -> None:
        """
        Manage the WebSocket connection lifecycle.

        The function performs the following steps:
        1. Accepts and registers the connection (on_connect).
        2. Receives frames until the client disconnects, passing each to
           on_receive.
        3. On an unexpected error, logs it, closes the socket with
           WS_1011_INTERNAL_ERROR and treats it as a close.
        4. Always runs on_disconnect for a registered connection.
        """
        websocket = self.websocket_class(
            self.scope, receive=self.receive, send=self.send
        )
        await self.on_connect(websocket)  # type: ignore[no-untyped-call]

        if self.client_id is None:
            return

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            logger.error(
                f"WebSocket error for client {self.client_id}: {exc!r}",
                exc_info=True,
            )
            await self._close_quietly(websocket, close_code)
        finally:
            await self.on_disconnect(websocket, close_code)  # type: ignore[no-untyped-call]

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Return the raw frame payload; JSON parsing belongs to the router.

        Args:
            websocket: WebSocket connection instance
            message: Raw message dict from WebSocket

        Returns:
            Frame text, frame bytes, or empty bytes for an empty frame.
        """
        if message.get("text") is not None:
            return message["text"]
        if message.get("bytes") is not None:
            return message["bytes"]
        return b""

    async def on_connect(self, websocket):  # type: ignore[no-untyped-def]
        """
        Accept the upgrade, register the connection and announce it.

        The connection is closed with WS_1011_INTERNAL_ERROR if the router
        cannot assign it an id.
        """
        await websocket.accept()

        try:
            self.client_id = await self.router.connect(websocket)
        except DuplicateClientError as ex:
            logger.error(f"Could not register connection: {ex}")
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        set_log_context(client_id=self.client_id)

    async def on_receive(self, websocket, data: str | bytes):  # type: ignore[no-untyped-def]
        await self.router.handle_message(self.client_id, data)

    async def on_disconnect(self, websocket, close_code):  # type: ignore[no-untyped-def]
        """
        Unregister the connection and announce the reduced roster.
        """
        logger.debug(
            f"Client {self.client_id} closed connection with code {close_code}"
        )
        # Unregistration must complete even when this task is being cancelled
        await asyncio.shield(self.router.disconnect(self.client_id))
        clear_log_context()

    @staticmethod
    async def _close_quietly(websocket: WebSocket, code: int) -> None:
        if (
            websocket.client_state == WebSocketState.DISCONNECTED
            or websocket.application_state == WebSocketState.DISCONNECTED
        ):
            return
        try:
            await websocket.close(code=code)
        except RuntimeError as ex:
            # Transport already gone
            logger.debug(f"Close after error failed: {ex}")
