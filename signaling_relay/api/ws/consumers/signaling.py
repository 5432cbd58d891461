from fastapi import APIRouter

from signaling_relay.api.ws.websocket import SignalingWebSocketEndpoint
from signaling_relay.settings import app_settings

router = APIRouter()

# Clients connect here; every connection is announced to all others and
# can relay messages to one named client or to everyone else.
router.add_websocket_route(
    app_settings.WS_PATH, SignalingWebSocketEndpoint, name="signaling"
)
