import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from signaling_relay.exceptions import MalformedMessageError


class UnicastMessage(BaseModel):
    """
    Inbound message addressed to a single client.

    Attributes:
        recipient: Client id of the target connection.
        payload: The decoded inbound object, exactly as received
            (including the `recipient` field itself).
    """

    model_config = ConfigDict(frozen=True)

    recipient: str = Field(min_length=1)
    payload: dict[str, Any]


class BroadcastMessage(BaseModel):
    """
    Inbound message without a recipient, relayed to every other client.

    Attributes:
        payload: The decoded inbound object, exactly as received.
    """

    model_config = ConfigDict(frozen=True)

    payload: dict[str, Any]


InboundMessage = UnicastMessage | BroadcastMessage


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON and cannot be relayed as-is
    raise ValueError(f"non-standard constant {name}")


def parse_inbound(raw: str | bytes | Any) -> InboundMessage:
    """
    Classify an inbound frame as unicast or broadcast.

    Only the `recipient` field is read; the rest of the object is carried
    through untouched. An absent, null or empty recipient means broadcast.

    Args:
        raw: Text or binary frame, or an already decoded JSON value.

    Returns:
        UnicastMessage or BroadcastMessage wrapping the original object.

    Raises:
        MalformedMessageError: If the frame is not strict JSON, not a JSON
            object, or its recipient is not a string.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as ex:
            # JSONDecodeError, UnicodeDecodeError, NaN/Infinity, or nesting
            # too deep for the decoder
            raise MalformedMessageError(f"Invalid JSON: {ex}") from ex
    else:
        data = raw

    if not isinstance(data, dict):
        raise MalformedMessageError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    recipient = data.get("recipient")
    if not recipient:
        return BroadcastMessage(payload=data)

    if not isinstance(recipient, str):
        raise MalformedMessageError(
            f"recipient must be a string, got {type(recipient).__name__}"
        )

    return UnicastMessage(recipient=recipient, payload=data)
