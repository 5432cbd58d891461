"""
Custom exception classes for the signaling relay.

None of these ever reach a client or the server loop: they are raised at
the edge where the problem is detected and caught by the component that
owns the recovery policy (the registry or the signaling router).
"""


class SignalingError(Exception):
    """Base class for relay errors."""

    pass


class MalformedMessageError(SignalingError):
    """
    Inbound frame could not be interpreted.

    Raised when a frame is not valid JSON, is not a JSON object, or carries
    a `recipient` that is not a string. The message is dropped; the
    connection stays open.
    """

    pass


class DuplicateClientError(SignalingError):
    """
    Client id is already registered.

    Raised when a connection is added under an id that is still live. Ids
    are random UUIDs, so this indicates a bug rather than a client fault.
    """

    def __init__(self, client_id: str):
        super().__init__(f"Client {client_id} is already registered")
        self.client_id = client_id
