from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ClientEntry(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(frozen=True)

    id: str


class RosterSnapshot(BaseModel):  # type: ignore[misc]
    """
    Point-in-time view of registry membership.

    Attributes:
        client_ids: Registered ids in insertion order.
        count: Number of registered clients.
    """

    model_config = ConfigDict(frozen=True)

    client_ids: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.client_ids)


class ClientListEnvelope(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(frozen=True)

    type: Literal["client_list"] = "client_list"
    current_client_id: str
    clients: list[ClientEntry]
    connection_number: Annotated[int, Field(ge=0)]

    @classmethod
    def from_snapshot(
        cls, current_client_id: str, snapshot: RosterSnapshot
    ) -> "ClientListEnvelope":
        return cls(
            current_client_id=current_client_id,
            clients=[ClientEntry(id=cid) for cid in snapshot.client_ids],
            connection_number=snapshot.count,
        )


class SignalEnvelope(BaseModel):  # type: ignore[misc]
    model_config = ConfigDict(frozen=True)

    type: Literal["signal"] = "signal"
    sender: str
    message: dict[str, Any]


OutboundEnvelope = Annotated[
    ClientListEnvelope | SignalEnvelope, Field(discriminator="type")
]

outbound_adapter: TypeAdapter[ClientListEnvelope | SignalEnvelope] = (
    TypeAdapter(OutboundEnvelope)
)
"""Parses outbound frames back into envelopes (used by clients and tests)."""
