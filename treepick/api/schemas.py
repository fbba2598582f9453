"""
Pydantic Schemas for API - Client frames and HTTP responses.

Client frames (WebSocket, JSON text):
- action: {"type": "action", "kind": "pick", "payload": {"x": 0, "y": 0}, "action_id": "..."}
- leave:  {"type": "leave"}
- ping:   {"type": "ping"}

The action payload is left untyped here; the action registry validates it
against the shape registered for `kind`.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


# =============================================================================
# Client frames
# =============================================================================

class ActionFrame(BaseModel):
    """A game action the client wants the server to run."""
    type: Literal["action"]
    kind: str
    payload: Any = None
    action_id: Optional[str] = Field(default=None, max_length=64)


class LeaveFrame(BaseModel):
    """The user quits the server for good."""
    type: Literal["leave"]


class PingFrame(BaseModel):
    """Keep-alive."""
    type: Literal["ping"]


ClientFrame = Annotated[
    Union[ActionFrame, LeaveFrame, PingFrame],
    Field(discriminator="type"),
]

client_frame_adapter = TypeAdapter(ClientFrame)


def parse_client_frame(text: str) -> Union[ActionFrame, LeaveFrame, PingFrame]:
    """Parse one text frame. Raises pydantic.ValidationError."""
    return client_frame_adapter.validate_json(text)


# =============================================================================
# HTTP responses
# =============================================================================

class StateResponse(BaseModel):
    """Canonical state and the sequence number it corresponds to."""
    seq: int
    state: dict[str, Any]


class UserInfo(BaseModel):
    username: str
    is_linked: bool


class UsersResponse(BaseModel):
    users: list[UserInfo] = Field(default_factory=list)
    count: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "treepick"
    version: str
    environment: str
