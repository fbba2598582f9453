"""
Server Messages - What the server pushes down a session.

Messages are pydantic models dumped to plain dicts, so the transport only
ever deals with JSON-ready data.
"""

from __future__ import annotations
from typing import Any, Literal, Optional

from pydantic import BaseModel


class SyncMessage(BaseModel):
    """Full canonical state, sent when a session links."""
    type: Literal["sync"] = "sync"
    seq: int
    state: dict[str, Any]


class ActionMessage(BaseModel):
    """An action the server ran, for every client to replay."""
    type: Literal["action"] = "action"
    seq: int
    dispatcher: str
    kind: str
    payload: Any = None
    action_id: Optional[str] = None


class RejectedMessage(BaseModel):
    """The sender's action never reached the game."""
    type: Literal["rejected"] = "rejected"
    action_id: Optional[str] = None
    error: str


class PongMessage(BaseModel):
    type: Literal["pong"] = "pong"


class ErrorMessage(BaseModel):
    """Session-level problem (bad frame, refused link)."""
    type: Literal["error"] = "error"
    message: str
