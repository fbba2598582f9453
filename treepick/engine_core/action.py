"""
Action System - Actions, payloads, dispatcher identities and results.

Actions represent:
1. Transport facts asserted by the server (tick, joiner, leaver)
2. Player requests (ready, pick)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


# Only the server process asserts this identity. Usernames are alphanumeric,
# so no connected session can ever claim it.
ROOT_DISPATCHER = "<ROOT_DISPATCHER>"

# Reserved username for a pure observer
SPECTATOR = "spectator"


class ActionKind(str, Enum):
    """Registered action kinds."""
    TICK = "tick"
    JOINER = "joiner"
    LEAVER = "leaver"
    READY = "ready"
    PICK = "pick"


# =============================================================================
# Payload shapes
# =============================================================================

class TickPayload(BaseModel):
    """Heartbeat fact: the server clock and everyone currently joined."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, strict=True)

    time: int = Field(gt=0)
    connected_players: list[str] = Field(alias="connectedPlayers")


class PickPayload(BaseModel):
    """Coordinates of a tree cell, row `y` and column `x`."""
    model_config = ConfigDict(frozen=True, strict=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)


Username = Annotated[str, StringConstraints(min_length=3)]


# =============================================================================
# Actions and results
# =============================================================================

class ActionValidationError(Exception):
    """Raised when an action kind is unknown or its payload has the wrong shape."""

    def __init__(self, kind: str, errors: list[str]):
        self.kind = kind
        self.errors = errors
        super().__init__(f"Invalid '{kind}' action: {'; '.join(errors)}")


@dataclass(frozen=True)
class Action:
    """
    A parsed action, ready for a handler.

    `payload` is already validated for `kind`. `action_id` is chosen by the
    client so it can recognise its own action when the server echoes it back.
    """
    kind: ActionKind
    payload: Any
    action_id: str | None = None

    @classmethod
    def tick(cls, time: int, connected_players: list[str]) -> Action:
        """Factory for tick action."""
        return cls(
            kind=ActionKind.TICK,
            payload=TickPayload(time=time, connected_players=list(connected_players)),
        )

    @classmethod
    def joiner(cls, username: str) -> Action:
        """Factory for joiner action."""
        return cls(kind=ActionKind.JOINER, payload=username)

    @classmethod
    def leaver(cls, username: str) -> Action:
        """Factory for leaver action."""
        return cls(kind=ActionKind.LEAVER, payload=username)

    @classmethod
    def ready(cls, is_ready: bool, action_id: str | None = None) -> Action:
        """Factory for ready action."""
        return cls(kind=ActionKind.READY, payload=is_ready, action_id=action_id)

    @classmethod
    def pick(cls, x: int, y: int, action_id: str | None = None) -> Action:
        """Factory for pick action."""
        return cls(kind=ActionKind.PICK, payload=PickPayload(x=x, y=y), action_id=action_id)


@dataclass(frozen=True)
class DispatchEvent:
    """An action the container ran, in canonical order."""
    seq: int
    dispatcher: str
    action: Action


@dataclass
class ActionResult:
    """
    Result of dispatching an action.

    A rejected authority or precondition check is still a success: the
    handler ran and the state simply did not change.
    """
    success: bool
    new_state: Any | None = None  # State
    changed: bool = False
    event: DispatchEvent | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)
