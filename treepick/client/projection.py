"""
Optimistic Projection - A client's two views of the game.

- confirmed: the last state the server vouched for
- optimistic: confirmed with this client's unacknowledged actions replayed on top

Local actions show up immediately in `optimistic`. When the server echoes
an action back, it moves into `confirmed` and leaves the pending queue.
Whatever the server decided wins; the optimistic view just snaps to it.

A `sync` starts a new session: actions still pending from an earlier
session are dropped, and echoes numbered at or below the sync are ignored.
"""

from __future__ import annotations
from typing import Any
import uuid

from ..engine_core.action import Action, ActionKind
from ..engine_core.registry import ActionRegistry
from ..engine_core.state import State


def replay(
    registry: ActionRegistry,
    confirmed: State,
    dispatcher: str,
    pending: list[Action],
) -> State:
    """Apply `pending` in order on top of `confirmed`. `confirmed` is not modified."""
    state = confirmed
    for action in pending:
        next_state = registry.apply(state, dispatcher, action)
        if next_state is not None:
            state = next_state
    return state


class OptimisticProjection:
    """
    Client-side state store.

    Usage:
        projection = OptimisticProjection(create_registry(), "alice")
        projection.sync(State.from_dict(message["state"]))

        action = projection.dispatch("pick", {"x": 0, "y": 0})
        send(action)                      # optimistic already shows the pick

        projection.confirm(dispatcher, echoed_action)
    """

    def __init__(self, registry: ActionRegistry, username: str):
        self.registry = registry
        self.username = username
        self.confirmed: State | None = None
        self.optimistic: State | None = None
        self.pending: list[Action] = []
        self.last_seq = 0

    def dispatch(self, kind: str | ActionKind, payload: Any) -> Action:
        """
        Queue a local action and apply it to the optimistic view.

        Raises ActionValidationError for a payload the server would refuse.
        """
        action = self.registry.parse(kind, payload, action_id=uuid.uuid4().hex)
        self.pending.append(action)
        self._recompute()
        return action

    def sync(self, state: State, seq: int | None = None) -> None:
        """Replace the confirmed state wholesale and forget pending actions."""
        self.confirmed = state
        self.pending = []
        if seq is not None:
            self.last_seq = seq
        self._recompute()

    def confirm(self, dispatcher: str, action: Action, seq: int | None = None) -> bool:
        """
        Apply an action the server ran to the confirmed state.

        Returns False for an echo the confirmed state already includes.
        """
        if seq is not None:
            if seq <= self.last_seq:
                return False
            self.last_seq = seq
        if self.confirmed is not None:
            next_state = self.registry.apply(self.confirmed, dispatcher, action)
            if next_state is not None:
                self.confirmed = next_state
        if dispatcher == self.username and action.action_id is not None:
            self._drop(action.action_id)
        self._recompute()
        return True

    def reject(self, action_id: str) -> None:
        """Forget a pending action the server refused."""
        self._drop(action_id)
        self._recompute()

    @property
    def state(self) -> State | None:
        """What to render."""
        return self.optimistic

    def _drop(self, action_id: str) -> None:
        self.pending = [a for a in self.pending if a.action_id != action_id]

    def _recompute(self) -> None:
        if self.confirmed is None:
            self.optimistic = None
            return
        self.optimistic = replay(self.registry, self.confirmed, self.username, self.pending)
