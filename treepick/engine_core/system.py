"""
System - The state container.

The system is the single point of state mutation on a process.
All state changes must go through dispatch().

Design principles:
- Owns exactly one State value, replaced wholesale by each change
- Fails closed: unknown kinds and malformed payloads never reach a handler
- Sequences actions: one dispatch at a time, subscribers see canonical order
"""

from __future__ import annotations
from typing import Any, Callable

from loguru import logger

from .action import Action, ActionResult, ActionValidationError, DispatchEvent
from .registry import ActionRegistry
from .state import State, initial_state


Subscriber = Callable[[State, DispatchEvent], None]


class System:
    """
    Holds the canonical State and applies actions to it.

    Usage:
        system = System(create_registry())
        system.subscribe(lambda state, event: broadcast(event))

        result = system.dispatch("alice", "ready", True)
        state = system.get_state()
    """

    def __init__(self, registry: ActionRegistry, state: State | None = None):
        self.registry = registry
        self._state = state if state is not None else initial_state()
        self._subscribers: list[Subscriber] = []
        self._seq = 0

    @property
    def seq(self) -> int:
        """Number of actions run so far."""
        return self._seq

    def get_state(self) -> State:
        """Current canonical snapshot. Treat as read-only."""
        return self._state

    def replace_state(self, state: State) -> None:
        """Swap in a state from outside the action flow (snapshot restore)."""
        self._state = state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback fired after every action that ran.

        Returns a function that removes the callback again.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def dispatch(
        self,
        dispatcher: str,
        action: Action | str,
        payload: Any = None,
        action_id: str | None = None,
    ) -> ActionResult:
        """
        Apply an action on behalf of `dispatcher`.

        `action` is either a parsed Action or a raw kind, in which case
        `payload` is validated first. Never raises for bad input.
        """
        try:
            if isinstance(action, Action):
                action = self.registry.validate(action)
            else:
                action = self.registry.parse(action, payload, action_id=action_id)
        except ActionValidationError as e:
            logger.debug("Dropped action from {}: {}", dispatcher, e)
            return ActionResult.failure(str(e), error_code="INVALID_ACTION")

        next_state = self.registry.apply(self._state, dispatcher, action)
        changed = next_state is not None
        if changed:
            self._state = next_state

        self._seq += 1
        event = DispatchEvent(seq=self._seq, dispatcher=dispatcher, action=action)
        for callback in list(self._subscribers):
            callback(self._state, event)

        return ActionResult(
            success=True,
            new_state=self._state,
            changed=changed,
            event=event,
        )
