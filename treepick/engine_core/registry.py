"""
Action Registry - Payload shapes and transition functions per action kind.

Every kind has exactly one entry:
- a pydantic type the raw payload must satisfy
- a transition (state, dispatcher, payload) -> State | None

A transition receives a private copy of the state. Returning a State makes it
the next value; returning None means nothing observable happened.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from .action import Action, ActionKind, ActionValidationError

if TYPE_CHECKING:
    from .state import State


Handler = Callable[["State", str, Any], "State | None"]


@dataclass(frozen=True)
class Registration:
    """Everything the registry knows about one action kind."""
    kind: ActionKind
    adapter: TypeAdapter
    handler: Handler


class ActionRegistry:
    """
    Lookup table from action kind to payload shape and handler.

    Usage:
        registry = ActionRegistry()
        registry.register(ActionKind.READY, StrictBool, handle_ready)

        action = registry.parse("ready", True)
        next_state = registry.apply(state, "alice", action)
    """

    def __init__(self):
        self._registrations: dict[ActionKind, Registration] = {}

    def register(self, kind: ActionKind, payload_type: Any, handler: Handler) -> None:
        """Register the payload shape and handler for a kind."""
        kind = ActionKind(kind)
        if kind in self._registrations:
            raise ValueError(f"Handler already registered for action kind: {kind.value}")
        self._registrations[kind] = Registration(
            kind=kind,
            adapter=TypeAdapter(payload_type),
            handler=handler,
        )

    def when(self, kind: ActionKind, payload_type: Any) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(handler: Handler) -> Handler:
            self.register(kind, payload_type, handler)
            return handler
        return decorator

    @property
    def kinds(self) -> list[ActionKind]:
        return list(self._registrations)

    def __contains__(self, kind: object) -> bool:
        try:
            return ActionKind(kind) in self._registrations
        except ValueError:
            return False

    def _lookup(self, kind: str | ActionKind) -> Registration:
        try:
            return self._registrations[ActionKind(kind)]
        except (ValueError, KeyError):
            raise ActionValidationError(str(getattr(kind, "value", kind)), ["unknown action kind"])

    def parse(self, kind: str | ActionKind, payload: Any, action_id: str | None = None) -> Action:
        """
        Validate a raw payload and build an Action.

        Raises ActionValidationError for unknown kinds or bad payloads.
        """
        registration = self._lookup(kind)
        value = self._check(registration, payload)
        return Action(kind=registration.kind, payload=value, action_id=action_id)

    def validate(self, action: Action) -> Action:
        """Re-check an already built Action against its kind's shape."""
        registration = self._lookup(action.kind)
        value = self._check(registration, action.payload)
        return Action(kind=registration.kind, payload=value, action_id=action.action_id)

    def _check(self, registration: Registration, payload: Any) -> Any:
        try:
            return registration.adapter.validate_python(payload)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ActionValidationError(registration.kind.value, errors) from e

    def dump(self, action: Action) -> Any:
        """JSON-ready payload for the wire."""
        registration = self._lookup(action.kind)
        return registration.adapter.dump_python(action.payload, mode="json", by_alias=True)

    def apply(self, state: State, dispatcher: str, action: Action) -> State | None:
        """
        Run the handler for an action on a copy of `state`.

        Returns the next state, or None if the handler made no change.
        The given state is never touched.
        """
        registration = self._lookup(action.kind)
        return registration.handler(state.clone(), dispatcher, action.payload)
