"""
Tests for the state container.

Tests:
- Fail-closed dispatch
- State replacement and no-op handling
- Subscriptions and sequencing
"""

from ..engine_core.action import Action, ActionKind, ROOT_DISPATCHER
from ..engine_core.state import initial_state
from ..engine_core.system import System


class TestDispatch:
    """Tests for System.dispatch()."""

    def test_raw_dispatch_applies(self, system):
        result = system.dispatch(ROOT_DISPATCHER, "joiner", "alice")

        assert result.success
        assert result.changed
        assert "alice" in system.get_state().lobby

    def test_unknown_kind_fails_closed(self, system):
        before = system.get_state()

        result = system.dispatch(ROOT_DISPATCHER, "restart", {})

        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert system.get_state() is before
        assert system.seq == 0

    def test_bad_payload_fails_closed(self, system):
        before = system.get_state().clone()

        result = system.dispatch(ROOT_DISPATCHER, "tick", {"time": "soon"})

        assert not result.success
        assert "tick" in result.error
        assert system.get_state() == before

    def test_bad_prebuilt_action_fails_closed(self, system):
        result = system.dispatch("alice", Action(kind=ActionKind.READY, payload="yes"))

        assert not result.success

    def test_noop_keeps_same_state_object(self, system):
        before = system.get_state()

        result = system.dispatch("mallory", Action.joiner("mallory"))

        assert result.success
        assert not result.changed
        assert system.get_state() is before

    def test_change_replaces_state_object(self, system):
        before = system.get_state()

        system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))

        assert system.get_state() is not before
        assert before.lobby == {}

    def test_custom_initial_state(self, registry):
        state = initial_state()
        state.time = 42

        assert System(registry, state).get_state().time == 42

    def test_replace_state(self, system):
        seen = []
        system.subscribe(lambda state, event: seen.append(event))
        state = initial_state()
        state.time = 42

        system.replace_state(state)

        assert system.get_state() is state
        assert system.seq == 0
        assert seen == []

        system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))
        assert system.get_state().time == 42
        assert "alice" in system.get_state().lobby


class TestSubscribe:
    """Tests for System.subscribe()."""

    def test_callback_sees_every_run_action(self, system):
        seen = []
        system.subscribe(lambda state, event: seen.append((event.seq, event.dispatcher, event.action.kind)))

        system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))
        system.dispatch("bob", Action.joiner("bob"))  # no-op, still run
        system.dispatch(ROOT_DISPATCHER, "nonsense", None)  # never run

        assert seen == [
            (1, ROOT_DISPATCHER, ActionKind.JOINER),
            (2, "bob", ActionKind.JOINER),
        ]

    def test_callback_gets_resulting_state(self, system):
        states = []
        system.subscribe(lambda state, event: states.append(state))

        system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))

        assert states == [system.get_state()]
        assert "alice" in states[0].lobby

    def test_unsubscribe(self, system):
        seen = []
        unsubscribe = system.subscribe(lambda state, event: seen.append(event))

        system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))
        unsubscribe()
        system.dispatch(ROOT_DISPATCHER, Action.joiner("bob"))

        assert len(seen) == 1

    def test_event_carries_action_id(self, lobby_system):
        events = []
        lobby_system.subscribe(lambda state, event: events.append(event))

        lobby_system.dispatch("alice", "ready", True, action_id="a-1")

        assert events[0].action.action_id == "a-1"
        assert events[0].action.payload is True
