"""
Pytest fixtures for Treepick tests.
"""

import pytest

from ..engine_core.action import Action, ROOT_DISPATCHER
from ..engine_core.registry import ActionRegistry
from ..engine_core.state import GIFT, LobbyEntry, Phase, State, Tree, initial_state
from ..engine_core.system import System
from ..games.tree import create_registry


def make_playing_state(players: list[str], tree: Tree | None = None, turn: str | None = None) -> State:
    """A state in the middle of a round."""
    state = initial_state()
    state.time = 10
    state.phase = Phase.PLAYING
    state.players = list(players)
    state.scores = {player: 0 for player in players}
    state.turn = turn if turn is not None else players[0]
    if tree is not None:
        state.tree = tree
    return state


def make_lobby_state(*usernames: str) -> State:
    """A lobby with everyone unready."""
    state = initial_state()
    state.lobby = {name: LobbyEntry() for name in usernames}
    return state


@pytest.fixture
def registry() -> ActionRegistry:
    """Registry with the tree game's actions."""
    return create_registry()


@pytest.fixture
def system(registry) -> System:
    """Fresh container on the initial state."""
    return System(registry)


@pytest.fixture
def lobby_system(registry) -> System:
    """Container with alice and bob in the lobby."""
    system = System(registry)
    system.dispatch(ROOT_DISPATCHER, Action.joiner("alice"))
    system.dispatch(ROOT_DISPATCHER, Action.joiner("bob"))
    return system


@pytest.fixture
def playing_system(lobby_system) -> System:
    """Container with alice and bob in a round on the default tree, alice to move."""
    system = lobby_system
    system.dispatch("alice", Action.ready(True))
    system.dispatch("bob", Action.ready(True))
    starting = system.get_state().starting
    system.dispatch(ROOT_DISPATCHER, Action.tick(starting, ["alice", "bob"]))
    return system


@pytest.fixture
def gift_tree() -> Tree:
    """Three rows with the top two cleared: 1, gift, 2 on the bottom."""
    return [
        [None],
        [None, None],
        [1, GIFT, 2],
    ]
