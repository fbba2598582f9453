"""
Tree Rules - Transition functions for the Christmas tree game.

Round cycle: lobby -> playing -> finished -> lobby.

Authority lives in each handler:
- tick, joiner, leaver describe transport facts; only ROOT_DISPATCHER may assert them
- ready, pick act on the dispatcher itself, never on a name from the payload

Handlers check every precondition before touching the state and return None
when the action has no effect.
"""

from __future__ import annotations

from loguru import logger
from pydantic import StrictBool

from ...engine_core.action import (
    ActionKind,
    PickPayload,
    ROOT_DISPATCHER,
    SPECTATOR,
    TickPayload,
    Username,
)
from ...engine_core.registry import ActionRegistry
from ...engine_core.state import LobbyEntry, Phase, State, initial_state
from .grid import gift_neighbours, is_cleared, is_gift, is_numeric, is_pickable, is_valid_location


# Ticks between everyone being ready and the round starting
START_DELAY = 5

GIFT_POINTS = 3
GIFT_BONUS = 1


def _unready_all(state: State) -> None:
    for entry in state.lobby.values():
        entry.is_ready = False
    state.starting = -1


def handle_tick(state: State, dispatcher: str, payload: TickPayload) -> State | None:
    """Advance the clock, start a due round, count down a finished one, or reset."""
    if dispatcher != ROOT_DISPATCHER:
        return None

    if state.ending <= 0:
        fresh = initial_state()
        fresh.spectators = [u for u in payload.connected_players if u == SPECTATOR]
        fresh.lobby = {
            u: LobbyEntry() for u in payload.connected_players if u != SPECTATOR
        }
        return fresh

    state.time = payload.time
    if state.phase == Phase.LOBBY and state.countdown_armed and state.time >= state.starting:
        state.phase = Phase.PLAYING
        state.players = list(state.lobby)
        state.scores = {player: 0 for player in state.players}
        state.turn = state.players[0] if state.players else None
        logger.info("Playing with {}", state.players)
    if state.phase == Phase.FINISHED:
        state.ending -= 1
    return state


def handle_joiner(state: State, dispatcher: str, username: str) -> State | None:
    """A user joined the server."""
    if dispatcher != ROOT_DISPATCHER:
        return None

    if state.phase == Phase.LOBBY and username != SPECTATOR:
        state.lobby[username] = LobbyEntry()
        # A late joiner invalidates a pending start
        _unready_all(state)
        return state

    if state.phase == Phase.PLAYING and username in state.players:
        # Reconnect of an active player
        return None

    if username in state.spectators:
        return None
    state.spectators.append(username)
    return state


def handle_leaver(state: State, dispatcher: str, username: str) -> State | None:
    """A user left the server for good."""
    if dispatcher != ROOT_DISPATCHER:
        return None

    if username in state.spectators:
        state.spectators.remove(username)

    if state.phase == Phase.LOBBY:
        state.lobby.pop(username, None)
        _unready_all(state)
        return state

    if state.phase == Phase.PLAYING and username in state.players:
        state.players = [player for player in state.players if player != username]
        state.scores[username] = -1
        if state.turn == username:
            state.turn = state.players[0] if state.players else None
        if not state.players:
            logger.info("All players left, finishing game")
            state.phase = Phase.FINISHED
    return state


def handle_ready(state: State, dispatcher: str, is_ready: bool) -> State | None:
    """Set the dispatcher's own readiness and arm or disarm the countdown."""
    if state.phase != Phase.LOBBY or dispatcher == SPECTATOR or dispatcher not in state.lobby:
        return None

    state.lobby[dispatcher].is_ready = is_ready
    if state.all_ready():
        state.starting = state.time + START_DELAY
    else:
        state.starting = -1
    return state


def handle_pick(state: State, dispatcher: str, payload: PickPayload) -> State | None:
    """Take a cell from the tree on the dispatcher's turn."""
    x, y = payload.x, payload.y
    if not is_valid_location(len(state.tree), x, y):
        return None
    cell = state.tree[y][x]
    if (
        state.phase != Phase.PLAYING
        or state.turn != dispatcher
        or cell is None
        or not is_pickable(state.tree, x, y)
    ):
        return None

    state.tree[y][x] = None
    if is_gift(cell):
        for nx, ny in gift_neighbours(x, y):
            if is_valid_location(len(state.tree), nx, ny) and is_numeric(state.tree[ny][nx]):
                state.tree[ny][nx] += GIFT_BONUS
        state.scores[dispatcher] = state.scores.get(dispatcher, 0) + GIFT_POINTS
        # Gifts grant another turn
    else:
        state.scores[dispatcher] = state.scores.get(dispatcher, 0) + cell
        position = state.players.index(dispatcher)
        state.turn = state.players[(position + 1) % len(state.players)]

    if is_cleared(state.tree):
        logger.info("Finished with {}", state.scores)
        state.phase = Phase.FINISHED
        state.spectators.extend(state.players)
        state.players = []
    return state


def create_registry() -> ActionRegistry:
    """Registry with every action of the tree game."""
    registry = ActionRegistry()
    registry.register(ActionKind.TICK, TickPayload, handle_tick)
    registry.register(ActionKind.JOINER, Username, handle_joiner)
    registry.register(ActionKind.LEAVER, Username, handle_leaver)
    registry.register(ActionKind.READY, StrictBool, handle_ready)
    registry.register(ActionKind.PICK, PickPayload, handle_pick)
    return registry
