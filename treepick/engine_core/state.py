"""
Game State - The single world snapshot shared by server and clients.

Design principles:
- One value: every field lives on State, nothing has its own lifetime
- Replaceable: handlers work on a copy and hand back the next value
- Serializable: to_dict()/from_dict() use the wire/snapshot field names
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Union
from copy import deepcopy
from enum import Enum


# Distinguished non-numeric tree cell
GIFT = "🎁"

Cell = Union[int, str, None]
Tree = list[list[Cell]]

# Seconds a finished round stays on screen before the reset
ENDING_TICKS = 20


class Phase(str, Enum):
    """Top-level phases of a round."""
    LOBBY = "lobby"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class LobbyEntry:
    """A lobby member's readiness."""
    is_ready: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"isReady": self.is_ready}


def default_tree() -> Tree:
    """The tree every round starts with."""
    g = GIFT
    return [
        [1],
        [2, g],
        [1, None, 1],
        [g, 3, 2, 1],
        [2, 2, 1, None, 3],
        [1, None, 3, 1, 2, 1],
        [2, 3, 2, 1, None, g, 3],
        [1, 2, g, 1, 3, 1, 2, 2],
        [2, None, 2, g, 1, 3, 2, 1, 4],
        [3, 1, 2, 1, 1, 3, 2, None, 2, 1],
        [1, 3, 1, 2, None, 5, g, 2, 2, 1, 3],
        [1, 2, g, 1, 2, 1, 1, 3, 1, 2, 1, 2],
        [3, 4, 1, None, 1, 1, 2, g, 1, 2, 3, None, 2],
        [2, 1, 2, 1, 5, 1, 3, None, 2, 2, 1, 1, 1, 1],
        [1, 3, 4, 1, g, 1, 4, 5, 2, 4, 1, 3, 1, 2, 3],
    ]


@dataclass
class State:
    """
    Complete game state at a point in time.

    Every other field's meaning depends on `phase`:
    - lobby: `lobby` and `starting` are live
    - playing: `players`, `scores`, `turn` and `tree` are live
    - finished: `scores` and `ending` are live
    """
    time: int = 0

    phase: Phase = Phase.LOBBY
    starting: int = -1
    ending: int = ENDING_TICKS
    lobby: dict[str, LobbyEntry] = field(default_factory=dict)
    spectators: list[str] = field(default_factory=list)

    players: list[str] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)
    turn: str | None = None
    tree: Tree = field(default_factory=default_tree)

    @property
    def countdown_armed(self) -> bool:
        return self.starting != -1

    def all_ready(self) -> bool:
        """True if every lobby member is ready (vacuously true for an empty lobby)."""
        return all(entry.is_ready for entry in self.lobby.values())

    def clone(self) -> State:
        """Deep copy the state."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Structured record with the wire field names."""
        return {
            "time": self.time,
            "phase": self.phase.value,
            "starting": self.starting,
            "ending": self.ending,
            "lobby": {name: entry.to_dict() for name, entry in self.lobby.items()},
            "spectators": list(self.spectators),
            "players": list(self.players),
            "scores": dict(self.scores),
            "turn": self.turn,
            "tree": [list(row) for row in self.tree],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> State:
        """Rebuild a state from to_dict() output."""
        return cls(
            time=int(data["time"]),
            phase=Phase(data["phase"]),
            starting=int(data["starting"]),
            ending=int(data["ending"]),
            lobby={
                name: LobbyEntry(is_ready=bool(entry["isReady"]))
                for name, entry in data["lobby"].items()
            },
            spectators=list(data["spectators"]),
            players=list(data["players"]),
            scores={name: int(score) for name, score in data["scores"].items()},
            turn=data.get("turn"),
            tree=[list(row) for row in data["tree"]],
        )


def initial_state() -> State:
    """Fresh state for a new process or a new round."""
    return State()
