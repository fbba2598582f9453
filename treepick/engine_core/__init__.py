"""
Engine Core - Replicated state machine.

The engine is the runtime that:
1. Defines the State snapshot
2. Registers action kinds with payload shapes and handlers
3. Validates and applies actions in one canonical order
4. Notifies subscribers of every action it ran
"""

from .state import State, Phase, LobbyEntry, GIFT, Tree, initial_state, default_tree
from .action import (
    Action,
    ActionKind,
    ActionResult,
    ActionValidationError,
    DispatchEvent,
    PickPayload,
    TickPayload,
    ROOT_DISPATCHER,
    SPECTATOR,
)
from .registry import ActionRegistry
from .system import System

__all__ = [
    "State",
    "Phase",
    "LobbyEntry",
    "GIFT",
    "Tree",
    "initial_state",
    "default_tree",
    "Action",
    "ActionKind",
    "ActionResult",
    "ActionValidationError",
    "DispatchEvent",
    "PickPayload",
    "TickPayload",
    "ROOT_DISPATCHER",
    "SPECTATOR",
    "ActionRegistry",
    "System",
]
