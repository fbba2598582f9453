"""
Session Module - The server side of the session channel.

One server process hosts one game room:
- Users join, link, unlink and leave; each change becomes an action
- A heartbeat drives the game clock while anyone is linked
- Every action the server runs is broadcast to all linked sessions
- The canonical state can be snapshotted to disk and restored on start
"""

from .server import GameServer, User, LinkRejected, USERNAME_PATTERN
from .heartbeat import Heartbeat
from .snapshot import SnapshotStore, SnapshotError
from .protocol import SyncMessage, ActionMessage, RejectedMessage, PongMessage, ErrorMessage

__all__ = [
    "GameServer",
    "User",
    "LinkRejected",
    "USERNAME_PATTERN",
    "Heartbeat",
    "SnapshotStore",
    "SnapshotError",
    "SyncMessage",
    "ActionMessage",
    "RejectedMessage",
    "PongMessage",
    "ErrorMessage",
]
