"""
API Module - Network interface to the game server.

Exposes one game room over HTTP and WebSocket:
1. Clients open /ws/{username} to link a session
2. They receive the canonical state, then every action the server runs
3. They send their own actions, tagged with an action_id
4. Closing the socket unlinks, a leave frame quits the game

All state lives in the GameServer the app owns.
"""

from .schemas import (
    ActionFrame,
    LeaveFrame,
    PingFrame,
    parse_client_frame,
    StateResponse,
    UserInfo,
    UsersResponse,
    HealthResponse,
)
from .app import create_app, create_game_server

__all__ = [
    # Client frames
    "ActionFrame",
    "LeaveFrame",
    "PingFrame",
    "parse_client_frame",
    # Responses
    "StateResponse",
    "UserInfo",
    "UsersResponse",
    "HealthResponse",
    # App
    "create_app",
    "create_game_server",
]
