"""
Treepick - Christmas Tree Picking Game Server

A replicated state machine for a small multiplayer turn-based game.
One authoritative server and many clients share a single State:
- Actions are validated and applied in one canonical order
- Handlers decide who may trigger what, from the session identity alone
- Clients predict locally and snap to the server's confirmations
"""

__version__ = "0.1.0"
