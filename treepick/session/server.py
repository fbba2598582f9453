"""
Game Server - The authoritative end of the session channel.

LIFECYCLE of a user:
1. link(username)   first time -> join   -> root `joiner(username)`
2. unlink(username) socket gone -> unlink -> `ready(false)` as the user
3. link(username)   same name again -> reconnect, no join
4. leave(username)  explicit quit -> leave -> root `leaver(username)`

A user stays "joined" while unlinked, until they leave.

Every action, from a session or from the heartbeat, goes through the one
System this server owns. Each action it runs is broadcast to all linked
sessions with its sequence number, so clients replay exactly the canonical
order. Nothing here awaits, which keeps dispatches strictly one at a time on
the event loop.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
import re

from loguru import logger

from ..engine_core.action import Action, ActionResult, DispatchEvent, ROOT_DISPATCHER
from ..engine_core.state import State
from ..engine_core.system import System
from .protocol import ActionMessage, RejectedMessage, SyncMessage
from .snapshot import SnapshotStore


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]{3,20}$")

Send = Callable[[dict[str, Any]], None]


class LinkRejected(Exception):
    """Raised when a session may not link under the requested username."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


@dataclass
class User:
    """A joined user and, while linked, the way to reach their session."""
    username: str
    send: Send | None = None

    @property
    def is_linked(self) -> bool:
        return self.send is not None


class GameServer:
    """
    Translates session lifecycle into actions and fans results out.

    Usage:
        server = GameServer(System(create_registry()))
        server.link("alice", outbox.put_nowait)
        server.receive("alice", "ready", True, action_id="a1")
        server.heartbeat()
    """

    def __init__(
        self,
        system: System,
        snapshot_store: SnapshotStore | None = None,
        snapshot_every: int = 10,
    ):
        self.system = system
        self.snapshot_store = snapshot_store
        self.snapshot_every = snapshot_every
        self._users: dict[str, User] = {}
        # Continue the clock of a restored state so countdowns stay meaningful
        self.time = system.get_state().time
        self._ticks_since_snapshot = 0
        self.system.subscribe(self._broadcast)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def users(self) -> dict[str, bool]:
        """Joined usernames mapped to whether they are linked right now."""
        return {name: user.is_linked for name, user in self._users.items()}

    def linked_usernames(self) -> list[str]:
        return [name for name, user in self._users.items() if user.is_linked]

    def get_state(self) -> State:
        return self.system.get_state()

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def link(self, username: str, send: Send) -> None:
        """
        Attach a session to a username.

        Raises LinkRejected for malformed names or a name that is already linked.
        """
        if not USERNAME_PATTERN.match(username or ""):
            raise LinkRejected("invalid username")
        user = self._users.get(username)
        if user is not None and user.is_linked:
            raise LinkRejected("username already linked")

        is_new = user is None
        if is_new:
            user = User(username=username)
            self._users[username] = user
        user.send = send

        send(SyncMessage(seq=self.system.seq, state=self.system.get_state().to_dict()).model_dump())
        logger.debug("{} {}", username, "joined" if is_new else "linked")
        if is_new:
            self.system.dispatch(ROOT_DISPATCHER, Action.joiner(username))

    def unlink(self, username: str) -> None:
        """The session of a user went away; they are still joined."""
        user = self._users.get(username)
        if user is None or not user.is_linked:
            return
        user.send = None
        logger.debug("{} unlinked", username)
        self.system.dispatch(username, Action.ready(False))

    def leave(self, username: str) -> None:
        """
        A user quit the server.

        The leaving session still receives the `leaver` echo before it is
        forgotten.
        """
        if username not in self._users:
            return
        logger.debug("{} left", username)
        self.system.dispatch(ROOT_DISPATCHER, Action.leaver(username))
        del self._users[username]

    # =========================================================================
    # Actions
    # =========================================================================

    def receive(
        self,
        username: str,
        kind: str,
        payload: Any,
        action_id: str | None = None,
    ) -> ActionResult:
        """
        Dispatch an action sent by a linked session.

        The dispatcher is always the session's own username. A payload that
        fails validation is reported back to that session only.
        """
        user = self._users.get(username)
        if user is None or not user.is_linked:
            return ActionResult.failure(f"{username} is not linked", error_code="NOT_LINKED")

        result = self.system.dispatch(username, kind, payload, action_id=action_id)
        if not result.success:
            self._send(user, RejectedMessage(action_id=action_id, error=result.error).model_dump())
        return result

    def heartbeat(self) -> ActionResult | None:
        """
        One clock tick. Skipped entirely while nobody is linked.
        """
        if not self.linked_usernames():
            return None
        self.time += 1
        result = self.system.dispatch(ROOT_DISPATCHER, Action.tick(self.time, list(self._users)))

        self._ticks_since_snapshot += 1
        if self.snapshot_store is not None and self._ticks_since_snapshot >= self.snapshot_every:
            self.save_snapshot()
        return result

    def save_snapshot(self) -> None:
        if self.snapshot_store is None:
            return
        self.snapshot_store.save(self.system.get_state())
        self._ticks_since_snapshot = 0

    # =========================================================================
    # Fan-out
    # =========================================================================

    def _broadcast(self, state: State, event: DispatchEvent) -> None:
        message = ActionMessage(
            seq=event.seq,
            dispatcher=event.dispatcher,
            kind=event.action.kind.value,
            payload=self.system.registry.dump(event.action),
            action_id=event.action.action_id,
        ).model_dump()
        for user in list(self._users.values()):
            self._send(user, message)

    def _send(self, user: User, message: dict[str, Any]) -> None:
        if user.send is not None:
            user.send(message)
