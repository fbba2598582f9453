"""
FastAPI Application - Session transport for the tree game.

Endpoints:
    GET    /health               Health check
    GET    /api/v1/state         Canonical state
    GET    /api/v1/users         Joined users and whether they are linked
    WS     /ws/{username}        Session channel

Session channel:
    1. Connecting links the username (first time also joins the game)
    2. Server sends a `sync` with the canonical state
    3. Client sends `action` frames; every action the server runs comes
       back to all sessions as an `action` message, in canonical order
    4. Closing the socket unlinks; a `leave` frame leaves the game

Run with:
    uvicorn treepick.api.app:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import os

from loguru import logger
from pydantic import ValidationError

from .. import __version__

# Environment configuration
TREEPICK_ENV = os.getenv("TREEPICK_ENV", "development")
TREEPICK_TICK_INTERVAL = float(os.getenv("TREEPICK_TICK_INTERVAL", "1.0"))
TREEPICK_SNAPSHOT_FILE = os.getenv("TREEPICK_SNAPSHOT_FILE", None)
TREEPICK_SNAPSHOT_EVERY = int(os.getenv("TREEPICK_SNAPSHOT_EVERY", "10"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Close code sent when a link is refused
LINK_REJECTED_CLOSE_CODE = 4001


def create_game_server(
    snapshot_file: Optional[str] = None,
    snapshot_every: Optional[int] = None,
):
    """
    Build the System and GameServer for one room.

    A configured snapshot is restored if present; an unreadable snapshot
    is logged and the room starts fresh.
    """
    from ..engine_core.system import System
    from ..games.tree import create_registry
    from ..session import GameServer, SnapshotStore, SnapshotError

    snapshot_file = snapshot_file if snapshot_file is not None else TREEPICK_SNAPSHOT_FILE
    snapshot_every = snapshot_every if snapshot_every is not None else TREEPICK_SNAPSHOT_EVERY

    system = System(create_registry())
    store = SnapshotStore(snapshot_file) if snapshot_file else None
    if store is not None:
        try:
            state = store.load()
        except SnapshotError as e:
            logger.warning("Ignoring snapshot: {}", e)
        else:
            if state is not None:
                system.replace_state(state)

    return GameServer(system, snapshot_store=store, snapshot_every=snapshot_every)


def create_app(server=None, tick_interval: Optional[float] = None):
    """
    Create the FastAPI application.

    Args:
        server: Optional GameServer instance (creates new if not provided)
        tick_interval: Heartbeat period in seconds

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..session import Heartbeat, LinkRejected, ErrorMessage, PongMessage
    from .schemas import (
        ActionFrame,
        LeaveFrame,
        PingFrame,
        HealthResponse,
        StateResponse,
        UserInfo,
        UsersResponse,
        parse_client_frame,
    )

    game_server = server or create_game_server()
    heartbeat = Heartbeat(
        game_server,
        interval=tick_interval if tick_interval is not None else TREEPICK_TICK_INTERVAL,
    )

    @asynccontextmanager
    async def lifespan(app):
        heartbeat.start()
        try:
            yield
        finally:
            await heartbeat.stop()
            game_server.save_snapshot()

    app = FastAPI(
        title="Treepick Server",
        description="Authoritative server for the Christmas tree picking game.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.game_server = game_server
    app.state.heartbeat = heartbeat

    # =========================================================================
    # HTTP Endpoints
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(version=__version__, environment=TREEPICK_ENV)

    @app.get("/api/v1/state", response_model=StateResponse, tags=["Game"])
    async def get_state() -> StateResponse:
        """Current canonical state."""
        return StateResponse(
            seq=game_server.system.seq,
            state=game_server.get_state().to_dict(),
        )

    @app.get("/api/v1/users", response_model=UsersResponse, tags=["Game"])
    async def get_users() -> UsersResponse:
        """Joined users."""
        users = [
            UserInfo(username=name, is_linked=linked)
            for name, linked in game_server.users.items()
        ]
        return UsersResponse(users=users, count=len(users))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    async def pump(websocket: WebSocket, outbox: asyncio.Queue) -> None:
        while True:
            message = await outbox.get()
            await websocket.send_json(message)

    async def flush(websocket: WebSocket, outbox: asyncio.Queue) -> None:
        while not outbox.empty():
            await websocket.send_json(outbox.get_nowait())

    @app.websocket("/ws/{username}")
    async def websocket_endpoint(websocket: WebSocket, username: str):
        """
        Session channel for one user.

        Messages from server:
        - sync: full canonical state
        - action: an action the server ran
        - rejected: your action had an invalid shape
        - pong: reply to ping
        - error: bad frame or refused link

        Messages from client:
        - action, leave, ping
        """
        await websocket.accept()
        outbox: asyncio.Queue = asyncio.Queue()

        try:
            game_server.link(username, outbox.put_nowait)
        except LinkRejected as e:
            logger.debug("Refused link for {!r}: {}", username, e.reason)
            await websocket.send_json(ErrorMessage(message=e.reason).model_dump())
            await websocket.close(code=LINK_REJECTED_CLOSE_CODE)
            return

        sender = asyncio.create_task(pump(websocket, outbox))
        left = False
        try:
            while True:
                text = await websocket.receive_text()
                try:
                    frame = parse_client_frame(text)
                except ValidationError as e:
                    outbox.put_nowait(ErrorMessage(message=f"Invalid frame: {e.error_count()} error(s)").model_dump())
                    continue

                if isinstance(frame, ActionFrame):
                    game_server.receive(username, frame.kind, frame.payload, action_id=frame.action_id)
                elif isinstance(frame, PingFrame):
                    outbox.put_nowait(PongMessage().model_dump())
                elif isinstance(frame, LeaveFrame):
                    game_server.leave(username)
                    left = True
                    break
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug("Sender for {} stopped: {}", username, e)
            if not left:
                game_server.unlink(username)

        if left:
            await flush(websocket, outbox)
            await websocket.close()

    return app
