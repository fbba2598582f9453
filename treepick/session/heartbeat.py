"""
Heartbeat - Drives the game clock from wall-clock time.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import asyncio

from loguru import logger

if TYPE_CHECKING:
    from .server import GameServer


class Heartbeat:
    """
    Calls GameServer.heartbeat() every `interval` seconds on the running loop.

    Usage:
        heartbeat = Heartbeat(server, interval=1.0)
        heartbeat.start()
        ...
        await heartbeat.stop()
    """

    def __init__(self, server: GameServer, interval: float = 1.0):
        self.server = server
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        logger.debug("Heartbeat started ({}s)", self.interval)
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.server.heartbeat()
            except Exception:
                logger.exception("Heartbeat tick failed")
