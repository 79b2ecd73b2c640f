"""WebSocket connection manager for real-time events."""

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from typing import Any

from fastapi import WebSocket

from rapid_responder.core.errors import DeliveryError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks active WebSocket connections keyed by user_id.

    ``push`` is the entry point used by the services: it never blocks and
    never raises for a delivery problem. A user with no live connection is
    simply skipped; they will see the event on their next poll.
    """

    def __init__(self) -> None:
        # user_id -> set of active websocket connections
        self._connections: dict[str, set[WebSocket]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        # Scheduled sends, held until done so they are not garbage collected
        self._pending: set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket, user_id: str) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self._connections.setdefault(user_id, set()).add(websocket)
        logger.info("WS connected: user=%s (total=%s)", user_id, self.total_connections)

    def disconnect(self, websocket: WebSocket, user_id: str) -> None:
        conns = self._connections.get(user_id)
        if conns:
            conns.discard(websocket)
            if not conns:
                del self._connections[user_id]
        logger.info("WS disconnected: user=%s (total=%s)", user_id, self.total_connections)

    def is_connected(self, user_id: str) -> bool:
        return bool(self._connections.get(user_id))

    async def send_to_user(self, user_id: str, event: str, data: Any) -> int:
        """Send event to all connections for a user. Returns connections reached."""
        conns = self._connections.get(user_id, set())
        payload = json.dumps({"event": event, "data": data}, default=str)
        dead: list[WebSocket] = []
        delivered = 0
        for ws in list(conns):
            try:
                await ws.send_text(payload)
                delivered += 1
            except Exception:
                dead.append(ws)
        for ws in dead:
            conns.discard(ws)
        if dead and not delivered:
            raise DeliveryError(user_id, f"All {len(dead)} connection(s) for user {user_id} failed")
        return delivered

    def push(self, user_id: str, event: str, data: Any) -> bool:
        """Schedule a send without waiting for it. Safe to call from worker threads.

        Returns True if a send was scheduled, False if the user is not live.
        """
        if not self.is_connected(user_id):
            return False
        coro = self.send_to_user(user_id, event, data)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None:
            task = running.create_task(coro)
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            task.add_done_callback(partial(_log_push_result, user_id, event))
        elif self._loop is not None and self._loop.is_running():
            future = asyncio.run_coroutine_threadsafe(coro, self._loop)
            future.add_done_callback(partial(_log_push_result, user_id, event))
        else:
            coro.close()
            return False
        return True

    @property
    def total_connections(self) -> int:
        return sum(len(c) for c in self._connections.values())


def _log_push_result(user_id: str, event: str, future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("Push %s to user=%s failed: %s", event, user_id, exc)


# Singleton instance used across the app
ws_manager = ConnectionManager()
