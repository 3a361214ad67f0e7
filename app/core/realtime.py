import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Per-user WebSocket rooms. One instance lives on ``app.state`` for the app's lifetime."""

    def __init__(self):
        self.active_connections: Dict[int, Set[WebSocket]] = defaultdict(set)
        self._tasks: Set[asyncio.Task] = set()

    async def connect(self, user_id: int, websocket: WebSocket):
        await websocket.accept()
        self.active_connections[user_id].add(websocket)
        logger.debug("User %s joined realtime room (%d sockets)", user_id, len(self.active_connections[user_id]))

    def disconnect(self, user_id: int, websocket: WebSocket):
        sockets = self.active_connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.active_connections[user_id]

    def is_connected(self, user_id: int) -> bool:
        return bool(self.active_connections.get(user_id))

    async def send_to_user(self, user_id: int, message: dict) -> int:
        """Send to every socket of the user, dropping the dead ones. Returns deliveries."""
        delivered = 0
        # Iterate over a copy, disconnect() mutates the set
        for connection in list(self.active_connections.get(user_id, ())):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception:
                logger.info("Dropping dead socket for user %s", user_id)
                self.disconnect(user_id, connection)
        return delivered

    def push(self, user_id: int, message: dict) -> Optional[asyncio.Task]:
        """Fire-and-forget delivery; never blocks or fails the caller."""
        if not self.is_connected(user_id):
            return None
        task = asyncio.create_task(self.send_to_user(user_id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close_all(self):
        for user_id in list(self.active_connections):
            for connection in list(self.active_connections.get(user_id, ())):
                try:
                    await connection.close()
                except Exception:
                    logger.debug("Socket for user %s already closed", user_id)
        self.active_connections.clear()
        for task in list(self._tasks):
            task.cancel()
