from typing import Any, Dict, Set
from fastapi import WebSocket
import asyncio
import json


class WebSocketManager:
    """Open notification sockets per user; a user may have several tabs open."""

    def __init__(self):
        self.active_connections: Dict[int, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: int):
        await websocket.accept()
        async with self._lock:
            self.active_connections.setdefault(int(user_id), set()).add(websocket)

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            for uid, sockets in list(self.active_connections.items()):
                if websocket in sockets:
                    sockets.discard(websocket)
                    if not sockets:
                        del self.active_connections[uid]
                    break

    def is_online(self, user_id: int) -> bool:
        return bool(self.active_connections.get(int(user_id)))

    async def send_personal_message(self, user_id: int, message: Any) -> bool:
        """Send to every socket of the user; True if at least one accepted it."""
        payload = message if isinstance(message, str) else json.dumps(message, default=str)
        delivered = False
        for ws in list(self.active_connections.get(int(user_id), ())):
            try:
                await ws.send_text(payload)
                delivered = True
            except Exception:
                # socket closed under us; forget it
                await self.disconnect(ws)
        return delivered


ws_manager = WebSocketManager()
