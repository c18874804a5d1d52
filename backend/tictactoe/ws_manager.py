"""
Менеджер WebSocket: отправка одному соединению и рассылка участникам партии.
Сами соединения хранятся в реестре.
"""
import logging
from typing import Any

from fastapi import WebSocket

from .game import Match
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, connection_id: str):
        self.ws = ws
        self.connection_id = connection_id


class ConnectionManager:
    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    def connect(self, ws: WebSocket, connection_id: str) -> Connection:
        conn = Connection(ws, connection_id)
        self.registry.add_connection(connection_id, conn)
        return conn

    def disconnect(self, connection_id: str) -> None:
        self.registry.remove_connection(connection_id)

    async def send_to(self, connection_id: str, payload: dict[str, Any]) -> bool:
        conn = self.registry.get_connection(connection_id)
        if not conn:
            return False
        try:
            await conn.ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send_to %s: %s", connection_id, e)
            return False

    async def broadcast(self, match: Match, payload: dict[str, Any], exclude: str | None = None) -> None:
        """Рассылка в порядке участников, ушедшим и exclude не отправляем."""
        for cid in match.live_members:
            if cid != exclude:
                await self.send_to(cid, payload)
