"""
Обработка сообщений WebSocket: create_game, join_game, find_game,
make_move, list_games, reset_game. При отключении — уборка партии.
"""
import logging
import uuid

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from . import messages
from .errors import GameError
from .game import Match, Phase
from .messages import CreateGame, FindGame, JoinGame, ListGames, MakeMove, ResetGame
from .registry import SessionRegistry
from .sweeper import LifecycleSweeper
from .ws_manager import ConnectionManager

logger = logging.getLogger(__name__)


def _connection_id() -> str:
    return uuid.uuid4().hex


class GameCoordinator:
    def __init__(self, registry: SessionRegistry, sweeper: LifecycleSweeper, grace_sec: float):
        self.registry = registry
        self.sweeper = sweeper
        self.grace_sec = grace_sec
        self.manager = ConnectionManager(registry)

    async def handle_message(self, raw: str | bytes, connection_id: str) -> None:
        """
        Обрабатывает одно сообщение. Ошибка уходит только отправителю,
        рассылки при ошибке нет.
        """
        try:
            msg = messages.parse_inbound(raw)
            logger.info("WS: msg from %s type=%s", connection_id, msg.type)
            await self._dispatch(msg, connection_id)
        except GameError as e:
            logger.info("WS: rejected %s: %s", connection_id, e.code)
            await self.manager.send_to(connection_id, e.to_payload())
        except Exception as e:
            logger.exception("WS: error handling message from %s: %s", connection_id, e)
            await self.manager.send_to(connection_id, messages.internal_error())

    async def _dispatch(self, msg, connection_id: str) -> None:
        if isinstance(msg, CreateGame):
            await self._create(connection_id)
        elif isinstance(msg, JoinGame):
            match = self.registry.get_match(msg.gameId)
            await self._join(match, connection_id)
        elif isinstance(msg, FindGame):
            await self._find(connection_id)
        elif isinstance(msg, MakeMove):
            match = self.registry.get_match(msg.gameId)
            result = match.apply_move(connection_id, msg.position)
            await self.manager.broadcast(match, messages.move_made(result))
        elif isinstance(msg, ListGames):
            await self.manager.send_to(connection_id, messages.games_list(self.registry.list_waiting()))
        elif isinstance(msg, ResetGame):
            await self._reset(msg.gameId, connection_id)

    async def _create(self, connection_id: str) -> Match:
        previous = self.registry.match_for(connection_id)
        match = self.registry.create_match(connection_id)
        await self.manager.send_to(connection_id, messages.game_created(match))
        if previous is not None:
            await self._leave(previous, connection_id)
        return match

    async def _join(self, match: Match, connection_id: str) -> None:
        previous = self.registry.match_for(connection_id)
        match.join(connection_id)
        self.registry.bind(connection_id, match.id)
        logger.info("match %s joined by %s", match.id, connection_id)
        if previous is not None and previous is not match:
            await self._leave(previous, connection_id)
        await self.manager.broadcast(match, messages.game_started(match))

    async def _find(self, connection_id: str) -> None:
        for match in self.registry.matches():
            if match.phase == Phase.WAITING and not match.is_member(connection_id):
                await self._join(match, connection_id)
                return
        await self._create(connection_id)

    async def _reset(self, match_id: str, connection_id: str) -> None:
        match = self.registry.get_match(match_id)
        match.mark_of(connection_id)
        if match.can_reset():
            match.reset(connection_id)
            await self.manager.broadcast(match, messages.game_reset(match))
            return
        # Соперника нет: старую партию выбрасываем, начинаем новую
        self.sweeper.cancel_eviction(match.id)
        self.registry.delete_match(match.id)
        await self._create(connection_id)

    async def _leave(self, match: Match, connection_id: str) -> None:
        """Выход из партии: пустую удаляем сразу, иначе сообщаем сопернику."""
        if self.registry.match_for(connection_id) is match:
            self.registry.unbind(connection_id)
        if match.remove_member(connection_id):
            self.sweeper.cancel_eviction(match.id)
            self.registry.delete_match(match.id)
            return
        await self.manager.broadcast(match, messages.player_disconnected(match.id), exclude=connection_id)
        self.sweeper.schedule_eviction(match.id, self.grace_sec)

    async def on_disconnect(self, connection_id: str) -> None:
        self.manager.disconnect(connection_id)
        match = self.registry.match_for(connection_id)
        if match is not None:
            await self._leave(match, connection_id)

    async def serve(self, ws: WebSocket) -> None:
        """Принять соединение, выдать id и обрабатывать сообщения до отключения."""
        connection_id = _connection_id()
        try:
            await ws.accept()
            self.manager.connect(ws, connection_id)
            logger.info("WS: connected %s from %s", connection_id, ws.client)
            await self.manager.send_to(connection_id, messages.connected(connection_id))
            while True:
                message = await ws.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
                # Бинарный кадр тоже разбираем, а не роняем соединение
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                await self.handle_message(raw, connection_id)
        except WebSocketDisconnect as e:
            logger.info("WS: client disconnected code=%s reason=%s id=%s", e.code, e.reason or "", connection_id)
        except Exception as e:
            logger.exception("WS: error id=%s: %s", connection_id, e)
        finally:
            await self.on_disconnect(connection_id)
            logger.info("WS: disconnected id=%s", connection_id)
