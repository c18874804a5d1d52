"""
Реестр сессий (in-memory): партии по id, соединения по id
и принадлежность соединения партии.
"""
import logging
import secrets
import time
from typing import Any, Callable

from .constants import MATCH_ID_ALPHABET, MATCH_ID_LENGTH, WaitingGame
from .errors import MatchNotFound
from .game import Match, Phase

logger = logging.getLogger(__name__)


def _random_match_id() -> str:
    return "".join(secrets.choice(MATCH_ID_ALPHABET) for _ in range(MATCH_ID_LENGTH))


class SessionRegistry:
    def __init__(
        self,
        id_factory: Callable[[], str] = _random_match_id,
        clock: Callable[[], float] = time.time,
    ):
        self._matches: dict[str, Match] = {}
        self._connections: dict[str, Any] = {}
        self._membership: dict[str, str] = {}  # connection_id -> match_id
        self._id_factory = id_factory
        self.clock = clock

    # --- соединения ---

    def add_connection(self, connection_id: str, handle: Any) -> None:
        self._connections[connection_id] = handle

    def remove_connection(self, connection_id: str) -> Any | None:
        return self._connections.pop(connection_id, None)

    def get_connection(self, connection_id: str) -> Any | None:
        return self._connections.get(connection_id)

    # --- партии ---

    def generate_match_id(self) -> str:
        while True:
            match_id = self._id_factory()
            if match_id not in self._matches:
                return match_id
            logger.debug("match id collision: %s", match_id)

    def create_match(self, connection_id: str) -> Match:
        match = Match.create_with(self.generate_match_id(), connection_id, now=self.clock())
        self._matches[match.id] = match
        self.bind(connection_id, match.id)
        logger.info("match %s created by %s", match.id, connection_id)
        return match

    def find_match(self, match_id: str) -> Match | None:
        return self._matches.get(match_id)

    def get_match(self, match_id: str) -> Match:
        match = self._matches.get(match_id)
        if match is None:
            raise MatchNotFound()
        return match

    def delete_match(self, match_id: str) -> bool:
        """Удалить партию. Повторное удаление не ошибка, вернёт False."""
        match = self._matches.pop(match_id, None)
        if match is None:
            return False
        for cid in match.members:
            if self._membership.get(cid) == match_id:
                del self._membership[cid]
        logger.info("match %s deleted", match_id)
        return True

    def matches(self) -> list[Match]:
        return list(self._matches.values())

    def list_waiting(self) -> list[WaitingGame]:
        return [
            {"id": m.id, "players": len(m.members)}
            for m in self._matches.values()
            if m.phase == Phase.WAITING
        ]

    # --- принадлежность ---

    def bind(self, connection_id: str, match_id: str) -> None:
        self._membership[connection_id] = match_id

    def unbind(self, connection_id: str) -> None:
        self._membership.pop(connection_id, None)

    def match_for(self, connection_id: str) -> Match | None:
        match_id = self._membership.get(connection_id)
        return self._matches.get(match_id) if match_id else None

    def counts(self) -> dict[str, int]:
        return {"games": len(self._matches), "players": len(self._connections)}
