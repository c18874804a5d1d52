"""
Состояние одной партии и её переходы: ожидание → игра → завершена.
Рассылка — забота координатора, здесь только проверка и мутация.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from .constants import BOARD_SIZE, MAX_MEMBERS
from .errors import (
    AlreadyMember,
    CellOccupied,
    GameOver,
    MatchFull,
    NotAMember,
    NotYourTurn,
    OutOfRange,
)
from .rules import Mark, Outcome, evaluate

logger = logging.getLogger(__name__)

# Метка определяется порядком входа и больше не пересчитывается
SEAT_MARKS = (Mark.X, Mark.O)


class Phase(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


def _empty_board() -> list[Mark | None]:
    return [None] * BOARD_SIZE


@dataclass
class MoveResult:
    match: "Match"
    position: int
    player: int  # индекс участника, сделавшего ход
    mark: Mark


@dataclass
class Match:
    id: str
    members: list[str] = field(default_factory=list)
    marks: dict[str, Mark] = field(default_factory=dict)
    cells: list[Mark | None] = field(default_factory=_empty_board)
    turn: int = 0
    phase: Phase = Phase.WAITING
    outcome: Outcome | None = None
    created_at: float = 0.0
    departed: set[str] = field(default_factory=set)

    @classmethod
    def create_with(cls, match_id: str, first_member: str, now: float | None = None) -> "Match":
        m = cls(id=match_id, created_at=time.time() if now is None else now)
        m._seat(first_member)
        return m

    @property
    def live_members(self) -> list[str]:
        return [cid for cid in self.members if cid not in self.departed]

    @property
    def abandoned(self) -> bool:
        return bool(self.departed)

    def is_member(self, connection_id: str) -> bool:
        return connection_id in self.marks

    def mark_of(self, connection_id: str) -> Mark:
        """Метка активного участника. Ушедший участником больше не считается."""
        if connection_id in self.departed or connection_id not in self.marks:
            raise NotAMember()
        return self.marks[connection_id]

    def _seat(self, connection_id: str) -> None:
        self.marks[connection_id] = SEAT_MARKS[len(self.members)]
        self.members.append(connection_id)

    def join(self, connection_id: str) -> None:
        if self.is_member(connection_id):
            raise AlreadyMember()
        if len(self.members) >= MAX_MEMBERS:
            raise MatchFull()
        self._seat(connection_id)
        if len(self.members) == MAX_MEMBERS:
            self.phase = Phase.PLAYING
            logger.info("match %s started", self.id)

    def apply_move(self, connection_id: str, position: int) -> MoveResult:
        """
        Проверить и применить ход. Все проверки выполняются до мутации,
        при ошибке партия не меняется.
        """
        mark = self.mark_of(connection_id)
        if self.phase == Phase.FINISHED:
            raise GameOver()
        if self.abandoned:
            raise GameOver("Opponent left the game")
        if self.phase == Phase.WAITING:
            raise NotYourTurn("Waiting for an opponent")
        player = self.members.index(connection_id)
        if player != self.turn:
            raise NotYourTurn()
        if not 0 <= position < BOARD_SIZE:
            raise OutOfRange()
        if self.cells[position] is not None:
            raise CellOccupied()

        self.cells[position] = mark
        self.turn = 1 - self.turn
        outcome = evaluate(self.cells)
        if outcome is not None:
            self.phase = Phase.FINISHED
            self.outcome = outcome
            logger.info("match %s finished: %s", self.id, outcome.value)
        return MoveResult(match=self, position=position, player=player, mark=mark)

    def remove_member(self, connection_id: str) -> bool:
        """
        Участник отключился. Возвращает True, если партия опустела
        (вызывающий удаляет её сразу). Иначе участник помечается ушедшим,
        порядок и метки сохраняются до отложенного удаления.
        """
        self.mark_of(connection_id)
        self.departed.add(connection_id)
        return not self.live_members

    def can_reset(self) -> bool:
        return len(self.live_members) == MAX_MEMBERS

    def reset(self, connection_id: str) -> None:
        """Новая партия теми же участниками: поле, ход и итог сбрасываются."""
        self.mark_of(connection_id)
        if not self.can_reset():
            raise GameOver("Opponent left the game")
        self.cells = _empty_board()
        self.turn = 0
        self.phase = Phase.PLAYING
        self.outcome = None
        logger.info("match %s reset", self.id)
