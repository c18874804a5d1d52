"""
Ошибки игровых операций.

Каждая ошибка несёт стабильный ``code`` для клиента и человекочитаемое
сообщение. Все они локальны и не ломают соединение.
"""


class GameError(Exception):
    """Базовая ошибка: операция отклонена, состояние не изменено."""

    code = "GAME_ERROR"
    default_message = "Request rejected"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"type": "error", "code": self.code, "message": self.message}


class MatchNotFound(GameError):
    code = "MATCH_NOT_FOUND"
    default_message = "Game not found"


class MatchFull(GameError):
    code = "MATCH_FULL"
    default_message = "Game is full"


class AlreadyMember(GameError):
    code = "ALREADY_MEMBER"
    default_message = "You are already in this game"


class NotAMember(GameError):
    code = "NOT_A_MEMBER"
    default_message = "You are not in this game"


class NotYourTurn(GameError):
    code = "NOT_YOUR_TURN"
    default_message = "Not your turn"


class OutOfRange(GameError):
    code = "OUT_OF_RANGE"
    default_message = "Position must be between 0 and 8"


class CellOccupied(GameError):
    code = "CELL_OCCUPIED"
    default_message = "Position already taken"


class GameOver(GameError):
    code = "GAME_OVER"
    default_message = "Game is over"


class MalformedMessage(GameError):
    code = "MALFORMED_MESSAGE"
    default_message = "Invalid message format"
