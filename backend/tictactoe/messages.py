"""
Протокол WebSocket: входящие сообщения (проверка на границе)
и сборка исходящих payload.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError, field_validator

from .errors import MalformedMessage
from .game import Match, MoveResult


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class _WithGameId(_Inbound):
    gameId: str = Field(min_length=1)

    @field_validator("gameId")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return v.strip().upper()


class CreateGame(_Inbound):
    type: Literal["create_game"]


class JoinGame(_WithGameId):
    type: Literal["join_game"]


class FindGame(_Inbound):
    """Войти в первую ожидающую партию или создать новую."""

    type: Literal["find_game"]


class MakeMove(_WithGameId):
    type: Literal["make_move"]
    position: StrictInt


class ListGames(_Inbound):
    type: Literal["list_games"]


class ResetGame(_WithGameId):
    type: Literal["reset_game"]


InboundMessage = Annotated[
    Union[CreateGame, JoinGame, FindGame, MakeMove, ListGames, ResetGame],
    Field(discriminator="type"),
]

_inbound = TypeAdapter(InboundMessage)


def parse_inbound(raw: str | bytes) -> InboundMessage:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage() from e
    try:
        return _inbound.validate_json(raw)
    except ValidationError as e:
        raise MalformedMessage(_describe(e)) from e


def _describe(e: ValidationError) -> str:
    err = e.errors()[0]
    if err["type"] == "json_invalid":
        return "Invalid message format"
    loc = ".".join(str(p) for p in err["loc"]) or "message"
    return f"Invalid message format: {loc}: {err['msg']}"


# --- исходящие ---

def snapshot(m: Match) -> dict:
    """Полное состояние партии для отправки клиентам."""
    return {
        "id": m.id,
        "players": list(m.members),
        "board": [c.value if c is not None else None for c in m.cells],
        "currentPlayer": m.turn,
        "status": m.phase.value,
        "winner": m.outcome.value if m.outcome is not None else None,
        "createdAt": int(m.created_at * 1000),
    }


def connected(connection_id: str) -> dict:
    return {"type": "connected", "playerId": connection_id}


def game_created(m: Match) -> dict:
    return {"type": "game_created", "gameId": m.id, "game": snapshot(m)}


def game_started(m: Match) -> dict:
    return {"type": "game_started", "game": snapshot(m)}


def game_reset(m: Match) -> dict:
    return {"type": "game_reset", "game": snapshot(m)}


def move_made(result: MoveResult) -> dict:
    return {
        "type": "move_made",
        "game": snapshot(result.match),
        "position": result.position,
        "player": result.player,
        "mark": result.mark.value,
    }


def games_list(games: list) -> dict:
    return {"type": "games_list", "games": games}


def player_disconnected(match_id: str) -> dict:
    return {"type": "player_disconnected", "gameId": match_id}


def internal_error() -> dict:
    return {"type": "error", "code": "INTERNAL_ERROR", "message": "Internal server error"}
