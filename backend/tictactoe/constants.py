"""Константы поля и протокола."""
import string
from typing import TypedDict


class WaitingGame(TypedDict):
    id: str
    players: int


BOARD_SIZE = 9
CENTER = 4
CORNERS = (0, 2, 6, 8)

# Порядок проверки важен: 3 строки, 3 столбца, 2 диагонали
WIN_LINES: list[tuple[int, int, int]] = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
]

MATCH_ID_LENGTH = 6
MATCH_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_MEMBERS = 2
