"""
Правила крестиков-ноликов: метки, исходы и проверка победы.
Чистые функции, без состояния.
"""
from enum import Enum
from typing import Sequence

from .constants import BOARD_SIZE, WIN_LINES


class Mark(str, Enum):
    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X


class Outcome(str, Enum):
    X = "X"
    O = "O"
    DRAW = "draw"

    @classmethod
    def win_for(cls, mark: Mark) -> "Outcome":
        return cls(mark.value)


Cells = Sequence[Mark | None]


def evaluate(cells: Cells) -> Outcome | None:
    """
    Результат позиции: победившая метка, ничья или None (игра продолжается).
    Линии проверяются в фиксированном порядке, первая полная линия побеждает.
    """
    if len(cells) != BOARD_SIZE:
        raise ValueError(f"board must have {BOARD_SIZE} cells, got {len(cells)}")
    for a, b, c in WIN_LINES:
        mark = cells[a]
        if mark is not None and mark == cells[b] == cells[c]:
            return Outcome.win_for(mark)
    if all(cell is not None for cell in cells):
        return Outcome.DRAW
    return None


def empty_cells(cells: Cells) -> list[int]:
    return [i for i, cell in enumerate(cells) if cell is None]
