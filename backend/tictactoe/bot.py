"""
Бот для одиночной игры. Чистая функция от поля и своей метки.
Приоритет: выиграть, заблокировать, центр, угол, любая свободная.
"""
import random

from .constants import CENTER, CORNERS
from .rules import Cells, Mark, Outcome, empty_cells, evaluate


def _winning_cell(cells: Cells, mark: Mark) -> int | None:
    for i in empty_cells(cells):
        trial = list(cells)
        trial[i] = mark
        if evaluate(trial) == Outcome.win_for(mark):
            return i
    return None


def choose_move(cells: Cells, mark: Mark, rng: random.Random | None = None) -> int:
    free = empty_cells(cells)
    if not free:
        raise ValueError("board is full")
    rng = rng or random.Random()

    for target in (mark, mark.opponent):
        cell = _winning_cell(cells, target)
        if cell is not None:
            return cell
    if cells[CENTER] is None:
        return CENTER
    corners = [i for i in CORNERS if cells[i] is None]
    if corners:
        return rng.choice(corners)
    return rng.choice(free)
