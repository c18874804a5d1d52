"""Tests for the match state machine."""
import copy

import pytest

from tictactoe.errors import (
    AlreadyMember,
    CellOccupied,
    GameOver,
    MatchFull,
    NotAMember,
    NotYourTurn,
    OutOfRange,
)
from tictactoe.game import Match, Phase
from tictactoe.rules import Mark, Outcome


def _playing() -> Match:
    m = Match.create_with("ABC123", "alice", now=10.0)
    m.join("bob")
    return m


def _play(m: Match, *positions: int) -> None:
    for pos in positions:
        m.apply_move(m.members[m.turn], pos)


class TestCreateAndJoin:
    def test_create_with_single_member(self):
        m = Match.create_with("ABC123", "alice", now=10.0)
        assert m.members == ["alice"]
        assert m.phase == Phase.WAITING
        assert m.cells == [None] * 9
        assert m.turn == 0
        assert m.outcome is None
        assert m.created_at == 10.0

    def test_second_join_starts_game_and_assigns_marks(self):
        m = _playing()
        assert m.phase == Phase.PLAYING
        assert m.marks == {"alice": Mark.X, "bob": Mark.O}

    def test_third_join_is_rejected(self):
        m = _playing()
        with pytest.raises(MatchFull):
            m.join("carol")
        assert m.members == ["alice", "bob"]

    def test_join_twice_is_rejected(self):
        m = Match.create_with("ABC123", "alice")
        with pytest.raises(AlreadyMember):
            m.join("alice")
        assert m.members == ["alice"]
        assert m.phase == Phase.WAITING


class TestApplyMove:
    def test_move_writes_mark_and_flips_turn(self):
        m = _playing()
        result = m.apply_move("alice", 4)
        assert m.cells[4] == Mark.X
        assert m.turn == 1
        assert (result.position, result.player, result.mark) == (4, 0, Mark.X)

    def test_turn_alternates(self):
        m = _playing()
        m.apply_move("alice", 0)
        m.apply_move("bob", 1)
        m.apply_move("alice", 2)
        assert m.cells[:3] == [Mark.X, Mark.O, Mark.X]
        assert m.turn == 1

    def test_not_your_turn_leaves_state_unchanged(self):
        m = _playing()
        before = copy.deepcopy(m)
        with pytest.raises(NotYourTurn):
            m.apply_move("bob", 0)
        assert m == before

    def test_non_member_rejected(self):
        m = _playing()
        with pytest.raises(NotAMember):
            m.apply_move("carol", 0)

    @pytest.mark.parametrize("position", [-1, 9, 100])
    def test_out_of_range(self, position):
        m = _playing()
        before = copy.deepcopy(m)
        with pytest.raises(OutOfRange):
            m.apply_move("alice", position)
        assert m == before

    def test_occupied_cell(self):
        m = _playing()
        m.apply_move("alice", 0)
        before = copy.deepcopy(m)
        with pytest.raises(CellOccupied):
            m.apply_move("bob", 0)
        assert m == before

    def test_move_before_opponent_joins(self):
        m = Match.create_with("ABC123", "alice")
        with pytest.raises(NotYourTurn):
            m.apply_move("alice", 0)
        assert m.cells == [None] * 9

    def test_left_column_wins_for_first_member(self):
        m = _playing()
        _play(m, 0, 1, 3, 2, 6)
        assert m.phase == Phase.FINISHED
        assert m.outcome == Outcome.X

    def test_second_member_can_win(self):
        m = _playing()
        _play(m, 0, 4, 1, 2, 8, 6)
        assert m.outcome == Outcome.O

    def test_draw_then_game_over(self):
        m = _playing()
        # X O X / X O O / O X X
        _play(m, 0, 1, 2, 4, 3, 5, 7, 6, 8)
        assert m.phase == Phase.FINISHED
        assert m.outcome == Outcome.DRAW
        for member in m.members:
            with pytest.raises(GameOver):
                m.apply_move(member, 0)

    def test_filled_cells_never_change(self):
        m = _playing()
        _play(m, 4, 0, 8)
        snapshot = list(m.cells)
        for pos in (4, 0, 8):
            with pytest.raises(CellOccupied):
                m.apply_move("bob", pos)
        assert m.cells == snapshot


class TestRemoveAndReset:
    def test_sole_member_leaving_empties_match(self):
        m = Match.create_with("ABC123", "alice")
        assert m.remove_member("alice") is True

    def test_one_of_two_leaving_keeps_match(self):
        m = _playing()
        assert m.remove_member("alice") is False
        assert m.live_members == ["bob"]
        assert m.members == ["alice", "bob"]
        with pytest.raises(GameOver):
            m.apply_move("bob", 0)

    def test_both_leaving_empties_match(self):
        m = _playing()
        m.remove_member("alice")
        assert m.remove_member("bob") is True

    def test_departed_member_is_no_longer_a_member(self):
        m = _playing()
        m.remove_member("alice")
        with pytest.raises(NotAMember):
            m.remove_member("alice")

    def test_reset_keeps_id_and_members(self):
        m = _playing()
        _play(m, 0, 1, 3, 2, 6)
        m.reset("bob")
        assert m.id == "ABC123"
        assert m.members == ["alice", "bob"]
        assert m.marks["alice"] == Mark.X
        assert m.cells == [None] * 9
        assert m.turn == 0
        assert m.phase == Phase.PLAYING
        assert m.outcome is None

    def test_reset_requires_both_members(self):
        m = _playing()
        m.remove_member("alice")
        assert m.can_reset() is False
        with pytest.raises(GameOver):
            m.reset("bob")

    def test_reset_by_outsider(self):
        m = _playing()
        with pytest.raises(NotAMember):
            m.reset("carol")
