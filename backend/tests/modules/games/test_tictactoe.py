"""Tests for modules/games/tictactoe.py."""

import pytest

from modules.games.models import GameAction
from modules.games.replay import GameReplayer
from modules.games.tictactoe import check_winner

from tests.fakes import ttt

_ = None


class TestCheckWinner:
    def test_top_row(self):
        assert check_winner(["X", "X", "X", _, _, _, _, _, _]) == "X"

    @pytest.mark.parametrize("line", [(0, 3, 6), (2, 4, 6), (1, 4, 7), (6, 7, 8)])
    def test_every_line_kind(self, line):
        board = [None] * 9
        for index in line:
            board[index] = "O"
        assert check_winner(board) == "O"

    def test_full_board_without_line_is_tie(self):
        board = ["X", "O", "X",
                 "X", "O", "O",
                 "O", "X", "X"]
        assert check_winner(board) == "tie"

    def test_open_board_is_ongoing(self):
        assert check_winner(["X", "O", _, _, _, _, _, _, _]) is None
        assert check_winner([None] * 9) is None


def replay(messages):
    replayer = GameReplayer(rounds_to_win=2)
    replayer.sync(messages)
    return replayer.game("g1")


class TestTicTacToeFold:
    def test_creator_is_x_and_moves_first(self):
        state = replay([ttt("s", "alice", "bob", 0, action=GameAction.START)])
        assert state.x_player == "alice"
        assert state.o_player == "bob"
        assert state.turn_of("alice")
        assert not state.turn_of("bob")

    def test_alternating_moves_to_a_win(self):
        state = replay([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("1", "alice", "bob", 1, index=0),
            ttt("2", "bob", "alice", 2, index=3),
            ttt("3", "alice", "bob", 3, index=1),
            ttt("4", "bob", "alice", 4, index=4),
            ttt("5", "alice", "bob", 5, index=2),
        ])
        assert state.result == "X"
        assert state.winner_id == "alice"
        assert state.is_over

    def test_out_of_turn_move_is_ignored(self):
        """bob cannot move first."""
        state = replay([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("1", "bob", "alice", 1, index=4),
        ])
        assert state.board[4] is None
        assert state.current == "X"

    def test_occupied_and_out_of_range_cells_are_ignored(self):
        state = replay([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("1", "alice", "bob", 1, index=0),
            ttt("2", "bob", "alice", 2, index=0),
            ttt("3", "bob", "alice", 3, index=9),
            ttt("4", "bob", "alice", 4, index=-1),
        ])
        assert state.board[0] == "X"
        assert state.current == "O"

    def test_moves_after_result_are_ignored(self):
        state = replay([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("r", "bob", "alice", 1, action=GameAction.RESULT, outcome="resign"),
            ttt("1", "alice", "bob", 2, index=0),
        ])
        assert state.result == "X"
        assert state.resigned_by == "bob"
        assert state.board[0] is None

    def test_moves_by_outsiders_are_ignored(self):
        state = replay([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("1", "carol", "alice", 1, index=0),
        ])
        assert state.board == [None] * 9
