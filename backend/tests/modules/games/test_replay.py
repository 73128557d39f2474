"""Tests for modules/games/replay.py."""

from modules.games.models import GameAction, GameType
from modules.games.replay import GameReplayer
from modules.messages.models import MessageKind

from tests.fakes import make_message, rps, ttt


class TestGrouping:
    def test_games_are_independent(self):
        """Moves of one game_id never touch another."""
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([
            ttt("s1", "alice", "bob", 0, game_id="g1", action=GameAction.START),
            ttt("s2", "bob", "alice", 1, game_id="g2", action=GameAction.START),
            ttt("m1", "alice", "bob", 2, game_id="g1", index=4),
        ])
        assert replayer.game("g1").board[4] == "X"
        assert replayer.game("g2").board == [None] * 9
        assert replayer.game("g2").x_player == "bob"

    def test_malformed_and_plain_messages_are_skipped(self):
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            make_message("junk", "bob", "alice", seconds=1, content="{broken", kind=MessageKind.GAME_EVENT),
            make_message("text", "bob", "alice", seconds=2, content="nice move"),
            ttt("m", "alice", "bob", 3, index=0),
        ])
        assert replayer.game("g1").board[0] == "X"

    def test_moves_before_start_are_ignored(self):
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([ttt("m", "alice", "bob", 0, index=0)])
        assert replayer.game("g1") is None

    def test_fold_uses_created_at_not_list_order(self):
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([
            ttt("m", "alice", "bob", 2, index=0),
            ttt("s", "alice", "bob", 1, action=GameAction.START),
        ])
        assert replayer.game("g1").board[0] == "X"


class TestIncrementalCache:
    def test_newer_messages_apply_without_refold(self):
        replayer = GameReplayer(rounds_to_win=2)
        history = [ttt("s", "alice", "bob", 0, action=GameAction.START)]
        replayer.sync(history)
        assert replayer.refolds == 1

        history.append(ttt("m1", "alice", "bob", 1, index=0))
        replayer.sync(history)
        history.append(ttt("m2", "bob", "alice", 2, index=1))
        replayer.sync(history)

        assert replayer.refolds == 1
        assert replayer.game("g1").board[:2] == ["X", "O"]

    def test_older_arrival_forces_refold(self):
        replayer = GameReplayer(rounds_to_win=2)
        history = [
            ttt("s", "alice", "bob", 0, action=GameAction.START),
            ttt("m2", "bob", "alice", 2, index=1),
        ]
        replayer.sync(history)
        # bob's move was out of turn until alice's earlier move shows up.
        assert replayer.game("g1").board[1] is None

        history.append(ttt("m1", "alice", "bob", 1, index=0))
        replayer.sync(history)

        assert replayer.refolds == 2
        assert replayer.game("g1").board[:2] == ["X", "O"]

    def test_removed_message_forces_refold(self):
        """A rolled-back optimistic move disappears from the state."""
        replayer = GameReplayer(rounds_to_win=2)
        start = ttt("s", "alice", "bob", 0, action=GameAction.START)
        replayer.sync([start, ttt("temp-1", "alice", "bob", 1, index=0)])
        replayer.sync([start])
        assert replayer.game("g1").board[0] is None

    def test_cleared_conversation_drops_games(self):
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([ttt("s", "alice", "bob", 0, action=GameAction.START)])
        replayer.sync([])
        assert replayer.game("g1") is None

    def test_repeated_start_resets(self):
        """A later start for the same game_id supersedes the earlier one."""
        replayer = GameReplayer(rounds_to_win=2)
        history = [
            ttt("s1", "alice", "bob", 0, action=GameAction.START),
            ttt("m1", "alice", "bob", 1, index=0),
        ]
        replayer.sync(history)
        history.append(ttt("s2", "bob", "alice", 2, action=GameAction.START))
        replayer.sync(history)

        state = replayer.game("g1")
        assert state.board == [None] * 9
        assert state.x_player == "bob"


class TestCurrentSession:
    def test_latest_start_wins(self):
        """Concurrent starts resolve to the later one on both peers."""
        history = [
            rps("a", "alice", "bob", 5, game_id="from-alice", action=GameAction.START),
            rps("b", "bob", "alice", 6, game_id="from-bob", action=GameAction.START),
        ]
        mine, theirs = GameReplayer(rounds_to_win=2), GameReplayer(rounds_to_win=2)
        mine.sync(history)
        theirs.sync(list(reversed(history)))

        assert mine.current(GameType.RPS).game_id == "from-bob"
        assert theirs.current(GameType.RPS).game_id == "from-bob"

    def test_equal_timestamps_break_by_message_id(self):
        history = [
            ttt("b-msg", "bob", "alice", 5, game_id="g-b", action=GameAction.START),
            ttt("a-msg", "alice", "bob", 5, game_id="g-a", action=GameAction.START),
        ]
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync(history)
        assert replayer.current(GameType.TICTACTOE).game_id == "g-b"

    def test_filters_by_game_type(self):
        replayer = GameReplayer(rounds_to_win=2)
        replayer.sync([ttt("s", "alice", "bob", 0, action=GameAction.START)])
        assert replayer.current(GameType.RPS) is None
        assert replayer.current(GameType.TICTACTOE).game_id == "g1"
