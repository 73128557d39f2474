"""
Tic-tac-toe rules and state fold.

The creator (sender of the start message) plays X and moves first.
Anything that is not a legal move for the current state is ignored so a
bad or duplicated message can never break replay.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from .models import GameAction, GameEvent, GameOutcome, GameType

logger = logging.getLogger(__name__)

LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

TIE = "tie"


def check_winner(board: list[Optional[str]]) -> Optional[str]:
    """
    Return "X" or "O" for a completed line, "tie" for a full board
    without one, and None while the game is still open.
    """
    for a, b, c in LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    if all(board):
        return TIE
    return None


class TicTacToeState(BaseModel):
    """Replayed state of one tic-tac-toe session."""

    game_type: GameType = GameType.TICTACTOE
    game_id: str
    x_player: str = Field(..., description="Creator, moves first")
    o_player: str
    board: list[Optional[str]] = Field(default_factory=lambda: [None] * 9)
    current: str = "X"
    result: Optional[str] = Field(None, description="X, O or tie once terminal")
    resigned_by: Optional[str] = None

    @classmethod
    def start(cls, event: GameEvent) -> "TicTacToeState":
        return cls(
            game_id=event.payload.game_id,
            x_player=event.sender_id,
            o_player=event.receiver_id,
        )

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def players(self) -> tuple[str, str]:
        return (self.x_player, self.o_player)

    def mark_of(self, user_id: str) -> Optional[str]:
        if user_id == self.x_player:
            return "X"
        if user_id == self.o_player:
            return "O"
        return None

    def player_for(self, mark: str) -> str:
        return self.x_player if mark == "X" else self.o_player

    def turn_of(self, user_id: str) -> bool:
        return not self.is_over and self.mark_of(user_id) == self.current

    @property
    def winner_id(self) -> Optional[str]:
        if self.result in ("X", "O"):
            return self.player_for(self.result)
        return None

    def apply(self, event: GameEvent) -> bool:
        """Apply one move or result. Returns False when the event is ignored."""
        payload = event.payload
        if self.is_over or payload.game_type != self.game_type:
            return False
        mark = self.mark_of(event.sender_id)
        if mark is None:
            return False

        if payload.action == GameAction.RESULT:
            if payload.outcome == GameOutcome.RESIGN:
                self.resigned_by = event.sender_id
                self.result = "O" if mark == "X" else "X"
            else:
                self.result = TIE
            return True

        if payload.action != GameAction.MOVE:
            return False
        index = payload.index
        if mark != self.current or index is None or not 0 <= index < 9 or self.board[index]:
            logger.debug("Ignoring illegal move %s in game %s", index, self.game_id)
            return False

        self.board[index] = mark
        self.result = check_winner(self.board)
        self.current = "O" if mark == "X" else "X"
        return True
