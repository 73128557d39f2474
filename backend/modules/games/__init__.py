"""
Embedded turn-based game protocol.

Games travel as game_event direct messages and are reconstructed on each
peer by replaying those messages.

Public API:
- GameService: validated start / move / choose / resign
- GameReplayer: cached per-game folds over a message log
- check_winner, resolve_round: the rule tables both peers share
"""

from .codec import decode_game_message, encode_game_payload
from .models import GameAction, GameEvent, GameOutcome, GamePayload, GameType, RpsChoice
from .replay import GameReplayer, GameState
from .rps import RpsState, resolve_round
from .service import GameService
from .tictactoe import TicTacToeState, check_winner
from .exceptions import (
    AlreadyChoseError,
    CellTakenError,
    GameNotFoundError,
    GameOverError,
    InvalidMoveError,
    NotYourTurnError,
)

__all__ = [
    "GameService",
    "GameReplayer",
    "GameState",
    "GameAction",
    "GameEvent",
    "GameOutcome",
    "GamePayload",
    "GameType",
    "RpsChoice",
    "RpsState",
    "TicTacToeState",
    "check_winner",
    "resolve_round",
    "decode_game_message",
    "encode_game_payload",
    "AlreadyChoseError",
    "CellTakenError",
    "GameNotFoundError",
    "GameOverError",
    "InvalidMoveError",
    "NotYourTurnError",
]
