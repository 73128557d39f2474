"""
Game service.

Validates a game action against the locally replayed state and sends it
through the conversation's message engine. Nothing here writes game
state directly; every peer derives it from the messages.
"""

import logging
import uuid
from typing import Optional

from modules.messages.engine import MessageSyncEngine
from modules.messages.models import DirectMessage

from .codec import to_message_payload
from .models import GameAction, GameOutcome, GamePayload, GameType, RpsChoice
from .replay import GameReplayer, GameState
from .rps import RpsState
from .tictactoe import TicTacToeState
from .exceptions import (
    AlreadyChoseError,
    CellTakenError,
    GameNotFoundError,
    GameOverError,
    InvalidMoveError,
    NotYourTurnError,
)

logger = logging.getLogger(__name__)


class GameService:
    """Games played inside one conversation."""

    def __init__(self, engine: MessageSyncEngine, replayer: Optional[GameReplayer] = None):
        self._engine = engine
        self._replayer = replayer or GameReplayer()

    @property
    def self_id(self) -> str:
        return self._engine.self_id

    def refresh(self) -> None:
        self._replayer.sync(self._engine.messages)

    def current(self, game_type: GameType) -> Optional[GameState]:
        self.refresh()
        return self._replayer.current(game_type)

    def game(self, game_id: str) -> GameState:
        self.refresh()
        state = self._replayer.game(game_id)
        if state is None:
            raise GameNotFoundError(game_id)
        return state

    async def start(self, game_type: GameType) -> str:
        """Start a new session with self as creator. Returns its game_id."""
        game_id = uuid.uuid4().hex
        await self._send(GamePayload(game_type=game_type, game_id=game_id, action=GameAction.START))
        logger.info("Started %s game %s", game_type.value, game_id)
        return game_id

    async def move(self, game_id: str, index: int) -> DirectMessage:
        """Place self's mark on a tic-tac-toe cell."""
        state = self._playable(game_id, GameType.TICTACTOE)
        if not isinstance(state, TicTacToeState):
            raise InvalidMoveError(f"Game {game_id} has no tic-tac-toe board", game_id)
        if not 0 <= index < 9:
            raise InvalidMoveError(f"Cell {index} is off the board", game_id)
        if not state.turn_of(self.self_id):
            raise NotYourTurnError(game_id)
        if state.board[index]:
            raise CellTakenError(game_id, index)
        return await self._send(
            GamePayload(game_type=GameType.TICTACTOE, game_id=game_id, action=GameAction.MOVE, index=index)
        )

    async def choose(self, game_id: str, choice: RpsChoice) -> DirectMessage:
        """Submit self's pick for the current rock-paper-scissors round."""
        state = self._playable(game_id, GameType.RPS)
        if not isinstance(state, RpsState):
            raise InvalidMoveError(f"Game {game_id} has no rock-paper-scissors round", game_id)
        if state.has_chosen(self.self_id):
            raise AlreadyChoseError(game_id)
        return await self._send(
            GamePayload(game_type=GameType.RPS, game_id=game_id, action=GameAction.CHOICE, choice=RpsChoice(choice))
        )

    async def resign(self, game_id: str) -> DirectMessage:
        state = self._playable(game_id)
        return await self._send(
            GamePayload(
                game_type=state.game_type,
                game_id=game_id,
                action=GameAction.RESULT,
                outcome=GameOutcome.RESIGN,
            )
        )

    def _playable(self, game_id: str, game_type: Optional[GameType] = None) -> GameState:
        state = self.game(game_id)
        if game_type is not None and state.game_type != game_type:
            raise InvalidMoveError(f"Game {game_id} is not {game_type.value}", game_id)
        if self.self_id not in state.players:
            raise InvalidMoveError("You are not playing this game", game_id)
        if state.is_over:
            raise GameOverError(game_id)
        return state

    async def _send(self, payload: GamePayload) -> DirectMessage:
        return await self._engine.send_message(to_message_payload(payload))
