"""
Game protocol data models.

A game move travels as the content of a game_event direct message. The
JSON keys are camelCase on the wire so rows written by older clients
still decode.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class GameType(str, Enum):
    TICTACTOE = "tictactoe"
    RPS = "rps"


class GameAction(str, Enum):
    START = "start"    # New session; sender takes the first-turn role
    MOVE = "move"      # Tic-tac-toe mark
    CHOICE = "choice"  # Rock-paper-scissors pick
    RESULT = "result"  # Resignation or agreed outcome


class RpsChoice(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class GameOutcome(str, Enum):
    """Outcomes a result payload may declare."""

    RESIGN = "resign"  # Sender forfeits
    TIE = "tie"        # Agreed draw


class GamePayload(BaseModel):
    """One state transition of an embedded game."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    game_type: GameType = Field(..., alias="gameType")
    game_id: str = Field(..., alias="gameId", min_length=1)
    action: GameAction
    index: Optional[int] = Field(None, description="Board cell 0-8 for moves")
    choice: Optional[RpsChoice] = None
    outcome: Optional[GameOutcome] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_moves(cls, data: Any) -> Any:
        # Older tic-tac-toe rows carry {"move": {"index": n}} and no action.
        if isinstance(data, dict) and "action" not in data and isinstance(data.get("move"), dict):
            data = {**data, "action": GameAction.MOVE.value, "index": data["move"].get("index")}
        if isinstance(data, dict) and data.get("gameId") is not None:
            data = {**data, "gameId": str(data["gameId"])}
        return data

    @model_validator(mode="after")
    def _check_fields(self) -> "GamePayload":
        if self.action == GameAction.MOVE and self.index is None:
            raise ValueError("move requires index")
        if self.action == GameAction.CHOICE and self.choice is None:
            raise ValueError("choice requires choice")
        if self.action == GameAction.RESULT and self.outcome is None:
            raise ValueError("result requires outcome")
        return self


class GameEvent(BaseModel):
    """A decoded payload together with the message that carried it."""

    payload: GamePayload
    message_id: str
    sender_id: str
    receiver_id: str
    created_at: datetime

    model_config = {"frozen": True}

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.message_id)

    @property
    def action(self) -> GameAction:
        return self.payload.action
