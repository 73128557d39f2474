"""
Rock-paper-scissors rules and state fold.

There is no referee: both peers replay the same choices through the
same rule table and must reach the same scores.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .models import GameAction, GameEvent, GameOutcome, GameType, RpsChoice

BEATS = {
    RpsChoice.ROCK: RpsChoice.SCISSORS,
    RpsChoice.SCISSORS: RpsChoice.PAPER,
    RpsChoice.PAPER: RpsChoice.ROCK,
}

FIRST = "first"
SECOND = "second"
TIE = "tie"


def resolve_round(first: RpsChoice, second: RpsChoice) -> str:
    """Return "first", "second" or "tie"."""
    first, second = RpsChoice(first), RpsChoice(second)
    if first == second:
        return TIE
    return FIRST if BEATS[first] == second else SECOND


class RpsRound(BaseModel):
    first_choice: RpsChoice
    second_choice: RpsChoice
    outcome: str


class RpsState(BaseModel):
    """Replayed state of one best-of rock-paper-scissors session."""

    game_type: GameType = GameType.RPS
    game_id: str
    first_player: str = Field(..., description="Creator")
    second_player: str
    rounds_to_win: int = 2
    choices: dict[str, RpsChoice] = Field(default_factory=dict, description="Current round picks")
    scores: dict[str, int] = Field(default_factory=dict)
    rounds: list[RpsRound] = Field(default_factory=list)
    result: Optional[str] = Field(None, description="Winner id, or tie, once terminal")
    resigned_by: Optional[str] = None

    @classmethod
    def start(cls, event: GameEvent, rounds_to_win: int = 2) -> "RpsState":
        return cls(
            game_id=event.payload.game_id,
            first_player=event.sender_id,
            second_player=event.receiver_id,
            rounds_to_win=rounds_to_win,
            scores={event.sender_id: 0, event.receiver_id: 0},
        )

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def players(self) -> tuple[str, str]:
        return (self.first_player, self.second_player)

    @property
    def round_number(self) -> int:
        return len(self.rounds) + 1

    @property
    def last_round(self) -> Optional[RpsRound]:
        return self.rounds[-1] if self.rounds else None

    def has_chosen(self, user_id: str) -> bool:
        return user_id in self.choices

    def score_of(self, user_id: str) -> int:
        return self.scores.get(user_id, 0)

    def other(self, user_id: str) -> str:
        return self.second_player if user_id == self.first_player else self.first_player

    @property
    def winner_id(self) -> Optional[str]:
        return self.result if self.result in self.players else None

    def apply(self, event: GameEvent) -> bool:
        """Apply one choice or result. Returns False when the event is ignored."""
        payload = event.payload
        sender = event.sender_id
        if self.is_over or payload.game_type != self.game_type or sender not in self.players:
            return False

        if payload.action == GameAction.RESULT:
            if payload.outcome == GameOutcome.RESIGN:
                self.resigned_by = sender
                self.result = self.other(sender)
            else:
                self.result = TIE
            return True

        if payload.action != GameAction.CHOICE or payload.choice is None or sender in self.choices:
            return False

        self.choices[sender] = payload.choice
        if len(self.choices) == 2:
            self._resolve()
        return True

    def _resolve(self) -> None:
        first_choice = self.choices[self.first_player]
        second_choice = self.choices[self.second_player]
        outcome = resolve_round(first_choice, second_choice)
        self.rounds.append(RpsRound(first_choice=first_choice, second_choice=second_choice, outcome=outcome))
        self.choices = {}
        if outcome == TIE:
            return
        winner = self.first_player if outcome == FIRST else self.second_player
        self.scores[winner] = self.score_of(winner) + 1
        if self.scores[winner] >= self.rounds_to_win:
            self.result = winner
