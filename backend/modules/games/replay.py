"""
Game state reconstruction by replay.

Every game_event message of a conversation is decoded, grouped by
game_id and folded in (created_at, message id) order. Folded states are
cached per game: messages newer than the cached frontier are applied
incrementally, anything else (an older arrival, a removed or re-keyed
message, a repeated start) refolds that one game from scratch.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Union

from shared.config import get_settings
from modules.messages.models import DirectMessage

from .codec import decode_game_message
from .models import GameAction, GameEvent, GameType
from .rps import RpsState
from .tictactoe import TicTacToeState

logger = logging.getLogger(__name__)

GameState = Union[TicTacToeState, RpsState]


@dataclass
class _GameLine:
    """Cached fold of one game_id."""

    events: list[GameEvent] = field(default_factory=list)
    state: Optional[GameState] = None
    latest_start: Optional[tuple[datetime, str]] = None

    @property
    def ids(self) -> set[str]:
        return {e.message_id for e in self.events}

    @property
    def frontier(self) -> Optional[tuple[datetime, str]]:
        return self.events[-1].sort_key if self.events else None


class GameReplayer:
    """Replays game sessions out of one conversation's message log."""

    def __init__(self, rounds_to_win: Optional[int] = None):
        self._rounds_to_win = rounds_to_win or get_settings().rps_rounds_to_win
        self._lines: dict[str, _GameLine] = {}
        self.refolds = 0

    def sync(self, messages: Iterable[DirectMessage]) -> None:
        """Bring every cached game in line with the given message log."""
        grouped: dict[str, list[GameEvent]] = {}
        for message in messages:
            event = decode_game_message(message)
            if event is not None:
                grouped.setdefault(event.payload.game_id, []).append(event)

        for game_id in list(self._lines):
            if game_id not in grouped:
                del self._lines[game_id]

        for game_id, events in grouped.items():
            events.sort(key=lambda e: e.sort_key)
            line = self._lines.get(game_id)
            if line is None or not self._extend(line, events):
                self._lines[game_id] = self._fold(events)

    def game(self, game_id: str) -> Optional[GameState]:
        line = self._lines.get(game_id)
        return line.state if line else None

    def games(self, game_type: Optional[GameType] = None) -> list[GameState]:
        return [
            line.state for line in self._lines.values()
            if line.state is not None and (game_type is None or line.state.game_type == game_type)
        ]

    def current(self, game_type: GameType) -> Optional[GameState]:
        """
        The session whose latest start is newest.

        When both peers start at once, the later start wins and equal
        timestamps fall back to the message id, so both sides pick the
        same session.
        """
        candidates = [
            line for line in self._lines.values()
            if line.state is not None and line.state.game_type == game_type and line.latest_start
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda line: line.latest_start).state

    def _extend(self, line: _GameLine, events: list[GameEvent]) -> bool:
        """Apply only the new tail of events. False when a refold is needed."""
        known = line.ids
        current = {e.message_id for e in events}
        if not known <= current:
            return False
        fresh = [e for e in events if e.message_id not in known]
        if not fresh:
            return True
        frontier = line.frontier
        if line.state is None or any(
            e.action == GameAction.START or (frontier is not None and e.sort_key < frontier)
            for e in fresh
        ):
            return False
        for event in fresh:
            line.state.apply(event)
        line.events.extend(fresh)
        return True

    def _fold(self, events: list[GameEvent]) -> _GameLine:
        self.refolds += 1
        line = _GameLine(events=list(events))
        for event in events:
            if event.action == GameAction.START:
                line.state = self._initial(event)
                line.latest_start = event.sort_key
            elif line.state is None:
                logger.debug("Ignoring %s before start in game %s", event.action.value, event.payload.game_id)
            else:
                line.state.apply(event)
        return line

    def _initial(self, event: GameEvent) -> GameState:
        if event.payload.game_type == GameType.TICTACTOE:
            return TicTacToeState.start(event)
        return RpsState.start(event, rounds_to_win=self._rounds_to_win)
