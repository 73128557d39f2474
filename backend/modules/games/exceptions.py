"""
Game protocol exceptions.

All of them are raised before anything is sent.
"""

from shared.exceptions import NotFoundError, ValidationError


class GameNotFoundError(NotFoundError):
    def __init__(self, game_id: str):
        super().__init__(
            f"Game not found: {game_id}",
            code="GAME_NOT_FOUND",
            details={"game_id": game_id},
        )


class GameOverError(ValidationError):
    def __init__(self, game_id: str):
        super().__init__(
            "This game is already over",
            code="GAME_OVER",
            details={"game_id": game_id},
        )


class NotYourTurnError(ValidationError):
    def __init__(self, game_id: str):
        super().__init__(
            "Wait for your friend to move",
            code="NOT_YOUR_TURN",
            details={"game_id": game_id},
        )


class CellTakenError(ValidationError):
    def __init__(self, game_id: str, index: int):
        super().__init__(
            f"Cell {index} is already taken",
            code="CELL_TAKEN",
            details={"game_id": game_id, "index": index},
        )


class AlreadyChoseError(ValidationError):
    def __init__(self, game_id: str):
        super().__init__(
            "You already chose this round",
            code="ALREADY_CHOSE",
            details={"game_id": game_id},
        )


class InvalidMoveError(ValidationError):
    def __init__(self, message: str, game_id: str):
        super().__init__(message, code="INVALID_MOVE", details={"game_id": game_id})
