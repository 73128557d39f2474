"""
Encoding of game payloads inside direct messages.
"""

import logging
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from modules.messages.models import DirectMessage, MessageKind, MessagePayload
from .models import GameEvent, GamePayload

logger = logging.getLogger(__name__)


def encode_game_payload(payload: GamePayload) -> str:
    return payload.model_dump_json(by_alias=True, exclude_none=True)


def to_message_payload(payload: GamePayload) -> MessagePayload:
    return MessagePayload.game_event(encode_game_payload(payload))


def decode_game_message(message: DirectMessage) -> Optional[GameEvent]:
    """
    Decode the game payload of a game_event message.

    Returns None for any other kind and for malformed content.
    """
    if message.kind != MessageKind.GAME_EVENT:
        return None
    try:
        payload = GamePayload.model_validate_json(message.content)
    except ModelValidationError as e:
        logger.debug("Dropping malformed game payload in %s: %s", message.id, e.error_count())
        return None
    return GameEvent(
        payload=payload,
        message_id=message.id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        created_at=message.created_at,
    )
