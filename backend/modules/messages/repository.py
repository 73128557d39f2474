"""
Direct message repository for database access.

Encapsulates all Supabase queries and data mapping for the
direct_messages table. Rows written before the kind column existed are
classified once here; nothing else looks at content to decide a kind.
"""

import json
import logging
from datetime import datetime
from typing import Optional, Any

from shared.exceptions import FetchError
from shared.repository import BaseRepository
from .models import DirectMessage, MessageKind, MessagePayload

logger = logging.getLogger(__name__)


def pair_filter(first: str, second: str) -> str:
    """PostgREST or-filter matching both directions of a conversation."""
    return (
        f"and(sender_id.eq.{first},receiver_id.eq.{second}),"
        f"and(sender_id.eq.{second},receiver_id.eq.{first})"
    )


def classify_legacy_row(data: dict[str, Any]) -> MessageKind:
    """Infer the kind of a row that predates the kind column."""
    if data.get("voice_url"):
        return MessageKind.VOICE
    content = data.get("content") or ""
    if content.startswith("{"):
        try:
            decoded = json.loads(content)
        except ValueError:
            decoded = None
        if isinstance(decoded, dict) and ("gameType" in decoded or "game_type" in decoded):
            return MessageKind.GAME_EVENT
    if data.get("image_url"):
        return MessageKind.IMAGE
    return MessageKind.TEXT


def map_message_row(data: dict[str, Any]) -> DirectMessage:
    """Map a direct_messages row (from a query or a push event) to DirectMessage.

    Raises KeyError or ValueError (pydantic ValidationError included) for a
    row that cannot be read, such as an unknown kind.
    """
    raw_kind = data.get("kind")
    kind = MessageKind(raw_kind) if raw_kind else classify_legacy_row(data)
    return DirectMessage(
        id=str(data["id"]),
        sender_id=str(data["sender_id"]),
        receiver_id=str(data["receiver_id"]),
        content=data.get("content") or "",
        kind=kind,
        image_url=data.get("image_url"),
        voice_url=data.get("voice_url"),
        created_at=data["created_at"],
        read_at=data.get("read_at"),
    )


class MessageRepository(BaseRepository[DirectMessage]):
    """
    Repository for direct messages.

    Implements IMessageStore. Row Level Security limits every query to
    conversations the signed-in user takes part in.
    """

    async def list_conversation(self, self_id: str, peer_id: str) -> list[DirectMessage]:
        query = (
            self._db.table("direct_messages")
            .select("*")
            .or_(pair_filter(self_id, peer_id))
            .order("created_at")
        )
        result = await self._run(query, "load messages")
        return self._map_rows(result.data)

    async def insert(self, sender_id: str, receiver_id: str, payload: MessagePayload) -> DirectMessage:
        data = {
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "content": payload.content,
            "kind": payload.kind.value,
            "image_url": payload.image_url,
            "voice_url": payload.voice_url,
        }
        query = self._db.table("direct_messages").insert(data)
        result = await self._run(query, "send message", write=True)
        try:
            return map_message_row(result.data[0])
        except (KeyError, ValueError) as e:
            raise FetchError(
                f"Message was sent but could not be read back: {e}",
                code="UNREADABLE_MESSAGE",
                details={"operation": "send message"},
            ) from e

    async def mark_read(self, reader_id: str, sender_id: str, read_at: datetime) -> int:
        """Mark everything sender sent to reader as read. One batched update."""
        query = (
            self._db.table("direct_messages")
            .update({"read_at": read_at.isoformat()})
            .eq("sender_id", sender_id)
            .eq("receiver_id", reader_id)
            .is_("read_at", "null")
        )
        result = await self._run(query, "mark messages as read", write=True)
        return len(result.data or [])

    async def mark_all_read(self, reader_id: str, read_at: datetime) -> int:
        """Mark every unread message addressed to reader as read."""
        query = (
            self._db.table("direct_messages")
            .update({"read_at": read_at.isoformat()})
            .eq("receiver_id", reader_id)
            .is_("read_at", "null")
        )
        result = await self._run(query, "mark messages as read", write=True)
        return len(result.data or [])

    async def delete_conversation(self, self_id: str, peer_id: str) -> int:
        query = self._db.table("direct_messages").delete().or_(pair_filter(self_id, peer_id))
        result = await self._run(query, "clear conversation", write=True)
        return len(result.data or [])

    async def latest_between(self, self_id: str, peer_id: str) -> Optional[DirectMessage]:
        query = (
            self._db.table("direct_messages")
            .select("*")
            .or_(pair_filter(self_id, peer_id))
            .order("created_at", desc=True)
            .limit(1)
        )
        result = await self._run(query, "load latest message")
        messages = self._map_rows(result.data)
        return messages[0] if messages else None

    async def count_unread(self, reader_id: str) -> int:
        query = (
            self._db.table("direct_messages")
            .select("id", count="exact", head=True)
            .eq("receiver_id", reader_id)
            .is_("read_at", "null")
        )
        result = await self._run(query, "count unread messages")
        return result.count or 0

    @staticmethod
    def _map_rows(rows: list[dict[str, Any]]) -> list[DirectMessage]:
        """Map query rows, dropping any that cannot be read."""
        messages = []
        for row in rows or []:
            try:
                messages.append(map_message_row(row))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable message row %s: %s", row.get("id"), e)
        return messages
