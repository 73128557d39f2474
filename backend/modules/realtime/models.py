"""
Push channel data models.

Normalizes the platform's postgres_changes payloads into ChangeEvent so
nothing above this module depends on the wire shape.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    """Row change kinds delivered by the push channel."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """One row change pushed by the platform."""

    type: ChangeType
    table: str
    record: dict[str, Any] = Field(default_factory=dict, description="Row after the change")
    old_record: dict[str, Any] = Field(default_factory=dict, description="Row before the change")

    @property
    def row(self) -> dict[str, Any]:
        """The most relevant row image: new for insert/update, old for delete."""
        return self.old_record if self.type == ChangeType.DELETE else self.record

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ChangeEvent"]:
        """
        Build an event from a raw postgres_changes payload.

        Accepts both the nested form ({"data": {"type", "table", "record",
        "old_record"}}) and the flat form ({"eventType", "table", "new",
        "old"}). Returns None when the payload is not a row change.
        """
        if not isinstance(payload, dict):
            return None
        data = payload.get("data", payload)
        if not isinstance(data, dict):
            return None

        raw_type = data.get("type") or data.get("eventType")
        try:
            change_type = ChangeType(str(raw_type).upper())
        except ValueError:
            return None

        record = data.get("record") if "record" in data else data.get("new")
        old_record = data.get("old_record") if "old_record" in data else data.get("old")
        return cls(
            type=change_type,
            table=str(data.get("table", "")),
            record=record or {},
            old_record=old_record or {},
        )


class ChangeBinding(BaseModel):
    """Which row changes a subscription wants."""

    table: str
    event: str = Field(default="*", description="INSERT, UPDATE, DELETE or *")
    filter: Optional[str] = Field(None, description="Single-column filter, e.g. receiver_id=eq.<id>")
    schema_name: str = "public"

    model_config = {"frozen": True}

    @classmethod
    def eq(cls, table: str, column: str, value: str, event: str = "*") -> "ChangeBinding":
        return cls(table=table, event=event, filter=f"{column}=eq.{value}")
