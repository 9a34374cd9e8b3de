from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.timestamps import parse_timestamp


class ConversationMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = Field(default="unknown")
    content: str = Field(default="")

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "unknown"
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, list):
            # Structured content parts, e.g. [{"type": "text", "text": "..."}]
            texts: List[str] = []
            for part in value:
                if isinstance(part, str):
                    texts.append(part)
                elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
                    texts.append(part["text"])
                else:
                    raise ValueError("unsupported message content part")
            return "\n".join(texts)
        return value


class ConversationRecord(BaseModel):
    """One conversation row read from the source application's database."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None)
    updated_at: datetime
    title: Optional[str] = Field(default=None)
    messages: List[ConversationMessage] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, bytes)) and not isinstance(value, bool):
            return value.decode("utf-8") if isinstance(value, bytes) else str(value)
        return value

    @field_validator("updated_at", mode="before")
    @classmethod
    def _parse_updated_at(cls, value: Any) -> Any:
        if isinstance(value, (str, datetime)):
            return parse_timestamp(value)
        return value

    @field_validator("messages", mode="before")
    @classmethod
    def _decode_messages(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (bytes, str)):
            if not value.strip():
                return []
            return json.loads(value)
        return value

    @classmethod
    def from_row(
        cls,
        row: Mapping[str, Any],
        *,
        id_column: str = "id",
        updated_column: str = "updated_at",
        messages_column: str = "messages",
    ) -> "ConversationRecord":
        """Build a record from a ``sqlite3.Row`` using the configured column names."""

        data = {key: row[key] for key in row.keys()}
        return cls.model_validate(
            {
                **data,
                "id": data.get(id_column),
                "updated_at": data.get(updated_column),
                "messages": data.get(messages_column),
            }
        )


__all__ = ["ConversationMessage", "ConversationRecord"]
