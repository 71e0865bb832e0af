"""Cursor and page envelope shared by every list-returning operation."""
from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ItemT = TypeVar("ItemT")


class Cursor(BaseModel):
    """The ``(created_at, id)`` key of the last item of the previous page."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime
    id: str = Field(..., min_length=1)

    def encode(self) -> str:
        raw = self.model_dump_json().encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, token: str) -> "Cursor":
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.urlsafe_b64decode(padded.encode("ascii"))
            return cls.model_validate_json(raw)
        except (binascii.Error, UnicodeEncodeError, ValidationError) as exc:
            raise ValueError("Malformed pagination cursor") from exc


class Page(BaseModel, Generic[ItemT]):
    items: list[ItemT]
    next_cursor: Cursor | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


__all__ = ["Cursor", "Page"]
