"""Schemas reporting counter drift found by reconciliation."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CounterDrift(BaseModel):
    stored: int
    actual: int


class StatsDrift(BaseModel):
    subject: Literal["profile", "post"]
    subject_id: str
    counters: dict[str, CounterDrift] = Field(default_factory=dict)

    @property
    def drifted(self) -> bool:
        return bool(self.counters)


__all__ = ["CounterDrift", "StatsDrift"]
