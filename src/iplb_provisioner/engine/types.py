"""Engine types (changes, apply results)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NOOP = "no-op"


class ResourceChange(BaseModel):
    address: str
    resource_type: str
    action: Action
    prior: dict[str, Any] | None = None
    planned: dict[str, Any] | None = None
    diff: dict[str, Any] | None = None


def summarize(changes: list[ResourceChange]) -> dict[str, int]:
    counts = {a.value: 0 for a in Action}
    for c in changes:
        counts[c.action.value] += 1
    return counts


class ApplyResult(BaseModel):
    applied: list[ResourceChange] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return summarize(self.applied)
