"""Local insight store domain models.

A ``StoredInsight`` is what the user keeps: the text that was analyzed,
the generated payload, and the lifecycle flags and action log the UI
hangs off it. Records are replaced wholesale on every change, so a
reader holding one never sees it change underneath them.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActionKind(StrEnum):
    """Follow-up actions a user can take on an insight."""

    CALENDAR = "calendar"
    SOCIAL = "social"
    TASK = "task"
    FOLLOWUP = "followup"


class UserActions(BaseModel):
    """Append-only action log, one list per ``ActionKind``."""

    model_config = ConfigDict(frozen=True)

    calendar_events: list[dict[str, Any]] = Field(default_factory=list)
    shared_content: list[dict[str, Any]] = Field(default_factory=list)
    completed_tasks: list[dict[str, Any]] = Field(default_factory=list)
    follow_up_analyses: list[dict[str, Any]] = Field(default_factory=list)


# Which UserActions list each kind appends to
ACTION_FIELDS: dict[ActionKind, str] = {
    ActionKind.CALENDAR: "calendar_events",
    ActionKind.SOCIAL: "shared_content",
    ActionKind.TASK: "completed_tasks",
    ActionKind.FOLLOWUP: "follow_up_analyses",
}


class StoredInsight(BaseModel):
    """A persisted insight record."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_text: str
    generated_payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    starred: bool = False
    archived: bool = False
    themes: list[str] = Field(default_factory=list)
    search_terms: list[str] = Field(default_factory=list)
    user_actions: UserActions = Field(default_factory=UserActions)


class DateRange(BaseModel):
    """Inclusive ``created_at`` window."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> DateRange:
        if self.end < self.start:
            raise ValueError("date range end must not precede start")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class InsightFilters(BaseModel):
    """Query constraints, ANDed together. ``None`` means unconstrained.

    ``themes`` matches records carrying any of the listed themes.
    Archived records only appear when ``archived`` is True.
    """

    starred: bool | None = None
    archived: bool | None = None
    themes: list[str] | None = None
    date_range: DateRange | None = None
    limit: int | None = Field(default=None, ge=0)


class InsightUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied."""

    starred: bool | None = None
    archived: bool | None = None
    themes: list[str] | None = None
    generated_payload: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)
