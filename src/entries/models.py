"""Entry model: a single raw user-authored text record."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Entry(BaseModel):
    """A captured thought.

    ``title``, ``body`` and ``created_at`` are authored by the user and never
    change. ``tags``, ``mood``, ``is_processed``, ``processed_at`` and
    ``context`` are annotations written back after a tiered analysis.
    """

    id: str
    title: str | None = None
    body: str
    created_at: datetime
    tags: list[str] = Field(default_factory=list)
    mood: str | None = None
    is_processed: bool = False
    processed_at: datetime | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("created_at", "processed_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def text(self) -> str:
        """Title and body joined the way keyword matching sees them."""
        return f"{self.title or ''} {self.body}"
