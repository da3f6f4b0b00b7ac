"""Error taxonomy for the personalization engine.

Every failure surfaced to callers derives from ``ScatterbrainError`` so the
CLI (or any other host) can catch one type and present a message instead of
crashing.
"""

from __future__ import annotations


class ScatterbrainError(Exception):
    """Base error for all scatterbrain failures."""


# ---------------------------------------------------------------------------
# Generation (tiered analysis)
# ---------------------------------------------------------------------------


class GenerationError(ScatterbrainError):
    """A tiered analysis call failed. Callers may retry."""

    retryable = True


class GenerationBackendError(GenerationError):
    """The generative backend was unavailable or returned an error."""


class GenerationParseError(GenerationError):
    """The backend answered, but not with the structured shape we asked for."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


# ---------------------------------------------------------------------------
# Profile building
# ---------------------------------------------------------------------------


class ProfileBuildError(ScatterbrainError):
    """A single entry could not be used for profile building.

    Raised per entry and caught by the builder, which logs and skips it.
    """


# ---------------------------------------------------------------------------
# Local insight store
# ---------------------------------------------------------------------------


class StoreError(ScatterbrainError):
    """Base error for the local insight store."""


class StoreNotFoundError(StoreError, KeyError):
    """Operation referenced an insight id that does not exist."""

    def __init__(self, insight_id: str) -> None:
        super().__init__(insight_id)
        self.insight_id = insight_id

    def __str__(self) -> str:
        return f"Insight not found: {self.insight_id}"


class StoreWriteError(StoreError):
    """The storage substrate rejected a write (I/O failure, quota exhausted)."""


class InvalidTransitionError(StoreError):
    """The requested change is not a legal lifecycle transition."""
