"""Generative backend seam.

The engine only needs ``complete(payload) -> str``. ``ClaudeBackend``
satisfies it with the shared Claude caller, run in a worker thread so the
awaiting task stays cancellable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from scatterbrain.errors import GenerationBackendError
from scatterbrain.intelligence.models import InstructionPayload
from scatterbrain.llm import LLMError, call_claude

logger = logging.getLogger(__name__)


class GenerativeBackend(Protocol):
    async def complete(self, payload: InstructionPayload) -> str:
        """Return the raw text produced for ``payload``.

        Raises:
            GenerationBackendError: If the backend is unreachable or fails.
        """
        ...


class ClaudeBackend:
    """Runs instructions through Claude (Anthropic API or ``claude -p``)."""

    def __init__(self, model: str | None = None, timeout: int = 120) -> None:
        self._model = model
        self._timeout = timeout

    async def complete(self, payload: InstructionPayload) -> str:
        try:
            return await asyncio.to_thread(
                call_claude,
                payload.system_prompt,
                payload.user_prompt,
                model=self._model,
                max_tokens=payload.max_tokens,
                timeout=self._timeout,
                label=f"analysis-{payload.tier}",
            )
        except LLMError as exc:
            logger.warning("Generative backend failed for %s tier: %s", payload.tier, exc)
            raise GenerationBackendError(str(exc)) from exc
