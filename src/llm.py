"""Claude completion calls used by the analysis backend.

A completion goes to the Anthropic Messages API when ``ANTHROPIC_API_KEY``
is present, and to the local ``claude -p`` CLI otherwise. Setting
``SCATTERBRAIN_USE_CLI=1`` forces the CLI even when a key is available.
Whichever route is taken, failures surface as ``LLMError``.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass

import anthropic

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120
DEFAULT_MAX_TOKENS = 4096

MODEL_ALIASES: dict[str, str] = {
    "sonnet": "claude-sonnet-4-6",
    "haiku": "claude-haiku-4-5-20251001",
    "opus": "claude-opus-4-6",
}
DEFAULT_MODEL = MODEL_ALIASES["sonnet"]


class LLMError(Exception):
    """A completion could not be obtained."""


@dataclass(frozen=True)
class _Completion:
    system: str
    user: str
    model: str | None
    max_tokens: int
    timeout: int
    label: str

    @property
    def combined_prompt(self) -> str:
        return f"{self.system}\n\n{self.user}"


def resolve_model(model: str | None) -> str:
    """Expand ``sonnet``/``haiku``/``opus`` to a model id; pass others through."""
    if model is None:
        return DEFAULT_MODEL
    return MODEL_ALIASES.get(model, model)


def _prefer_cli() -> bool:
    return os.environ.get("SCATTERBRAIN_USE_CLI", "").strip() == "1"


def _api_key() -> str:
    return os.environ.get("ANTHROPIC_API_KEY", "").strip()


def _complete_via_api(req: _Completion, api_key: str) -> str:
    model = resolve_model(req.model)
    logger.debug("Anthropic completion %s model=%s max_tokens=%d", req.label, model, req.max_tokens)

    request: dict[str, object] = {
        "model": model,
        "max_tokens": req.max_tokens,
        "messages": [{"role": "user", "content": req.user}],
    }
    if req.system.strip():
        request["system"] = req.system

    client = anthropic.Anthropic(api_key=api_key, timeout=req.timeout)
    try:
        response = client.messages.create(**request)  # type: ignore[arg-type]
    except anthropic.APIError as exc:
        raise LLMError(f"Anthropic API failed (label={req.label}): {exc}") from exc

    text = "".join(block.text for block in response.content if block.type == "text").strip()
    if not text:
        raise LLMError(f"Anthropic API returned empty response (label={req.label})")
    return text


def _complete_via_cli(req: _Completion) -> str:
    cmd = ["claude", "-p"]
    if req.model:
        cmd += ["--model", req.model]
    # A nested CLI refuses to start while CLAUDECODE is set
    env = {key: value for key, value in os.environ.items() if key != "CLAUDECODE"}

    logger.debug("claude -p completion %s", req.label)
    try:
        proc = subprocess.run(
            cmd,
            input=req.combined_prompt,
            capture_output=True,
            text=True,
            timeout=req.timeout,
            env=env,
        )
    except FileNotFoundError as exc:
        raise LLMError(f"Claude CLI not found on PATH (label={req.label})") from exc
    except subprocess.TimeoutExpired as exc:
        raise LLMError(f"Claude CLI timed out after {req.timeout}s (label={req.label})") from exc

    if proc.returncode != 0:
        raise LLMError(
            f"Claude CLI exited {proc.returncode} (label={req.label}): {proc.stderr[:500]}"
        )
    text = proc.stdout.strip()
    if not text:
        raise LLMError(f"Claude CLI returned empty output (label={req.label})")
    return text


def call_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    timeout: int = DEFAULT_TIMEOUT,
    label: str = "analysis",
) -> str:
    """Run one completion and return its stripped text.

    Args:
        system_prompt: Instructions for the model. Omitted when blank.
        user_prompt: The content to analyze.
        model: Alias or full model id.
        max_tokens: Output ceiling. Only the API route honours it.
        timeout: Seconds before the call is abandoned.
        label: Tag used in log lines and error messages.

    Raises:
        LLMError: The backend was unreachable, failed, or said nothing.
    """
    req = _Completion(system_prompt, user_prompt, model, max_tokens, timeout, label)
    api_key = _api_key()
    if api_key and not _prefer_cli():
        return _complete_via_api(req, api_key)
    return _complete_via_cli(req)


_FENCED_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def strip_json_fences(text: str) -> str:
    """Pull a JSON object out of a model reply.

    Prefers the body of a fenced block; otherwise takes the span from the
    first ``{`` to the last ``}``. Text with neither comes back stripped.
    """
    text = text.strip()
    fenced = _FENCED_RE.search(text)
    if fenced:
        return fenced.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text
