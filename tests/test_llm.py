"""Tests for scatterbrain.llm: call_claude() and strip_json_fences()."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from scatterbrain.llm import LLMError, call_claude, resolve_model, strip_json_fences


def _api_response(*texts: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(type="text", text=t) for t in texts]
    return response


# ---------------------------------------------------------------------------
# call_claude: Anthropic API path
# ---------------------------------------------------------------------------


@patch.dict("os.environ", {"ANTHROPIC_API_KEY": "sk-test", "SCATTERBRAIN_USE_CLI": ""})
class TestCallClaudeAPI:
    """Tests for the Anthropic API path in call_claude()."""

    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_api_returns_text(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        client.messages.create.return_value = _api_response("  Hello ", "from API  ")

        assert call_claude("sys", "usr") == "Hello from API"

    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_api_passes_model_and_max_tokens(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        client.messages.create.return_value = _api_response("ok")

        call_claude("sys", "usr", model="haiku", max_tokens=1500)

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == resolve_model("haiku")
        assert kwargs["max_tokens"] == 1500
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "usr"}]

    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_blank_system_prompt_omitted(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        client.messages.create.return_value = _api_response("ok")

        call_claude("   ", "usr")

        assert "system" not in client.messages.create.call_args.kwargs

    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_empty_response_raises_llm_error(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        client.messages.create.return_value = _api_response("   ")

        with pytest.raises(LLMError, match="empty response"):
            call_claude("sys", "usr", label="empty")

    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_api_error_wrapped(self, mock_client_cls: MagicMock) -> None:
        client = mock_client_cls.return_value
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.messages.create.side_effect = anthropic.APIConnectionError(request=request)

        with pytest.raises(LLMError, match="label=analysis-basic") as exc_info:
            call_claude("sys", "usr", label="analysis-basic")
        assert isinstance(exc_info.value.__cause__, anthropic.APIError)

    @patch.dict("os.environ", {"SCATTERBRAIN_USE_CLI": "1"})
    @patch("scatterbrain.llm.subprocess.run")
    @patch("scatterbrain.llm.anthropic.Anthropic")
    def test_use_cli_forces_subprocess(
        self, mock_client_cls: MagicMock, mock_run: MagicMock
    ) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="from cli", stderr="")

        assert call_claude("sys", "usr") == "from cli"
        mock_client_cls.assert_not_called()


# ---------------------------------------------------------------------------
# call_claude: subprocess path
# ---------------------------------------------------------------------------


@patch.dict("os.environ", {"ANTHROPIC_API_KEY": ""})
class TestCallClaudeSubprocess:
    """Tests for the subprocess fallback in call_claude()."""

    @patch("scatterbrain.llm.subprocess.run")
    def test_successful_call(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="  Hello from Claude  \n",
            stderr="",
        )
        result = call_claude("system prompt", "user prompt")
        assert result == "Hello from Claude"

        args, kwargs = mock_run.call_args
        assert args[0] == ["claude", "-p"]
        assert kwargs["input"] == "system prompt\n\nuser prompt"
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == 120

    @patch("scatterbrain.llm.subprocess.run")
    def test_model_parameter(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="ok", stderr="")
        call_claude("sys", "usr", model="haiku")

        args, _kwargs = mock_run.call_args
        assert args[0] == ["claude", "-p", "--model", "haiku"]

    @patch("scatterbrain.llm.subprocess.run")
    def test_file_not_found_raises_llm_error(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("claude not found")

        with pytest.raises(LLMError, match="Claude CLI not found") as exc_info:
            call_claude("sys", "usr", label="test-label")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    @patch("scatterbrain.llm.subprocess.run")
    def test_timeout_raises_llm_error(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="claude", timeout=5)

        with pytest.raises(LLMError, match="timed out after 5s"):
            call_claude("sys", "usr", timeout=5)

    @patch("scatterbrain.llm.subprocess.run")
    def test_nonzero_exit_includes_stderr(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="rate limited")

        with pytest.raises(LLMError, match="rate limited"):
            call_claude("sys", "usr")

    @patch("scatterbrain.llm.subprocess.run")
    def test_empty_output_raises(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="  \n", stderr="")

        with pytest.raises(LLMError, match="empty output"):
            call_claude("sys", "usr")

    @patch.dict("os.environ", {"CLAUDECODE": "1"})
    @patch("scatterbrain.llm.subprocess.run")
    def test_claudecode_env_filtered(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="ok", stderr="")
        call_claude("sys", "usr")

        _args, kwargs = mock_run.call_args
        assert "CLAUDECODE" not in kwargs["env"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestResolveModel:
    def test_alias(self) -> None:
        assert resolve_model("sonnet").startswith("claude-sonnet")

    def test_full_id_passthrough(self) -> None:
        assert resolve_model("claude-custom-1") == "claude-custom-1"

    def test_none_uses_default(self) -> None:
        assert resolve_model(None) == resolve_model("sonnet")


class TestStripJsonFences:
    """Tests for strip_json_fences()."""

    def test_plain_json_object(self) -> None:
        assert strip_json_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fenced_block(self) -> None:
        assert strip_json_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_generic_fenced_block(self) -> None:
        assert strip_json_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_mixed_content_with_json_object(self) -> None:
        text = 'Here is the analysis:\n{"summary": "x"}\nHope that helps!'
        assert strip_json_fences(text) == '{"summary": "x"}'

    def test_no_json_returns_original(self) -> None:
        assert strip_json_fences("  no json here  ") == "no json here"
