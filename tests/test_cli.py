"""Smoke tests for the CLI."""

import json
import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from scatterbrain.cli import app
from scatterbrain.llm import LLMError

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

RESPONSE = json.dumps(
    {
        "summary": "Revenue thinking",
        "keyInsights": ["Focus on one segment"],
        "themes": ["revenue", "customers"],
        "mood": "focused",
    }
)


def _strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    return _ANSI_RE.sub("", text)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200", "ANTHROPIC_API_KEY": ""})


@pytest.fixture
def base_args(tmp_path: Path, monkeypatch) -> list[str]:
    """Global options pointing the CLI at an isolated data dir."""
    monkeypatch.chdir(tmp_path)
    for key in ("SCATTERBRAIN_DATA_DIR", "SCATTERBRAIN_USER", "SCATTERBRAIN_MAX_RECORDS"):
        monkeypatch.delenv(key, raising=False)
    return ["--data-dir", str(tmp_path / "data"), "--user", "alice"]


def _capture(runner: CliRunner, base_args: list[str], text: str) -> str:
    result = runner.invoke(app, [*base_args, "capture", text])
    assert result.exit_code == 0, result.output
    match = re.search(r"Captured (\w+)", _strip_ansi(result.output))
    assert match is not None
    return match.group(1)


class TestCLI:
    """Tests for the CLI entry point."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        output = _strip_ansi(result.output)
        for command in ("capture", "profile", "tier", "analyze", "insights"):
            assert command in output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "scatterbrain" in result.output

    def test_insights_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["insights", "--help"])
        assert result.exit_code == 0
        output = _strip_ansi(result.output)
        for command in ("list", "search", "star", "archive", "delete", "track"):
            assert command in output


class TestCaptureAndProfile:
    def test_capture_reports_progress(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "capture", "first thought"])
        assert result.exit_code == 0
        assert "Add 3 more thoughts" in _strip_ansi(result.output)

    def test_tier_after_four_entries(self, runner: CliRunner, base_args: list[str]) -> None:
        for i in range(4):
            _capture(runner, base_args, f"thought {i}")
        result = runner.invoke(app, [*base_args, "tier"])
        assert result.exit_code == 0
        output = _strip_ansi(result.output)
        assert "Enhanced Analysis" in output
        assert "4 thoughts" in output

    def test_profile_table(self, runner: CliRunner, base_args: list[str]) -> None:
        _capture(runner, base_args, "Our marketing plan should grow revenue")
        result = runner.invoke(app, [*base_args, "profile"])
        assert result.exit_code == 0
        output = _strip_ansi(result.output)
        assert "business" in output
        assert "Tone:" in output

    def test_profile_json(self, runner: CliRunner, base_args: list[str]) -> None:
        _capture(runner, base_args, "docker and kubernetes")
        result = runner.invoke(app, [*base_args, "profile", "--json"])
        assert result.exit_code == 0
        assert '"primary_interests"' in result.output

    def test_empty_profile(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "profile"])
        assert result.exit_code == 0
        assert "No interests detected yet" in _strip_ansi(result.output)


class TestAnalyze:
    @patch("scatterbrain.intelligence.backend.call_claude")
    def test_analyze_and_manage_insight(
        self, mock_call: MagicMock, runner: CliRunner, base_args: list[str]
    ) -> None:
        mock_call.return_value = RESPONSE
        entry_id = _capture(runner, base_args, "Which customer segment brings the most revenue?")

        result = runner.invoke(app, [*base_args, "analyze", entry_id])
        assert result.exit_code == 0, result.output
        output = _strip_ansi(result.output)
        assert "Basic Analysis" in output
        assert "Revenue thinking" in output
        insight_id = re.search(r"Saved (insight_\w+)", output).group(1)

        result = runner.invoke(app, [*base_args, "insights", "star", insight_id])
        assert "starred" in result.output

        result = runner.invoke(
            app, [*base_args, "insights", "track", insight_id, "task", "--note", "done"]
        )
        assert result.exit_code == 0
        assert "task recorded" in result.output

        result = runner.invoke(app, [*base_args, "insights", "search", "segment"])
        assert result.exit_code == 0
        assert "Insights (1)" in _strip_ansi(result.output)

        result = runner.invoke(app, [*base_args, "insights", "archive", insight_id])
        assert "archived" in result.output
        result = runner.invoke(app, [*base_args, "insights", "list"])
        assert "No insights found" in _strip_ansi(result.output)
        result = runner.invoke(app, [*base_args, "insights", "list", "--archived"])
        assert "Insights (1)" in _strip_ansi(result.output)
        result = runner.invoke(app, [*base_args, "insights", "track", insight_id, "social"])
        assert result.exit_code == 1
        assert "is archived" in _strip_ansi(result.output)

        result = runner.invoke(app, [*base_args, "insights", "delete", insight_id, "--yes"])
        assert result.exit_code == 0
        assert "deleted" in result.output

    @patch("scatterbrain.intelligence.backend.call_claude")
    def test_analyze_json(
        self, mock_call: MagicMock, runner: CliRunner, base_args: list[str]
    ) -> None:
        mock_call.return_value = RESPONSE
        entry_id = _capture(runner, base_args, "hello")
        result = runner.invoke(app, [*base_args, "analyze", entry_id, "--json", "--no-save"])
        assert result.exit_code == 0
        assert '"intelligence_level": "basic"' in result.output
        assert "Saved" not in result.output

    def test_analyze_missing_entry(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "analyze", "nope"])
        assert result.exit_code == 1
        assert "Entry not found" in _strip_ansi(result.output)

    @patch("scatterbrain.intelligence.backend.call_claude")
    def test_backend_error_exits_cleanly(
        self, mock_call: MagicMock, runner: CliRunner, base_args: list[str]
    ) -> None:
        mock_call.side_effect = LLMError("Claude CLI not found")
        entry_id = _capture(runner, base_args, "hello")
        result = runner.invoke(app, [*base_args, "analyze", entry_id])
        assert result.exit_code == 1
        assert "Claude CLI not found" in _strip_ansi(result.output)


class TestInsightsErrors:
    def test_star_unknown_insight(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "insights", "star", "insight_0_nope"])
        assert result.exit_code == 1
        assert "Insight not found" in _strip_ansi(result.output)

    def test_track_unknown_kind(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "insights", "track", "x", "email"])
        assert result.exit_code != 0

    def test_delete_requires_confirmation(self, runner: CliRunner, base_args: list[str]) -> None:
        result = runner.invoke(app, [*base_args, "insights", "delete", "x"], input="n\n")
        assert result.exit_code == 1
