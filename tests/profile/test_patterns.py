"""Tests for keyword tables and TOML overrides."""

from datetime import UTC, datetime

import pytest
from scatterbrain.profile.models import Tone
from scatterbrain.profile.patterns import DEFAULT_TABLES, KeywordTables, load_tables
from scatterbrain.profile.services import build_profile, match_categories

NOW = datetime(2026, 3, 1, tzinfo=UTC)


class TestDefaultTables:
    def test_seven_categories(self):
        assert sorted(DEFAULT_TABLES.categories) == [
            "business",
            "creative",
            "fitness",
            "gaming",
            "lifestyle",
            "music",
            "technology",
        ]

    def test_every_tone_has_words(self):
        for tone in Tone:
            assert DEFAULT_TABLES.tone_words(tone)

    def test_lifestyle_has_no_expert_terms(self):
        assert DEFAULT_TABLES.categories["lifestyle"].expert_terms == ()


class TestLoadTables:
    def test_none_returns_defaults(self):
        assert load_tables(None) is DEFAULT_TABLES
        assert load_tables("") is DEFAULT_TABLES

    def test_custom_categories(self, tmp_path):
        path = tmp_path / "tables.toml"
        path.write_text(
            "[categories.cooking]\n"
            'keywords = ["sourdough", "recipe"]\n'
            'forums = ["r/Breadit"]\n'
            'content_formats = ["recipe_card"]\n'
            'expert_terms = ["hydration", "autolyse"]\n'
        )
        tables = load_tables(path)
        assert list(tables.categories) == ["cooking"]
        # Tones were omitted, so the defaults remain
        assert tables.tones == DEFAULT_TABLES.tones
        assert match_categories("new sourdough recipe", tables) == {
            "cooking": ["sourdough", "recipe"]
        }

        profile = build_profile(
            [{"id": "1", "body": "sourdough hydration and autolyse", "created_at": NOW}],
            tables,
            now=NOW,
        )
        assert profile.top_interest == "cooking"
        assert profile.expertise_level["cooking"] == "expert"
        assert profile.recommended_sources.forums == ["r/Breadit"]

    def test_custom_tones(self, tmp_path):
        path = tmp_path / "tables.toml"
        path.write_text('[tones]\nanalytical = ["hypothesis"]\n')
        tables = load_tables(path)
        assert tables.tone_words(Tone.ANALYTICAL) == ("hypothesis",)
        assert tables.tone_words(Tone.CASUAL) == ()

    def test_missing_file_falls_back(self, tmp_path, caplog):
        assert load_tables(tmp_path / "nope.toml") is DEFAULT_TABLES
        assert "Failed to load keyword tables" in caplog.text

    def test_invalid_toml_falls_back(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[categories\nnope")
        assert load_tables(path) is DEFAULT_TABLES

    def test_invalid_shape_falls_back(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[categories.cooking]\nforums = ["r/Breadit"]\n')
        assert load_tables(path) is DEFAULT_TABLES


class TestKeywordTablesFrozen:
    def test_tables_are_immutable(self):
        tables = KeywordTables()
        with pytest.raises(ValueError):
            tables.categories = {}  # type: ignore[misc]

    def test_default_mappings_reject_item_assignment(self):
        music = DEFAULT_TABLES.categories["music"]
        with pytest.raises(TypeError):
            DEFAULT_TABLES.categories["injected"] = music  # type: ignore[index]
        with pytest.raises(TypeError):
            DEFAULT_TABLES.tones[Tone.CASUAL] = ("yo",)  # type: ignore[index]
        assert "injected" not in DEFAULT_TABLES.categories
        assert "injected" not in KeywordTables().categories

    def test_loaded_mappings_are_read_only(self, tmp_path):
        path = tmp_path / "tables.toml"
        path.write_text('[categories.cooking]\nkeywords = ["recipe"]\n')
        tables = load_tables(path)
        with pytest.raises(TypeError):
            del tables.categories["cooking"]  # type: ignore[attr-defined]
        assert list(tables.model_dump()["categories"]) == ["cooking"]
