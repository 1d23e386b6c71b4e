"""Tests for the category registry."""

import json
from pathlib import Path

import pytest

from smaug.core.categories import (
    FALLBACK_KEY,
    UNCATEGORIZED_RULE,
    CategoryAction,
    CategoryRegistry,
    CategoryRule,
)
from smaug.core.exceptions import ConfigurationError


class TestCategoryRule:
    """Test CategoryRule."""

    def test_matches_url(self):
        rule = CategoryRule(key="article", match=("medium.com", "blog."))

        assert rule.matches_url("https://medium.com/@a/b")
        assert rule.matches_url("https://blog.example.com")
        assert not rule.matches_url("https://example.com")

    def test_no_patterns_never_match(self):
        assert not UNCATEGORIZED_RULE.matches_url("https://github.com")


class TestDefaultRegistry:
    """Test the built-in registry."""

    def test_contains_standard_keys(self, registry: CategoryRegistry):
        assert [rule.key for rule in registry] == [
            "github", "article", "youtube", "podcast", "tweet",
        ]
        assert len(registry) == 5

    def test_actions(self, registry: CategoryRegistry):
        assert registry.resolve("github").action == CategoryAction.FILE
        assert registry.resolve("article").action == CategoryAction.FILE
        assert registry.resolve("youtube").action == CategoryAction.TRANSCRIBE
        assert registry.resolve("podcast").action == CategoryAction.TRANSCRIBE
        assert registry.resolve("tweet").action == CategoryAction.CAPTURE

    def test_folders(self, registry: CategoryRegistry):
        assert registry.resolve("github").folder == "./knowledge/tools"
        assert registry.resolve("article").folder == "./knowledge/articles"
        assert registry.resolve("tweet").folder is None

    def test_resolve_is_total(self, registry: CategoryRegistry):
        assert registry.resolve("unknown").key == FALLBACK_KEY
        assert registry.resolve(None).key == FALLBACK_KEY

    def test_get_unknown_returns_none(self, registry: CategoryRegistry):
        assert registry.get("unknown") is None
        assert registry.get(None) is None

    def test_find_by_url(self, registry: CategoryRegistry):
        assert registry.find_by_url("https://github.com/a/b").key == "github"
        assert registry.find_by_url("https://youtu.be/x").key == "youtube"
        assert registry.find_by_url("https://example.com") is None
        assert registry.find_by_url("") is None


class TestCustomRegistry:
    """Test registries built from configuration."""

    def test_from_dict_defaults(self):
        registry = CategoryRegistry.from_dict({"misc": {}})
        rule = registry.resolve("misc")

        assert rule.action == CategoryAction.CAPTURE
        assert rule.match == ()
        assert rule.folder is None

    def test_fallback_without_tweet(self):
        registry = CategoryRegistry.from_dict({"github": {"action": "file"}})
        assert registry.fallback is UNCATEGORIZED_RULE
        assert registry.resolve("nope") is UNCATEGORIZED_RULE

    def test_invalid_action(self):
        with pytest.raises(ConfigurationError, match="invalid action"):
            CategoryRegistry.from_dict({"github": {"action": "archive"}})

    def test_match_must_be_list(self):
        with pytest.raises(ConfigurationError, match="match must be a list"):
            CategoryRegistry.from_dict({"github": {"match": "github.com"}})

    def test_rule_must_be_object(self):
        with pytest.raises(ConfigurationError):
            CategoryRegistry.from_dict({"github": "file"})

    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "categories.json"
        path.write_text(
            json.dumps(
                {"categories": {"docs": {"match": ["readthedocs.io"], "action": "file", "folder": "./docs"}}}
            )
        )

        registry = CategoryRegistry.from_file(path)

        assert "docs" in registry
        assert registry.find_by_url("https://x.readthedocs.io").key == "docs"

    def test_from_file_missing(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            CategoryRegistry.from_file(tmp_path / "missing.json")

    def test_from_file_invalid_json(self, tmp_path: Path):
        path = tmp_path / "categories.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            CategoryRegistry.from_file(path)
