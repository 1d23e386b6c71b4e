"""Tests for bookmark data model."""

from dataclasses import FrozenInstanceError

import pytest

from smaug.core.bookmark import Bookmark, Link, ProcessingResult, ReasoningResult


def _make_bookmark(**kwargs) -> Bookmark:
    """Helper to create a bookmark with defaults."""
    defaults = {
        "id": "123456789",
        "author": "testuser",
        "text": "Test tweet",
        "date": "2026-01-15",
        "tweet_url": "https://x.com/testuser/status/123456789",
    }
    defaults.update(kwargs)
    return Bookmark(**defaults)


class TestBookmark:
    """Tests for Bookmark."""

    def test_defaults(self):
        bookmark = _make_bookmark()

        assert bookmark.links == ()
        assert bookmark.tags == ()
        assert bookmark.reply_context is None
        assert bookmark.quote_context is None
        assert bookmark.primary_link is None

    def test_lists_stored_as_tuples(self):
        bookmark = _make_bookmark(
            links=[Link(expanded="https://a.test"), Link(expanded="https://b.test")],
            tags=["x"],
        )

        assert isinstance(bookmark.links, tuple)
        assert bookmark.tags == ("x",)
        assert bookmark.primary_link.expanded == "https://a.test"

    def test_immutable(self):
        bookmark = _make_bookmark()

        with pytest.raises(FrozenInstanceError):
            bookmark.text = "changed"


class TestReasoningResult:
    """Tests for ReasoningResult."""

    def test_defaults(self):
        result = ReasoningResult(title="T", summary="S")

        assert result.tags == []
        assert result.category == ""


class TestProcessingResult:
    """Tests for ProcessingResult."""

    def test_file_path_optional(self):
        result = ProcessingResult(id="1", title="T", slug="t-1", category="tweet")
        assert result.file_path is None
