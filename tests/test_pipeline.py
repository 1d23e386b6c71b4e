"""Tests for the processing pipeline."""

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from smaug.core.bookmark import Bookmark, Link
from smaug.core.categories import CategoryRegistry
from smaug.core.config import Config
from smaug.core.exceptions import TransportError
from smaug.core.pipeline import KNOWLEDGE_FOLDERS, Pipeline, PipelineResult


def _make_bookmark(**kwargs) -> Bookmark:
    """Helper to create a bookmark with defaults."""
    bookmark_id = kwargs.pop("id", "123456789")
    defaults = {
        "id": bookmark_id,
        "author": "testuser",
        "text": "Test tweet",
        "date": "Thursday, January 15, 2026",
        "tweet_url": f"https://x.com/testuser/status/{bookmark_id}",
    }
    defaults.update(kwargs)
    return Bookmark(**defaults)


class FakeReasoner:
    """Reasoning provider returning canned output."""

    def __init__(self, output=None, error=None, delay=0.0):
        self.output = output
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def reason(self, prompt: str, *, timeout: float) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.output


def _output(title: str, category: str, summary: str = "Summary.", tags=("ai",)) -> str:
    return json.dumps(
        {"title": title, "summary": summary, "tags": list(tags), "category": category}
    )


class TestPipelineInit:
    """Tests for pipeline setup."""

    def test_creates_knowledge_folders(self, config: Config):
        Pipeline(config)

        for folder in KNOWLEDGE_FOLDERS:
            assert (config.output_dir / folder).is_dir()

    def test_default_registry(self, config: Config):
        assert len(Pipeline(config).registry) == 5


class TestEndToEnd:
    """Full runs against a temporary knowledge store."""

    @pytest.mark.asyncio
    async def test_github_link_filed_under_tools(self, config: Config):
        bookmark = _make_bookmark(
            text="Check out this amazing tool",
            links=[Link(expanded="https://github.com/user/amazing-tool")],
        )
        reasoner = FakeReasoner(_output("Amazing Tool", "GitHub"))

        result = await Pipeline(config, reasoner=reasoner).process([bookmark])

        assert result.processed == 1
        item = result.results[0]
        assert item.category == "github"
        assert item.file_path is not None

        note = Path(item.file_path)
        assert note.parent == config.output_dir / "knowledge" / "tools"
        assert note.name == f"{item.slug}.md"
        assert note.exists()

        archive = config.archive_file.read_text()
        assert "## @testuser - Amazing Tool" in archive
        assert f"- **Filed:** [{note.name}](./knowledge/tools/{note.name})" in archive

    @pytest.mark.asyncio
    async def test_offline_plain_post_is_captured(self, config: Config):
        bookmark = _make_bookmark(text="just thinking about stuff")

        result = await Pipeline(config).process([bookmark])

        item = result.results[0]
        assert item.category == "tweet"
        assert item.file_path is None
        assert item.title == "just thinking about stuff"

        notes = [p for p in (config.output_dir / "knowledge").rglob("*.md")]
        assert notes == []
        assert "https://x.com/testuser/status/123456789" in config.archive_file.read_text()

    @pytest.mark.asyncio
    async def test_transcribe_category_archived_without_note(self, config: Config):
        bookmark = _make_bookmark(links=[Link(expanded="https://youtu.be/abc")])
        reasoner = FakeReasoner(_output("A Talk", "Video"))

        result = await Pipeline(config, reasoner=reasoner).process([bookmark])

        assert result.results[0].category == "youtube"
        assert result.results[0].file_path is None
        assert "## @testuser - A Talk" in config.archive_file.read_text()

    @pytest.mark.asyncio
    async def test_custom_registry(self, config: Config):
        registry = CategoryRegistry.from_dict(
            {
                "docs": {"match": ["readthedocs.io"], "action": "file", "folder": "./knowledge/docs"},
                "tweet": {"action": "capture"},
            }
        )
        bookmark = _make_bookmark(links=[Link(expanded="https://lib.readthedocs.io/en/latest")])

        result = await Pipeline(config, registry=registry).process([bookmark])

        note = Path(result.results[0].file_path)
        assert note.parent == config.output_dir / "knowledge" / "docs"


class TestDeduplication:
    """Tests for duplicate handling."""

    @pytest.mark.asyncio
    async def test_duplicates_in_same_batch(self, config: Config):
        bookmarks = [_make_bookmark(id="1"), _make_bookmark(id="1"), _make_bookmark(id="2")]

        result = await Pipeline(config).process(bookmarks)

        assert result.total == 3
        assert result.processed == 2
        assert result.skipped == 1
        assert config.archive_file.read_text().count("/status/1\n") == 1

    @pytest.mark.asyncio
    async def test_duplicates_across_runs(self, config: Config):
        await Pipeline(config).process([_make_bookmark(id="1")])

        result = await Pipeline(config).process([_make_bookmark(id="1"), _make_bookmark(id="2")])

        assert result.processed == 1
        assert result.skipped == 1
        assert result.results[0].id == "2"

    @pytest.mark.asyncio
    async def test_hand_written_archive_entries_count(self, config: Config):
        config.archive_file.write_text(
            "# Old\n\n- **Tweet:** https://twitter.com/someone/status/42\n"
        )

        result = await Pipeline(config).process([_make_bookmark(id="42")])

        assert result.skipped == 1
        assert result.processed == 0


class TestReasoningFallback:
    """Tests for falling back to default metadata."""

    @pytest.mark.asyncio
    async def test_long_prompt_skips_reasoning(self, temp_output_dir: Path):
        config = Config(output_dir=temp_output_dir, max_prompt_chars=100)
        reasoner = FakeReasoner(_output("Never Used", "GitHub"))
        bookmark = _make_bookmark(text="x" * 500)

        result = await Pipeline(config, reasoner=reasoner).process([bookmark])

        assert reasoner.prompts == []
        assert result.results[0].title == "x" * 50 + "..."

    @pytest.mark.asyncio
    async def test_transport_error_uses_defaults(self, config: Config):
        reasoner = FakeReasoner(error=TransportError("boom"))
        bookmark = _make_bookmark(
            text="A tool",
            links=[Link(expanded="https://github.com/user/repo")],
        )

        result = await Pipeline(config, reasoner=reasoner).process([bookmark])

        assert result.failed == 0
        assert result.results[0].category == "github"
        assert result.results[0].title == "A tool"

    @pytest.mark.asyncio
    async def test_invalid_output_uses_defaults(self, config: Config):
        reasoner = FakeReasoner('{"title": "Missing fields"}')

        result = await Pipeline(config, reasoner=reasoner).process(
            [_make_bookmark(text="just thinking about stuff")]
        )

        assert result.results[0].title == "just thinking about stuff"
        assert result.results[0].category == "tweet"

    @pytest.mark.asyncio
    async def test_slow_reasoner_times_out(self, temp_output_dir: Path):
        config = Config(output_dir=temp_output_dir, reasoning_timeout=0.05)
        reasoner = FakeReasoner(_output("Too Late", "GitHub"), delay=1.0)

        result = await Pipeline(config, reasoner=reasoner).process([_make_bookmark()])

        assert result.failed == 0
        assert result.results[0].title == "Test tweet"

    @pytest.mark.asyncio
    async def test_unexpected_port_error_uses_defaults(self, config: Config):
        """Errors outside the ProcessorError hierarchy still fall back."""
        reasoner = FakeReasoner(error=ConnectionError("socket reset"))
        bookmark = _make_bookmark(
            id="1",
            text="A tool",
            links=[Link(expanded="https://github.com/user/repo")],
        )

        result = await Pipeline(config, reasoner=reasoner).process([bookmark])

        assert result.processed == 1
        assert result.failed == 0
        assert result.results[0].category == "github"
        assert result.results[0].file_path is not None
        assert "/status/1\n" in config.archive_file.read_text()

    @pytest.mark.asyncio
    async def test_builtin_timeout_error_uses_defaults(self, config: Config):
        reasoner = FakeReasoner(error=TimeoutError("read timed out"))

        result = await Pipeline(config, reasoner=reasoner).process([_make_bookmark()])

        assert result.failed == 0
        assert result.results[0].title == "Test tweet"

    @pytest.mark.asyncio
    async def test_fenced_output_accepted(self, config: Config):
        raw = "```json\n" + _output("Fenced", "Article") + "\n```"
        reasoner = FakeReasoner(raw)

        result = await Pipeline(config, reasoner=reasoner).process([_make_bookmark()])

        assert result.results[0].title == "Fenced"
        assert result.results[0].category == "article"


class TestFailures:
    """Tests for per-bookmark failures."""

    @pytest.mark.asyncio
    async def test_invalid_slug_still_archived(self, config: Config):
        reasoner = FakeReasoner(_output("Tool", "GitHub"))

        with patch("smaug.core.pipeline.generate_slug", return_value=""):
            result = await Pipeline(config, reasoner=reasoner).process([_make_bookmark()])

        assert result.processed == 1
        assert result.results[0].file_path is None
        assert "## @testuser - Tool" in config.archive_file.read_text()

    @pytest.mark.asyncio
    async def test_write_failure_does_not_stop_batch(self, config: Config):
        reasoner = FakeReasoner(_output("Tool", "GitHub"))
        pipeline = Pipeline(config, reasoner=reasoner)

        with patch.object(
            pipeline.writer, "write", side_effect=[PermissionError("denied"), None]
        ):
            result = await pipeline.process([_make_bookmark(id="1"), _make_bookmark(id="2")])

        assert result.failed == 1
        assert result.processed == 1
        assert "Bookmark 1" in result.errors[0]
        assert "denied" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_counted(self, config: Config):
        pipeline = Pipeline(config)

        with patch.object(pipeline.resolver, "resolve", side_effect=RuntimeError("bug")):
            result = await pipeline.process([_make_bookmark()])

        assert result.failed == 1
        assert result.processed == 0

    @pytest.mark.asyncio
    async def test_failed_bookmark_not_marked_seen(self, config: Config):
        pipeline = Pipeline(config)

        with patch.object(pipeline.resolver, "resolve", side_effect=RuntimeError("bug")):
            await pipeline.process([_make_bookmark(id="7")])

        result = await pipeline.process([_make_bookmark(id="7")])

        assert result.processed == 1


class TestPipelineResult:
    """Tests for PipelineResult defaults."""

    def test_defaults(self):
        result = PipelineResult()

        assert result.total == 0
        assert result.errors == []
        assert result.results == []
        assert result.dedup_stats.total_checked == 0

    @pytest.mark.asyncio
    async def test_dedup_stats_reported(self, config: Config):
        bookmarks = [_make_bookmark(id="1"), _make_bookmark(id="1"), _make_bookmark(id="2")]

        result = await Pipeline(config).process(bookmarks)

        assert result.dedup_stats.total_checked == 3
        assert result.dedup_stats.duplicates_found == 1
        assert result.dedup_stats.unique_bookmarks == 2
