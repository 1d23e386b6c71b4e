"""Processing pipeline for the Smaug bookmark archiver.

Integrates all components to archive bookmarks end-to-end:
dedupe → reasoning (remote or default metadata) → category resolution →
slug → knowledge note (file action only) → archive entry

Bookmarks are processed one at a time, in input order. The archive is
updated with a whole-file read-modify-write, so the pipeline is its only
writer. A failure on one bookmark is logged and counted; it never stops the
batch.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from smaug.core.bookmark import ProcessingResult
from smaug.core.categories import CategoryRegistry
from smaug.core.classifier import CategoryResolver
from smaug.core.deduplicator import DeduplicationStats, Deduplicator
from smaug.core.exceptions import (
    InvalidPathError,
    InvalidSlugError,
    ProcessingError,
    ProcessorError,
    ReasoningTimeoutError,
)
from smaug.core.logger import get_bookmark_logger
from smaug.core.metadata import generate_default_metadata
from smaug.core.output_parser import parse_reasoning_output
from smaug.core.prompts import build_reasoning_prompt
from smaug.core.slug import generate_slug
from smaug.output.archive import ArchiveUpdater
from smaug.output.knowledge_writer import KnowledgeWriter

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, ReasoningResult
    from smaug.core.config import Config
    from smaug.core.reasoning import ReasoningPort

logger = logging.getLogger(__name__)

# Folders created under the output directory on startup
KNOWLEDGE_FOLDERS = (
    "knowledge/tools",
    "knowledge/articles",
    "knowledge/podcasts",
    "knowledge/videos",
)


@dataclass
class PipelineResult:
    """Result of processing a batch of bookmarks.

    Attributes:
        total: Number of bookmarks in the batch
        processed: Number of bookmarks archived in this run
        skipped: Number of bookmarks skipped as duplicates
        failed: Number of bookmarks that failed processing
        errors: Error messages for failed bookmarks
        results: One ProcessingResult per processed bookmark, in input order
        dedup_stats: Duplicate checks made during the run
    """

    total: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    results: list[ProcessingResult] = field(default_factory=list)
    dedup_stats: DeduplicationStats = field(default_factory=DeduplicationStats)


class Pipeline:
    """Archives bookmarks into the knowledge store.

    Args:
        config: Archiver configuration (output dir, timeout, prompt limit)
        registry: Category registry; defaults to the built-in one
        reasoner: Reasoning provider, or None to always use default metadata
    """

    def __init__(
        self,
        config: "Config",
        registry: Optional[CategoryRegistry] = None,
        reasoner: Optional["ReasoningPort"] = None,
    ):
        self.config = config
        self.output_dir = Path(config.output_dir)
        self.registry = registry or CategoryRegistry.default()
        self.resolver = CategoryResolver(self.registry)
        self.writer = KnowledgeWriter(self.output_dir)
        self.archive = ArchiveUpdater(config.archive_file)
        self._reasoner = reasoner

        for folder in KNOWLEDGE_FOLDERS:
            (self.output_dir / folder).mkdir(parents=True, exist_ok=True)

    async def process(self, bookmarks: list["Bookmark"]) -> PipelineResult:
        """Process a batch of bookmarks sequentially.

        Args:
            bookmarks: Bookmarks in the order they should be archived

        Returns:
            PipelineResult with counts and per-bookmark results
        """
        result = PipelineResult(total=len(bookmarks))
        dedup = Deduplicator(self.archive.load_existing_ids())
        logger.info(
            "Processing %d bookmark(s), %d already archived",
            len(bookmarks),
            len(dedup),
        )

        for bookmark in bookmarks:
            log = get_bookmark_logger(__name__, bookmark.id)

            if dedup.check(bookmark):
                log.info("Skipping duplicate: @%s", bookmark.author)
                result.skipped += 1
                continue

            try:
                processed = await self.process_bookmark(bookmark)
            except ProcessorError as e:
                result.failed += 1
                result.errors.append(f"Bookmark {bookmark.id}: {e}")
                log.error("Error processing bookmark: %s", e)
                continue
            except Exception as e:
                result.failed += 1
                result.errors.append(f"Bookmark {bookmark.id}: {e}")
                log.exception("Unexpected error processing bookmark: %s", e)
                continue

            result.processed += 1
            result.results.append(processed)
            dedup.mark_seen(bookmark.id)

        result.dedup_stats = dedup.get_stats()

        logger.info(
            "Pipeline complete: processed=%d/%d, skipped=%d, failed=%d",
            result.processed,
            result.total,
            result.skipped,
            result.failed,
        )
        return result

    async def process_bookmark(self, bookmark: "Bookmark") -> ProcessingResult:
        """Process one bookmark (no dedupe check).

        Raises:
            ProcessingError: If the note or archive entry could not be written.
        """
        log = get_bookmark_logger(__name__, bookmark.id)
        log.info("Processing: @%s", bookmark.author)

        reasoning = await self.get_reasoning(bookmark)
        rule = self.resolver.resolve(bookmark, reasoning)
        slug = generate_slug(reasoning.title, bookmark.author)
        log.info("Category: %s (%s) - %s", rule.key, rule.action.value, reasoning.title)

        file_path: Optional[Path] = None
        try:
            file_path = self.writer.write(bookmark, reasoning, rule, slug)
        except (InvalidSlugError, InvalidPathError) as e:
            log.warning("Not writing knowledge note: %s", e)
        except OSError as e:
            raise ProcessingError(
                f"Failed to write knowledge note: {e}", bookmark_id=bookmark.id
            ) from e

        try:
            self.archive.append(bookmark, reasoning, file_path)
        except OSError as e:
            raise ProcessingError(
                f"Failed to update archive: {e}", bookmark_id=bookmark.id
            ) from e

        if file_path is not None:
            log.info("Wrote: %s", file_path)
        else:
            log.info("Archived without note (action: %s)", rule.action.value)

        return ProcessingResult(
            id=bookmark.id,
            title=reasoning.title,
            slug=slug,
            category=rule.key,
            file_path=str(file_path) if file_path else None,
        )

    async def get_reasoning(self, bookmark: "Bookmark") -> "ReasoningResult":
        """Get metadata for a bookmark, falling back to local defaults.

        The remote call is skipped when no reasoner is configured or the
        prompt exceeds ``config.max_prompt_chars``. Any failure of the reasoning
        call or its output falls back to default metadata.
        """
        log = get_bookmark_logger(__name__, bookmark.id)

        if self._reasoner is None:
            return generate_default_metadata(bookmark)

        prompt = build_reasoning_prompt(bookmark)
        if len(prompt) > self.config.max_prompt_chars:
            log.warning(
                "Context too long (%d chars), using defaults", len(prompt)
            )
            return generate_default_metadata(bookmark)

        timeout = self.config.reasoning_timeout
        try:
            raw_output = await asyncio.wait_for(
                self._reasoner.reason(prompt, timeout=timeout), timeout=timeout
            )
            reasoning = parse_reasoning_output(raw_output)
        except asyncio.TimeoutError:
            error = ReasoningTimeoutError(f"Reasoning timed out after {timeout:g}s")
            log.warning("AI reasoning failed: %s, using defaults", error)
            return generate_default_metadata(bookmark)
        except ProcessorError as e:
            log.warning("AI reasoning failed: %s, using defaults", e)
            return generate_default_metadata(bookmark)
        except Exception as e:
            log.warning("AI reasoning failed unexpectedly: %s, using defaults", e)
            return generate_default_metadata(bookmark)

        log.debug("AI reasoning: %s [%s]", reasoning.title, reasoning.category)
        return reasoning
