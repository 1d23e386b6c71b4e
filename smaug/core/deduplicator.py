"""Deduplicator for the Smaug bookmark archiver.

Tracks which bookmark ids have already been archived during one run. The
set is seeded from the archive at the start of the run and grows as
bookmarks are processed, so later duplicates in the same batch are skipped
too.

Primary key: post id.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark

logger = logging.getLogger(__name__)


@dataclass
class DeduplicationStats:
    """Statistics from deduplication checks.

    Attributes:
        total_checked: Total number of bookmarks checked
        duplicates_found: Number of duplicates detected and skipped
        unique_bookmarks: Number of unique (non-duplicate) bookmarks
    """

    total_checked: int = 0
    duplicates_found: int = 0
    unique_bookmarks: int = 0

    @property
    def duplicate_rate(self) -> float:
        """Duplicate rate as a percentage (0.0 when nothing was checked)."""
        if self.total_checked == 0:
            return 0.0
        return (self.duplicates_found / self.total_checked) * 100.0


class Deduplicator:
    """In-memory set of seen bookmark ids for one run.

    Example:
        >>> dedup = Deduplicator(archive.load_existing_ids())
        >>> if not dedup.check(bookmark):
        ...     process(bookmark)
        ...     dedup.mark_seen(bookmark.id)
    """

    def __init__(self, seen_ids: Iterable[str] = ()):
        self._seen: set[str] = set(seen_ids)
        self._stats = DeduplicationStats()

    def __len__(self) -> int:
        return len(self._seen)

    def check(self, bookmark: "Bookmark") -> bool:
        """Check a bookmark and record the result in the statistics.

        Returns:
            True if the bookmark is a duplicate and should be skipped.
        """
        self._stats.total_checked += 1

        if bookmark.id in self._seen:
            self._stats.duplicates_found += 1
            logger.debug(
                "Duplicate bookmark: %s (@%s)", bookmark.id, bookmark.author
            )
            return True

        self._stats.unique_bookmarks += 1
        return False

    def mark_seen(self, bookmark_id: str) -> None:
        """Record a bookmark id as archived."""
        self._seen.add(bookmark_id)

    def get_stats(self) -> DeduplicationStats:
        return self._stats
