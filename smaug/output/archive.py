"""Archive updater for the Smaug bookmark archiver.

The archive is a single markdown document (``bookmarks.md``) organized in
``# <date>`` sections, newest entry first within a section and newest
section first in the file. It is also edited by hand, so updates only ever
insert text; existing content is never rewritten.

The archive is the durable record of processed bookmarks: the ids used for
dedupe are extracted from the permalinks it contains.

Updates are a whole-file read-modify-write. There must be a single writer.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from smaug.output.knowledge_writer import create_jinja_env

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, ReasoningResult

logger = logging.getLogger(__name__)

# Permalinks that identify an archived bookmark
STATUS_URL_PATTERN = re.compile(r"(?:x|twitter)\.com/\w+/status/(\d+)")

UNKNOWN_DATE = "Unknown Date"


def quote_block(text: str) -> str:
    """Render text as a markdown blockquote, one ``>`` per line."""
    lines = (text or "").splitlines() or [""]
    return "\n".join(f"> {line}" if line.strip() else ">" for line in lines)


def _date_heading_pattern(date: str) -> re.Pattern[str]:
    return re.compile(rf"^# {re.escape(date)}[ \t]*$", re.MULTILINE)


def insert_entry(content: str, date: str, entry: str) -> str:
    """Merge an entry block into archive content.

    If a ``# <date>`` heading line exists, the entry goes directly under it
    (after the heading's blank line), above that day's older entries.
    Otherwise a new section is prepended to the document.

    Args:
        content: Current archive text (may be empty)
        date: Section date as shown in the heading
        entry: Rendered entry block, ending in a newline

    Returns:
        The new archive text.
    """
    if not entry.endswith("\n"):
        entry += "\n"

    heading = _date_heading_pattern(date).search(content)
    if heading is None:
        return f"# {date}\n\n{entry}\n{content}"

    # Skip the heading's line break and the blank line after it, adding
    # whichever of the two is missing
    insert_pos = heading.end()
    for _ in range(2):
        if content.startswith("\n", insert_pos):
            insert_pos += 1
        else:
            entry = "\n" + entry

    return content[:insert_pos] + entry + "\n" + content[insert_pos:]


def extract_bookmark_ids(content: str) -> set[str]:
    """Return every post id referenced by a permalink in ``content``."""
    return set(STATUS_URL_PATTERN.findall(content))


class ArchiveUpdater:
    """Maintains the running markdown archive.

    Example:
        >>> archive = ArchiveUpdater(Path("bookmarks/bookmarks.md"))
        >>> seen = archive.load_existing_ids()
        >>> archive.append(bookmark, reasoning, file_path=note_path)
    """

    def __init__(self, archive_file: Path):
        self.archive_file = Path(archive_file)
        self._env = create_jinja_env()

    def read(self) -> str:
        """Return the archive text, or an empty string if it does not exist yet."""
        if not self.archive_file.exists():
            return ""
        return self.archive_file.read_text(encoding="utf-8")

    def load_existing_ids(self) -> set[str]:
        """Scan the archive for bookmark ids already recorded."""
        ids = extract_bookmark_ids(self.read())
        logger.debug("Found %d archived bookmark ids in %s", len(ids), self.archive_file)
        return ids

    def _filed_path(self, file_path: Path) -> str:
        """Path of a knowledge note as linked from the archive."""
        file_path = Path(file_path)
        try:
            return file_path.relative_to(self.archive_file.parent).as_posix()
        except ValueError:
            return file_path.as_posix()

    def format_entry(
        self,
        bookmark: "Bookmark",
        reasoning: "ReasoningResult",
        file_path: Optional[Path] = None,
    ) -> str:
        """Render the archive entry block for a bookmark."""
        link = bookmark.primary_link

        context = {
            "author": bookmark.author,
            "title": reasoning.title,
            "quoted_text": quote_block(bookmark.text),
            "tweet_url": bookmark.tweet_url,
            "link": link.expanded if link else None,
            "tag_links": " ".join(f"[[{tag}]]" for tag in bookmark.tags),
            "filed_path": self._filed_path(file_path) if file_path else None,
            "filed_name": Path(file_path).name if file_path else None,
            "summary": reasoning.summary,
        }

        return self._env.get_template("archive_entry.md.j2").render(**context)

    def append(
        self,
        bookmark: "Bookmark",
        reasoning: "ReasoningResult",
        file_path: Optional[Path] = None,
    ) -> None:
        """Insert an entry for ``bookmark`` under its date section."""
        date = bookmark.date or UNKNOWN_DATE
        entry = self.format_entry(bookmark, reasoning, file_path)

        content = insert_entry(self.read(), date, entry)

        self.archive_file.parent.mkdir(parents=True, exist_ok=True)
        self.archive_file.write_text(content, encoding="utf-8")
