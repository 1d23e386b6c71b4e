"""Bookmark data model for the Smaug bookmark archiver.

This module defines the core data structures passed between components:
- Bookmark: one saved post with its extracted links (immutable input)
- ReasoningResult: title/summary/tags/category guessed for a bookmark
- ProcessingResult: what the pipeline did with one bookmark
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LinkContent:
    """Metadata already known about a linked page (e.g. from a link preview)."""

    title: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Link:
    """An expanded URL found in a bookmark."""

    expanded: str
    content: Optional[LinkContent] = None


@dataclass(frozen=True)
class ContextPost:
    """A post the bookmark replies to or quotes."""

    author: str
    text: str


@dataclass(frozen=True)
class Bookmark:
    """Represents a saved post to be archived.

    Required fields:
        id: Post ID (unique identifier, used for dedupe)
        author: Handle without the leading @
        text: Raw post content
        date: Display date, used verbatim as the archive section heading
        tweet_url: Canonical permalink to the post

    The first entry of ``links`` is treated as the primary link.
    ``reply_context`` and ``quote_context`` only enrich the reasoning prompt.
    """

    id: str
    author: str
    text: str
    date: str
    tweet_url: str

    links: tuple[Link, ...] = ()
    tags: tuple[str, ...] = ()
    reply_context: Optional[ContextPost] = None
    quote_context: Optional[ContextPost] = None

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so the input stays immutable
        if not isinstance(self.links, tuple):
            object.__setattr__(self, "links", tuple(self.links))
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def primary_link(self) -> Optional[Link]:
        """Return the first link, or None when the post has no links."""
        return self.links[0] if self.links else None


@dataclass
class ReasoningResult:
    """Structured metadata for a bookmark.

    ``category`` is a free-text label and is not guaranteed to be one of the
    registry keys; the category resolver maps it.
    """

    title: str
    summary: str
    tags: list[str] = field(default_factory=list)
    category: str = ""


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of processing one bookmark.

    Attributes:
        id: Bookmark ID
        title: Title used for the note and archive entry
        slug: Filesystem-safe identifier derived from title and author
        category: Resolved category key
        file_path: Path of the knowledge file, or None if none was written
    """

    id: str
    title: str
    slug: str
    category: str
    file_path: Optional[str] = None
