"""Default metadata for bookmarks the reasoning provider could not handle.

Used when the prompt is too long, the provider is unavailable, or its output
was rejected. Pure heuristics over the bookmark's primary link and text.
"""

from typing import TYPE_CHECKING, Optional

from smaug.core.bookmark import ReasoningResult
from smaug.core.classifier import KeywordRule, first_matching_key

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, Link

TITLE_MAX_CHARS = 50
SUMMARY_MAX_CHARS = 150

DEFAULT_CATEGORY = "General"

# Primary link domains, checked before any text keyword
DOMAIN_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "GitHub",
        ("github.com", "npmjs.com", "pypi.org", "gitlab.com", "bitbucket.org"),
    ),
    KeywordRule(
        "Article",
        (
            "medium.com", "substack.com", "dev.to", "blog.", "hackernoon.com",
            "freecodecamp.org",
        ),
    ),
    KeywordRule("Video", ("youtube.com", "youtu.be")),
    KeywordRule(
        "Podcast",
        ("podcasts.apple.com", "spotify.com/episode", "overcast.fm", "pocketcasts.com"),
    ),
    KeywordRule("Video", ("loom.com", "vimeo.com", "twitch.tv")),
)

_GITHUB_WORDS = KeywordRule("GitHub", ("github", "repo", "npm "))
_VIDEO_WORDS = KeywordRule("Video", ("video", "youtube", "watch"))
_ARTICLE_WORDS = (
    "article", "blog", "post", "guide", "tutorial", "course", "resource", "learning",
)
_PODCAST_WORDS = KeywordRule("Podcast", ("podcast", "episode"))
_TOOL_WORDS = KeywordRule("Tool", ("library", "framework", "tool", "app", "stack", "tech"))

# Text keywords for bookmarks whose primary link matched no domain
LINKED_TEXT_RULES: tuple[KeywordRule, ...] = (
    _GITHUB_WORDS,
    _VIDEO_WORDS,
    KeywordRule("Article", _ARTICLE_WORDS),
    _PODCAST_WORDS,
    _TOOL_WORDS,
)

# Text keywords for bookmarks without links; "free" and deals count as reading
UNLINKED_TEXT_RULES: tuple[KeywordRule, ...] = (
    _GITHUB_WORDS,
    _VIDEO_WORDS,
    KeywordRule("Article", _ARTICLE_WORDS + ("free",)),
    _PODCAST_WORDS,
    _TOOL_WORDS,
    KeywordRule("Article", ("deal", "offer", "discount", "student", "developer")),
)


def _link_title(link: "Link") -> Optional[str]:
    if link.content is None:
        return None
    return link.content.name or link.content.title


def generate_default_metadata(bookmark: "Bookmark") -> ReasoningResult:
    """Build a ReasoningResult from local heuristics only.

    Category comes from the primary link's domain when it matches one of
    DOMAIN_RULES, otherwise from text keywords, otherwise ``General``. A
    domain match also lets the link's known name/title replace the truncated
    text as the title.

    Never raises and performs no I/O.
    """
    text = bookmark.text or ""
    text_lower = text.lower()
    link = bookmark.primary_link

    title: Optional[str] = None
    category: Optional[str] = None

    if link is not None:
        category = first_matching_key(DOMAIN_RULES, link.expanded or "")
        if category is not None:
            title = _link_title(link)
        if category is None:
            category = first_matching_key(LINKED_TEXT_RULES, text_lower)
    else:
        category = first_matching_key(UNLINKED_TEXT_RULES, text_lower)

    if not title:
        title = text[:TITLE_MAX_CHARS]
        if len(text) > TITLE_MAX_CHARS:
            title += "..."

    return ReasoningResult(
        title=title or "Untitled",
        summary=text[:SUMMARY_MAX_CHARS],
        tags=list(bookmark.tags),
        category=category or DEFAULT_CATEGORY,
    )
