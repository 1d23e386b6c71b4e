"""Category resolver for the Smaug bookmark archiver.

This module maps the free-text category label guessed by the reasoning
provider, plus the bookmark's text and links, to exactly one rule of the
category registry.

Resolution is a fixed chain; the first decisive step wins:
1. Label lookup in CATEGORY_SYNONYMS
2. Keyword groups over title + summary + text (TEXT_KEYWORD_RULES)
3. Exact word lookup of the same text in CATEGORY_SYNONYMS
4. Broad topical keywords (TOPICAL_RULES)
5. URL patterns of the registry rules
6. The registry's uncategorized rule

Steps 3-5 only run while the key is still unresolved or the placeholder.
Within every step the first rule in list order wins; there is no scoring.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from smaug.core.categories import FALLBACK_KEY, CategoryRegistry, CategoryRule

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, ReasoningResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """Maps to ``key`` when any keyword occurs as a substring of the text."""

    key: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


def first_matching_key(rules: Iterable[KeywordRule], text: str) -> Optional[str]:
    """Return the key of the first rule matching ``text``, or None."""
    for rule in rules:
        if rule.matches(text):
            return rule.key
    return None


# Free-text labels → category key. Many-to-one; lookups are exact.
CATEGORY_SYNONYMS: dict[str, str] = {
    # Code
    "github": "github",
    "repo": "github",
    "repository": "github",
    "code": "github",
    "source": "github",
    # Reading
    "article": "article",
    "blog": "article",
    "post": "article",
    "guide": "article",
    "tutorial": "article",
    "docs": "article",
    "documentation": "article",
    # Video
    "video": "youtube",
    "youtube": "youtube",
    "screencast": "youtube",
    "talk": "youtube",
    "presentation": "youtube",
    # Audio
    "podcast": "podcast",
    "audio": "podcast",
    "episode": "podcast",
    "interview": "podcast",
    # Tools live with code
    "tool": "github",
    "utility": "github",
    "library": "github",
    "framework": "github",
    "app": "github",
    "service": "github",
    "api": "github",
    "package": "github",
    "module": "github",
    # Nothing to file
    "general": "tweet",
    "misc": "tweet",
    "note": "tweet",
    "announcement": "tweet",
    "news": "tweet",
    "thought": "tweet",
    "idea": "tweet",
    "resource": "article",
    "resources": "article",
    "list": "article",
    "collection": "article",
    "deal": "article",
    "deals": "article",
    "offer": "article",
    "offers": "article",
    "discount": "article",
    "free": "article",
    "stack": "github",
    "techstack": "github",
    "tech": "github",
    "toolset": "github",
    "setup": "github",
    "course": "article",
    "courses": "article",
    "learning": "article",
    "learn": "article",
    "education": "article",
    "student": "article",
    "students": "article",
    "developer": "article",
    "dev": "article",
    "programming": "article",
    "comprehensive": "article",
    "complete": "article",
    "ultimate": "article",
    "ai": "article",
    "ml": "article",
    "llm": "article",
    "model": "article",
    "claude": "article",
    "gemini": "article",
    "mcp": "github",
    "automation": "github",
    "blender": "github",
    "concept": "article",
    "os": "github",
    "operating": "github",
    "system": "github",
    "tip": "article",
    "tips": "article",
    "millionaire": "article",
    "millionaires": "article",
    "shipping": "github",
    "products": "github",
    "scene": "github",
    "generation": "article",
    "benefits": "article",
    "storage": "github",
    "backend": "github",
    "guided": "article",
    "feature": "article",
    "hacking": "article",
    "beginners": "article",
    "layer": "github",
    "version": "github",
    "v3": "github",
    "intelligence": "article",
    "fundamental": "article",
    "advanced": "article",
    "concepts": "article",
    "unlimited": "github",
    "cloud": "github",
    "telegram": "github",
    "message": "github",
    "commit": "github",
    "vibe": "article",
    "chat": "article",
    "chat history": "article",
    "history": "article",
    "conversations": "article",
    "ragging": "article",
    "rag": "article",
    "vision": "article",
    "personal": "article",
    "personal ai os": "article",
    "3d": "article",
    "y combinator": "article",
    "yc": "article",
    "combinator": "article",
    "student deals": "article",
    "credits": "article",
    "startup": "article",
    "funding": "article",
    "accelerator": "article",
}

# Substring groups over the combined text, in priority order
TEXT_KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "github",
        (
            "github", " repo", "npm", "mcp", "automation", "/commit",
            "backend", "storage", "cloud", "layer", "version", "blender",
        ),
    ),
    KeywordRule("youtube", ("video", "youtube", "watch", "talk")),
    KeywordRule("podcast", ("podcast", "audio", "episode")),
    KeywordRule(
        "article",
        (
            "article", "blog", "post", "guide", "tutorial", "course",
            "resource", "learning", "student", "developer", "free",
            "comprehensive", "ultimate", "deal", "tip", "feature", "hacking",
            "beginners", "generation", "fundamental", "advanced", "concept",
            "benefits", "intelligence", "vibe", "guided", "chat", "history",
            "conversations", "ragging", "vision", "personal", "3d",
            "millionaire",
        ),
    ),
    # Tools and generic tech are filed with code
    KeywordRule(
        "github",
        (
            "library", "framework", "tool", " app", "stack", "tech",
            "products", "shipping", "operating", "system", "millionaires",
            "scene",
        ),
    ),
)

# Topics worth filing as an article when nothing more specific matched
TOPICAL_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "article",
        (
            "ai", "student", "deal", "credit", "combinator", "y combinator",
            "yc", "startup", "funding", "accelerator",
        ),
    ),
)


def _is_unresolved(key: Optional[str]) -> bool:
    return key is None or key == FALLBACK_KEY


def _combined_text(bookmark: Optional["Bookmark"], reasoning: Optional["ReasoningResult"]) -> str:
    title = (reasoning.title if reasoning else "") or ""
    summary = (reasoning.summary if reasoning else "") or ""
    text = (bookmark.text if bookmark else "") or ""
    return f"{title} {summary} {text}".lower()


class CategoryResolver:
    """Resolves a bookmark and its reasoning result to one registry rule.

    Pure: the same bookmark, reasoning result and registry always give the
    same rule.
    """

    def __init__(self, registry: CategoryRegistry):
        self._registry = registry

    def resolve_key(
        self,
        bookmark: Optional["Bookmark"],
        reasoning: Optional["ReasoningResult"],
    ) -> Optional[str]:
        """Run label, keyword, word and topical steps.

        Returns:
            A category key, or None when no step matched.
        """
        label = ((reasoning.category if reasoning else "") or "").lower().strip()
        combined = _combined_text(bookmark, reasoning)

        key = CATEGORY_SYNONYMS.get(label)

        if key is None:
            key = first_matching_key(TEXT_KEYWORD_RULES, combined)

        if _is_unresolved(key):
            for word in combined.split():
                if word in CATEGORY_SYNONYMS:
                    key = CATEGORY_SYNONYMS[word]
                    break

        if _is_unresolved(key):
            key = first_matching_key(TOPICAL_RULES, combined) or key

        return key

    def resolve(
        self,
        bookmark: Optional["Bookmark"],
        reasoning: Optional["ReasoningResult"],
    ) -> CategoryRule:
        """Resolve to exactly one CategoryRule (never None)."""
        key = self.resolve_key(bookmark, reasoning)

        if _is_unresolved(key) and bookmark is not None:
            for link in bookmark.links:
                rule = self._registry.find_by_url(link.expanded)
                if rule is not None:
                    logger.debug(
                        "Category for %s taken from link %s: %s",
                        bookmark.id,
                        link.expanded,
                        rule.key,
                    )
                    return rule

        rule = self._registry.resolve(key)
        if key is not None and key not in self._registry:
            logger.warning(
                "Category '%s' is not configured, using '%s'", key, rule.key
            )
        return rule
