"""Category registry for the Smaug bookmark archiver.

A category rule tells the pipeline what to do with a bookmark once it has been
classified: write a knowledge file, hand it to a transcriber, or just capture
it in the archive. The registry is closed and keyed by category key.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from smaug.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Key of the uncategorized rule every lookup falls back to
FALLBACK_KEY = "tweet"


class CategoryAction(str, Enum):
    """What the pipeline does with a bookmark of a given category.

    - FILE: write a knowledge file and an archive entry
    - TRANSCRIBE: archive only; transcription happens elsewhere
    - CAPTURE: archive only
    """

    FILE = "file"
    TRANSCRIBE = "transcribe"
    CAPTURE = "capture"


@dataclass(frozen=True)
class CategoryRule:
    """One entry of the category registry.

    Attributes:
        key: Category key (e.g. github, article, youtube, podcast, tweet)
        action: What to do with matching bookmarks
        folder: Target folder for FILE/TRANSCRIBE, None for CAPTURE
        match: URL substrings that identify this category from a link
        template: Note template variant, written as the note's ``type``
        description: Human readable description
    """

    key: str
    action: CategoryAction = CategoryAction.CAPTURE
    folder: Optional[str] = None
    match: tuple[str, ...] = field(default_factory=tuple)
    template: Optional[str] = None
    description: str = ""

    def matches_url(self, url: str) -> bool:
        """Check if any of this rule's URL patterns occurs in ``url``."""
        return any(pattern in url for pattern in self.match)


UNCATEGORIZED_RULE = CategoryRule(
    key=FALLBACK_KEY,
    action=CategoryAction.CAPTURE,
    folder=None,
    match=(),
    template=None,
    description="Plain tweets",
)

DEFAULT_CATEGORIES: dict[str, dict[str, Any]] = {
    "github": {
        "match": ["github.com"],
        "action": "file",
        "folder": "./knowledge/tools",
        "template": "tool",
        "description": "GitHub repositories",
    },
    "article": {
        "match": ["medium.com", "substack.com", "dev.to", "blog."],
        "action": "file",
        "folder": "./knowledge/articles",
        "template": "article",
        "description": "Blog posts and articles",
    },
    "youtube": {
        "match": ["youtube.com", "youtu.be"],
        "action": "transcribe",
        "folder": "./knowledge/videos",
        "template": "video",
        "description": "YouTube videos",
    },
    "podcast": {
        "match": ["podcasts.apple.com", "spotify.com/episode", "overcast.fm"],
        "action": "transcribe",
        "folder": "./knowledge/podcasts",
        "template": "podcast",
        "description": "Podcast episodes",
    },
    "tweet": {
        "match": [],
        "action": "capture",
        "folder": None,
        "template": None,
        "description": "Plain tweets",
    },
}


def _parse_rule(key: str, data: dict[str, Any]) -> CategoryRule:
    """Build a CategoryRule from its JSON representation.

    Raises:
        ConfigurationError: If the action is unknown or ``match`` is not a list.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Category '{key}' must be an object")

    action_value = data.get("action", CategoryAction.CAPTURE.value)
    try:
        action = CategoryAction(action_value)
    except ValueError:
        valid = ", ".join(a.value for a in CategoryAction)
        raise ConfigurationError(
            f"Category '{key}' has invalid action '{action_value}'. Must be one of: {valid}"
        )

    match = data.get("match") or []
    if not isinstance(match, list):
        raise ConfigurationError(f"Category '{key}' match must be a list of strings")

    return CategoryRule(
        key=key,
        action=action,
        folder=data.get("folder"),
        match=tuple(str(m) for m in match),
        template=data.get("template"),
        description=data.get("description", ""),
    )


class CategoryRegistry:
    """Closed mapping from category key to CategoryRule.

    ``resolve()`` is total: unknown keys fall back to the registry's own
    ``tweet`` rule, or to UNCATEGORIZED_RULE when none was configured.

    Example:
        >>> registry = CategoryRegistry.default()
        >>> registry.resolve("github").action
        <CategoryAction.FILE: 'file'>
        >>> registry.resolve("nope").key
        'tweet'
    """

    def __init__(self, rules: dict[str, CategoryRule]):
        self._rules = dict(rules)

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, Any]]) -> "CategoryRegistry":
        """Create a registry from the JSON-style mapping used in config files."""
        if not isinstance(data, dict):
            raise ConfigurationError("Category registry must be a JSON object")
        return cls({key: _parse_rule(key, value) for key, value in data.items()})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CategoryRegistry":
        """Load a registry from a JSON file.

        The file may hold the mapping directly or under a ``categories`` key.

        Raises:
            ConfigurationError: If the file is missing or malformed.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Categories file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in categories file {path}: {e}")

        if isinstance(data, dict) and isinstance(data.get("categories"), dict):
            data = data["categories"]

        registry = cls.from_dict(data)
        logger.debug("Loaded %d categories from %s", len(registry), path)
        return registry

    @classmethod
    def default(cls) -> "CategoryRegistry":
        """Return the built-in registry (github, article, youtube, podcast, tweet)."""
        return cls.from_dict(DEFAULT_CATEGORIES)

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __iter__(self) -> Iterator[CategoryRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, key: Optional[str]) -> Optional[CategoryRule]:
        """Return the rule for ``key`` or None."""
        if key is None:
            return None
        return self._rules.get(key)

    @property
    def fallback(self) -> CategoryRule:
        """The uncategorized capture rule."""
        return self._rules.get(FALLBACK_KEY, UNCATEGORIZED_RULE)

    def resolve(self, key: Optional[str]) -> CategoryRule:
        """Return the rule for ``key``, falling back to the uncategorized rule."""
        return self.get(key) or self.fallback

    def find_by_url(self, url: Optional[str]) -> Optional[CategoryRule]:
        """Return the first rule (in registry order) whose patterns match ``url``."""
        if not url:
            return None
        for rule in self._rules.values():
            if rule.matches_url(url):
                return rule
        return None
