"""Bookmark export parser for the Smaug bookmark archiver.

Parses a JSON array of fetched bookmarks into Bookmark instances. Each item
looks like:

    {
        "id": "1879876543210",
        "author": "simonw",
        "text": "New release of llm ...",
        "date": "2026-01-15",
        "tweetUrl": "https://x.com/simonw/status/1879876543210",
        "links": [{"expanded": "https://github.com/simonw/llm",
                   "content": {"name": "llm", "description": "..."}}],
        "tags": ["cli"],
        "replyContext": {"author": "someone", "text": "..."},
        "quoteContext": null
    }

Only ``id``, ``author`` and ``text`` are required.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from smaug.core.bookmark import Bookmark, ContextPost, Link, LinkContent
from smaug.core.exceptions import ParseError


def _parse_link(item: Any) -> Optional[Link]:
    """Parse one link entry; plain URL strings are accepted too."""
    if isinstance(item, str):
        return Link(expanded=item)
    if not isinstance(item, dict):
        raise TypeError(f"link must be an object or string, got {type(item).__name__}")

    expanded = item.get("expanded") or item.get("url")
    if not expanded:
        return None

    content = item.get("content")
    link_content = None
    if isinstance(content, dict):
        link_content = LinkContent(
            title=content.get("title"),
            name=content.get("name"),
            description=content.get("description"),
        )

    return Link(expanded=str(expanded), content=link_content)


def _parse_context(item: Any) -> Optional[ContextPost]:
    if not isinstance(item, dict):
        return None
    return ContextPost(author=str(item.get("author", "")), text=str(item.get("text", "")))


def _parse_single_bookmark(item: dict) -> Bookmark:
    """Parse a single bookmark entry.

    Raises:
        KeyError: If required fields are missing
        TypeError: If field types are incorrect
    """
    bookmark_id = str(item["id"])
    author = str(item["author"]).lstrip("@")
    text = item["text"]
    if not isinstance(text, str):
        raise TypeError("text must be a string")

    tweet_url = item.get("tweetUrl") or f"https://x.com/{author}/status/{bookmark_id}"

    links = [link for link in map(_parse_link, item.get("links") or []) if link]

    tags = item.get("tags") or []
    if not isinstance(tags, list):
        raise TypeError("tags must be a list")

    return Bookmark(
        id=bookmark_id,
        author=author,
        text=text,
        date=str(item.get("date") or ""),
        tweet_url=tweet_url,
        links=tuple(links),
        tags=tuple(str(tag) for tag in tags),
        reply_context=_parse_context(item.get("replyContext")),
        quote_context=_parse_context(item.get("quoteContext")),
    )


def parse_bookmark_export(source: Union[str, Path, list[dict]]) -> list[Bookmark]:
    """Parse a bookmark export into Bookmark instances.

    Args:
        source: A file path (str or Path), or the already-parsed JSON list

    Returns:
        List of Bookmark instances, in export order

    Raises:
        ParseError: If the JSON is malformed or required fields are missing
        FileNotFoundError: If the source file doesn't exist
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Export file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in export file: {e}")
    else:
        data = source

    # Exports written by the fetch step wrap the list
    if isinstance(data, dict) and isinstance(data.get("bookmarks"), list):
        data = data["bookmarks"]

    if not isinstance(data, list):
        raise ParseError("Bookmark export must be a JSON array")

    bookmarks = []
    for i, item in enumerate(data):
        try:
            bookmarks.append(_parse_single_bookmark(item))
        except (KeyError, TypeError) as e:
            raise ParseError(f"Failed to parse bookmark at index {i}: {e}")

    return bookmarks
