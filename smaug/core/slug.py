"""Slug generation for knowledge files."""

import hashlib
import re

SLUG_MAX_CHARS = 60
HASH_CHARS = 8


def generate_slug(title: str, author: str) -> str:
    """Derive a filesystem-safe identifier from a title and author.

    The readable part is the lowercased title with everything outside
    ``[a-z0-9\\s-]`` removed, whitespace collapsed to hyphens and cut at 60
    characters. An 8-character md5 prefix of ``"{title}-{author}"`` is
    appended so the same title from two authors never collides.

    Example:
        >>> generate_slug("Hello, World!", "alice")[:12]
        'hello-world-'
    """
    readable = re.sub(r"[^a-z0-9\s-]", "", title.lower()).strip()
    readable = re.sub(r"\s+", "-", readable)[:SLUG_MAX_CHARS]

    digest = hashlib.md5(f"{title}-{author}".encode("utf-8")).hexdigest()[:HASH_CHARS]

    return f"{readable}-{digest}"
