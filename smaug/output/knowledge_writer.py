"""Knowledge file writer for the Smaug bookmark archiver.

Writes one markdown note with YAML frontmatter per filed bookmark, at
``{output_dir}/{rule.folder}/{slug}.md``. Only rules with the ``file`` action
produce a note. Rendering uses the Jinja2 templates in ``templates/``.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from jinja2 import Environment, FileSystemLoader

from smaug.core.categories import CategoryAction
from smaug.core.exceptions import InvalidPathError, InvalidSlugError

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, ReasoningResult
    from smaug.core.categories import CategoryRule

logger = logging.getLogger(__name__)

# Path to templates directory
TEMPLATES_DIR = Path(__file__).parent / "templates"

# Folder for file-action rules that configure none
DEFAULT_FOLDER = "knowledge/tools"

DEFAULT_TEMPLATE = "tool"

KEY_FEATURES_PLACEHOLDER = "See link for details"


def quote_yaml_string(value: str) -> str:
    """Render a string as a double-quoted YAML scalar.

    Args:
        value: String to quote

    Returns:
        The value wrapped in double quotes with backslashes and quotes escaped
    """
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", " ")
    return f'"{escaped}"'


def _json_filter(value: object) -> str:
    """Jinja2 filter: compact JSON without ASCII escaping."""
    return json.dumps(value, ensure_ascii=False)


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment shared by the note and archive writers."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["yaml_quote"] = quote_yaml_string
    env.filters["json"] = _json_filter
    return env


def resolve_folder(output_dir: Path, folder: Optional[str]) -> Path:
    """Resolve a rule's folder against the output directory.

    Relative folders (``./knowledge/tools``) live under output_dir; absolute
    folders are used as-is.
    """
    return output_dir / (folder or DEFAULT_FOLDER)


class KnowledgeWriter:
    """Writes filed bookmarks as markdown knowledge notes."""

    def __init__(self, output_dir: Path):
        """Initialize writer with the knowledge store root.

        Args:
            output_dir: Root directory; rule folders are resolved against it
        """
        self.output_dir = Path(output_dir)
        self._env = create_jinja_env()

    def note_path(self, rule: "CategoryRule", slug: str) -> Path:
        """Compute and validate the note path for a slug.

        Raises:
            InvalidSlugError: If slug is not a non-empty string.
            InvalidPathError: If slug would escape the rule's folder.
        """
        if not isinstance(slug, str) or not slug.strip():
            raise InvalidSlugError(f"Invalid slug computed: {slug!r}")

        if "/" in slug or "\\" in slug or slug in (".", "..") or "\x00" in slug:
            raise InvalidPathError(f"Invalid file path computed for slug: {slug!r}")

        folder = resolve_folder(self.output_dir, rule.folder)
        path = folder / f"{slug}.md"
        if path.parent != folder or path.name != f"{slug}.md":
            raise InvalidPathError(f"Invalid file path computed: {path}")

        return path

    def write(
        self,
        bookmark: "Bookmark",
        reasoning: "ReasoningResult",
        rule: "CategoryRule",
        slug: str,
    ) -> Optional[Path]:
        """Write the knowledge note for a bookmark.

        Args:
            bookmark: Original bookmark
            reasoning: Title, summary and tags for the note
            rule: Resolved category rule
            slug: Note identifier (file stem)

        Returns:
            Path to the written note, or None when the rule's action is not
            ``file``.

        Raises:
            InvalidSlugError: If slug is empty.
            InvalidPathError: If the computed path is malformed.
        """
        if rule.action != CategoryAction.FILE:
            return None

        path = self.note_path(rule, slug)
        content = self.render(bookmark, reasoning, rule)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

        logger.debug("Wrote knowledge note %s", path)
        return path

    def render(
        self,
        bookmark: "Bookmark",
        reasoning: "ReasoningResult",
        rule: "CategoryRule",
    ) -> str:
        """Render the markdown for a knowledge note."""
        link = bookmark.primary_link
        description = None
        if link is not None and link.content is not None:
            description = link.content.description

        context = {
            "title": reasoning.title,
            "template": rule.template or DEFAULT_TEMPLATE,
            "date_added": datetime.now().strftime("%Y-%m-%d"),
            "source": link.expanded if link else bookmark.tweet_url,
            "tags": [*reasoning.tags, *bookmark.tags],
            "via": f"Twitter bookmark from @{bookmark.author}",
            "summary": reasoning.summary,
            "key_features": description or KEY_FEATURES_PLACEHOLDER,
            "tweet_url": bookmark.tweet_url,
            "link": link.expanded if link else None,
        }

        return self._env.get_template("note.md.j2").render(**context)
