"""Parser for reasoning provider output.

Turns the raw text returned by the LLM into a validated ReasoningResult.
Tolerates a surrounding markdown code block and prose before or after the
JSON object; anything else is rejected whole.
"""

import json
import re
from typing import Any

from smaug.core.bookmark import ReasoningResult
from smaug.core.exceptions import ParseError, ValidationError

# ```json ... ``` or ``` ... ``` anywhere in the text
CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

# String fields, in the order they are validated
REQUIRED_TEXT_FIELDS = ("title", "summary", "category")


def _extract_json_text(raw_output: str) -> str:
    """Strip code fences and surrounding prose from raw output."""
    text = raw_output.strip()

    match = CODE_BLOCK_PATTERN.search(text)
    if match:
        text = match.group(1).strip()

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace != -1:
        text = text[first_brace : last_brace + 1]

    return text


def _require_text(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(name)
    return value.strip()


def parse_reasoning_output(raw_output: str) -> ReasoningResult:
    """Parse and validate raw reasoning output.

    Args:
        raw_output: Text returned by the reasoning provider.

    Returns:
        ReasoningResult with trimmed strings and empty tags removed.

    Raises:
        ParseError: If the text does not contain a JSON object.
        ValidationError: If title, summary or category is missing/empty, or
            tags is not a list. ``error.field`` names the offending field.
    """
    if not isinstance(raw_output, str):
        raise ParseError(f"Reasoning output must be text, got {type(raw_output).__name__}")

    text = _extract_json_text(raw_output)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Reasoning output is not valid JSON: {e.msg}")

    if not isinstance(data, dict):
        raise ParseError(
            f"Reasoning output is not a JSON object: {type(data).__name__}"
        )

    title, summary, category = (
        _require_text(data, name) for name in REQUIRED_TEXT_FIELDS
    )

    tags = data.get("tags")
    if not isinstance(tags, list):
        raise ValidationError("tags", 'Invalid "tags" field: must be array')

    cleaned_tags = [str(tag).strip() for tag in tags if tag is not None]

    return ReasoningResult(
        title=title,
        summary=summary,
        tags=[tag for tag in cleaned_tags if tag],
        category=category,
    )
