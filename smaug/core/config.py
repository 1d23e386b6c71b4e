"""Configuration for the Smaug bookmark archiver.

Configuration is loaded from environment variables once, at the program
edge, and then passed explicitly to the components that need it. Values are
validated at load time to fail fast on invalid settings.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from smaug.core.exceptions import ConfigurationError

DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OUTPUT_DIR = "./bookmarks"

# Seconds allowed for one reasoning call
DEFAULT_REASONING_TIMEOUT = 20.0

# Prompts longer than this skip the reasoning call entirely
DEFAULT_MAX_PROMPT_CHARS = 3000


@dataclass
class Config:
    """Archiver configuration.

    Optional (with defaults):
        openrouter_api_key: API key for the reasoning provider. Empty means
            the archiver runs offline on default metadata.
        openrouter_model: Model requested from OpenRouter.
        openrouter_base_url: OpenRouter API root.
        output_dir: Root of the knowledge store (archive + knowledge/).
        categories_file: JSON category registry; None uses the built-in one.
        reasoning_timeout: Seconds allowed for one reasoning call.
        max_prompt_chars: Prompt length above which reasoning is skipped.
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    openrouter_api_key: str = ""
    openrouter_model: str = DEFAULT_MODEL
    openrouter_base_url: str = DEFAULT_BASE_URL
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    categories_file: Optional[Path] = None
    reasoning_timeout: float = DEFAULT_REASONING_TIMEOUT
    max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if isinstance(self.categories_file, str):
            self.categories_file = Path(self.categories_file)

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_log_levels:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(valid_log_levels))}"
            )
        self.log_level = self.log_level.upper()

        if self.reasoning_timeout <= 0:
            raise ConfigurationError("SMAUG_REASONING_TIMEOUT must be positive")
        if self.max_prompt_chars < 1:
            raise ConfigurationError("SMAUG_MAX_PROMPT_CHARS must be at least 1")
        if not self.openrouter_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"OPENROUTER_BASE_URL must be an http(s) URL, got '{self.openrouter_base_url}'"
            )

    @property
    def archive_file(self) -> Path:
        """The running markdown archive."""
        return self.output_dir / "bookmarks.md"


def load_config(*, require_api_key: bool = True) -> Config:
    """Load configuration from environment variables.

    Args:
        require_api_key: If True (default), raises ConfigurationError when
            OPENROUTER_API_KEY is missing. Set to False for offline runs.

    Returns:
        Config object with all settings loaded.

    Raises:
        ConfigurationError: If required config is missing or values are invalid.
    """
    api_key = os.environ.get("OPENROUTER_API_KEY", "")

    if require_api_key and not api_key:
        raise ConfigurationError(
            "OPENROUTER_API_KEY environment variable is required but not set"
        )

    def get_float(key: str, default: float) -> float:
        """Parse float from env var with default."""
        value = os.environ.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a valid number, got '{value}'")

    def get_int(key: str, default: int) -> int:
        """Parse int from env var with default."""
        value = os.environ.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a valid integer, got '{value}'")

    categories_file = os.environ.get("SMAUG_CATEGORIES_FILE")

    return Config(
        openrouter_api_key=api_key,
        openrouter_model=os.environ.get("OPENROUTER_MODEL", DEFAULT_MODEL),
        openrouter_base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
        output_dir=Path(os.environ.get("SMAUG_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)),
        categories_file=Path(categories_file) if categories_file else None,
        reasoning_timeout=get_float("SMAUG_REASONING_TIMEOUT", DEFAULT_REASONING_TIMEOUT),
        max_prompt_chars=get_int("SMAUG_MAX_PROMPT_CHARS", DEFAULT_MAX_PROMPT_CHARS),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
