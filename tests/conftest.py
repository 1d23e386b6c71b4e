"""Shared test fixtures for the Smaug bookmark archiver.

Provides reusable fixtures for integration and unit tests, especially for
temporary directory management so tests never write to a real knowledge
store.
"""

from pathlib import Path

import pytest

from smaug.core.categories import CategoryRegistry
from smaug.core.config import Config


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary knowledge store root.

    Args:
        tmp_path: pytest's built-in temp directory fixture.

    Returns:
        Path to temporary output directory (created but empty).
    """
    output_dir = tmp_path / "bookmarks"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


@pytest.fixture
def config(temp_output_dir: Path) -> Config:
    """Offline configuration pointing at the temporary output directory."""
    return Config(output_dir=temp_output_dir)


@pytest.fixture
def registry() -> CategoryRegistry:
    """The built-in category registry."""
    return CategoryRegistry.default()
