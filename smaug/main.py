"""Main entry point for the Smaug bookmark archiver.

Archives a bookmark export into the knowledge store.

Usage:
    python -m smaug.main bookmarks.json                  # Archive with AI reasoning
    python -m smaug.main bookmarks.json --offline        # Heuristics only, no API key
    python -m smaug.main bookmarks.json --output-dir ./kb --categories categories.json
    python -m smaug.main bookmarks.json --json-logs -v   # JSON debug logging
"""

import argparse
import asyncio
import sys
from pathlib import Path

from smaug.core.categories import CategoryRegistry
from smaug.core.config import load_config
from smaug.core.exceptions import ConfigurationError, ParseError
from smaug.core.logger import get_logger, setup_logging
from smaug.core.pipeline import Pipeline, PipelineResult
from smaug.core.reasoning import OpenRouterReasoner
from smaug.sources.bookmark_reader import parse_bookmark_export

logger = get_logger(__name__)


def print_stats(result: PipelineResult) -> None:
    """Print processing statistics to stdout."""
    print("\n=== Archiving Complete ===")
    print(f"Processed: {result.processed}/{result.total}")
    print(f"Skipped:   {result.skipped}")
    stats = result.dedup_stats
    if stats.total_checked:
        print(
            f"Duplicates: {stats.duplicates_found}/{stats.total_checked} "
            f"({stats.duplicate_rate:.1f}%)"
        )
    print(f"Failed:    {result.failed}")

    for item in result.results:
        target = item.file_path or "archive only"
        print(f"  - [{item.category}] {item.title} -> {target}")

    if result.errors:
        print(f"\nErrors ({len(result.errors)}):")
        for error in result.errors[:10]:  # Limit to first 10
            print(f"  - {error}")
        if len(result.errors) > 10:
            print(f"  ... and {len(result.errors) - 10} more")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="smaug",
        description="Classify bookmarked posts and archive them into a markdown knowledge store.",
    )

    parser.add_argument(
        "input",
        type=Path,
        metavar="INPUT",
        help="JSON file with the bookmarks to archive",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Knowledge store root (default: SMAUG_OUTPUT_DIR or ./bookmarks)",
    )

    parser.add_argument(
        "--categories",
        type=Path,
        default=None,
        metavar="FILE",
        help="JSON category registry (default: built-in categories)",
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip AI reasoning and use local heuristics only",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines instead of the console trace",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, 1 for errors).
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    try:
        config = load_config(require_api_key=not parsed_args.offline)
        if parsed_args.output_dir is not None:
            config.output_dir = parsed_args.output_dir
        categories_file = parsed_args.categories or config.categories_file
        registry = (
            CategoryRegistry.from_file(categories_file)
            if categories_file
            else CategoryRegistry.default()
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if parsed_args.verbose else config.log_level
    setup_logging(log_level, json_format=parsed_args.json_logs)

    try:
        bookmarks = parse_bookmark_export(parsed_args.input)
    except (FileNotFoundError, ParseError) as e:
        print(f"Cannot read bookmarks: {e}", file=sys.stderr)
        return 1

    reasoner = None
    if not parsed_args.offline:
        reasoner = OpenRouterReasoner(
            api_key=config.openrouter_api_key,
            model=config.openrouter_model,
            base_url=config.openrouter_base_url,
        )

    logger.info(
        "Archiving %d bookmark(s) into %s (%s)",
        len(bookmarks),
        config.output_dir,
        "offline" if reasoner is None else config.openrouter_model,
    )

    pipeline = Pipeline(config, registry=registry, reasoner=reasoner)
    result = asyncio.run(pipeline.process(bookmarks))
    print_stats(result)

    return 0 if result.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
