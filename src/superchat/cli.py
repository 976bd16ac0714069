"""CLI entry point for the superchat scraper.

Provides ``main()`` as the sync entry point for the ``superchat-scraper``
console script, and ``async_main(args)`` which sets up logging, runs the
pipeline for one archive page, and prints the report.

Usage::

    superchat-scraper https://example.org/archive/abc
    superchat-scraper URL --html-file saved.html.gz   # offline
    superchat-scraper URL --grouping structural --output chats.tsv
"""

import argparse
import asyncio
import logging
import sys
import time

from superchat.config import ScraperConfig
from superchat.exceptions import SuperchatScraperError
from superchat.logging_config import setup_logging
from superchat.pipeline import PipelineResult, run_pipeline
from superchat.reporter import export_records, format_summary, format_table
from superchat.row_repairer import GROUPING_STRATEGIES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the superchat-scraper CLI."""
    parser = argparse.ArgumentParser(
        prog="superchat-scraper",
        description="Extract and summarize superchats from a stream archive page",
    )
    parser.add_argument(
        "url",
        help="Archive page URL",
    )
    parser.add_argument(
        "--html-file",
        type=str,
        default=None,
        help="Read the page from a saved .html or .html.gz file instead of fetching",
    )
    parser.add_argument(
        "--grouping",
        choices=GROUPING_STRATEGIES,
        default="positional",
        help="How raw rows are grouped into triplets (default: positional)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=80,
        help="Report table width in characters (default: 80)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of senders listed in the table (default: 10)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Also write all records to this TSV file",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory for log files (default: data)",
    )
    parser.add_argument(
        "--nav-timeout",
        type=float,
        default=None,
        help="Page navigation timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show per-row DEBUG output, tagged with logger names, on the console",
    )
    return parser


def _format_results(result: PipelineResult, wall_time: float, log_file: str) -> str:
    """Format end-of-run counts into a human-readable summary string."""
    lines = [
        "=" * 60,
        f"Superchats for {result.url}",
        "-" * 60,
        "Rows:        {} scraped, {} complete".format(
            result.raw_rows, result.complete_rows,
        ),
        "Records:     {} kept, {} triplets dropped, {} invalid".format(
            len(result.records), result.dropped_triplets, result.invalid_records,
        ),
        "Senders:     {}".format(len(result.report.summaries)),
        "-" * 60,
        f"Wall time:   {wall_time:.1f}s",
        f"Log file:    {log_file}",
        "=" * 60,
    ]
    return "\n".join(lines)


async def async_main(args: argparse.Namespace) -> int:
    """Async entry point: set up logging, run the pipeline, print the report.

    Returns:
        Process exit status (0 on success, 1 on a scraper error).
    """
    log_file = setup_logging(data_dir=args.data_dir, verbose=args.verbose, url=args.url)

    config_overrides = {
        "data_dir": args.data_dir,
        "grouping": args.grouping,
        "report_width": args.width,
        "top_n": args.top,
    }
    if args.nav_timeout is not None:
        config_overrides["navigation_timeout"] = args.nav_timeout
    config = ScraperConfig(**config_overrides)

    logger.info(
        "Starting superchat-scraper: url=%s, source=%s, grouping=%s, log=%s",
        args.url, args.html_file or "browser", config.grouping, log_file,
    )

    start_time = time.monotonic()
    try:
        result = await run_pipeline(args.url, config=config, html_path=args.html_file)
    except SuperchatScraperError as exc:
        logger.error(
            "%s stage failed for %s: %s",
            exc.stage or "pipeline", exc.url or args.url, exc,
        )
        return 1
    finally:
        wall_time = time.monotonic() - start_time

    if args.output:
        export_records(result.records, args.output)

    print(format_summary(result.report))
    print(format_table(
        result.report.summaries, width=config.report_width, top_n=config.top_n,
    ))
    logger.info("\n%s", _format_results(result, wall_time, str(log_file)))
    return 0


def main() -> None:
    """Sync entry point for the superchat-scraper console script."""
    parser = build_parser()
    args = parser.parse_args()
    try:
        status = asyncio.run(async_main(args))
    finally:
        logging.shutdown()
    sys.exit(status)


if __name__ == "__main__":
    main()
