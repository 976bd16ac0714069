"""Pipeline orchestration for the superchat scraper.

Wires the four stages in order, each consuming the previous stage's
whole table:

1. **Fetch** -- page HTML from the browser (or a saved file) to a document
2. **Extract** -- document to RawRows
3. **Repair** -- RawRows to validated SuperchatRecords
4. **Report** -- records to per-sender summaries and leaders

There is no state carried between runs; the same document always yields
the same records and report.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from bs4 import BeautifulSoup

from superchat.config import ScraperConfig
from superchat.exceptions import FetchError
from superchat.http_client import ChatPageClient, fetch_document, load_document
from superchat.models import SuperchatRecord
from superchat.reporter import ChatReport, build_report, summarize_chatters
from superchat.row_extractor import extract_rows
from superchat.row_repairer import repair_rows
from superchat.validation import validate_batch

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything one run produced, plus drop counts for the summary."""

    url: str
    records: list[SuperchatRecord] = field(default_factory=list)
    report: ChatReport = field(default_factory=ChatReport)
    raw_rows: int = 0
    complete_rows: int = 0
    dropped_triplets: int = 0
    invalid_records: int = 0


def process_document(
    soup: BeautifulSoup,
    url: str,
    config: ScraperConfig | None = None,
) -> PipelineResult:
    """Run the extract, repair and report stages over a parsed page."""
    if config is None:
        config = ScraperConfig()

    rows = extract_rows(soup, config, url=url)

    repaired = repair_rows(rows, config)
    records, invalid = validate_batch(repaired.records, SuperchatRecord, {"url": url})
    if invalid:
        logger.warning("%d repaired records failed validation (%s)", invalid, url)

    report = build_report(summarize_chatters(records))

    return PipelineResult(
        url=url,
        records=records,
        report=report,
        raw_rows=repaired.input_rows,
        complete_rows=repaired.complete_rows,
        dropped_triplets=repaired.dropped_triplets,
        invalid_records=invalid,
    )


async def run_pipeline(
    url: str,
    config: ScraperConfig | None = None,
    client: ChatPageClient | None = None,
    html_path: str | Path | None = None,
) -> PipelineResult:
    """Fetch one archive page and run it through every stage.

    Args:
        url: Archive page URL. Still used for log and error context when
            ``html_path`` is given.
        config: ScraperConfig instance.
        client: A started ChatPageClient. If None, one is started and
            closed around the single fetch.
        html_path: Read the page from this saved file instead of fetching.

    Raises:
        FetchError: The page could not be fetched or parsed.
        StructuralMismatch: The page has no chat container.
    """
    if config is None:
        config = ScraperConfig()

    if html_path is not None:
        logger.info("Loading saved page %s (for %s)", html_path, url)
        soup = load_document(html_path)
    elif client is not None:
        soup = await fetch_document(client, url, content_marker=config.content_marker)
    else:
        try:
            async with ChatPageClient(config) as own_client:
                soup = await fetch_document(
                    own_client, url, content_marker=config.content_marker
                )
        except FetchError as exc:
            # Browser launch failures happen before any URL is known
            if exc.url is None:
                exc.url = url
            raise

    result = process_document(soup, url, config)
    logger.info(
        "Pipeline complete for %s: %d records from %d senders",
        url, len(result.records), len(result.report.summaries),
    )
    return result
