"""Row extractor for stream archive chat tables.

Provides:
- extract_rows: pure function turning a parsed archive page into RawRows
- RawRow: one table row as scraped, before any repair

Rows are selected from the ``#chatarea`` container by their ``visible``
class. Rows that also carry ``hidden`` are membership events; they sit in
the same table as superchat rows and must be excluded, not skipped later.
"""

import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from superchat.config import ScraperConfig
from superchat.exceptions import StructuralMismatch

logger = logging.getLogger(__name__)

STAGE = "extract"


@dataclass
class RawRow:
    """A single scraped table row. Fields are None when the cell is absent."""

    position: int  # 0-based document order among selected rows
    group: int  # index of the row's parent element, in document order
    left_texts: list[str] = field(default_factory=list)
    right_text: str | None = None  # absent means the value was already JPY
    comment_text: str | None = None

    @property
    def primary_text(self) -> str | None:
        """First left-aligned text: the amount, user or comment slot."""
        return self.left_texts[0] if self.left_texts else None


def extract_rows(
    soup: BeautifulSoup,
    config: ScraperConfig | None = None,
    url: str | None = None,
) -> list[RawRow]:
    """Extract every superchat row from an archive page, in document order.

    Pure function: document in, RawRows out. Rows missing cells come back
    with empty/None fields; filtering them is the repairer's job.

    Raises:
        StructuralMismatch: If the chat container is not on the page.
    """
    if config is None:
        config = ScraperConfig()

    container = soup.select_one(config.container_selector)
    if container is None:
        raise StructuralMismatch(
            f"No {config.container_selector!r} container found",
            url=url,
            stage=STAGE,
        )

    candidates = container.select(f".{config.row_class}")
    selected = [
        el for el in candidates if config.hidden_class not in el.get("class", [])
    ]
    excluded = len(candidates) - len(selected)
    if excluded:
        logger.debug("Excluded %d hidden (membership) rows", excluded)

    parent_index: dict[int, int] = {}
    rows: list[RawRow] = []
    for position, el in enumerate(selected):
        group = parent_index.setdefault(id(el.parent), len(parent_index))
        rows.append(_extract_row(el, position, group, config))

    logger.info(
        "Extracted %d rows from %s (%d hidden excluded)",
        len(rows),
        url or "document",
        excluded,
    )
    return rows


def _extract_row(el: Tag, position: int, group: int, config: ScraperConfig) -> RawRow:
    """Pull the left/right/comment texts out of a single row element."""
    left_texts = [
        cell.get_text(strip=True) for cell in el.select(config.left_selector)
    ]

    right_el = el.select_one(config.right_selector)
    right_text = right_el.get_text(strip=True) if right_el else None

    return RawRow(
        position=position,
        group=group,
        left_texts=left_texts,
        right_text=right_text,
        comment_text=_extract_comment(el, config),
    )


def _extract_comment(el: Tag, config: ScraperConfig) -> str | None:
    """Comment cell text, preferring a nested placeholder element's text.

    Commentless superchats get a styled placeholder element
    (``comment_nested_selector``) inside the cell; when one is there its
    text is the comment. Other markup such as emote images or line breaks
    does not count, so ``hello<img>`` stays ``hello``.
    """
    cell = el.select_one(config.comment_selector)
    if cell is None:
        return None

    nested = cell.select_one(config.comment_nested_selector)
    if nested is not None:
        return nested.get_text(strip=True)
    return cell.get_text(strip=True)
