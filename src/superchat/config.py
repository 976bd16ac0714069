"""Scraper configuration with sensible defaults for stream archive pages."""

from dataclasses import dataclass

WORDLESS_SOURCE_LITERAL = "無言スパチャ"
WORDLESS_PLACEHOLDER = "wordless superchat"
EMOTE_PLACEHOLDER = "Member emote"


@dataclass
class ScraperConfig:
    """Configuration for the superchat scraper.

    All timing values are in seconds. Selector defaults match the archive
    page layout: a ``#chatarea`` container holding ``tr.visible`` rows
    (``tr.hidden`` rows are membership events).
    """

    # Row selection
    container_selector: str = "#chatarea"
    row_class: str = "visible"
    hidden_class: str = "hidden"

    # Cell selection within a row
    left_selector: str = ".align-left"
    right_selector: str = ".align-right"
    comment_selector: str = ".comment"
    # Placeholder element inside a commentless superchat's comment cell
    comment_nested_selector: str = "span"

    # Comment placeholder substitution
    wordless_literal: str = WORDLESS_SOURCE_LITERAL
    wordless_placeholder: str = WORDLESS_PLACEHOLDER
    emote_placeholder: str = EMOTE_PLACEHOLDER

    # Triplet grouping: "positional" (stride of 3) or "structural"
    # (rows sharing a parent element)
    grouping: str = "positional"

    # Fetching
    navigation_timeout: float = 30.0
    page_load_wait: float = 1.0
    min_document_size: int = 200
    content_marker: str = "chatarea"

    # Reporting
    report_width: int = 80
    top_n: int = 10

    # Log directory lives under here
    data_dir: str = "data"
