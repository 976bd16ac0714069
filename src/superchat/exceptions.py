"""Custom exception hierarchy for the superchat scraper.

Exception tree:
    SuperchatScraperError
    +-- FetchError          (network failure, bad page, malformed HTML)
    +-- ParseError          (value text with no number in it)
    +-- StructuralMismatch  (page or row lacks the expected elements)

Every error carries the page URL and the pipeline stage it was raised in
so the CLI can report where extraction stopped.
"""

from typing import Optional


class SuperchatScraperError(Exception):
    """Base exception for all superchat scraper errors."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        self.url = url
        self.stage = stage
        super().__init__(message)


class FetchError(SuperchatScraperError):
    """The page could not be retrieved or parsed into a document.

    Fatal -- there are no retries, so the run aborts.
    """

    pass


class ParseError(SuperchatScraperError):
    """A value cell could not be reduced to a number.

    Recovered locally: the value becomes missing and the row is dropped.
    """

    pass


class StructuralMismatch(SuperchatScraperError):
    """The document does not have the expected table structure.

    Raised when the chat container itself is missing. Individual rows
    lacking sub-elements never raise; they come back with absent fields.
    """

    pass
