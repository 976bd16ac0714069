"""Archive page fetcher using nodriver.

Uses a real Chrome browser to load the stream archive page, then reads
the rendered document back over CDP. One page, one attempt: there is no
retry loop and no cache, so any failure surfaces as ``FetchError`` and
aborts the run.

Also provides ``parse_document`` / ``load_document`` so the rest of the
pipeline only ever sees a BeautifulSoup tree, whether the HTML came from
the browser or from a saved copy on disk.
"""

import asyncio
import gzip
import logging
import re
from pathlib import Path
from typing import Any

import nodriver
from bs4 import BeautifulSoup

from superchat.config import ScraperConfig
from superchat.exceptions import FetchError

logger = logging.getLogger(__name__)

STAGE = "fetch"

# Page titles Chrome shows for non-success responses served as HTML.
_ERROR_TITLES = (
    "400 Bad Request",
    "403 Forbidden",
    "404 Not Found",
    "410 Gone",
    "500 Internal Server Error",
    "502 Bad Gateway",
    "503 Service Unavailable",
    "504 Gateway Time-out",
)

# Chrome's own network error interstitial (DNS failure, refused, offline).
_NETWORK_ERROR_MARKERS = ('id="main-frame-error"', "ERR_NAME_NOT_RESOLVED")


class ChatPageClient:
    """Fetches archive pages through a single headless Chrome instance.

    Usage:
        async with ChatPageClient(config) as client:
            html = await client.fetch("https://example.org/archive/abc")
    """

    def __init__(self, config: ScraperConfig | None = None):
        if config is None:
            config = ScraperConfig()

        self._config = config
        self._browser: nodriver.Browser | None = None
        self._request_count = 0

    async def start(self) -> None:
        """Launch Chrome headless.

        Raises:
            FetchError: If the browser cannot be launched (Chrome missing,
                sandbox or profile setup failure). ``url`` is left unset;
                callers that know the page attach it.
        """
        browser_args = [
            "--window-size=1280,900",
            "--lang=ja-JP,ja,en-US,en",
            "--no-first-run",
            "--no-default-browser-check",
        ]
        try:
            self._browser = await nodriver.start(
                headless=True,
                browser_args=browser_args,
                no_sandbox=True,
            )
        except Exception as exc:
            raise FetchError(f"Could not start browser: {exc}", stage=STAGE) from exc
        logger.debug("Browser started")

    async def fetch(self, url: str, content_marker: str | None = None) -> str:
        """Navigate to a URL and return the rendered page HTML.

        Args:
            url: The full URL to fetch.
            content_marker: Optional string that must appear in the HTML.

        Returns:
            The page HTML as a string.

        Raises:
            FetchError: On navigation failure, timeout, an HTTP error page,
                a too-short document, or a missing content marker.
        """
        if self._browser is None:
            raise FetchError(
                "Browser not started. Call start() first.", url=url, stage=STAGE
            )

        self._request_count += 1
        try:
            tab = await asyncio.wait_for(
                self._browser.get(url),
                timeout=self._config.navigation_timeout,
            )
            await asyncio.sleep(self._config.page_load_wait)

            # nodriver may return ExceptionDetails instead of str on error
            title = await tab.evaluate("document.title")
            if not isinstance(title, str):
                title = ""
            html = await tab.evaluate("document.documentElement.outerHTML")
            if not isinstance(html, str):
                html = ""
        except asyncio.TimeoutError as exc:
            raise FetchError(
                f"Navigation to {url} timed out after "
                f"{self._config.navigation_timeout:.0f}s",
                url=url,
                stage=STAGE,
            ) from exc
        except Exception as exc:
            raise FetchError(
                f"Failed to fetch {url}: {exc}", url=url, stage=STAGE
            ) from exc

        if any(marker in html for marker in _NETWORK_ERROR_MARKERS):
            codes = re.findall(r"ERR_[A-Z_]+", html)
            code = codes[0] if codes else "ERR_UNKNOWN"
            raise FetchError(
                f"Network error loading {url} ({code})", url=url, stage=STAGE
            )

        if any(title.startswith(t) for t in _ERROR_TITLES):
            raise FetchError(
                f"Server returned an error page for {url} (title: {title!r})",
                url=url,
                stage=STAGE,
            )

        if len(html) < self._config.min_document_size:
            raise FetchError(
                f"Response too short from {url} ({len(html)} chars)",
                url=url,
                stage=STAGE,
            )

        if content_marker and content_marker not in html:
            raise FetchError(
                f"Content marker {content_marker!r} not found on {url} "
                f"({len(html)} chars)",
                url=url,
                stage=STAGE,
            )

        logger.debug("Fetched %s (%d chars)", url, len(html))
        return html

    async def close(self) -> None:
        """Stop Chrome. Safe to call more than once."""
        if not self._browser:
            return

        browser = self._browser
        self._browser = None
        browser.stop()
        logger.debug("Browser stopped")

    async def __aenter__(self) -> "ChatPageClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def stats(self) -> dict:
        """Return current client statistics."""
        return {"requests": self._request_count}


def parse_document(html: str, url: str | None = None) -> BeautifulSoup:
    """Parse page HTML into a document tree.

    Raises:
        FetchError: If the HTML is empty or has no elements at all.
    """
    if not html or not html.strip():
        raise FetchError("Empty document", url=url, stage=STAGE)

    soup = BeautifulSoup(html, "lxml")
    if soup.find() is None:
        raise FetchError("Malformed HTML: no elements found", url=url, stage=STAGE)
    return soup


async def fetch_document(
    client: ChatPageClient, url: str, content_marker: str | None = None
) -> BeautifulSoup:
    """Fetch a page through ``client`` and parse it."""
    html = await client.fetch(url, content_marker=content_marker)
    return parse_document(html, url=url)


def load_document(path: str | Path) -> BeautifulSoup:
    """Parse a saved copy of an archive page (plain or gzip-compressed).

    Raises:
        FetchError: If the file cannot be read or holds no HTML.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
        if path.suffix == ".gz":
            raw = gzip.decompress(raw)
        html = raw.decode("utf-8")
    except (OSError, EOFError, UnicodeDecodeError) as exc:
        raise FetchError(
            f"Could not read saved page {path}: {exc}", url=str(path), stage=STAGE
        ) from exc

    logger.debug("Loaded %s (%d chars)", path, len(html))
    return parse_document(html, url=str(path))
