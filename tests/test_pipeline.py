"""Tests for the pipeline orchestrator (superchat.pipeline).

Runs the full extract -> repair -> report chain over the shared archive
page fixture, with the fetch stage served from disk or a mocked client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bs4 import BeautifulSoup

from superchat.config import ScraperConfig
from superchat.exceptions import FetchError, StructuralMismatch
from superchat.pipeline import process_document, run_pipeline

URL = "https://example.org/archive/abc"


class TestProcessDocument:
    """Pure stages over an already-parsed page."""

    @pytest.fixture(autouse=True)
    def setup(self, archive_html):
        self.result = process_document(BeautifulSoup(archive_html, "lxml"), URL)

    def test_records(self):
        assert [(r.user, r.yen_value, r.comment) for r in self.result.records] == [
            ("Alice", 750.0, "Great stream!"),
            ("Bob", 500.0, "Member emote"),
            ("Alice", 1000.0, "Again!"),
        ]

    def test_original_value_text_kept(self):
        assert [r.original_value_text for r in self.result.records] == [
            "$5.00", "¥500", "¥1,000",
        ]

    def test_every_record_has_non_negative_value(self):
        assert all(r.yen_value >= 0 for r in self.result.records)

    def test_report(self):
        report = self.result.report
        assert report.total_yen == 2250.0
        assert report.most_generous.user == "Alice"
        assert report.most_frequent.user == "Alice"
        assert report.generous_share == 77.78

    def test_counts(self):
        assert self.result.raw_rows == 9
        assert self.result.complete_rows == 9
        assert self.result.dropped_triplets == 0
        assert self.result.invalid_records == 0

    def test_structural_grouping_matches_positional_on_clean_page(self, archive_html):
        structural = process_document(
            BeautifulSoup(archive_html, "lxml"), URL, ScraperConfig(grouping="structural"),
        )
        assert structural.records == self.result.records

    def test_rerun_is_identical(self, archive_html):
        again = process_document(BeautifulSoup(archive_html, "lxml"), URL)
        assert again.records == self.result.records
        assert again.report == self.result.report


@pytest.mark.asyncio
async def test_run_pipeline_from_saved_file(tmp_path, archive_html):
    path = tmp_path / "page.html"
    path.write_text(archive_html, encoding="utf-8")

    result = await run_pipeline(URL, html_path=path)

    assert result.url == URL
    assert len(result.records) == 3


@pytest.mark.asyncio
async def test_run_pipeline_with_client(archive_html):
    client = MagicMock()
    client.fetch = AsyncMock(return_value=archive_html)

    result = await run_pipeline(URL, config=ScraperConfig(), client=client)

    client.fetch.assert_awaited_once_with(URL, content_marker="chatarea")
    assert len(result.records) == 3


@pytest.mark.asyncio
@patch("nodriver.start")
async def test_run_pipeline_starts_and_closes_own_browser(mock_start, archive_html):
    tab = AsyncMock()
    tab.evaluate = AsyncMock(
        side_effect=lambda js: "Stream archive" if "title" in js else archive_html
    )
    browser = AsyncMock()
    browser.get = AsyncMock(return_value=tab)
    browser.stop = MagicMock()
    mock_start.return_value = browser

    result = await run_pipeline(URL, config=ScraperConfig(page_load_wait=0.0))

    assert len(result.records) == 3
    browser.stop.assert_called_once()


@pytest.mark.asyncio
@patch("nodriver.start", side_effect=FileNotFoundError("no chrome"))
async def test_run_pipeline_browser_launch_failure_carries_url(mock_start):
    with pytest.raises(FetchError, match="Could not start browser") as exc_info:
        await run_pipeline(URL)
    assert exc_info.value.stage == "fetch"
    assert exc_info.value.url == URL


@pytest.mark.asyncio
async def test_run_pipeline_fetch_error_propagates():
    client = MagicMock()
    client.fetch = AsyncMock(side_effect=FetchError("boom", url=URL, stage="fetch"))

    with pytest.raises(FetchError) as exc_info:
        await run_pipeline(URL, client=client)
    assert exc_info.value.stage == "fetch"


@pytest.mark.asyncio
async def test_run_pipeline_wrong_page_raises_structural(tmp_path):
    path = tmp_path / "page.html"
    path.write_text("<html><body><p>Not an archive</p></body></html>", encoding="utf-8")

    with pytest.raises(StructuralMismatch) as exc_info:
        await run_pipeline(URL, html_path=path)
    assert exc_info.value.stage == "extract"
    assert exc_info.value.url == URL
