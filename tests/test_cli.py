"""Tests for the CLI argument parsing and async entry point."""

import logging
from unittest.mock import patch

import pytest

from superchat.cli import async_main, build_parser

URL = "https://example.org/archive/abc"


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestBuildParser:
    """Tests for CLI argument parsing."""

    def test_default_args(self):
        args = build_parser().parse_args([URL])
        assert args.url == URL
        assert args.html_file is None
        assert args.grouping == "positional"
        assert args.width == 80
        assert args.top == 10
        assert args.output is None
        assert args.data_dir == "data"
        assert args.nav_timeout is None
        assert args.verbose is False

    def test_url_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_invalid_grouping_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([URL, "--grouping", "diagonal"])

    def test_all_flags_combined(self):
        args = build_parser().parse_args([
            URL,
            "--html-file", "saved.html",
            "--grouping", "structural",
            "--width", "100",
            "--top", "5",
            "--output", "out.tsv",
            "--data-dir", "/tmp/sc",
            "--nav-timeout", "12.5",
            "--verbose",
        ])
        assert args.html_file == "saved.html"
        assert args.grouping == "structural"
        assert args.width == 100
        assert args.top == 5
        assert args.output == "out.tsv"
        assert args.data_dir == "/tmp/sc"
        assert args.nav_timeout == 12.5
        assert args.verbose is True


class TestAsyncMain:

    @pytest.mark.asyncio
    async def test_report_from_saved_page(self, tmp_path, archive_html, capsys):
        page = tmp_path / "page.html"
        page.write_text(archive_html, encoding="utf-8")
        out = tmp_path / "chats.tsv"
        args = build_parser().parse_args([
            URL, "--html-file", str(page), "--data-dir", str(tmp_path),
            "--output", str(out),
        ])

        status = await async_main(args)

        assert status == 0
        printed = capsys.readouterr().out
        assert "Most generous: Alice" in printed
        assert "Most frequent: Alice" in printed
        assert len(out.read_text(encoding="utf-8").splitlines()) == 4
        assert list((tmp_path / "logs").glob("superchat-*.log"))

    @pytest.mark.asyncio
    async def test_failure_returns_nonzero(self, tmp_path, capsys):
        args = build_parser().parse_args([
            URL, "--html-file", str(tmp_path / "missing.html"),
            "--data-dir", str(tmp_path),
        ])

        status = await async_main(args)

        assert status == 1
        assert "Most generous" not in capsys.readouterr().out

    @pytest.mark.asyncio
    @patch("nodriver.start", side_effect=FileNotFoundError("no chrome"))
    async def test_browser_launch_failure_returns_nonzero(self, mock_start, tmp_path):
        args = build_parser().parse_args([URL, "--data-dir", str(tmp_path)])

        status = await async_main(args)

        assert status == 1
        mock_start.assert_called_once()
        log_text = next((tmp_path / "logs").glob("superchat-*.log")).read_text(
            encoding="utf-8"
        )
        assert f"fetch stage failed for {URL}: Could not start browser" in log_text
