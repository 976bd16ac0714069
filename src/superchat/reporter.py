"""Aggregate reporting over repaired superchat records.

Provides:
- summarize_chatters: per-sender counts and JPY totals
- build_report: totals plus the most generous and most frequent senders
- format_summary / format_table: plain-text rendering for the console
- export_records: one-record-per-line TSV export

Senders are grouped in order of first appearance, and leader ties go to
the sender seen first, so output is deterministic for a given page.
"""

import csv
import logging
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path

from superchat.models import ChatterSummary, SuperchatRecord

logger = logging.getLogger(__name__)

EXPORT_FIELDS = ("user", "yen_value", "original_value_text", "comment")


@dataclass
class ChatReport:
    """Aggregate statistics over one page's superchats."""

    summaries: list[ChatterSummary] = field(default_factory=list)
    total_yen: float = 0.0
    most_generous: ChatterSummary | None = None
    most_frequent: ChatterSummary | None = None
    generous_share: float = 0.0  # percent of total_yen, 2 d.p.


def summarize_chatters(records: list[SuperchatRecord]) -> list[ChatterSummary]:
    """Group records by user into ChatterSummary objects."""
    counts: dict[str, int] = {}
    totals: dict[str, float] = {}
    for record in records:
        counts[record.user] = counts.get(record.user, 0) + 1
        totals[record.user] = totals.get(record.user, 0.0) + record.yen_value

    return [
        ChatterSummary(user=user, superchat_count=counts[user], total_yen=totals[user])
        for user in counts
    ]


def build_report(summaries: list[ChatterSummary]) -> ChatReport:
    """Compute totals and leaders from per-sender summaries."""
    report = ChatReport(summaries=list(summaries))
    if not summaries:
        return report

    report.total_yen = sum(s.total_yen for s in summaries)

    generous = summaries[0]
    frequent = summaries[0]
    for summary in summaries[1:]:
        if summary.total_yen > generous.total_yen:
            generous = summary
        if summary.superchat_count > frequent.superchat_count:
            frequent = summary

    report.most_generous = generous
    report.most_frequent = frequent
    if report.total_yen > 0:
        report.generous_share = round(generous.total_yen / report.total_yen * 100, 2)

    logger.debug(
        "Report: %d senders, total %.0f JPY, generous=%s, frequent=%s",
        len(summaries), report.total_yen, generous.user, frequent.user,
    )
    return report


def format_yen(value: float) -> str:
    return f"¥{value:,.0f}"


def format_summary(report: ChatReport) -> str:
    """Human-readable two-line summary of the report's leaders."""
    if report.most_generous is None or report.most_frequent is None:
        return "No superchats found."

    generous = report.most_generous
    frequent = report.most_frequent
    return "\n".join([
        "Most generous: {} with {} ({:.2f}% of {} total)".format(
            generous.user,
            format_yen(generous.total_yen),
            report.generous_share,
            format_yen(report.total_yen),
        ),
        "Most frequent: {} with {} superchats ({})".format(
            frequent.user,
            frequent.superchat_count,
            format_yen(frequent.total_yen),
        ),
    ])


def format_table(
    summaries: list[ChatterSummary],
    width: int = 80,
    top_n: int | None = None,
) -> str:
    """Render per-sender summaries as a fixed-width table.

    Rows are ordered by total JPY, highest first. ``width`` is the full
    line width; the user column takes whatever the other columns leave.
    """
    ranked = sorted(summaries, key=lambda s: s.total_yen, reverse=True)
    if top_n is not None:
        ranked = ranked[:top_n]

    count_w, total_w, rank_w = 6, 14, 4
    user_w = max(width - count_w - total_w - rank_w - 3, 8)

    lines = [
        "=" * width,
        "{} {} {} {}".format(
            _pad("#", rank_w),
            _pad("User", user_w),
            "Count".rjust(count_w),
            "Total (JPY)".rjust(total_w),
        ),
        "-" * width,
    ]
    for rank, summary in enumerate(ranked, start=1):
        lines.append("{} {} {} {}".format(
            _pad(str(rank), rank_w),
            _pad(_truncate(summary.user, user_w), user_w),
            str(summary.superchat_count).rjust(count_w),
            format_yen(summary.total_yen).rjust(total_w),
        ))
    lines.append("=" * width)
    return "\n".join(lines)


def export_records(records: list[SuperchatRecord], path: str | Path) -> Path:
    """Write records as tab-separated lines with a header row."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter="\t", lineterminator="\n")
        writer.writerow(EXPORT_FIELDS)
        for record in records:
            writer.writerow([getattr(record, name) for name in EXPORT_FIELDS])

    logger.info("Exported %d records to %s", len(records), path)
    return path


def _display_width(text: str) -> int:
    # Full-width (CJK) characters take two terminal cells.
    return sum(2 if unicodedata.east_asian_width(ch) in "WF" else 1 for ch in text)


def _truncate(text: str, width: int) -> str:
    if _display_width(text) <= width:
        return text
    out = ""
    for ch in text:
        if _display_width(out + ch) > width - 1:
            break
        out += ch
    return out + "…"


def _pad(text: str, width: int) -> str:
    return text + " " * max(width - _display_width(text), 0)
