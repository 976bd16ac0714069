"""Row repairer: turns scraped RawRows into superchat record dicts.

The archive page renders every superchat as three consecutive table rows
(a triplet) with the fields spread across them:

* offset 0 -- the amount row: displayed value in the first left-aligned
  cell, the JPY conversion in the right-aligned cell when the original
  currency was not JPY.
* offset 1 -- the user row: sender name in the first left-aligned cell and
  a placeholder in the comment cell.
* offset 2 -- a second user row whose first left-aligned cell carries the
  real free-text comment when there is one.

Repair runs as whole-table passes: drop incomplete rows, group into
triplets, resolve the value from the amount row, stitch the comment from
the offset-2 row onto the offset-1 row, keep one record per triplet, then
normalize user and comment.

Grouping strategies:

* ``positional`` -- a stride of three over the filtered rows. If a row is
  dropped from the middle of a triplet, every later triplet shifts.
* ``structural`` -- rows sharing a parent element form one triplet; groups
  that are not exactly three rows are dropped on their own.
"""

import logging
import re
from dataclasses import dataclass, field
from itertools import groupby

from superchat.config import ScraperConfig
from superchat.exceptions import ParseError
from superchat.row_extractor import RawRow

logger = logging.getLogger(__name__)

GROUPING_STRATEGIES = ("positional", "structural")
TRIPLET_SIZE = 3

_NON_NUMERIC = re.compile(r"[^0-9.]")
# "$5.00 (¥750)" -- a trailing parenthesized group is the converted value
_CONVERTED_VALUE = re.compile(r"\(([^()]*)\)\s*$")
_DEDUP_SUFFIX = re.compile(r"\(\d+\)$")


@dataclass
class RepairResult:
    """Repaired record dicts plus bookkeeping about what was dropped."""

    records: list[dict] = field(default_factory=list)
    input_rows: int = 0
    complete_rows: int = 0
    triplets: int = 0
    dropped_triplets: int = 0


def to_number(text: str) -> float:
    """Reduce a value cell to a number.

    Keeps only digits and decimal points. When the text ends in a
    parenthesized group, only that group is read.

    Raises:
        ParseError: If nothing numeric remains.
    """
    converted = _CONVERTED_VALUE.search(text)
    if converted:
        text = converted.group(1)

    digits = _NON_NUMERIC.sub("", text)
    if not digits:
        raise ParseError(f"No number in value text {text!r}")
    try:
        return float(digits)
    except ValueError as exc:
        raise ParseError(f"Unparseable value text {text!r}") from exc


def parse_amount(text: str | None) -> float | None:
    """Like ``to_number`` but a failure yields None instead of raising."""
    if text is None:
        return None
    try:
        return to_number(text)
    except ParseError as exc:
        logger.debug("Value missing: %s", exc)
        return None


def resolve_value(row: RawRow) -> float | None:
    """JPY value of an amount row.

    The right-aligned cell holds the converted value; its absence means
    the displayed amount was already in JPY.
    """
    if row.right_text is not None:
        return parse_amount(row.right_text)
    return parse_amount(row.primary_text)


def drop_incomplete(rows: list[RawRow]) -> list[RawRow]:
    """Discard rows with no comment cell or no left-aligned text."""
    kept = [r for r in rows if r.comment_text is not None and r.left_texts]
    if len(kept) != len(rows):
        logger.debug(
            "Dropped %d incomplete rows at positions %s",
            len(rows) - len(kept),
            [r.position for r in rows if r.comment_text is None or not r.left_texts],
        )
    return kept


def group_triplets(rows: list[RawRow], strategy: str = "positional") -> list[list[RawRow]]:
    """Split rows into triplets using the given grouping strategy.

    The positional strategy may produce a short final group; the
    structural strategy returns every parent group, whatever its size.
    """
    if strategy == "positional":
        return [rows[i:i + TRIPLET_SIZE] for i in range(0, len(rows), TRIPLET_SIZE)]
    if strategy == "structural":
        return [list(g) for _, g in groupby(rows, key=lambda r: r.group)]
    raise ValueError(
        f"Unknown grouping strategy {strategy!r}. "
        f"Valid strategies: {list(GROUPING_STRATEGIES)}"
    )


def strip_dedup_suffix(user: str) -> str:
    """Remove the trailing ``(N)`` repeat counter the site appends to names."""
    return _DEDUP_SUFFIX.sub("", user).rstrip()


def substitute_placeholder(comment: str, config: ScraperConfig | None = None) -> str:
    """Map the site's wordless marker and empty emote comments to placeholders."""
    if config is None:
        config = ScraperConfig()

    if comment == config.wordless_literal:
        return config.wordless_placeholder
    if comment == "":
        return config.emote_placeholder
    return comment


def repair_rows(rows: list[RawRow], config: ScraperConfig | None = None) -> RepairResult:
    """Merge triplets of raw rows into normalized superchat record dicts.

    Pure function: the input rows are not modified.

    Returns:
        RepairResult whose ``records`` are dicts with keys
        ``original_value_text``, ``yen_value``, ``user`` and ``comment``,
        in document order.
    """
    if config is None:
        config = ScraperConfig()

    result = RepairResult(input_rows=len(rows))

    complete = drop_incomplete(rows)
    result.complete_rows = len(complete)

    triplets = group_triplets(complete, config.grouping)
    result.triplets = len(triplets)

    for triplet in triplets:
        record = _assemble(triplet, config)
        if record is None:
            result.dropped_triplets += 1
            continue
        result.records.append(record)

    logger.info(
        "Repaired %d rows into %d records (%d incomplete rows, %d triplets dropped)",
        result.input_rows,
        len(result.records),
        result.input_rows - result.complete_rows,
        result.dropped_triplets,
    )
    return result


def _assemble(triplet: list[RawRow], config: ScraperConfig) -> dict | None:
    """Build one record dict from a triplet, or None if it cannot be used."""
    first = triplet[0].position

    if config.grouping == "structural" and len(triplet) != TRIPLET_SIZE:
        logger.warning(
            "Dropping row group at position %d: %d rows, expected %d",
            first, len(triplet), TRIPLET_SIZE,
        )
        return None

    if len(triplet) < 2:
        logger.warning("Dropping trailing amount row at position %d (no user row)", first)
        return None

    amount_row, user_row = triplet[0], triplet[1]
    yen_value = resolve_value(amount_row)
    if yen_value is None:
        logger.warning(
            "Dropping triplet at position %d: no value in %r / %r",
            first, amount_row.primary_text, amount_row.right_text,
        )
        return None

    comment = user_row.comment_text
    if len(triplet) > 2:
        comment = triplet[2].primary_text

    return {
        "original_value_text": amount_row.primary_text,
        "yen_value": yen_value,
        "user": strip_dedup_suffix(user_row.primary_text),
        "comment": substitute_placeholder(comment, config),
    }
