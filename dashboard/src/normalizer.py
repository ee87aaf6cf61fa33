"""
Pure normalizer that converts raw historical rows into CumulativeReadings.

The upstream ``getDevicePointsDayMonthYearDataList`` call returns rows such as
``{"time_stamp": "20250101", "p2": "123456.0"}``. The value column is named
after the requested data point, so it is discovered per row rather than
hard-coded: it is the first key that is not ``time_stamp``.

Values arrive as strings. Anything that does not parse to a finite,
non-negative float is coerced to 0 so that one bad row never breaks the
pipeline. Output is sorted by timestamp with duplicates resolved last-wins.

This is a pure function: no side effects, no I/O, no clock.

CHANGELOG:
- 2026-10-19: Report coercion from a single parse
- 2026-10-13: Accept an explicit value_key to pin the value column
- 2026-10-12: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from dashboard.src.models import CumulativeReading
from dashboard.src.periods import canonical_timestamp

logger = logging.getLogger(__name__)

TIME_STAMP_KEY = "time_stamp"
"""Key holding the period timestamp in every upstream row."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_value_key(row: Mapping[str, Any]) -> str | None:
    """Return the first key of *row* that is not ``time_stamp``."""
    for key in row:
        if key != TIME_STAMP_KEY:
            return key
    return None


def _coerce_wh(raw: Any) -> tuple[float, bool]:
    """Return ``(wh, coerced)``; *coerced* is true when a present value was replaced by 0."""
    if raw is None or raw == "":
        return 0.0, False
    if isinstance(raw, bool):
        return 0.0, True
    try:
        value = float(str(raw).strip())
    except ValueError:
        return 0.0, True
    if not math.isfinite(value) or value < 0:
        return 0.0, True
    return value, False


def parse_wh(raw: Any) -> float:
    """Parse a raw Wh value, coercing anything unusable to 0.

    ``None``, empty strings, unparseable text (``"N/A"``), NaN, infinities
    and negative numbers all yield ``0.0``.
    """
    return _coerce_wh(raw)[0]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize(
    raw_rows: Iterable[Mapping[str, Any]],
    *,
    value_key: str | None = None,
) -> list[CumulativeReading]:
    """Convert raw upstream rows into a sorted, de-duplicated reading list.

    Args:
        raw_rows: Rows mapping ``time_stamp`` and one data-point column to
            string values.
        value_key: Name of the value column. When omitted it is discovered
            per row as the first non-``time_stamp`` key.

    Returns:
        Readings sorted ascending by timestamp. When several rows share a
        timestamp the last one in input order wins.
    """
    by_timestamp: dict[str, CumulativeReading] = {}

    for index, row in enumerate(raw_rows):
        raw_ts = row.get(TIME_STAMP_KEY)
        if raw_ts is None or not str(raw_ts).strip():
            logger.warning("Row %d: missing '%s', skipping", index, TIME_STAMP_KEY)
            continue
        timestamp = canonical_timestamp(raw_ts)

        key = value_key if value_key is not None else _find_value_key(row)
        raw_value = row.get(key) if key is not None else None
        wh, coerced = _coerce_wh(raw_value)
        if coerced:
            logger.debug(
                "Row %d (%s): value %r for '%s' coerced to 0",
                index,
                timestamp,
                raw_value,
                key,
            )

        if timestamp in by_timestamp:
            logger.debug("Duplicate timestamp %s: keeping last occurrence", timestamp)
        by_timestamp[timestamp] = CumulativeReading(timestamp=timestamp, cumulative_wh=wh)

    return sorted(by_timestamp.values(), key=lambda reading: reading.timestamp)
