"""
Period calendar for day / month / year telemetry series.

The upstream API keys historical rows by fixed-width numeric strings whose
width depends on the granularity: ``YYYYMMDD`` (day), ``YYYYMM`` (month)
and ``YYYY`` (year). Lexicographic order of these strings matches
chronological order, so callers can sort them as plain strings.

This module owns all calendar arithmetic on those keys. Stepping back one
period honours month lengths and leap years for daily keys, and rolls
January back to December of the previous year for monthly keys.

CHANGELOG:
- 2026-10-19: Add per-granularity query span limit (STORY-006)
- 2026-10-13: Add lookback_start for fetching the period before a window (STORY-006)
- 2026-10-12: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from enum import Enum

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    """Period size of a historical series.

    The enum value is the name used in request payloads. The upstream
    API identifies the same granularity by ``query_type`` and expects a
    matching ``data_type``.
    """

    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @property
    def query_type(self) -> str:
        """Upstream ``query_type`` code (1=day, 2=month, 3=year)."""
        return _QUERY_TYPES[self]

    @property
    def data_type(self) -> str:
        """Upstream ``data_type`` code paired with this granularity."""
        return "2" if self is Granularity.DAY else "4"

    @property
    def width(self) -> int:
        """Number of digits in a timestamp of this granularity."""
        return _WIDTHS[self]

    @property
    def label(self) -> str:
        """Human-readable period label used in notes and exports."""
        return _LABELS[self]

    @property
    def unit(self) -> str:
        """Singular period name (``day``, ``month``, ``year``)."""
        return self.value

    @property
    def max_span(self) -> int:
        """Longest query window, in periods, the gateway serves in one call."""
        return _MAX_SPANS[self]

    @classmethod
    def from_query_type(cls, code: str) -> Granularity:
        """Map an upstream ``query_type`` code back to a granularity.

        Raises:
            ValueError: If *code* is not one of ``"1"``, ``"2"``, ``"3"``.
        """
        for granularity, query_type in _QUERY_TYPES.items():
            if query_type == str(code):
                return granularity
        raise ValueError(f"Unknown query_type '{code}'. Must be one of: 1, 2, 3.")

    @classmethod
    def infer(cls, timestamp: str) -> Granularity | None:
        """Guess the granularity from the width of a canonical timestamp.

        Returns ``None`` for keys that are not all digits or whose width
        does not match any granularity.
        """
        ts = canonical_timestamp(timestamp)
        if not ts.isdigit():
            return None
        for granularity, width in _WIDTHS.items():
            if len(ts) == width:
                return granularity
        return None


_QUERY_TYPES: dict[Granularity, str] = {
    Granularity.DAY: "1",
    Granularity.MONTH: "2",
    Granularity.YEAR: "3",
}

_WIDTHS: dict[Granularity, int] = {
    Granularity.DAY: 8,
    Granularity.MONTH: 6,
    Granularity.YEAR: 4,
}

_LABELS: dict[Granularity, str] = {
    Granularity.DAY: "Daily",
    Granularity.MONTH: "Monthly",
    Granularity.YEAR: "Yearly",
}

_MAX_SPANS: dict[Granularity, int] = {
    Granularity.DAY: 100,
    Granularity.MONTH: 24,
    Granularity.YEAR: 5,
}


def canonical_timestamp(value: str) -> str:
    """Strip dashes and surrounding whitespace from a timestamp.

    Accepts both the upstream shape (``20250103``) and the ISO-like shape
    produced by date pickers (``2025-01-03``).
    """
    return str(value).strip().replace("-", "")


def _parse(timestamp: str, granularity: Granularity) -> date | None:
    """Parse a canonical timestamp into the first day of its period."""
    ts = canonical_timestamp(timestamp)
    if len(ts) != granularity.width or not ts.isdigit():
        return None
    year = int(ts[0:4])
    month = int(ts[4:6]) if granularity is not Granularity.YEAR else 1
    day = int(ts[6:8]) if granularity is Granularity.DAY else 1
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_timestamp(value: date, granularity: Granularity) -> str:
    """Render *value* in the upstream timestamp shape for *granularity*."""
    if granularity is Granularity.DAY:
        return value.strftime("%Y%m%d")
    if granularity is Granularity.MONTH:
        return value.strftime("%Y%m")
    return f"{value.year:04d}"


def previous_timestamp(
    timestamp: str,
    granularity: Granularity | None = None,
) -> str | None:
    """Return the timestamp exactly one period before *timestamp*.

    Args:
        timestamp: Canonical or dashed timestamp.
        granularity: Period size. Inferred from the timestamp width when
            omitted.

    Returns:
        The previous period's key in the same shape, or ``None`` when the
        timestamp cannot be parsed (or has no representable predecessor).
    """
    if granularity is None:
        granularity = Granularity.infer(timestamp)
        if granularity is None:
            return None

    current = _parse(timestamp, granularity)
    if current is None:
        return None

    try:
        if granularity is Granularity.DAY:
            prior = current - timedelta(days=1)
        elif granularity is Granularity.MONTH:
            if current.month == 1:
                prior = date(current.year - 1, 12, 1)
            else:
                prior = date(current.year, current.month - 1, 1)
        else:
            prior = date(current.year - 1, 1, 1)
    except (OverflowError, ValueError):
        return None

    return format_timestamp(prior, granularity)


def display_date(timestamp: str, granularity: Granularity | None = None) -> str:
    """Render a timestamp for display: ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY``.

    Unrecognised timestamps are returned unchanged.
    """
    ts = canonical_timestamp(timestamp)
    if granularity is None:
        granularity = Granularity.infer(ts)
    if granularity is None or len(ts) != granularity.width:
        return ts
    if granularity is Granularity.DAY:
        return f"{ts[0:4]}-{ts[4:6]}-{ts[6:8]}"
    if granularity is Granularity.MONTH:
        return f"{ts[0:4]}-{ts[4:6]}"
    return ts


def lookback_start(window_start: str, granularity: Granularity) -> str:
    """Return the fetch start for a window: one period before *window_start*.

    Fetching this extra period lets the converter subtract a real prior
    reading from the first emitted record instead of reporting it as a
    first period. Falls back to the window start itself when no previous
    period can be computed.
    """
    ts = canonical_timestamp(window_start)
    prior = previous_timestamp(ts, granularity)
    if prior is None:
        logger.warning(
            "Cannot step back from window start '%s' (%s); fetching from window start",
            ts,
            granularity.value,
        )
        return ts
    return prior


def period_span(start: str, end: str, granularity: Granularity) -> int | None:
    """Number of whole periods from *start* to *end* (0 when they are equal).

    Returns ``None`` when either timestamp does not parse for *granularity*.
    Negative when *end* precedes *start*.
    """
    first = _parse(start, granularity)
    last = _parse(end, granularity)
    if first is None or last is None:
        return None
    if granularity is Granularity.DAY:
        return (last - first).days
    if granularity is Granularity.MONTH:
        return (last.year - first.year) * 12 + (last.month - first.month)
    return last.year - first.year


def check_span(start: str, end: str, granularity: Granularity) -> None:
    """Reject a query window longer than the gateway accepts for *granularity*.

    Windows that do not parse are left to the caller to validate.

    Raises:
        ValueError: If the window spans more than ``granularity.max_span``
            periods.
    """
    span = period_span(start, end, granularity)
    if span is not None and span > granularity.max_span:
        raise ValueError(
            f"{granularity.label} queries are limited to {granularity.max_span} "
            f"{granularity.unit}s maximum ({span} requested)"
        )
