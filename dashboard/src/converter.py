"""
Cumulative-to-period production converter.

The inverter reports energy as a running total. Production within a period
is the difference between this period's total and the total one period
earlier. Readings before the caller's window start are never emitted but
remain available as the prior value for the first emitted period.

First-period policy, applied in this order for every emitted reading:

1. The calendar-adjacent prior reading (one day, month or year earlier) is
   looked up in the full reading set. If present it is subtracted.
2. Otherwise, for the first emitted reading, production is 0 and the record
   is flagged ``is_first_period``.
3. Otherwise (a gap inside the window) the previous emitted reading is
   subtracted as the best available prior.

Negative deltas (counter reset, clock skew) are clamped to 0, flagged on the
record and logged as a warning.

This is a pure function apart from logging.

CHANGELOG:
- 2026-10-14: Flag clamped deltas on the record (STORY-004)
- 2026-10-12: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dashboard.src.models import CumulativeReading, PeriodRecord
from dashboard.src.periods import (
    Granularity,
    canonical_timestamp,
    display_date,
    previous_timestamp,
)

logger = logging.getLogger(__name__)


def growth_pct(previous: float, current: float) -> float:
    """Percentage change from *previous* to *current* production.

    Returns 100 when production starts from zero and 0 when both are zero,
    so division by zero never leaks to the caller.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return 100.0
    return 0.0


def _subtract(
    current: CumulativeReading,
    prior: CumulativeReading,
    date: str,
) -> tuple[float, str, bool]:
    """Return ``(production_kwh, note, clamped)`` for ``current - prior``."""
    delta = current.cumulative_kwh - prior.cumulative_kwh
    note = (
        f"{current.cumulative_kwh:.2f} kWh - {prior.cumulative_kwh:.2f} kWh "
        f"({prior.timestamp}) = {delta:.2f} kWh"
    )
    if delta < 0:
        logger.warning(
            "Negative period value detected: %s (%.2f kWh). Using 0 instead.",
            date,
            delta,
        )
        return 0.0, f"{note}; negative delta clamped to 0.00 kWh", True
    return delta, note, False


def to_period_series(
    readings: Iterable[CumulativeReading],
    window_start: str | None = None,
    *,
    granularity: Granularity | None = None,
) -> list[PeriodRecord]:
    """Convert cumulative readings into per-period production records.

    Args:
        readings: Cumulative readings in any order. Duplicate timestamps
            resolve last-wins.
        window_start: Optional first timestamp to emit (``YYYYMMDD`` or
            ``YYYY-MM-DD`` shapes accepted). Earlier readings are used only
            as prior values.
        granularity: Period size used for the calendar-adjacent lookup.
            Inferred per timestamp from its width when omitted.

    Returns:
        One :class:`PeriodRecord` per emitted reading, ascending by
        timestamp. Empty when there are no readings in the window.
    """
    index: dict[str, CumulativeReading] = {}
    for reading in readings:
        index[reading.timestamp] = reading
    if not index:
        return []

    ordered = sorted(index.values(), key=lambda r: r.timestamp)
    if window_start:
        start = canonical_timestamp(window_start)
        emitted = [r for r in ordered if r.timestamp >= start]
    else:
        emitted = ordered

    records: list[PeriodRecord] = []
    previous_production = 0.0

    for position, current in enumerate(emitted):
        date = display_date(current.timestamp, granularity)
        prior_ts = previous_timestamp(current.timestamp, granularity)
        prior = index.get(prior_ts) if prior_ts is not None else None

        is_first = False
        clamped = False
        if prior is not None:
            production, note, clamped = _subtract(current, prior, date)
        elif position == 0:
            is_first = True
            production = 0.0
            note = "First period: no preceding data available, production set to 0 kWh"
        else:
            production, note, clamped = _subtract(current, emitted[position - 1], date)
            note = f"{note} (no reading for {prior_ts or 'previous period'})"

        growth = growth_pct(previous_production, production) if position > 0 else 0.0
        previous_production = production

        records.append(
            PeriodRecord(
                timestamp=current.timestamp,
                date=date,
                cumulative_wh=current.cumulative_wh,
                cumulative_kwh=current.cumulative_kwh,
                period_production_kwh=production,
                growth_pct=growth,
                is_first_period=is_first,
                calculation_note=note,
                clamped=clamped,
            )
        )

    return records
