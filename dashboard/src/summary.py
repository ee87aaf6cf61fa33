"""
Growth and aggregate calculator for period series.

Produces the figures shown on the dashboard summary tiles: total, average,
peak and trough production, the overall production trend and the latest
cumulative total, plus the least-squares slope of production per period.

``overall_growth_pct`` compares the last record's production against a
baseline: the first record that is not a first period and produced more
than 0 kWh. The zero-valued first period is skipped so it cannot make every
trend look like +100%. Without such a baseline the trend is 0.

CHANGELOG:
- 2026-10-19: Add least-squares trend_slope (STORY-005)
- 2026-10-14: Add cumulative_growth_pct and non_zero_periods (STORY-005)
- 2026-10-13: Initial creation (STORY-005)
"""

from __future__ import annotations

from collections.abc import Sequence

from dashboard.src.models import PeriodRecord, Summary


def _overall_growth(records: Sequence[PeriodRecord]) -> float:
    """Trend of the last production versus the first eligible baseline."""
    for position, record in enumerate(records):
        if record.is_first_period or record.period_production_kwh <= 0:
            continue
        if position == len(records) - 1:
            return 0.0
        baseline = record.period_production_kwh
        last = records[-1].period_production_kwh
        return (last - baseline) / baseline * 100
    return 0.0


def _cumulative_growth(records: Sequence[PeriodRecord]) -> float:
    """Growth of the running total from the first to the last record."""
    if len(records) < 2:
        return 0.0
    first = records[0].cumulative_kwh
    if first <= 0:
        return 0.0
    return (records[-1].cumulative_kwh - first) / first * 100


def _trend_slope(records: Sequence[PeriodRecord]) -> float:
    """Least-squares slope of production against record index (kWh per period)."""
    n = len(records)
    if n < 2:
        return 0.0
    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, record in enumerate(records):
        y = record.period_production_kwh
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def summarize(records: Sequence[PeriodRecord]) -> Summary:
    """Aggregate a period series into a :class:`Summary`.

    Args:
        records: Period records as produced by
            :func:`~dashboard.src.converter.to_period_series`.

    Returns:
        Summary figures. An empty input yields an all-zero summary with no
        peak or trough record.
    """
    if not records:
        return Summary()

    total = sum(record.period_production_kwh for record in records)
    peak = records[0]
    trough = records[0]
    for record in records[1:]:
        if record.period_production_kwh > peak.period_production_kwh:
            peak = record
        if record.period_production_kwh < trough.period_production_kwh:
            trough = record

    return Summary(
        count=len(records),
        total_production_kwh=total,
        average_per_period_kwh=total / len(records),
        peak_record=peak,
        trough_record=trough,
        overall_growth_pct=_overall_growth(records),
        cumulative_growth_pct=_cumulative_growth(records),
        trend_slope=_trend_slope(records),
        latest_cumulative_kwh=records[-1].cumulative_kwh,
        non_zero_periods=sum(1 for record in records if record.period_production_kwh > 0),
    )
