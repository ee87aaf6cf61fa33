"""
Pydantic models for cumulative energy readings and derived period figures.

CumulativeReading is the canonical form of one upstream historical row after
value-column discovery and numeric coercion. PeriodRecord and Summary are
derived values: they are recomputed from the current readings on every call
and are never mutated after creation.

CHANGELOG:
- 2026-10-19: Add trend_slope to Summary (STORY-005)
- 2026-10-14: Add cumulative_growth_pct and non_zero_periods to Summary (STORY-005)
- 2026-10-12: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CumulativeReading(BaseModel):
    """A single running-total energy value reported by the inverter.

    Attributes:
        timestamp: Fixed-width sortable key (``YYYYMMDD``, ``YYYYMM`` or
            ``YYYY``).
        cumulative_wh: Running total in watt-hours. Non-negative; the
            normalizer coerces malformed values to 0.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    cumulative_wh: float = Field(ge=0)

    @property
    def cumulative_kwh(self) -> float:
        """Running total in kilowatt-hours, full precision."""
        return self.cumulative_wh / 1000


class PeriodRecord(BaseModel):
    """Energy produced within one period, derived from cumulative readings.

    kWh values keep full precision so that chained arithmetic does not
    accumulate rounding error. Use :meth:`rounded` for display.

    Attributes:
        timestamp: Period key, same shape as the source reading.
        date: Display form of the timestamp.
        cumulative_wh: Source running total in Wh.
        cumulative_kwh: Source running total in kWh.
        period_production_kwh: Energy produced in this period, never negative.
        growth_pct: Change of production versus the previous emitted period.
        is_first_period: True when no preceding cumulative value was available.
        calculation_note: Which prior value was subtracted, or why none was.
        clamped: True when the raw delta was negative and clamped to 0.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    date: str
    cumulative_wh: float
    cumulative_kwh: float
    period_production_kwh: float = Field(ge=0)
    growth_pct: float = 0.0
    is_first_period: bool = False
    calculation_note: str = ""
    clamped: bool = False

    def rounded(self) -> PeriodRecord:
        """Return a copy rounded for presentation (kWh to 2, growth to 1 decimal)."""
        return self.model_copy(
            update={
                "cumulative_kwh": round(self.cumulative_kwh, 2),
                "period_production_kwh": round(self.period_production_kwh, 2),
                "growth_pct": round(self.growth_pct, 1),
            }
        )


class Summary(BaseModel):
    """Aggregate figures over a period series.

    Attributes:
        count: Number of records summarised.
        total_production_kwh: Sum of period production.
        average_per_period_kwh: Total divided by count, 0 for no records.
        peak_record: Record with the highest production (first on ties).
        trough_record: Record with the lowest production (first on ties).
        overall_growth_pct: Last production versus the first non-zero
            production that is not a first period.
        cumulative_growth_pct: Last cumulative total versus the first.
        trend_slope: Least-squares slope of production against record
            index, in kWh per period. 0 for fewer than two records.
        latest_cumulative_kwh: Cumulative total of the last record.
        non_zero_periods: Number of records with production above 0.
    """

    model_config = ConfigDict(frozen=True)

    count: int = 0
    total_production_kwh: float = 0.0
    average_per_period_kwh: float = 0.0
    peak_record: PeriodRecord | None = None
    trough_record: PeriodRecord | None = None
    overall_growth_pct: float = 0.0
    cumulative_growth_pct: float = 0.0
    trend_slope: float = 0.0
    latest_cumulative_kwh: float = 0.0
    non_zero_periods: int = 0

    def rounded(self) -> Summary:
        """Return a copy rounded for presentation, including peak and trough."""
        return self.model_copy(
            update={
                "total_production_kwh": round(self.total_production_kwh, 2),
                "average_per_period_kwh": round(self.average_per_period_kwh, 2),
                "peak_record": self.peak_record.rounded() if self.peak_record else None,
                "trough_record": self.trough_record.rounded() if self.trough_record else None,
                "overall_growth_pct": round(self.overall_growth_pct, 1),
                "cumulative_growth_pct": round(self.cumulative_growth_pct, 1),
                "trend_slope": round(self.trend_slope, 2),
                "latest_cumulative_kwh": round(self.latest_cumulative_kwh, 2),
            }
        )
