"""
Energy analytics endpoints built on the cumulative-to-period converter.

- POST /api/solar/energy-report fetches cumulative history from the gateway
  (starting one period before the requested window) and returns the period
  series with a summary.
- POST /api/energy/period-series runs the same pipeline over raw rows the
  caller already holds, without contacting the gateway.

Both return kWh values rounded to 2 decimals and growth to 1 decimal.

CHANGELOG:
- 2026-10-19: Reject windows longer than the granularity allows (STORY-011)
- 2026-10-16: Add period-series endpoint for caller-supplied rows (STORY-011)
- 2026-10-15: Initial creation (STORY-011)

TODO:
- None
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, model_validator

from dashboard.src.api.deps import SolarClient, upstream_http_error
from dashboard.src.client import SolarCloudError
from dashboard.src.models import PeriodRecord, Summary
from dashboard.src.periods import Granularity, canonical_timestamp, check_span
from dashboard.src.services.energy import EnergyReport, build_report, fetch_energy_report

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analytics"])


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------


class EnergyReportRequest(BaseModel):
    """Request body for a gateway-backed energy report.

    Attributes:
        token: Session token from /api/solar/login.
        ps_key: Device key to query.
        data_point: Cumulative energy point code (``p2`` is total energy).
        granularity: Period size of the report.
        start: First period to report, in the granularity's shape
            (dashes allowed, e.g. ``2025-01-03`` or ``2025-01``).
        end: Last period to report, same shape as *start*.
    """

    token: str
    ps_key: str
    data_point: str = "p2"
    granularity: Granularity = Granularity.DAY
    start: str
    end: str

    @model_validator(mode="after")
    def range_must_match_granularity(self) -> "EnergyReportRequest":
        """Validate start/end shapes, order and span for the chosen granularity."""
        start = canonical_timestamp(self.start)
        end = canonical_timestamp(self.end)
        width = self.granularity.width
        for name, value in (("start", start), ("end", end)):
            if len(value) != width or not value.isdigit():
                raise ValueError(
                    f"{name} '{value}' does not match {self.granularity.value} "
                    f"granularity ({width} digits expected)"
                )
        if start > end:
            raise ValueError(f"start '{start}' is after end '{end}'")
        check_span(start, end, self.granularity)
        return self


class PeriodSeriesRequest(BaseModel):
    """Request body for converting caller-supplied raw rows.

    Attributes:
        rows: Raw rows, each with ``time_stamp`` and one value column.
        granularity: Period size. Inferred from timestamp width when omitted.
        window_start: First timestamp to emit; earlier rows serve as priors.
        value_key: Value column name. Discovered per row when omitted.
    """

    rows: list[dict[str, Any]]
    granularity: Granularity | None = None
    window_start: str | None = None
    value_key: str | None = None


class EnergyReportResponse(BaseModel):
    """Period series and summary returned by the analytics endpoints."""

    granularity: Granularity | None
    window_start: str | None
    ps_key: str | None
    data_point: str | None
    records: list[PeriodRecord]
    summary: Summary


def _to_response(report: EnergyReport) -> EnergyReportResponse:
    """Round a report for presentation."""
    return EnergyReportResponse(
        granularity=report.granularity,
        window_start=report.window_start,
        ps_key=report.ps_key,
        data_point=report.data_point,
        records=[record.rounded() for record in report.records],
        summary=report.summary.rounded(),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/api/solar/energy-report", response_model=EnergyReportResponse)
async def energy_report(body: EnergyReportRequest, client: SolarClient) -> EnergyReportResponse:
    """Return period production and summary for a device over a window.

    Raises:
        HTTPException: Upstream status (or 502/504) when the gateway call
            fails or reports a failure ``result_code``.
    """
    try:
        report = await fetch_energy_report(
            client,
            token=body.token,
            ps_key=body.ps_key,
            data_point=body.data_point,
            granularity=body.granularity,
            start=body.start,
            end=body.end,
        )
    except SolarCloudError as exc:
        logger.error("Energy report error: %s", exc.message)
        raise upstream_http_error(exc) from exc

    logger.info(
        "Energy report: ps_key=%s granularity=%s records=%d total=%.2f kWh",
        report.ps_key,
        report.granularity.value,
        len(report.records),
        report.summary.total_production_kwh,
    )
    return _to_response(report)


@router.post("/api/energy/period-series", response_model=EnergyReportResponse)
async def period_series(body: PeriodSeriesRequest) -> EnergyReportResponse:
    """Convert caller-supplied cumulative rows into a period series."""
    granularity = body.granularity
    if granularity is None:
        first_ts = next(
            (str(row["time_stamp"]) for row in body.rows if row.get("time_stamp")),
            "",
        )
        granularity = Granularity.infer(first_ts)

    report = build_report(
        body.rows,
        granularity,
        body.window_start,
        value_key=body.value_key,
    )
    return _to_response(report)
