"""
Energy report service: historical cumulative data to period production.

Pulls the row list for one device and data point out of a
``getDevicePointsDayMonthYearDataList`` response and runs it through the
conversion pipeline (normalize -> to_period_series -> summarize).

When fetching from the gateway, the request starts one period before the
caller's window so the first emitted period can subtract a real prior
reading instead of being reported as a zero-production first period.

CHANGELOG:
- 2026-10-15: Fetch from lookback_start so the window's first period has a prior (STORY-008)
- 2026-10-14: Initial creation (STORY-008)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from dashboard.src.client import SolarCloudClient, ensure_success
from dashboard.src.converter import to_period_series
from dashboard.src.models import PeriodRecord, Summary
from dashboard.src.normalizer import normalize
from dashboard.src.periods import Granularity, canonical_timestamp, lookback_start
from dashboard.src.summary import summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyReport:
    """Period series and summary for one device data point.

    Attributes:
        granularity: Period size of the series, None when it could not be
            determined (each timestamp then infers its own).
        window_start: First emitted timestamp, or None for the whole series.
        ps_key: Device key the rows were taken from, when known.
        data_point: Data point code the rows were taken from, when known.
        records: Period records in ascending timestamp order.
        summary: Aggregates over *records*.
    """

    granularity: Granularity | None
    window_start: str | None
    ps_key: str | None
    data_point: str | None
    records: list[PeriodRecord]
    summary: Summary


def _pick(mapping: Mapping[str, Any], wanted: str | None) -> str | None:
    """Return *wanted* if present in *mapping*, else its first key."""
    if wanted is not None and wanted in mapping:
        return wanted
    first = next(iter(mapping), None)
    if wanted is not None and first is not None:
        logger.debug("Key '%s' not in response, using '%s'", wanted, first)
    return first


def extract_point_rows(
    payload: Mapping[str, Any],
    ps_key: str | None = None,
    data_point: str | None = None,
) -> tuple[str | None, str | None, list[dict[str, Any]]]:
    """Locate the row list for a device and data point in a historical response.

    The response nests rows as ``result_data[ps_key][data_point]``. Missing
    keys fall back to the first device / data point present.

    Returns:
        ``(ps_key, data_point, rows)``. Rows are empty when the response
        carries no usable data.
    """
    result_data = payload.get("result_data")
    if not isinstance(result_data, Mapping) or not result_data:
        return None, None, []

    chosen_key = _pick(result_data, ps_key)
    points = result_data.get(chosen_key)
    if not isinstance(points, Mapping) or not points:
        return chosen_key, None, []

    chosen_point = _pick(points, data_point)
    rows = points.get(chosen_point)
    if not isinstance(rows, list):
        return chosen_key, chosen_point, []
    return chosen_key, chosen_point, [row for row in rows if isinstance(row, Mapping)]


def build_report(
    rows: Sequence[Mapping[str, Any]],
    granularity: Granularity | None,
    window_start: str | None = None,
    *,
    value_key: str | None = None,
    ps_key: str | None = None,
    data_point: str | None = None,
) -> EnergyReport:
    """Run raw rows through the conversion pipeline."""
    readings = normalize(rows, value_key=value_key)
    start = canonical_timestamp(window_start) if window_start else None
    records = to_period_series(readings, start, granularity=granularity)
    logger.debug(
        "Built %s report: %d reading(s) -> %d record(s), window_start=%s",
        granularity.label if granularity else "Inferred",
        len(readings),
        len(records),
        start,
    )
    return EnergyReport(
        granularity=granularity,
        window_start=start,
        ps_key=ps_key,
        data_point=data_point,
        records=records,
        summary=summarize(records),
    )


async def fetch_energy_report(
    client: SolarCloudClient,
    *,
    token: str,
    ps_key: str,
    data_point: str,
    granularity: Granularity,
    start: str,
    end: str,
) -> EnergyReport:
    """Fetch cumulative history from the gateway and build a report.

    Raises:
        SolarCloudError: If the upstream call fails or reports a failure
            ``result_code``.
    """
    window_start = canonical_timestamp(start)
    payload = await client.historical_data(
        token=token,
        ps_key_list=ps_key,
        data_point=data_point,
        start_time=lookback_start(window_start, granularity),
        end_time=canonical_timestamp(end),
        data_type=granularity.data_type,
        query_type=granularity.query_type,
    )
    ensure_success(payload)
    chosen_key, chosen_point, rows = extract_point_rows(payload, ps_key, data_point)
    return build_report(
        rows,
        granularity,
        window_start,
        ps_key=chosen_key,
        data_point=chosen_point,
    )
