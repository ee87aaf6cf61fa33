"""
POST /api/solar/* proxy endpoints for the iSolarCloud gateway.

Each route validates the dashboard's request body, forwards it through the
shared SolarCloudClient with server-side credentials, and returns the
upstream JSON unchanged. Upstream failures are reported with the upstream
status (or 502/504 for gateway failures) and an ``{"error", "details"}``
body.

CHANGELOG:
- 2026-10-19: Limit historical query span per query_type (STORY-010)
- 2026-10-13: Initial creation (STORY-010)

TODO:
- None
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, field_validator, model_validator

from dashboard.src.api.deps import SolarClient, upstream_http_error
from dashboard.src.client import SolarCloudError
from dashboard.src.periods import Granularity, check_span

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/solar", tags=["solar"])


# ---------------------------------------------------------------------------
# Pydantic request models
# ---------------------------------------------------------------------------


def _require_value(v: Any) -> Any:
    """Reject empty strings and empty lists for required parameters."""
    if isinstance(v, str) and not v.strip():
        raise ValueError("must not be empty")
    if isinstance(v, list) and not v:
        raise ValueError("must contain at least one entry")
    return v


class LoginRequest(BaseModel):
    """Login request body.

    The account fields are accepted for compatibility with existing
    dashboards but are not forwarded; the server-side account is used.
    """

    user_account: str | None = None
    user_password: str | None = None


class MinuteDataRequest(BaseModel):
    """Request body for minute-interval point data."""

    token: str
    ps_key_list: str | list[str]
    points: str
    start_time_stamp: str
    end_time_stamp: str
    minute_interval: int = 10
    is_get_data_acquisition_time: str = "1"
    lang: str = "_en_US"

    check_required = field_validator(
        "token", "ps_key_list", "points", "start_time_stamp", "end_time_stamp"
    )(_require_value)


class InverterDataRequest(BaseModel):
    """Request body for real-time inverter data."""

    token: str
    sn_list: str | list[str]

    check_required = field_validator("token", "sn_list")(_require_value)


class HistoricalDataRequest(BaseModel):
    """Request body for day/month/year cumulative point data."""

    token: str
    ps_key_list: str | list[str]
    data_point: str
    start_time: str
    end_time: str
    data_type: str = "2"
    query_type: str = "1"
    order: str = "0"

    check_required = field_validator(
        "token", "ps_key_list", "data_point", "start_time", "end_time"
    )(_require_value)

    @field_validator("query_type")
    @classmethod
    def query_type_must_be_known(cls, v: str) -> str:
        """Validate query_type is 1 (day), 2 (month) or 3 (year)."""
        Granularity.from_query_type(v)
        return v

    @model_validator(mode="after")
    def window_within_span_limit(self) -> "HistoricalDataRequest":
        """Reject windows longer than the gateway serves for query_type."""
        check_span(self.start_time, self.end_time, Granularity.from_query_type(self.query_type))
        return self


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/login")
async def login(client: SolarClient, body: LoginRequest | None = None) -> dict[str, Any]:
    """Log in to the gateway with the server-side account.

    Returns:
        dict: Upstream login response, including ``result_data.token``.
    """
    if body is not None and body.user_account:
        logger.debug("Login requested by dashboard user %s", body.user_account)
    try:
        return await client.login()
    except SolarCloudError as exc:
        logger.error("Login error: %s", exc.message)
        raise upstream_http_error(exc) from exc


@router.post("/minute-data")
async def minute_data(body: MinuteDataRequest, client: SolarClient) -> dict[str, Any]:
    """Forward a minute-interval data query."""
    try:
        return await client.minute_data(
            token=body.token,
            ps_key_list=body.ps_key_list,
            points=body.points,
            start_time_stamp=body.start_time_stamp,
            end_time_stamp=body.end_time_stamp,
            minute_interval=body.minute_interval,
            is_get_data_acquisition_time=body.is_get_data_acquisition_time,
            lang=body.lang,
        )
    except SolarCloudError as exc:
        logger.error("Minute data error: %s", exc.message)
        raise upstream_http_error(exc) from exc


@router.post("/inverter-data")
async def inverter_data(body: InverterDataRequest, client: SolarClient) -> dict[str, Any]:
    """Forward a real-time inverter data query."""
    try:
        return await client.inverter_realtime(token=body.token, sn_list=body.sn_list)
    except SolarCloudError as exc:
        logger.error("Real-time data error: %s", exc.message)
        raise upstream_http_error(exc) from exc


@router.post("/historical-data")
async def historical_data(body: HistoricalDataRequest, client: SolarClient) -> dict[str, Any]:
    """Forward a day/month/year historical data query."""
    try:
        return await client.historical_data(
            token=body.token,
            ps_key_list=body.ps_key_list,
            data_point=body.data_point,
            start_time=body.start_time,
            end_time=body.end_time,
            data_type=body.data_type,
            query_type=body.query_type,
            order=body.order,
        )
    except SolarCloudError as exc:
        logger.error("Historical data error: %s", exc.message)
        raise upstream_http_error(exc) from exc
