"""
Async HTTPS client for the iSolarCloud OpenAPI gateway.

Wraps the four upstream calls the dashboard needs:

- login(): ``/openapi/login`` with the server-side account.
- minute_data(): ``/openapi/getDevicePointMinuteDataList``.
- inverter_realtime(): ``/openapi/getPVInverterRealTimeData``.
- historical_data(): ``/openapi/getDevicePointsDayMonthYearDataList``.

Every request carries the OpenAPI secret in the ``x-access-key`` header and
the application key in the body. Token-authenticated calls additionally
send the session token as a header and use the token ``sys_code`` header.
Responses are returned as decoded JSON; upstream HTTP failures and
transport errors are raised as :class:`SolarCloudError`.

CHANGELOG:
- 2026-10-15: Add ensure_success for consumers of result_data (STORY-007)
- 2026-10-13: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dashboard.src.config import DashboardSettings

logger = logging.getLogger(__name__)

SUCCESS_RESULT_CODE = "1"
"""``result_code`` reported by the gateway for a successful call."""


class SolarCloudError(Exception):
    """An upstream call failed.

    Attributes:
        status_code: HTTP status to report to the dashboard caller. The
            upstream status for HTTP errors, 502/504 for gateway failures.
        message: Short human-readable description.
        details: Upstream response body when one was available.
    """

    def __init__(self, status_code: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def _as_list(value: str | list[str]) -> list[str]:
    """Forward list parameters as lists even when a single string is given."""
    if isinstance(value, list):
        return value
    return [value]


def ensure_success(payload: dict[str, Any]) -> dict[str, Any]:
    """Return *payload* if its ``result_code`` reports success.

    Raises:
        SolarCloudError: 502 when the gateway answered with a failure code
            (expired token, unknown device, ...).
    """
    code = str(payload.get("result_code", ""))
    if code != SUCCESS_RESULT_CODE:
        raise SolarCloudError(
            502,
            f"Upstream result_code {code or '<missing>'}: "
            f"{payload.get('result_msg', 'unknown error')}",
            details=payload,
        )
    return payload


class SolarCloudClient:
    """Client for the iSolarCloud OpenAPI gateway.

    Args:
        settings: Loaded :class:`~dashboard.src.config.DashboardSettings`
            providing credentials, base URL, system codes and timeout.

    Usage::

        client = SolarCloudClient(DashboardSettings())
        login = await client.login()
        token = login["result_data"]["token"]
        data = await client.historical_data(
            token=token,
            ps_key_list="1234567_1_1_1",
            data_point="p2",
            start_time="20250101",
            end_time="20250131",
        )
    """

    def __init__(self, settings: DashboardSettings) -> None:
        self._settings = settings
        self._base_url = settings.solar_base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def login(self) -> dict[str, Any]:
        """Log in with the server-side account and return the raw response."""
        logger.info("Login request for: %s", self._settings.solar_user_account)
        body = {
            "appkey": self._settings.solar_app_key,
            "user_account": self._settings.solar_user_account,
            "user_password": self._settings.solar_user_password,
        }
        headers = {
            "Content-Type": "application/json",
            "x-access-key": self._settings.solar_secret_key,
            "sys_code": self._settings.solar_sys_code,
        }
        payload = await self._post("/openapi/login", body, headers)
        logger.info("Login successful")
        return payload

    async def minute_data(
        self,
        token: str,
        ps_key_list: str | list[str],
        points: str,
        start_time_stamp: str,
        end_time_stamp: str,
        minute_interval: int = 10,
        is_get_data_acquisition_time: str = "1",
        lang: str | None = None,
    ) -> dict[str, Any]:
        """Fetch minute-interval point data for one or more devices."""
        logger.info(
            "Fetching minute data: ps_key_list=%s points=%s %s..%s interval=%d",
            ps_key_list,
            points,
            start_time_stamp,
            end_time_stamp,
            minute_interval,
        )
        body = {
            "appkey": self._settings.solar_app_key,
            "end_time_stamp": end_time_stamp,
            "is_get_data_acquisition_time": is_get_data_acquisition_time,
            "lang": lang or self._settings.solar_lang,
            "minute_interval": minute_interval,
            "points": points,
            "ps_key_list": _as_list(ps_key_list),
            "start_time_stamp": start_time_stamp,
            "sys_code": int(self._settings.solar_sys_code),
            "token": token,
        }
        return await self._post(
            "/openapi/getDevicePointMinuteDataList", body, self._token_headers(token)
        )

    async def inverter_realtime(
        self,
        token: str,
        sn_list: str | list[str],
    ) -> dict[str, Any]:
        """Fetch real-time inverter data for one or more serial numbers."""
        logger.info("Fetching real-time data for %d inverter(s)", len(_as_list(sn_list)))
        body = {
            "sn_list": _as_list(sn_list),
            "appkey": self._settings.solar_app_key,
            "lang": self._settings.solar_lang,
            "sys_code": int(self._settings.solar_sys_code),
        }
        return await self._post(
            "/openapi/getPVInverterRealTimeData", body, self._token_headers(token)
        )

    async def historical_data(
        self,
        token: str,
        ps_key_list: str | list[str],
        data_point: str,
        start_time: str,
        end_time: str,
        data_type: str = "2",
        query_type: str = "1",
        order: str = "0",
    ) -> dict[str, Any]:
        """Fetch day/month/year cumulative point data.

        ``query_type`` selects the granularity (1=day, 2=month, 3=year) and
        the timestamps use the matching ``YYYYMMDD``/``YYYYMM``/``YYYY``
        shape.
        """
        logger.info(
            "Fetching historical data: ps_key_list=%s data_point=%s %s..%s query_type=%s",
            ps_key_list,
            data_point,
            start_time,
            end_time,
            query_type,
        )
        body = {
            "appkey": self._settings.solar_app_key,
            "data_point": data_point,
            "data_type": data_type,
            "end_time": end_time,
            "lang": self._settings.solar_lang,
            "order": order,
            "ps_key_list": _as_list(ps_key_list),
            "query_type": query_type,
            "start_time": start_time,
            "sys_code": int(self._settings.solar_sys_code),
            "token": token,
        }
        return await self._post(
            "/openapi/getDevicePointsDayMonthYearDataList",
            body,
            self._token_headers(token),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _token_headers(self, token: str) -> dict[str, str]:
        """Headers for calls authenticated with a session token."""
        return {
            "Content-Type": "application/json",
            "x-access-key": self._settings.solar_secret_key,
            "sys_code": self._settings.solar_token_sys_code,
            "token": token,
        }

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        headers: dict[str, str],
    ) -> dict[str, Any]:
        """POST *body* to the gateway and return the decoded JSON response.

        Raises:
            SolarCloudError: On transport failure, HTTP error status or a
                body that is not JSON.
        """
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.request_timeout_s,
                verify=True,
            ) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("Upstream %s timed out: %s", path, exc)
            raise SolarCloudError(504, f"Upstream timeout: {exc}") from exc
        except httpx.RequestError as exc:
            logger.warning("Upstream %s failed (network error): %s", path, exc)
            raise SolarCloudError(502, f"Upstream request failed: {exc}") from exc

        if response.status_code >= 400:
            details = _safe_json(response)
            logger.error(
                "Upstream %s returned HTTP %d: %s", path, response.status_code, details
            )
            raise SolarCloudError(
                response.status_code,
                f"Upstream returned HTTP {response.status_code}",
                details=details,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Upstream %s returned a non-JSON body", path)
            raise SolarCloudError(502, "Upstream returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise SolarCloudError(502, "Upstream returned an unexpected body", details=payload)

        logger.debug("Upstream %s succeeded: result_code=%s", path, payload.get("result_code"))
        return payload


def _safe_json(response: httpx.Response) -> Any:
    """Decode an error body as JSON, falling back to its text."""
    try:
        return response.json()
    except ValueError:
        return response.text
