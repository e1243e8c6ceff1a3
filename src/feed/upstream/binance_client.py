"""Binance USD-M futures history client via httpx async.

Binds the four history endpoints to SeriesSpec values, sends every call
through the shared RateThrottle and validates each response before
handing the payload back.
"""

from typing import Any

import httpx

from feed.config import UpstreamSettings
from feed.exceptions import (
    UpstreamError,
    UpstreamFormatError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from feed.logging import get_logger
from feed.series import Period, RawRecord, SeriesSpec, SeriesType, get_spec, resolve_period
from feed.upstream.client import UpstreamClient
from feed.upstream.throttle import RateThrottle

logger = get_logger(__name__)


def build_query(
    spec: SeriesSpec,
    symbol: str,
    start_time: int,
    end_time: int | None,
    period: Period | None,
) -> dict[str, str | int]:
    """Build the query parameters for one page request.

    ``startTime`` is always sent; ``endTime`` only when given. The period
    policy of the series is enforced here (see ``resolve_period``).
    """
    resolved = resolve_period(spec, period, has_end_time=end_time is not None)

    params: dict[str, str | int] = {"symbol": symbol}
    if resolved is not None:
        params["period"] = resolved.value
    params["limit"] = spec.page_limit
    params["startTime"] = start_time
    if end_time is not None:
        params["endTime"] = end_time
    return params


def _error_message(response: httpx.Response) -> str | None:
    """Extract Binance's ``msg`` from an error envelope, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("msg"):
        return str(body["msg"])
    return None


def validate_response(response: Any) -> list[RawRecord]:
    """Validate an upstream response and return its list payload.

    Raises:
        UpstreamTransportError: If ``response`` is not a response object or
            its body is not JSON.
        UpstreamStatusError: If the status code is not 200.
        UpstreamFormatError: If the payload is not a list.
    """
    if not isinstance(response, httpx.Response):
        raise UpstreamTransportError("Binance's API returned an invalid response object.")

    if response.status_code != 200:
        raise UpstreamStatusError(response.status_code, _error_message(response))

    try:
        payload = response.json()
    except ValueError as e:
        raise UpstreamTransportError(
            f"Binance's API returned a body that is not valid JSON: {e}"
        ) from e

    if not isinstance(payload, list):
        raise UpstreamFormatError(
            "Binance's API returned an invalid series of records. "
            f"Received: {type(payload).__name__}"
        )
    return payload


class BinanceClient(UpstreamClient):
    """Concrete Binance futures data client.

    The throttle is injected so every client built in the process shares
    one pacing state.
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        throttle: RateThrottle,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._throttle = throttle
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "User-Agent": settings.user_agent,
            },
        )

    async def fetch_batch(
        self,
        series: SeriesType,
        start_time: int,
        end_time: int | None = None,
        period: Period | None = None,
    ) -> list[RawRecord]:
        """Fetch one page for ``series`` starting at ``start_time``."""
        spec = get_spec(series)
        params = build_query(spec, self._settings.symbol, start_time, end_time, period)
        return await self._throttle.run(self._get, spec.path, params)

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._http.aclose()

    async def _get(self, path: str, params: dict[str, str | int]) -> list[RawRecord]:
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error("upstream_transport_error", path=path, error=str(e))
            raise UpstreamTransportError(
                f"Request to Binance's API failed: {e!r}"
            ) from e

        try:
            records = validate_response(response)
        except UpstreamError as e:
            logger.error(
                "upstream_error",
                path=path,
                status_code=response.status_code,
                error=str(e),
            )
            raise

        logger.debug("upstream_page", path=path, params=params, records=len(records))
        return records
