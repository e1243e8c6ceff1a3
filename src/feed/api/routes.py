"""JSON API endpoint for range-fetched series data."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from feed.api.params import parse_data_request
from feed.engine.models import FetchResult
from feed.exceptions import UpstreamError, ValidationError
from feed.series import FUNDING_RATE_PERIOD

log = structlog.get_logger(__name__)

router = APIRouter()


def _requested_end_date(end_time: int) -> str:
    """UTC calendar date of the last millisecond inside the window."""
    dt = datetime.fromtimestamp((end_time - 1) / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d")


def _meta(result: FetchResult) -> dict[str, Any]:
    return {
        "dataType": result.series.value,
        "period": result.period.value if result.period else FUNDING_RATE_PERIOD,
        "startTime": result.window.start,
        "endTime": result.window.end,
        "requestedEndDate": _requested_end_date(result.window.end),
        "recordCount": result.record_count,
        "totalUniqueRecordsFetched": result.unique_records_fetched,
        "termination": result.termination.value,
    }


def _failure(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "details": details},
    )


@router.get("/data")
async def get_data(
    request: Request,
    data_type: str | None = Query(None, alias="dataType"),
    start_time: str | None = Query(None, alias="startTime"),
    end_time: str | None = Query(None, alias="endTime"),
    period: str | None = Query(None),
) -> JSONResponse:
    """Return every record of a series within [startTime, endTime), ascending."""
    try:
        data_request = parse_data_request(data_type, start_time, end_time, period)
    except ValidationError as e:
        log.info("data_request_rejected", data_type=data_type, reason=str(e))
        return _failure(400, str(e))

    fetcher = request.app.state.fetcher
    try:
        result = await fetcher.fetch(
            data_request.series, data_request.window, data_request.period
        )
    except ValidationError as e:
        return _failure(400, str(e))
    except UpstreamError as e:
        log.error(
            "data_request_failed",
            data_type=data_request.series.value,
            error=str(e),
        )
        return _failure(
            500,
            f"Failed to fetch data from Binance API for data type {data_request.series.value}.",
            details=str(e),
        )

    return JSONResponse(
        content={
            "success": True,
            "message": "Data fetched successfully.",
            "data": result.records,
            "meta": _meta(result),
        }
    )
