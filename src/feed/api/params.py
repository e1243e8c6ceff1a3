"""Query parameter validation for the data endpoint."""

from dataclasses import dataclass

from feed.engine.models import TimeWindow
from feed.exceptions import ValidationError
from feed.series import Period, SeriesType, parse_period, parse_series

# 9999-12-31T23:59:59.999Z, the last instant datetime can represent
MAX_TIMESTAMP_MS = 253_402_300_799_999


@dataclass(frozen=True)
class DataRequest:
    """A validated ``GET /api/data`` request."""

    series: SeriesType
    window: TimeWindow
    period: Period | None


def _parse_timestamp(name: str, value: str) -> int:
    try:
        timestamp = int(value.strip(), 10)
    except ValueError:
        raise ValidationError(
            f"Invalid {name}. Must be an integer timestamp in milliseconds."
        ) from None
    if not 0 <= timestamp <= MAX_TIMESTAMP_MS:
        raise ValidationError(
            f"Invalid {name}. Must be between 0 and {MAX_TIMESTAMP_MS} (ms since epoch)."
        )
    return timestamp


def parse_data_request(
    data_type: str | None,
    start_time: str | None,
    end_time: str | None,
    period: str | None,
) -> DataRequest:
    """Validate raw query values. Raises ValidationError on any problem."""
    if not data_type or not start_time or not end_time:
        raise ValidationError(
            "Missing or invalid required parameters: dataType, startTime, endTime, "
            "and period (for non-fundingRate)."
        )

    series = parse_series(data_type)

    if series is SeriesType.FUNDING_RATE:
        if period is not None:
            raise ValidationError(
                "Period is not supported for fundingRate; the endpoint is implicitly hourly."
            )
        parsed_period = None
    else:
        if not period:
            raise ValidationError(f"Missing required parameter: period (for {series.value}).")
        parsed_period = parse_period(period)

    window = TimeWindow(
        start=_parse_timestamp("startTime", start_time),
        end=_parse_timestamp("endTime", end_time),
    )
    return DataRequest(series=series, window=window, period=parsed_period)
