"""Series definitions: endpoint bindings, timestamp accessors and normalizers.

Each supported series is described by one SeriesSpec value. The range
fetcher, merger, upstream client and dataset sources all look the spec up
by SeriesType instead of branching on the series name.

Numeric metric fields arrive from Binance as strings; normalizers convert
them to Decimal. Never use float for rates, ratios or volumes.
"""

from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from feed.exceptions import ValidationError

RawRecord = dict[str, Any]
NormalizedRecord = dict[str, Any]


class SeriesType(str, Enum):
    """Supported market-metric feeds, valued by their request name."""

    FUNDING_RATE = "fundingRate"
    OPEN_INTEREST = "openInterest"
    LONG_SHORT_RATIO = "longShortRatio"
    TAKER_VOLUME = "takerVolume"


class Period(str, Enum):
    """Bucket sizes accepted by the period-based futures data endpoints."""

    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H2 = "2h"
    H4 = "4h"
    H6 = "6h"
    H8 = "8h"
    H12 = "12h"
    D1 = "1d"


DEFAULT_PERIOD = Period.M5
FUNDING_RATE_PERIOD = "1h"  # funding endpoint is implicitly hourly


def format_number(value: Any, decimals: int) -> Decimal:
    """Round a numeric string or number to a fixed number of decimals (half-up)."""
    quantum = Decimal(1).scaleb(-decimals)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def _normalize_funding_rate(record: RawRecord) -> NormalizedRecord:
    return {
        "timestamp": record["fundingTime"],
        "funding_rate": format_number(record["fundingRate"], 8),
    }


def _normalize_open_interest(record: RawRecord) -> NormalizedRecord:
    return {
        "timestamp": record["timestamp"],
        "sum_open_interest": format_number(record["sumOpenInterest"], 8),
        "sum_open_interest_value": format_number(record["sumOpenInterestValue"], 8),
    }


def _normalize_long_short_ratio(record: RawRecord) -> NormalizedRecord:
    return {
        "timestamp": record["timestamp"],
        "long_account": format_number(record["longAccount"], 4),
        "short_account": format_number(record["shortAccount"], 4),
        "long_short_ratio": format_number(record["longShortRatio"], 4),
    }


def _normalize_taker_volume(record: RawRecord) -> NormalizedRecord:
    return {
        "timestamp": record["timestamp"],
        "buy_vol": format_number(record["buyVol"], 4),
        "sell_vol": format_number(record["sellVol"], 4),
        "buy_sell_ratio": format_number(record["buySellRatio"], 4),
    }


@dataclass(frozen=True)
class SeriesSpec:
    """Everything that differs between series.

    Attributes:
        series: The series this spec describes.
        path: Upstream endpoint path.
        page_limit: Maximum records per upstream call (sent as ``limit``).
        timestamp_field: The one field holding the record's time in ms.
        uses_period: Whether the endpoint takes a ``period`` argument.
        normalize: Maps a raw record to the dataset row shape.
    """

    series: SeriesType
    path: str
    page_limit: int
    timestamp_field: str
    uses_period: bool
    normalize: Callable[[RawRecord], NormalizedRecord]

    def timestamp_of(self, record: Any) -> int | None:
        """Return the record's timestamp, or None if it is missing or not numeric."""
        if not isinstance(record, dict):
            return None
        value = record.get(self.timestamp_field)
        # bool is an int subclass but never a timestamp
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not value.is_integer():
            return None
        return int(value)


SERIES_SPECS: dict[SeriesType, SeriesSpec] = {
    SeriesType.FUNDING_RATE: SeriesSpec(
        series=SeriesType.FUNDING_RATE,
        path="/fapi/v1/fundingRate",
        page_limit=1000,
        timestamp_field="fundingTime",
        uses_period=False,
        normalize=_normalize_funding_rate,
    ),
    SeriesType.OPEN_INTEREST: SeriesSpec(
        series=SeriesType.OPEN_INTEREST,
        path="/futures/data/openInterestHist",
        page_limit=500,
        timestamp_field="timestamp",
        uses_period=True,
        normalize=_normalize_open_interest,
    ),
    SeriesType.LONG_SHORT_RATIO: SeriesSpec(
        series=SeriesType.LONG_SHORT_RATIO,
        path="/futures/data/globalLongShortAccountRatio",
        page_limit=500,
        timestamp_field="timestamp",
        uses_period=True,
        normalize=_normalize_long_short_ratio,
    ),
    SeriesType.TAKER_VOLUME: SeriesSpec(
        series=SeriesType.TAKER_VOLUME,
        path="/futures/data/takerlongshortRatio",
        page_limit=500,
        timestamp_field="timestamp",
        uses_period=True,
        normalize=_normalize_taker_volume,
    ),
}


def get_spec(series: SeriesType) -> SeriesSpec:
    """Return the spec for a series."""
    return SERIES_SPECS[series]


def parse_series(value: str | None) -> SeriesType:
    """Parse a request ``dataType`` value into a SeriesType."""
    try:
        return SeriesType(value)
    except ValueError:
        supported = ", ".join(s.value for s in SeriesType)
        raise ValidationError(
            f"Unsupported data type: {value}. Supported types: {supported}."
        ) from None


def parse_period(value: str) -> Period:
    """Parse a period string such as ``"5m"`` or ``"1d"``."""
    try:
        return Period(value)
    except ValueError:
        supported = ", ".join(p.value for p in Period)
        raise ValidationError(
            f"Unsupported period: {value}. Supported periods: {supported}."
        ) from None


def resolve_period(
    spec: SeriesSpec,
    period: Period | None,
    has_end_time: bool,
) -> Period | None:
    """Apply the period policy of a series.

    Funding rate rejects any period. The other series require one whenever
    an end time bounds the call, and fall back to the smallest period in
    single-page mode (no end time).
    """
    if not spec.uses_period:
        if period is not None:
            raise ValidationError(
                f"Period is not supported for {spec.series.value}; "
                "the endpoint is implicitly hourly."
            )
        return None
    if period is None:
        if has_end_time:
            raise ValidationError(
                f"Period is required when providing an end time for {spec.series.value}."
            )
        return DEFAULT_PERIOD
    return period
