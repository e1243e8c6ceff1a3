"""Single-page dataset sources for incremental dataset builders.

An external builder tracks the last timestamp it wrote and repeatedly
asks a source for the next page from there. Each call is one upstream
request without an end time, normalized to the dataset row shape.
Writing the rows somewhere is the builder's job, not this module's.
"""

from decimal import InvalidOperation

from feed.logging import get_logger
from feed.series import (
    DEFAULT_PERIOD,
    NormalizedRecord,
    Period,
    SeriesType,
    get_spec,
)
from feed.upstream.client import UpstreamClient

logger = get_logger(__name__)

# Binance Futures launch; funding rate history starts here.
FUNDING_RATE_GENESIS_MS = 1_568_102_400_000
DEFAULT_LOOKBACK_DAYS = 30

_DAY_MS = 86_400 * 1000


class DatasetSource:
    """Produces normalized pages of one series for a dataset builder.

    Period-based series use ``period`` (5m by default); funding rate
    ignores it.
    """

    def __init__(
        self,
        series: SeriesType,
        client: UpstreamClient,
        period: Period = DEFAULT_PERIOD,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ) -> None:
        self._spec = get_spec(series)
        self._client = client
        self._period = period if self._spec.uses_period else None
        self._lookback_days = lookback_days

    @property
    def series(self) -> SeriesType:
        return self._spec.series

    async def get_next_items(self, start_at: int) -> list[NormalizedRecord]:
        """Fetch and normalize the page of records starting at ``start_at``."""
        records = await self._client.fetch_batch(
            self._spec.series, start_at, None, self._period
        )

        items: list[NormalizedRecord] = []
        for record in records:
            if self._spec.timestamp_of(record) is None:
                self._skip(record, reason="timestamp")
                continue
            try:
                items.append(self._spec.normalize(record))
            except (KeyError, InvalidOperation):
                self._skip(record, reason="metric")

        logger.debug(
            "dataset_items_fetched",
            series=self._spec.series.value,
            start_at=start_at,
            items=len(items),
        )
        return items

    def _skip(self, record: object, reason: str) -> None:
        logger.warning(
            "malformed_record_skipped",
            series=self._spec.series.value,
            stage="dataset",
            reason=reason,
            record=record,
        )

    def initial_timestamp(self, now_ms: int) -> int:
        """Where a builder starts when no prior output exists.

        Funding rate starts at its genesis; the other series only keep a
        limited history upstream, so they start ``lookback_days`` back.
        """
        if self._spec.series is SeriesType.FUNDING_RATE:
            return FUNDING_RATE_GENESIS_MS
        return now_ms - self._lookback_days * _DAY_MS
