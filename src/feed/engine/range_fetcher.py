"""Forward pagination over a half-open time window.

Walks an upstream that returns count-bounded pages from ``startTime``
onward, advancing a cursor one millisecond past the newest record of each
page until the window is covered.

Termination rules (first match wins, checked after every page):
- Empty page: no more data in range (EXHAUSTED).
- Newest record not after the cursor: upstream is repeating itself (STALLED).
- Cursor reached the window end (WINDOW_COVERED).
- Attempt ceiling reached (MAX_ATTEMPTS).

All four are soft: the records collected so far are merged and returned.
Upstream errors abort the whole fetch and are never retried.

Pages are requested strictly one after another since each request's
cursor depends on the previous page.
"""

import time

import structlog

from feed.config import FetchSettings
from feed.engine.merger import merge_records
from feed.engine.models import FetchResult, FetchState, TerminationReason, TimeWindow
from feed.logging import get_logger
from feed.series import Period, RawRecord, SeriesSpec, SeriesType, get_spec, resolve_period
from feed.upstream.client import UpstreamClient

logger = get_logger(__name__)


class RangeFetcher:
    """Reconstructs a series over an arbitrary window from bounded pages.

    Usage:
        fetcher = RangeFetcher(client, settings.fetch)
        result = await fetcher.fetch(SeriesType.OPEN_INTEREST, window, Period.M5)
    """

    def __init__(self, client: UpstreamClient, settings: FetchSettings) -> None:
        if settings.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if settings.batch_window_ms < 1:
            raise ValueError("batch_window_ms must be at least 1")
        self._client = client
        self._max_attempts = settings.max_attempts
        self._batch_window_ms = settings.batch_window_ms

    async def fetch(
        self,
        series: SeriesType,
        window: TimeWindow,
        period: Period | None = None,
    ) -> FetchResult:
        """Fetch every record of ``series`` inside ``window``.

        Raises:
            ValidationError: If the period policy of the series is violated.
                Raised before any upstream call.
            UpstreamError: If any page request fails.
        """
        spec = get_spec(series)
        resolve_period(spec, period, has_end_time=True)

        started = time.monotonic()
        with structlog.contextvars.bound_contextvars(
            series=series.value,
            period=period.value if period else None,
        ):
            logger.info("fetch_started", start_time=window.start, end_time=window.end)
            state = FetchState(cursor=window.start)
            termination = await self._paginate(spec, window, period, state)

            merged = merge_records(spec, state.collected, window)
            logger.info(
                "fetch_completed",
                termination=termination.value,
                attempts=state.attempts,
                collected=len(state.collected),
                records=len(merged.records),
                duration_seconds=round(time.monotonic() - started, 3),
            )

        return FetchResult(
            series=series,
            window=window,
            period=period,
            records=merged.records,
            unique_records_fetched=merged.unique_before_filter,
            termination=termination,
            attempts=state.attempts,
        )

    async def _paginate(
        self,
        spec: SeriesSpec,
        window: TimeWindow,
        period: Period | None,
        state: FetchState,
    ) -> TerminationReason:
        """Run the page loop, mutating ``state``. Returns why it stopped."""
        while state.cursor < window.end and state.attempts < self._max_attempts:
            batch_end = min(state.cursor + self._batch_window_ms, window.end)
            batch = await self._client.fetch_batch(
                spec.series, state.cursor, batch_end, period
            )

            if not batch:
                logger.info("batch_empty", cursor=state.cursor, batch_end=batch_end)
                return TerminationReason.EXHAUSTED

            latest = self._collect(spec, batch, window, state)
            logger.debug(
                "batch_fetched",
                cursor=state.cursor,
                batch_end=batch_end,
                size=len(batch),
                latest=latest,
            )

            if latest is None or latest <= state.cursor:
                logger.warning(
                    "fetch_stalled",
                    cursor=state.cursor,
                    latest=latest,
                    size=len(batch),
                )
                return TerminationReason.STALLED

            # +1 ms so the boundary record is not requested again
            state.cursor = latest + 1
            if state.cursor >= window.end:
                return TerminationReason.WINDOW_COVERED

            state.attempts += 1

        logger.warning(
            "max_attempts_reached",
            max_attempts=self._max_attempts,
            cursor=state.cursor,
            end_time=window.end,
        )
        return TerminationReason.MAX_ATTEMPTS

    def _collect(
        self,
        spec: SeriesSpec,
        batch: list[RawRecord],
        window: TimeWindow,
        state: FetchState,
    ) -> int | None:
        """Append in-window records to ``state.collected``.

        Returns the newest timestamp in the batch, or None when no record
        carries a usable timestamp.
        """
        latest: int | None = None
        for record in batch:
            ts = spec.timestamp_of(record)
            if ts is None:
                logger.warning("malformed_record_skipped", stage="collect", record=record)
                continue
            if window.contains(ts):
                state.collected.append(record)
            if latest is None or ts > latest:
                latest = ts
        return latest
