"""Tests for DatasetSource single-page fetching and normalization."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from feed.dataset.sources import FUNDING_RATE_GENESIS_MS, DatasetSource
from feed.series import Period, SeriesType
from feed.upstream.client import UpstreamClient

NOW_MS = 1704067200000
DAY_MS = 86_400_000


@pytest.fixture
def upstream() -> AsyncMock:
    upstream = AsyncMock(spec=UpstreamClient)
    upstream.fetch_batch = AsyncMock()
    return upstream


class TestGetNextItems:
    @pytest.mark.asyncio
    async def test_open_interest_single_page(self, upstream: AsyncMock) -> None:
        upstream.fetch_batch.return_value = [
            {
                "symbol": "BTCUSDT",
                "sumOpenInterest": "81234.123456789",
                "sumOpenInterestValue": "3456789012.5",
                "timestamp": NOW_MS,
            }
        ]
        source = DatasetSource(SeriesType.OPEN_INTEREST, upstream)

        items = await source.get_next_items(NOW_MS)

        upstream.fetch_batch.assert_awaited_once_with(
            SeriesType.OPEN_INTEREST, NOW_MS, None, Period.M5
        )
        assert items == [
            {
                "timestamp": NOW_MS,
                "sum_open_interest": Decimal("81234.12345679"),
                "sum_open_interest_value": Decimal("3456789012.50000000"),
            }
        ]

    @pytest.mark.asyncio
    async def test_funding_rate_sends_no_period(self, upstream: AsyncMock) -> None:
        upstream.fetch_batch.return_value = [
            {"symbol": "BTCUSDT", "fundingTime": NOW_MS, "fundingRate": "-0.00002500"}
        ]
        source = DatasetSource(SeriesType.FUNDING_RATE, upstream, period=Period.H1)

        items = await source.get_next_items(NOW_MS)

        upstream.fetch_batch.assert_awaited_once_with(
            SeriesType.FUNDING_RATE, NOW_MS, None, None
        )
        assert items == [{"timestamp": NOW_MS, "funding_rate": Decimal("-0.00002500")}]

    @pytest.mark.asyncio
    async def test_skips_records_without_timestamp(self, upstream: AsyncMock) -> None:
        upstream.fetch_batch.return_value = [
            {"buySellRatio": "1", "buyVol": "1", "sellVol": "1"},
            {"buySellRatio": "1.1", "buyVol": "11", "sellVol": "10", "timestamp": NOW_MS},
        ]
        source = DatasetSource(SeriesType.TAKER_VOLUME, upstream, period=Period.H1)

        items = await source.get_next_items(NOW_MS)

        assert [i["timestamp"] for i in items] == [NOW_MS]
        upstream.fetch_batch.assert_awaited_once_with(
            SeriesType.TAKER_VOLUME, NOW_MS, None, Period.H1
        )


    @pytest.mark.asyncio
    async def test_skips_records_with_bad_metric(self, upstream: AsyncMock) -> None:
        upstream.fetch_batch.return_value = [
            {"symbol": "BTCUSDT", "sumOpenInterest": None,
             "sumOpenInterestValue": "1", "timestamp": NOW_MS},
            {"symbol": "BTCUSDT", "sumOpenInterestValue": "1", "timestamp": NOW_MS + 1},
            {"symbol": "BTCUSDT", "sumOpenInterest": "2",
             "sumOpenInterestValue": "3", "timestamp": NOW_MS + 2},
        ]
        source = DatasetSource(SeriesType.OPEN_INTEREST, upstream)

        items = await source.get_next_items(NOW_MS)

        assert [i["timestamp"] for i in items] == [NOW_MS + 2]

class TestInitialTimestamp:
    def test_funding_rate_starts_at_genesis(self, upstream: AsyncMock) -> None:
        source = DatasetSource(SeriesType.FUNDING_RATE, upstream)
        assert source.initial_timestamp(NOW_MS) == FUNDING_RATE_GENESIS_MS

    def test_period_series_look_back(self, upstream: AsyncMock) -> None:
        source = DatasetSource(SeriesType.LONG_SHORT_RATIO, upstream)
        assert source.initial_timestamp(NOW_MS) == NOW_MS - 30 * DAY_MS

    def test_custom_lookback(self, upstream: AsyncMock) -> None:
        source = DatasetSource(SeriesType.OPEN_INTEREST, upstream, lookback_days=7)
        assert source.initial_timestamp(NOW_MS) == NOW_MS - 7 * DAY_MS
