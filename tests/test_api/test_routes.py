"""Tests for the /api/data endpoint and its query validation.

The RangeFetcher is real; only the upstream client is mocked.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from feed.api.app import create_app
from feed.api.params import parse_data_request
from feed.config import FetchSettings
from feed.engine.range_fetcher import RangeFetcher
from feed.exceptions import UpstreamFormatError, UpstreamStatusError, ValidationError
from feed.series import Period, SeriesType
from feed.upstream.client import UpstreamClient

JAN_1_2024 = 1704067200000
JAN_2_2024 = 1704153600000
FIVE_MINUTES_MS = 5 * 60 * 1000


@pytest.fixture
def upstream() -> AsyncMock:
    upstream = AsyncMock(spec=UpstreamClient)
    upstream.fetch_batch = AsyncMock()
    return upstream


@pytest.fixture
def client(upstream: AsyncMock) -> TestClient:
    app = create_app()
    app.state.fetcher = RangeFetcher(upstream, FetchSettings())
    return TestClient(app)


def query(**params: str) -> dict[str, str]:
    base = {
        "dataType": "openInterest",
        "startTime": str(JAN_1_2024),
        "endTime": str(JAN_2_2024),
        "period": "5m",
    }
    base.update(params)
    return {k: v for k, v in base.items() if v is not None}


# ---------------------------------------------------------------------------
# Query validation
# ---------------------------------------------------------------------------


class TestParseDataRequest:
    def test_valid_request(self) -> None:
        req = parse_data_request("longShortRatio", "1000", "2000", "4h")
        assert req.series is SeriesType.LONG_SHORT_RATIO
        assert (req.window.start, req.window.end) == (1000, 2000)
        assert req.period is Period.H4

    def test_funding_rate_without_period(self) -> None:
        req = parse_data_request("fundingRate", "1000", "2000", None)
        assert req.period is None

    @pytest.mark.parametrize(
        "args",
        [
            (None, "1000", "2000", "5m"),
            ("openInterest", None, "2000", "5m"),
            ("openInterest", "1000", "", "5m"),
            ("openInterest", "1000", "2000", None),
            ("openInterest", "abc", "2000", "5m"),
            ("openInterest", "1000", "2000", "7m"),
            ("openInterest", "2000", "2000", "5m"),
            ("openInterest", "3000", "2000", "5m"),
            ("fundingRate", "1000", "2000", "1h"),
            ("fundingRate", "1000", "2000", ""),
            ("openInterest", "1704067200000", str(10**17), "5m"),
            ("openInterest", "-1", "2000", "5m"),
            ("liquidations", "1000", "2000", "5m"),
        ],
    )
    def test_invalid_requests(self, args: tuple) -> None:
        with pytest.raises(ValidationError):
            parse_data_request(*args)


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


class TestDataEndpoint:
    def test_success_response(self, client: TestClient, upstream: AsyncMock) -> None:
        page = [
            {"symbol": "BTCUSDT", "sumOpenInterest": "2", "sumOpenInterestValue": "3",
             "timestamp": JAN_1_2024 + 2 * FIVE_MINUTES_MS},
            {"symbol": "BTCUSDT", "sumOpenInterest": "1", "sumOpenInterestValue": "2",
             "timestamp": JAN_1_2024 + FIVE_MINUTES_MS},
        ]
        upstream.fetch_batch.side_effect = [page, []]

        response = client.get("/api/data", params=query())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [r["timestamp"] for r in body["data"]] == [
            JAN_1_2024 + FIVE_MINUTES_MS,
            JAN_1_2024 + 2 * FIVE_MINUTES_MS,
        ]
        assert body["meta"] == {
            "dataType": "openInterest",
            "period": "5m",
            "startTime": JAN_1_2024,
            "endTime": JAN_2_2024,
            "requestedEndDate": "2024-01-01",
            "recordCount": 2,
            "totalUniqueRecordsFetched": 2,
            "termination": "exhausted",
        }

    def test_funding_rate_reports_hourly_period(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        upstream.fetch_batch.return_value = []

        response = client.get("/api/data", params=query(dataType="fundingRate", period=None))

        assert response.status_code == 200
        assert response.json()["meta"]["period"] == "1h"
        assert response.json()["data"] == []

    def test_funding_rate_with_period_rejected(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        response = client.get("/api/data", params=query(dataType="fundingRate", period="1h"))

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "data" not in response.json()
        upstream.fetch_batch.assert_not_awaited()

    def test_inverted_window_rejected(self, client: TestClient, upstream: AsyncMock) -> None:
        response = client.get(
            "/api/data",
            params=query(startTime=str(JAN_2_2024), endTime=str(JAN_1_2024)),
        )

        assert response.status_code == 400
        assert "startTime must be less than endTime" in response.json()["message"]
        upstream.fetch_batch.assert_not_awaited()

    def test_missing_period_rejected(self, client: TestClient, upstream: AsyncMock) -> None:
        response = client.get("/api/data", params=query(period=None))

        assert response.status_code == 400
        upstream.fetch_batch.assert_not_awaited()

    def test_upstream_status_error_is_500(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        upstream.fetch_batch.side_effect = UpstreamStatusError(400, "Invalid period.")

        response = client.get("/api/data", params=query())

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "data" not in body
        assert "Invalid period." in body["details"]

    def test_upstream_format_error_is_500(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        upstream.fetch_batch.side_effect = UpstreamFormatError("not a list")

        response = client.get("/api/data", params=query())

        assert response.status_code == 500
        assert response.json()["details"] == "not a list"

    def test_end_time_beyond_calendar_rejected(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        response = client.get("/api/data", params=query(endTime=str(10**17)))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "Invalid endTime" in body["message"]
        upstream.fetch_batch.assert_not_awaited()

    def test_funding_rate_with_empty_period_rejected(
        self, client: TestClient, upstream: AsyncMock
    ) -> None:
        response = client.get("/api/data", params=query(dataType="fundingRate", period=""))

        assert response.status_code == 400
        upstream.fetch_batch.assert_not_awaited()
