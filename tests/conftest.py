"""Shared test fixtures for the market series feed."""

import pytest

from feed.config import AppSettings, FetchSettings, ThrottleSettings, UpstreamSettings


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (no throttling delay, fake base URL)."""
    return AppSettings(
        log_level="DEBUG",
        upstream=UpstreamSettings(base_url="https://upstream.test", symbol="BTCUSDT"),
        throttle=ThrottleSettings(min_interval_seconds=0.0),
        fetch=FetchSettings(),
    )
