"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class UpstreamSettings(BaseSettings):
    """Binance USD-M futures REST connection settings."""

    model_config = SettingsConfigDict(env_prefix="UPSTREAM_")

    base_url: str = "https://fapi.binance.com"
    symbol: str = "BTCUSDT"
    timeout_seconds: float = 15.0
    user_agent: str = "market-series-feed/0.1"


class ThrottleSettings(BaseSettings):
    """Outbound call pacing shared by every in-flight request."""

    model_config = SettingsConfigDict(env_prefix="THROTTLE_")

    min_interval_seconds: float = 0.25  # spacing between upstream call starts


class FetchSettings(BaseSettings):
    """Range fetch loop bounds.

    batch_window_ms only shapes the endTime sent with each page request.
    The upstream's record-count cap is what actually bounds a page.
    """

    model_config = SettingsConfigDict(env_prefix="FETCH_")

    max_attempts: int = 200
    batch_window_ms: int = 24 * 60 * 60 * 1000  # 1 day


class ApiSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 3000


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    upstream: UpstreamSettings = UpstreamSettings()
    throttle: ThrottleSettings = ThrottleSettings()
    fetch: FetchSettings = FetchSettings()
    api: ApiSettings = ApiSettings()
