"""Entry point for the market series feed API.

Component wiring order (inside the FastAPI lifespan):
1. AppSettings (configuration)
2. Logging setup
3. RateThrottle (process-wide upstream pacing)
4. BinanceClient (upstream history endpoints)
5. RangeFetcher (pagination engine)

The HTTP client is closed when the server shuts down.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from feed.api.app import create_app
from feed.config import AppSettings
from feed.engine.range_fetcher import RangeFetcher
from feed.logging import get_logger, setup_logging
from feed.upstream.binance_client import BinanceClient
from feed.upstream.throttle import RateThrottle


def build_app(settings: AppSettings) -> FastAPI:
    """Create the API app with a lifespan that owns the upstream client."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger = get_logger("feed.main")
        throttle = RateThrottle(settings.throttle.min_interval_seconds)
        client = BinanceClient(settings.upstream, throttle)
        app.state.fetcher = RangeFetcher(client, settings.fetch)
        logger.info(
            "feed_started",
            base_url=settings.upstream.base_url,
            symbol=settings.upstream.symbol,
            min_interval_seconds=settings.throttle.min_interval_seconds,
        )
        try:
            yield
        finally:
            await client.close()
            logger.info("feed_stopped")

    return create_app(lifespan=lifespan)


def run() -> None:
    """Load settings, configure logging and serve the API."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    app = build_app(settings)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
