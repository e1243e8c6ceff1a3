"""FastAPI application factory for the series data API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from feed.api import routes


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to build the fetcher and close the HTTP client.

    Returns:
        FastAPI application with the data router mounted under ``/api``.
        Route handlers read the RangeFetcher from ``app.state.fetcher``.
    """
    app = FastAPI(
        title="Market Series Feed",
        lifespan=lifespan,
    )

    # Wired by main.py lifespan, or directly by tests
    app.state.fetcher = None

    app.include_router(routes.router, prefix="/api")

    return app
