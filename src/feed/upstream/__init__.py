"""Upstream client layer -- Binance futures history endpoints via httpx."""

from feed.upstream.binance_client import BinanceClient
from feed.upstream.client import UpstreamClient
from feed.upstream.throttle import RateThrottle

__all__ = ["BinanceClient", "RateThrottle", "UpstreamClient"]
