"""Abstract upstream client interface.

The range fetcher and dataset sources depend only on this interface,
keeping Binance-specific details isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod

from feed.series import Period, RawRecord, SeriesType


class UpstreamClient(ABC):
    """Abstract base class for market-metric history clients."""

    @abstractmethod
    async def fetch_batch(
        self,
        series: SeriesType,
        start_time: int,
        end_time: int | None = None,
        period: Period | None = None,
    ) -> list[RawRecord]:
        """Fetch one page of records starting at ``start_time``.

        Returns at most the series' page limit of raw records.

        Pagination is NOT handled here -- callers advance the cursor
        and call again.

        Raises:
            ValidationError: If the period policy of the series is violated.
            UpstreamTransportError: On network failure or undecodable body.
            UpstreamStatusError: On a non-200 response.
            UpstreamFormatError: If the payload is not a list.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...
