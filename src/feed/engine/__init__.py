"""Range fetch engine: cursor pagination and page merging."""

from feed.engine.merger import MergeOutcome, merge_records
from feed.engine.models import FetchResult, FetchState, TerminationReason, TimeWindow
from feed.engine.range_fetcher import RangeFetcher

__all__ = [
    "FetchResult",
    "FetchState",
    "MergeOutcome",
    "RangeFetcher",
    "TerminationReason",
    "TimeWindow",
    "merge_records",
]
