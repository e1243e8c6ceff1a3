"""Merge collected pages into one deduplicated, ascending sequence."""

from collections.abc import Iterable
from dataclasses import dataclass

from feed.engine.models import TimeWindow
from feed.logging import get_logger
from feed.series import RawRecord, SeriesSpec

logger = get_logger(__name__)


@dataclass
class MergeOutcome:
    """Merged records and the unique count seen before the window filter."""

    records: list[RawRecord]
    unique_before_filter: int


def merge_records(
    spec: SeriesSpec,
    records: Iterable[RawRecord],
    window: TimeWindow,
) -> MergeOutcome:
    """Deduplicate by timestamp, clip to the window and sort ascending.

    On a timestamp collision the record seen last wins. Records without a
    usable timestamp are skipped.

    Args:
        spec: Series spec supplying the timestamp accessor.
        records: Collected records, in collection order.
        window: The caller's requested [start, end) window.

    Returns:
        MergeOutcome whose records have unique, strictly ascending
        timestamps inside the window.
    """
    by_timestamp: dict[int, RawRecord] = {}
    for record in records:
        ts = spec.timestamp_of(record)
        if ts is None:
            logger.warning(
                "malformed_record_skipped",
                series=spec.series.value,
                stage="merge",
                record=record,
            )
            continue
        by_timestamp[ts] = record

    in_window = sorted(ts for ts in by_timestamp if window.contains(ts))
    return MergeOutcome(
        records=[by_timestamp[ts] for ts in in_window],
        unique_before_filter=len(by_timestamp),
    )
