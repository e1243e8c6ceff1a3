"""Data models for range fetches.

All timestamps are integer milliseconds since the Unix epoch (UTC).
"""

from dataclasses import dataclass, field
from enum import Enum

from feed.exceptions import ValidationError
from feed.series import Period, RawRecord, SeriesType


class TerminationReason(str, Enum):
    """Why the pagination loop stopped.

    None of these is an error: each ends the fetch with whatever was
    collected so far.
    """

    WINDOW_COVERED = "window_covered"
    EXHAUSTED = "exhausted"  # upstream returned an empty page
    STALLED = "stalled"  # non-empty page without forward progress
    MAX_ATTEMPTS = "max_attempts"


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end) in milliseconds."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValidationError(
                "Invalid startTime or endTime. startTime must be less than endTime."
            )

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end


@dataclass
class FetchState:
    """Mutable loop state of a single range fetch."""

    cursor: int
    attempts: int = 0
    collected: list[RawRecord] = field(default_factory=list)


@dataclass
class FetchResult:
    """Merged output of a range fetch plus its metadata."""

    series: SeriesType
    window: TimeWindow
    period: Period | None
    records: list[RawRecord]
    unique_records_fetched: int
    termination: TerminationReason
    attempts: int

    @property
    def record_count(self) -> int:
        return len(self.records)
