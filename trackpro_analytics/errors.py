"""Error taxonomy for the analytics engine.

Every error here is local and recoverable by the caller: re-prompt the user,
skip the record, ask for the missing entry. Degenerate numeric cases (empty
record sets, zero-width goal ranges) are not errors and never raise.
"""

from typing import Iterable, Tuple


class TrackProError(Exception):
    """Base class for all engine errors."""


class UnknownEventError(TrackProError, LookupError):
    """Event is not present in the event policy table."""

    def __init__(self, event: str):
        self.event = event
        super().__init__(f"Unknown event: {event!r}")


class IncompleteMetricsError(TrackProError):
    """Recovery aggregation attempted with one or more channels missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing: Tuple[str, ...] = tuple(missing)
        super().__init__(f"Missing recovery metrics: {', '.join(self.missing)}")


class InvalidRecordError(TrackProError, ValueError):
    """Performance record rejected at ingestion."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid performance record: {reason}")


class InvalidGoalError(TrackProError, ValueError):
    """Goal definition cannot be evaluated (e.g. no resolvable direction)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid goal: {reason}")
