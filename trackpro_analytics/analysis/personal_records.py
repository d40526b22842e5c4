"""Personal best tracking over immutable performance records."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidRecordError, UnknownEventError
from .event_policy import Direction, EventPolicy, Unit, is_better, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordContext:
    """Optional circumstances of a performance."""
    competition_type: Optional[str] = None  # Training, Meet, Championship, ...
    location: Optional[str] = None
    weather: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PerformanceRecord:
    """A single recorded result. Corrections create a new record."""
    event: str
    value: float
    unit: Unit
    recorded_at: datetime
    context: Optional[RecordContext] = None
    id: Optional[str] = None

    @classmethod
    def create(
        cls,
        event: str,
        value: float,
        recorded_at: datetime,
        context: Optional[RecordContext] = None,
        id: Optional[str] = None,
    ) -> "PerformanceRecord":
        """Build a validated record, resolving the event and deriving its unit.

        Raises:
            UnknownEventError: if the event has no policy
            InvalidRecordError: if the value is not a positive finite number
        """
        policy = resolve(event)
        record = cls(
            event=policy.name,
            value=value,
            unit=policy.unit,
            recorded_at=recorded_at,
            context=context,
            id=id,
        )
        validate_record(record)
        return record


def validate_record(record: PerformanceRecord) -> EventPolicy:
    """Check a record against its event policy and return that policy."""
    policy = resolve(record.event)

    if isinstance(record.value, bool) or not isinstance(record.value, (int, float)):
        logger.warning(f"Rejected {record.event} record with non-numeric value {record.value!r}")
        raise InvalidRecordError(f"value must be numeric, got {record.value!r}")
    if not math.isfinite(record.value) or record.value <= 0:
        logger.warning(f"Rejected {record.event} record with value {record.value}")
        raise InvalidRecordError(f"value must be strictly positive, got {record.value}")
    if record.unit is not policy.unit:
        raise InvalidRecordError(
            f"{policy.name} is measured in {policy.unit.value}, got {getattr(record.unit, 'value', record.unit)}"
        )
    if not isinstance(record.recorded_at, datetime):
        raise InvalidRecordError("recorded_at must be a datetime")

    return policy


def _records_for(records: Iterable[PerformanceRecord], policy: EventPolicy) -> List[PerformanceRecord]:
    # Records may carry an alias; compare on the resolved policy.
    matched = []
    for record in records:
        try:
            if resolve(record.event) is policy:
                matched.append(record)
        except UnknownEventError:
            continue
    return matched


def _best_of(records: List[PerformanceRecord], direction: Direction) -> Optional[PerformanceRecord]:
    best = None
    for record in records:
        if best is None or is_better(direction, record.value, best.value):
            best = record
        elif record.value == best.value and record.recorded_at < best.recorded_at:
            # First achievement of the mark is the record
            best = record
    return best


def personal_best(records: Iterable[PerformanceRecord], event: str) -> Optional[PerformanceRecord]:
    """Get the most favourable record for an event.

    Lower-is-better events take the minimum, higher-is-better the maximum.
    Ties go to the earliest ``recorded_at``.

    Returns:
        The best record, or None when no record exists for the event yet

    Raises:
        UnknownEventError: if the event has no policy
    """
    policy = resolve(event)
    return _best_of(_records_for(records, policy), policy.direction)


def insert(records: Iterable[PerformanceRecord], new_record: PerformanceRecord) -> List[PerformanceRecord]:
    """Return a new list with ``new_record`` appended. The input is not modified."""
    validate_record(new_record)
    return list(records) + [new_record]


def personal_bests(records: Iterable[PerformanceRecord]) -> Dict[str, PerformanceRecord]:
    """Get the personal best for every event that has at least one record."""
    by_event: Dict[str, List[PerformanceRecord]] = {}
    policies: Dict[str, EventPolicy] = {}
    for record in records:
        try:
            policy = resolve(record.event)
        except UnknownEventError:
            logger.warning(f"Skipping record for unknown event {record.event!r}")
            continue
        policies[policy.name] = policy
        by_event.setdefault(policy.name, []).append(record)

    return {
        name: _best_of(event_records, policies[name].direction)
        for name, event_records in by_event.items()
    }


def progression(records: Iterable[PerformanceRecord], event: str) -> List[PerformanceRecord]:
    """Get the chronological list of records that each set a new best."""
    policy = resolve(event)
    ordered = sorted(_records_for(records, policy), key=lambda r: r.recorded_at)

    history: List[PerformanceRecord] = []
    for record in ordered:
        if not history or is_better(policy.direction, record.value, history[-1].value):
            history.append(record)
    return history


def improvement(records: Iterable[PerformanceRecord], new_record: PerformanceRecord) -> Optional[float]:
    """Signed improvement of ``new_record`` over the prior best.

    Positive means better in the event's direction (a faster time or a
    longer throw). Returns None when there is no prior record.
    """
    policy = validate_record(new_record)
    prior = personal_best(records, policy.name)
    if prior is None:
        return None
    if policy.direction is Direction.LOWER_IS_BETTER:
        return prior.value - new_record.value
    return new_record.value - prior.value
