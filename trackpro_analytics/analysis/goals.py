"""Goal progress tracking against targets and deadlines.

Goals are immutable; every operation returns a new goal. Only the terminal
states (completed, archived) are stored. Overdue is always derived from the
deadline and the current progress.

State machine::

    active  -> completed   (explicit completion, or 100% progress committed)
    active  -> overdue     (deadline passed with progress < 100%)
    overdue -> active      (target or deadline edited)
    overdue -> completed
    active/overdue -> archived  (superseded by a new goal for the same event)
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from ..errors import InvalidGoalError
from .event_policy import Direction, is_better, resolve
from .personal_records import PerformanceRecord

logger = logging.getLogger(__name__)


class GoalStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    ARCHIVED = "archived"


TERMINAL_STATUSES = frozenset({GoalStatus.COMPLETED, GoalStatus.ARCHIVED})


@dataclass(frozen=True)
class Milestone:
    """Intermediate target on the way to a goal."""
    id: str
    title: str
    target_value: float
    deadline: Optional[date] = None
    completed_on: Optional[date] = None

    @property
    def completed(self) -> bool:
        return self.completed_on is not None


@dataclass(frozen=True)
class Goal:
    """A numeric target for an event or a free-standing metric.

    Event goals take their direction from the event policy; other goals
    (e.g. "training weeks completed") must state it explicitly. A goal whose
    direction cannot be resolved, or whose target is worse than its
    baseline, cannot be built.
    """
    id: str
    title: str
    baseline_value: float
    current_value: float
    target_value: float
    deadline: date
    event: Optional[str] = None
    metric_name: Optional[str] = None
    direction: Optional[Direction] = None
    status: GoalStatus = GoalStatus.ACTIVE
    milestones: Tuple[Milestone, ...] = ()
    created_on: Optional[date] = None

    def __post_init__(self):
        if self.status is GoalStatus.OVERDUE:
            raise InvalidGoalError("overdue is derived from the deadline and cannot be stored")
        if self.event is None and not self.metric_name:
            raise InvalidGoalError("a goal needs an event or a metric name")
        for name in ("baseline_value", "current_value", "target_value"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidGoalError(f"{name} must be a finite number, got {value!r}")

        direction = resolve_direction(self)
        baseline, target = self.baseline_value, self.target_value
        if target != baseline and not is_better(direction, target, baseline):
            raise InvalidGoalError(
                f"target {target} is not an improvement on baseline {baseline} ({direction.value})"
            )


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def resolve_direction(goal: Goal) -> Direction:
    """Get the direction a goal improves in.

    Raises:
        UnknownEventError: if the linked event has no policy
        InvalidGoalError: if no direction can be resolved, or an explicit
            direction contradicts the event policy
    """
    if goal.event is not None:
        policy_direction = resolve(goal.event).direction
        if goal.direction is not None and goal.direction is not policy_direction:
            raise InvalidGoalError(
                f"{goal.event} is {policy_direction.value}, goal states {goal.direction.value}"
            )
        return policy_direction

    if goal.direction is None:
        raise InvalidGoalError(f"goal {goal.id!r} has no event and no explicit direction")
    return goal.direction


def is_reached(direction: Direction, value: float, target: float) -> bool:
    """True if ``value`` equals or passes ``target`` in the favourable direction."""
    return value == target or is_better(direction, value, target)


def progress_percent(goal: Goal) -> float:
    """Percent progress from baseline to target, clamped to [0, 100].

    When baseline equals target the range has zero width: progress is 100
    once the current value reaches the target, else 0.
    """
    direction = resolve_direction(goal)
    baseline, current, target = goal.baseline_value, goal.current_value, goal.target_value

    if baseline == target:
        return 100.0 if is_reached(direction, current, target) else 0.0

    if direction is Direction.HIGHER_IS_BETTER:
        raw = 100.0 * (current - baseline) / (target - baseline)
    else:
        raw = 100.0 * (baseline - current) / (baseline - target)

    return float(min(100.0, max(0.0, raw)))


def days_remaining(goal: Goal, as_of: Union[date, datetime]) -> int:
    """Days until the deadline; negative once it has passed."""
    return (goal.deadline - _as_date(as_of)).days


def status(goal: Goal, as_of: Union[date, datetime]) -> GoalStatus:
    """Derive the goal's status as of a date."""
    if goal.status in TERMINAL_STATUSES:
        return goal.status
    if days_remaining(goal, as_of) < 0 and progress_percent(goal) < 100.0:
        return GoalStatus.OVERDUE
    return GoalStatus.ACTIVE


def update_progress(goal: Goal, current_value: float) -> Goal:
    """Record a new current value.

    Reaching 100% commits the goal as completed. A completed goal keeps its
    status whatever the value.

    Raises:
        InvalidGoalError: if the goal has been archived
    """
    if goal.status is GoalStatus.ARCHIVED:
        raise InvalidGoalError(f"goal {goal.id!r} is archived and cannot be updated")

    updated = replace(goal, current_value=current_value)
    if goal.status is GoalStatus.COMPLETED:
        return updated

    if progress_percent(updated) >= 100.0:
        logger.info(f"Goal {goal.id} completed at {current_value}")
        return replace(updated, status=GoalStatus.COMPLETED)
    return updated


def complete(goal: Goal) -> Goal:
    """Explicitly mark a goal as completed (terminal)."""
    if goal.status is GoalStatus.ARCHIVED:
        raise InvalidGoalError(f"goal {goal.id!r} is archived and cannot be completed")
    if goal.status is GoalStatus.COMPLETED:
        return goal
    return replace(goal, status=GoalStatus.COMPLETED)


def edit(
    goal: Goal,
    target_value: Optional[float] = None,
    deadline: Optional[date] = None,
    baseline_value: Optional[float] = None,
) -> Goal:
    """Change a goal's target, deadline or baseline.

    Editing can move an overdue goal back to active. Terminal goals cannot
    be edited.
    """
    if goal.status in TERMINAL_STATUSES:
        raise InvalidGoalError(f"goal {goal.id!r} is {goal.status.value} and cannot be edited")

    changes = {}
    if target_value is not None:
        changes["target_value"] = target_value
    if deadline is not None:
        changes["deadline"] = deadline
    if baseline_value is not None:
        changes["baseline_value"] = baseline_value
    return replace(goal, **changes)


def ingest_record(goal: Goal, record: PerformanceRecord) -> Goal:
    """Apply a new performance to a goal linked to the same event.

    The goal's current value only moves when the record beats it. Archived
    goals are returned unchanged.
    """
    if goal.status is GoalStatus.ARCHIVED:
        return goal
    if goal.event is None or resolve(goal.event) is not resolve(record.event):
        return goal

    direction = resolve_direction(goal)
    if not is_better(direction, record.value, goal.current_value):
        return goal
    return update_progress(goal, record.value)


def supersede(goals: Iterable[Goal], new_goal: Goal) -> List[Goal]:
    """Add ``new_goal`` and archive open goals for the same event."""
    new_policy = resolve(new_goal.event) if new_goal.event is not None else None

    result = []
    for goal in goals:
        same_event = (
            new_policy is not None
            and goal.event is not None
            and resolve(goal.event) is new_policy
        )
        if same_event and goal.status not in TERMINAL_STATUSES:
            logger.info(f"Goal {goal.id} archived, superseded by {new_goal.id}")
            goal = replace(goal, status=GoalStatus.ARCHIVED)
        result.append(goal)

    result.append(new_goal)
    return result


def upcoming_deadlines(goals: Iterable[Goal], as_of: Union[date, datetime], days: int) -> List[Goal]:
    """Open goals whose deadline falls within ``days`` of ``as_of``, soonest first.

    Overdue goals are included, since their deadline is already behind.
    """
    as_of = _as_date(as_of)
    open_goals = [
        goal for goal in goals
        if status(goal, as_of) in (GoalStatus.ACTIVE, GoalStatus.OVERDUE)
        and days_remaining(goal, as_of) <= days
    ]
    return sorted(open_goals, key=lambda goal: goal.deadline)


def reached_milestones(goal: Goal) -> List[Milestone]:
    """Milestones whose target the current value has reached."""
    direction = resolve_direction(goal)
    return [
        milestone for milestone in goal.milestones
        if is_reached(direction, goal.current_value, milestone.target_value)
    ]


def complete_milestone(goal: Goal, milestone_id: str, on: Union[date, datetime]) -> Goal:
    """Mark one milestone as completed on a date."""
    if not any(m.id == milestone_id for m in goal.milestones):
        raise InvalidGoalError(f"goal {goal.id!r} has no milestone {milestone_id!r}")

    milestones = tuple(
        replace(m, completed_on=_as_date(on)) if m.id == milestone_id and not m.completed else m
        for m in goal.milestones
    )
    return replace(goal, milestones=milestones)
