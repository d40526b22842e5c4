"""Training plan structure: plan -> sessions -> exercises.

A plan owns an ordered schedule of sessions and each session exclusively
owns its exercises, so removing a session removes its exercises with it.
Exercises are a tagged union over the session type: track sessions carry
sets/distance/rest, weight sessions carry sets/reps/weight.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .compliance import ComplianceEntry


class SessionType(Enum):
    TRACK = "track"
    WEIGHTS = "weights"


class PlanStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class TrackExercise:
    """Running repetitions, e.g. 6 x 150m with 180s rest."""
    name: str
    sets: int
    distance_m: float
    rest_seconds: int = 0

    kind = SessionType.TRACK


@dataclass(frozen=True)
class WeightsExercise:
    """Lifting work, e.g. 4 x 5 back squat at 100kg."""
    name: str
    sets: int
    reps: int
    weight_kg: float = 0.0

    kind = SessionType.WEIGHTS


Exercise = Union[TrackExercise, WeightsExercise]


@dataclass(frozen=True)
class TrainingSession:
    id: str
    name: str
    session_type: SessionType
    duration_minutes: float
    exercises: Tuple[Exercise, ...] = ()
    scheduled_on: Optional[date] = None
    completed: bool = False
    rpe: Optional[int] = None  # Rate of Perceived Exertion (1-10)


@dataclass(frozen=True)
class TrainingPlan:
    id: str
    name: str
    status: PlanStatus = PlanStatus.DRAFT
    sessions: Tuple[TrainingSession, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class ValidationError:
    """A structural problem found in a plan. Returned, not raised."""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class TrainingStats:
    completed_sessions: int
    total_hours: float
    average_rpe: float
    sessions_by_type: Dict[str, int]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_amount(path: str, label: str, value, allow_zero: bool = False) -> List[ValidationError]:
    if not _is_number(value):
        return [ValidationError(path, f"{label} must be a number, got {value!r}")]
    if allow_zero and value < 0:
        return [ValidationError(path, f"{label} must not be negative, got {value}")]
    if not allow_zero and value <= 0:
        return [ValidationError(path, f"{label} must be positive, got {value}")]
    return []


def _validate_exercise(exercise: Exercise, session: TrainingSession, path: str) -> List[ValidationError]:
    errors = []

    if not isinstance(exercise, (TrackExercise, WeightsExercise)):
        return [ValidationError(path, f"unsupported exercise type {type(exercise).__name__}")]

    if exercise.kind is not session.session_type:
        errors.append(ValidationError(
            path, f"{exercise.kind.value} exercise in a {session.session_type.value} session"
        ))
    errors.extend(_check_amount(path, "sets", exercise.sets))

    if isinstance(exercise, TrackExercise):
        errors.extend(_check_amount(path, "distance", exercise.distance_m))
        errors.extend(_check_amount(path, "rest", exercise.rest_seconds, allow_zero=True))
    else:
        errors.extend(_check_amount(path, "reps", exercise.reps))
        errors.extend(_check_amount(path, "weight", exercise.weight_kg, allow_zero=True))

    return errors


def validate(plan: TrainingPlan) -> List[ValidationError]:
    """Check every structural rule of a plan.

    Values loaded from JSON are not type-checked on load, so non-numeric
    amounts are reported here as well.

    Returns:
        All problems found; an empty list for a well-formed plan
    """
    errors = []

    if plan.status is PlanStatus.ACTIVE and not plan.sessions:
        errors.append(ValidationError("sessions", "an active plan needs at least one session"))

    seen_ids = set()
    for i, session in enumerate(plan.sessions):
        path = f"sessions[{i}]"

        if session.id in seen_ids:
            errors.append(ValidationError(f"{path}.id", f"duplicate session id {session.id!r}"))
        seen_ids.add(session.id)

        errors.extend(_check_amount(f"{path}.duration_minutes", "duration", session.duration_minutes))
        if session.rpe is not None:
            if not _is_number(session.rpe):
                errors.append(ValidationError(f"{path}.rpe", f"RPE must be a number, got {session.rpe!r}"))
            elif not 1 <= session.rpe <= 10:
                errors.append(ValidationError(f"{path}.rpe", f"RPE must be within 1-10, got {session.rpe}"))

        for j, exercise in enumerate(session.exercises):
            errors.extend(_validate_exercise(exercise, session, f"{path}.exercises[{j}]"))

    return errors


def add_session(plan: TrainingPlan, session: TrainingSession) -> TrainingPlan:
    """Append a session to the end of the schedule."""
    return replace(plan, sessions=plan.sessions + (session,))


def remove_session(plan: TrainingPlan, session_id: str) -> TrainingPlan:
    """Remove a session and, with it, all of its exercises.

    Raises:
        KeyError: if the plan has no such session
    """
    if not any(session.id == session_id for session in plan.sessions):
        raise KeyError(session_id)
    return replace(plan, sessions=tuple(s for s in plan.sessions if s.id != session_id))


def training_stats(plan: TrainingPlan) -> TrainingStats:
    """Summarize completed sessions: count, hours, average RPE and type breakdown."""
    completed = [session for session in plan.sessions if session.completed]

    rated = [session.rpe for session in completed if session.rpe is not None]
    by_type: Dict[str, int] = {}
    for session in completed:
        by_type[session.session_type.value] = by_type.get(session.session_type.value, 0) + 1

    return TrainingStats(
        completed_sessions=len(completed),
        total_hours=sum(session.duration_minutes for session in completed) / 60,
        average_rpe=sum(rated) / len(rated) if rated else 0.0,
        sessions_by_type=by_type,
    )


def session_compliance(
    plan: TrainingPlan,
    as_of: date,
    subject_id: Optional[str] = None,
) -> List[ComplianceEntry]:
    """Project scheduled sessions up to ``as_of`` into compliance entries.

    Each scheduled day becomes one entry, fulfilled when every session on
    that day was completed. Unscheduled sessions and future days are skipped.
    """
    subject_id = subject_id or plan.id

    by_day: Dict[date, bool] = {}
    for session in plan.sessions:
        if session.scheduled_on is None or session.scheduled_on > as_of:
            continue
        by_day[session.scheduled_on] = by_day.get(session.scheduled_on, True) and session.completed

    return [
        ComplianceEntry(subject_id=subject_id, date=day, fulfilled=fulfilled)
        for day, fulfilled in sorted(by_day.items())
    ]


def _exercise_from_dict(data: dict, session_type: SessionType) -> Exercise:
    if session_type is SessionType.TRACK:
        return TrackExercise(
            name=data["name"],
            sets=data["sets"],
            distance_m=data["distance_m"],
            rest_seconds=data.get("rest_seconds", 0),
        )
    return WeightsExercise(
        name=data["name"],
        sets=data["sets"],
        reps=data["reps"],
        weight_kg=data.get("weight_kg", 0.0),
    )


def plan_from_dict(data: dict) -> TrainingPlan:
    """Build a plan from its JSON form.

    Exercises are read according to their session's ``session_type``.
    Structural checks are left to :func:`validate`.

    Raises:
        KeyError: if a required field is missing
        ValueError: if an enum value or date is malformed
    """
    sessions = []
    for item in data.get("sessions", []):
        session_type = SessionType(item["session_type"])
        scheduled_on = item.get("scheduled_on")
        sessions.append(TrainingSession(
            id=str(item["id"]),
            name=item["name"],
            session_type=session_type,
            duration_minutes=item["duration_minutes"],
            exercises=tuple(_exercise_from_dict(e, session_type) for e in item.get("exercises", [])),
            scheduled_on=date.fromisoformat(scheduled_on) if scheduled_on else None,
            completed=bool(item.get("completed", False)),
            rpe=item.get("rpe"),
        ))

    return TrainingPlan(
        id=str(data["id"]),
        name=data["name"],
        status=PlanStatus(data.get("status", PlanStatus.DRAFT.value)),
        sessions=tuple(sessions),
        description=data.get("description", ""),
    )
