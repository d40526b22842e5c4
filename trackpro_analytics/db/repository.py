"""Conversion between stored rows and analysis domain objects."""

import json
import logging
from datetime import date
from typing import List, Optional

from ..analysis.compliance import ComplianceEntry
from ..analysis.event_policy import Direction, Unit, resolve
from ..analysis.goals import Goal, GoalStatus, Milestone, supersede
from ..analysis.personal_records import PerformanceRecord, RecordContext, validate_record
from ..analysis.recovery import ALL_CHANNELS, RecoveryDailyScore, RecoverySubMetrics
from .database import Database
from .models import ComplianceEntryRow, GoalRow, PerformanceRecordRow, RecoveryEntryRow

logger = logging.getLogger(__name__)


def _record_from_row(row: PerformanceRecordRow) -> PerformanceRecord:
    context = None
    if any((row.competition_type, row.location, row.weather, row.notes)):
        context = RecordContext(
            competition_type=row.competition_type,
            location=row.location,
            weather=row.weather,
            notes=row.notes,
        )
    return PerformanceRecord(
        event=row.event,
        value=row.value,
        unit=Unit(row.unit),
        recorded_at=row.recorded_at,
        context=context,
        id=str(row.id),
    )


def _milestones_to_json(milestones) -> str:
    return json.dumps([
        {
            "id": m.id,
            "title": m.title,
            "target_value": m.target_value,
            "deadline": m.deadline.isoformat() if m.deadline else None,
            "completed_on": m.completed_on.isoformat() if m.completed_on else None,
        }
        for m in milestones
    ])


def _milestones_from_json(raw: Optional[str]):
    if not raw:
        return ()
    return tuple(
        Milestone(
            id=item["id"],
            title=item["title"],
            target_value=item["target_value"],
            deadline=date.fromisoformat(item["deadline"]) if item.get("deadline") else None,
            completed_on=date.fromisoformat(item["completed_on"]) if item.get("completed_on") else None,
        )
        for item in json.loads(raw)
    )


def _goal_from_row(row: GoalRow) -> Goal:
    return Goal(
        id=str(row.id),
        title=row.title,
        baseline_value=row.baseline_value,
        current_value=row.current_value,
        target_value=row.target_value,
        deadline=row.deadline,
        event=row.event,
        metric_name=row.metric_name,
        direction=Direction(row.direction) if row.direction else None,
        status=GoalStatus(row.status),
        milestones=_milestones_from_json(row.milestones),
        created_on=row.created_on,
    )


def _apply_goal(row: GoalRow, goal: Goal) -> None:
    row.title = goal.title
    row.event = resolve(goal.event).name if goal.event else None
    row.metric_name = goal.metric_name
    row.direction = goal.direction.value if goal.direction else None
    row.baseline_value = goal.baseline_value
    row.current_value = goal.current_value
    row.target_value = goal.target_value
    row.deadline = goal.deadline
    row.status = goal.status.value
    row.milestones = _milestones_to_json(goal.milestones)
    row.created_on = goal.created_on


class Repository:
    """Read and write domain objects for one user."""

    def __init__(self, db: Database, user_id: str = "default"):
        self.db = db
        self.user_id = user_id

    # Performance records

    def add_record(self, record: PerformanceRecord) -> PerformanceRecord:
        """Store a validated record and return it with its id."""
        policy = validate_record(record)
        context = record.context or RecordContext()

        with self.db.get_session() as session:
            row = PerformanceRecordRow(
                user_id=self.user_id,
                event=policy.name,
                value=record.value,
                unit=policy.unit.value,
                recorded_at=record.recorded_at,
                competition_type=context.competition_type,
                location=context.location,
                weather=context.weather,
                notes=context.notes,
            )
            session.add(row)
            session.flush()
            stored = _record_from_row(row)

        logger.info(f"Stored {stored.event} record {stored.value} ({stored.id})")
        return stored

    def list_records(self, event: Optional[str] = None) -> List[PerformanceRecord]:
        """Get records in chronological order, optionally for one event."""
        with self.db.get_session() as session:
            query = session.query(PerformanceRecordRow).filter(PerformanceRecordRow.user_id == self.user_id)
            if event is not None:
                query = query.filter(PerformanceRecordRow.event == resolve(event).name)
            rows = query.order_by(PerformanceRecordRow.recorded_at, PerformanceRecordRow.id).all()
            return [_record_from_row(row) for row in rows]

    # Compliance log

    def log_compliance(self, entry: ComplianceEntry) -> ComplianceEntry:
        """Store an entry, overwriting any earlier entry for the same subject and day."""
        with self.db.get_session() as session:
            row = session.query(ComplianceEntryRow).filter(
                ComplianceEntryRow.user_id == self.user_id,
                ComplianceEntryRow.subject_id == entry.subject_id,
                ComplianceEntryRow.date == entry.date,
            ).first()
            if row is None:
                row = ComplianceEntryRow(user_id=self.user_id, subject_id=entry.subject_id, date=entry.date)
                session.add(row)
            row.fulfilled = entry.fulfilled
        return entry

    def list_compliance(self, subject_id: Optional[str] = None) -> List[ComplianceEntry]:
        with self.db.get_session() as session:
            query = session.query(ComplianceEntryRow).filter(ComplianceEntryRow.user_id == self.user_id)
            if subject_id is not None:
                query = query.filter(ComplianceEntryRow.subject_id == subject_id)
            rows = query.order_by(ComplianceEntryRow.date, ComplianceEntryRow.subject_id).all()
            return [ComplianceEntry(subject_id=r.subject_id, date=r.date, fulfilled=r.fulfilled) for r in rows]

    # Recovery metrics

    def log_recovery(self, score: RecoveryDailyScore, notes: Optional[str] = None) -> RecoveryDailyScore:
        """Store a day's sub-metrics, replacing whatever was logged for that day."""
        with self.db.get_session() as session:
            row = session.query(RecoveryEntryRow).filter(
                RecoveryEntryRow.user_id == self.user_id,
                RecoveryEntryRow.date == score.date,
            ).first()
            if row is None:
                row = RecoveryEntryRow(user_id=self.user_id, date=score.date)
                session.add(row)
            for channel, value in score.sub_metrics.as_dict().items():
                setattr(row, channel, value)
            row.notes = notes
        return score

    def list_recovery(self, start: Optional[date] = None, end: Optional[date] = None) -> List[RecoveryDailyScore]:
        """Get logged days in chronological order, optionally within [start, end]."""
        with self.db.get_session() as session:
            query = session.query(RecoveryEntryRow).filter(RecoveryEntryRow.user_id == self.user_id)
            if start is not None:
                query = query.filter(RecoveryEntryRow.date >= start)
            if end is not None:
                query = query.filter(RecoveryEntryRow.date <= end)
            rows = query.order_by(RecoveryEntryRow.date).all()
            return [
                RecoveryDailyScore(
                    date=row.date,
                    sub_metrics=RecoverySubMetrics(**{c: getattr(row, c) for c in ALL_CHANNELS}),
                )
                for row in rows
            ]

    # Goals

    def add_goal(self, goal: Goal) -> Goal:
        """Store a new goal, archiving open goals it supersedes.

        The stored goal's id is assigned by the database.
        """
        existing = self.list_goals()
        updated = supersede(existing, goal)[:-1]

        with self.db.get_session() as session:
            for before, after in zip(existing, updated):
                if after.status is not before.status:
                    row = session.get(GoalRow, int(after.id))
                    row.status = after.status.value

            row = GoalRow(user_id=self.user_id)
            _apply_goal(row, goal)
            session.add(row)
            session.flush()
            return _goal_from_row(row)

    def save_goal(self, goal: Goal) -> Goal:
        """Persist changes to an existing goal."""
        with self.db.get_session() as session:
            row = session.get(GoalRow, int(goal.id))
            if row is None or row.user_id != self.user_id:
                raise KeyError(goal.id)
            _apply_goal(row, goal)
        return goal

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        with self.db.get_session() as session:
            row = session.get(GoalRow, int(goal_id))
            if row is None or row.user_id != self.user_id:
                return None
            return _goal_from_row(row)

    def list_goals(self) -> List[Goal]:
        with self.db.get_session() as session:
            rows = session.query(GoalRow).filter(GoalRow.user_id == self.user_id).order_by(GoalRow.id).all()
            return [_goal_from_row(row) for row in rows]
