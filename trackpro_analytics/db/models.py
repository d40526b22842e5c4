"""Database models for performance records, logs and goals.

Only raw inputs are stored. Personal bests, compliance rates, recovery
scores and goal progress are recomputed from these rows on every read.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Boolean, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PerformanceRecordRow(Base):
    """Recorded event result. Rows are never updated or deleted."""

    __tablename__ = "performance_records"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), default="default")
    event = Column(String(50), nullable=False)  # canonical event name, e.g. "100m"
    value = Column(Float, nullable=False)  # seconds or meters
    unit = Column(String(20), nullable=False)
    recorded_at = Column(DateTime, nullable=False)

    # Context
    competition_type = Column(String(50))  # Training, Meet, Championship
    location = Column(String(255))
    weather = Column(String(100))
    notes = Column(Text)

    created_at = Column(DateTime, default=_utcnow)

    def __repr__(self):
        return f"<PerformanceRecordRow(event={self.event}, value={self.value}, recorded_at={self.recorded_at})>"


class ComplianceEntryRow(Base):
    """Daily adherence log for a supplement or plan."""

    __tablename__ = "compliance_entries"
    __table_args__ = (UniqueConstraint("user_id", "subject_id", "date", name="uq_compliance_subject_day"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), default="default")
    subject_id = Column(String(100), nullable=False)
    date = Column(Date, nullable=False)
    fulfilled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<ComplianceEntryRow(subject_id={self.subject_id}, date={self.date}, fulfilled={self.fulfilled})>"


class RecoveryEntryRow(Base):
    """Daily wellness sub-metrics (0-10 scales). One row per user and day."""

    __tablename__ = "recovery_entries"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_recovery_day"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), default="default")
    date = Column(Date, nullable=False)

    sleep = Column(Float)
    hrv = Column(Float)
    resting_hr = Column(Float)
    stress = Column(Float)  # inverted channel
    hydration = Column(Float)
    nutrition = Column(Float)
    soreness = Column(Float)  # inverted channel
    energy = Column(Float)
    mood = Column(Float)  # optional

    notes = Column(Text)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<RecoveryEntryRow(date={self.date}, sleep={self.sleep}, energy={self.energy})>"


class GoalRow(Base):
    """Goal definition and latest value. Status holds only terminal states."""

    __tablename__ = "goals"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), default="default")
    title = Column(String(255), nullable=False)
    event = Column(String(50))  # canonical event name, if linked
    metric_name = Column(String(100))
    direction = Column(String(20))  # only for non-event goals
    baseline_value = Column(Float, nullable=False)
    current_value = Column(Float, nullable=False)
    target_value = Column(Float, nullable=False)
    deadline = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active, completed, archived
    milestones = Column(Text)  # JSON list
    created_on = Column(Date)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<GoalRow(id={self.id}, title={self.title}, status={self.status})>"
