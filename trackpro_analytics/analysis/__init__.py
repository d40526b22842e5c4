"""Analysis module: pure performance and training analytics."""

from .event_policy import Direction, EventPolicy, Unit, resolve
from .personal_records import PerformanceRecord, RecordContext, personal_best
from .compliance import ComplianceEntry, compliance_rate
from .recovery import AggregateScore, Band, RecoveryDailyScore, RecoveryScoreAggregator, RecoverySubMetrics
from .goals import Goal, GoalStatus, Milestone, progress_percent
from .training_plan import TrainingPlan, TrainingSession, TrackExercise, WeightsExercise, validate

__all__ = [
    "Direction",
    "EventPolicy",
    "Unit",
    "resolve",
    "PerformanceRecord",
    "RecordContext",
    "personal_best",
    "ComplianceEntry",
    "compliance_rate",
    "AggregateScore",
    "Band",
    "RecoveryDailyScore",
    "RecoveryScoreAggregator",
    "RecoverySubMetrics",
    "Goal",
    "GoalStatus",
    "Milestone",
    "progress_percent",
    "TrainingPlan",
    "TrainingSession",
    "TrackExercise",
    "WeightsExercise",
    "validate",
]
