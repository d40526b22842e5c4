"""Database module for the TrackPro analytics tool."""

from .database import Database, get_db
from .models import PerformanceRecordRow, ComplianceEntryRow, RecoveryEntryRow, GoalRow
from .repository import Repository

__all__ = [
    "Database",
    "get_db",
    "PerformanceRecordRow",
    "ComplianceEntryRow",
    "RecoveryEntryRow",
    "GoalRow",
    "Repository",
]
