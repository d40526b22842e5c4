"""Adherence (compliance) rates over trailing windows.

Only logged days count in the denominator: a day with no entry is neither
compliant nor non-compliant. A window with no entries at all reports 0%.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class ComplianceEntry:
    """Whether a tracked behaviour (supplement, session) was done on a day."""
    subject_id: str
    date: date
    fulfilled: bool


def deduplicate(entries: Iterable[ComplianceEntry]) -> List[ComplianceEntry]:
    """Keep the last entry per (subject_id, date), ordered by date then subject."""
    latest: Dict[Tuple[str, date], ComplianceEntry] = {}
    for entry in entries:
        latest[(entry.subject_id, entry.date)] = entry
    return [latest[key] for key in sorted(latest, key=lambda k: (k[1], k[0]))]


def _subject_days(entries: Iterable[ComplianceEntry], subject_id: str) -> Dict[date, bool]:
    days: Dict[date, bool] = {}
    for entry in entries:
        if entry.subject_id == subject_id:
            days[entry.date] = entry.fulfilled
    return days


def compliance_rate(
    entries: Iterable[ComplianceEntry],
    subject_id: str,
    window_days: int,
    as_of: date,
) -> float:
    """Percentage of logged days in ``[as_of - window_days, as_of]`` that were fulfilled.

    Args:
        entries: Compliance log, later entries overwrite earlier ones for the same day
        subject_id: Supplement or plan id to evaluate
        window_days: Trailing window length in days
        as_of: Last day of the window (inclusive)

    Returns:
        Rate in [0, 100]; 0.0 when nothing was logged in the window
    """
    if window_days < 0:
        raise ValueError(f"window_days must not be negative, got {window_days}")

    start = as_of - timedelta(days=window_days)
    in_window = [
        fulfilled
        for day, fulfilled in _subject_days(entries, subject_id).items()
        if start <= day <= as_of
    ]
    if not in_window:
        return 0.0

    return 100.0 * sum(1 for fulfilled in in_window if fulfilled) / len(in_window)


def daily_rate(entries: Iterable[ComplianceEntry], subject_ids: Sequence[str], on: date) -> float:
    """Share of ``subject_ids`` fulfilled on one day, as a percentage.

    Subjects without an entry that day count as not fulfilled.
    """
    if not subject_ids:
        return 0.0

    done = {
        entry.subject_id: entry.fulfilled
        for entry in entries
        if entry.date == on
    }
    fulfilled = sum(1 for subject_id in set(subject_ids) if done.get(subject_id, False))
    return 100.0 * fulfilled / len(set(subject_ids))


def current_streak(entries: Iterable[ComplianceEntry], subject_id: str, as_of: date) -> int:
    """Count consecutive fulfilled days ending at ``as_of``.

    If ``as_of`` has not been logged yet the streak is counted up to the day
    before, so an unlogged today does not break it. A missed or unlogged
    earlier day ends the streak.
    """
    days = _subject_days(entries, subject_id)

    day = as_of if as_of in days else as_of - timedelta(days=1)
    streak = 0
    while days.get(day, False):
        streak += 1
        day -= timedelta(days=1)
    return streak
