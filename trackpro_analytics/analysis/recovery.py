"""Recovery score aggregation from daily wellness sub-metrics.

Eight channels are required (sleep, HRV, resting HR, stress, hydration,
nutrition, soreness, energy); mood is optional and only counted when
entered. All channels are on a 0-10 scale. Stress and soreness are inverted
(a low raw value means good recovery) and are flipped to ``10 - v`` before
the weighted mean is taken.

The aggregate is never stored: it is recomputed from the sub-metrics every
time so the score cannot drift from what the athlete entered.
"""

import logging
from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from ..errors import IncompleteMetricsError

logger = logging.getLogger(__name__)

REQUIRED_CHANNELS = (
    "sleep", "hrv", "resting_hr", "stress", "hydration", "nutrition", "soreness", "energy",
)
OPTIONAL_CHANNELS = ("mood",)
ALL_CHANNELS = REQUIRED_CHANNELS + OPTIONAL_CHANNELS
INVERTED_CHANNELS = frozenset({"stress", "soreness"})

CHANNEL_MIN = 0.0
CHANNEL_MAX = 10.0


class Band(Enum):
    """Qualitative recovery band, lower bound inclusive."""

    EXCELLENT = ("Excellent", 8.0)
    GOOD = ("Good", 6.0)
    MODERATE = ("Moderate", 4.0)
    POOR = ("Poor", float("-inf"))

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def lower_bound(self) -> float:
        return self.value[1]


@dataclass(frozen=True)
class RecoverySubMetrics:
    """One day's wellness inputs, each on a 0-10 scale. None means not entered."""
    sleep: Optional[float] = None
    hrv: Optional[float] = None
    resting_hr: Optional[float] = None
    stress: Optional[float] = None
    hydration: Optional[float] = None
    nutrition: Optional[float] = None
    soreness: Optional[float] = None
    energy: Optional[float] = None
    mood: Optional[float] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[float]]) -> "RecoverySubMetrics":
        """Build from a channel -> value mapping. Unknown channel names are rejected."""
        unknown = set(values) - set(ALL_CHANNELS)
        if unknown:
            raise ValueError(f"Unknown recovery channels: {', '.join(sorted(unknown))}")
        return cls(**dict(values))

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def missing_channels(self) -> Tuple[str, ...]:
        return tuple(name for name in REQUIRED_CHANNELS if getattr(self, name) is None)


@dataclass(frozen=True)
class AggregateScore:
    """Derived 0-10 recovery score."""
    value: float
    band: Band


@dataclass(frozen=True)
class RecoveryDailyScore:
    """Sub-metrics logged for a date. The aggregate is derived on access."""
    date: date
    sub_metrics: RecoverySubMetrics

    @property
    def aggregate(self) -> AggregateScore:
        """Score under uniform channel weights.

        Configured weights are not applied here; use
        ``RecoveryScoreAggregator(weights).aggregate(score.sub_metrics)`` or
        :meth:`aggregate_with` for a weighted score.
        """
        return self.aggregate_with(RecoveryScoreAggregator())

    def aggregate_with(self, aggregator: "RecoveryScoreAggregator") -> AggregateScore:
        return aggregator.aggregate(self.sub_metrics)


@dataclass(frozen=True)
class TrendPoint:
    date: date
    value: float


class RecommendationType(Enum):
    SLEEP = "Sleep"
    STRESS = "Stress"
    HYDRATION = "Hydration"
    NUTRITION = "Nutrition"


class Priority(Enum):
    HIGH = 3
    MEDIUM = 2
    LOW = 1


@dataclass(frozen=True)
class RecoveryRecommendation:
    """Actionable advice derived from recent sub-metrics."""
    type: RecommendationType
    priority: Priority
    title: str
    description: str
    action_items: Tuple[str, ...]


def round_score(value: float) -> float:
    """Round half-up to one decimal place (7.875 -> 7.9)."""
    return float(Decimal(repr(float(value))).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def band_for(value: float) -> Band:
    """Map a 0-10 score to its band."""
    for band in Band:
        if value >= band.lower_bound:
            return band
    return Band.POOR


def latest_per_day(scores: Iterable[RecoveryDailyScore]) -> List[RecoveryDailyScore]:
    """Keep the last logged metrics for each date, in chronological order."""
    by_date: Dict[date, RecoveryDailyScore] = {}
    for score in scores:
        by_date[score.date] = score
    return [by_date[day] for day in sorted(by_date)]


class RecoveryScoreAggregator:
    """Combine weighted sub-metrics into a 0-10 recovery score."""

    def __init__(self, weights: Optional[Mapping[str, float]] = None):
        """Initialize with optional channel weights.

        Args:
            weights: channel -> weight overrides; unspecified channels weigh 1.0
        """
        resolved = {channel: 1.0 for channel in ALL_CHANNELS}
        if weights:
            unknown = set(weights) - set(ALL_CHANNELS)
            if unknown:
                raise ValueError(f"Unknown recovery channels in weights: {', '.join(sorted(unknown))}")
            for channel, weight in weights.items():
                if weight < 0:
                    raise ValueError(f"Weight for {channel} must not be negative, got {weight}")
                resolved[channel] = float(weight)
        self.weights = resolved

    def normalize(self, sub_metrics: RecoverySubMetrics) -> Dict[str, float]:
        """Get entered channels on a common "higher is better" 0-10 scale.

        Raises:
            IncompleteMetricsError: if any required channel is missing
            ValueError: if a channel is outside [0, 10]
        """
        missing = sub_metrics.missing_channels()
        if missing:
            raise IncompleteMetricsError(missing)

        normalized = {}
        for channel, raw in sub_metrics.as_dict().items():
            if raw is None:
                continue
            if not CHANNEL_MIN <= raw <= CHANNEL_MAX:
                raise ValueError(f"{channel} must be within [0, 10], got {raw}")
            normalized[channel] = CHANNEL_MAX - raw if channel in INVERTED_CHANNELS else float(raw)
        return normalized

    def aggregate(self, sub_metrics: RecoverySubMetrics) -> AggregateScore:
        """Compute the weighted recovery score and its band.

        Raises:
            IncompleteMetricsError: if any required channel is missing
        """
        normalized = self.normalize(sub_metrics)

        channels = sorted(normalized)
        values = np.array([normalized[c] for c in channels], dtype=float)
        weights = np.array([self.weights[c] for c in channels], dtype=float)

        if weights.sum() <= 0:
            raise ValueError("Recovery weights of the entered channels sum to zero")

        value = round_score(float(np.average(values, weights=weights)))
        return AggregateScore(value=value, band=band_for(value))

    def weekly_trend(self, scores: Iterable[RecoveryDailyScore]) -> List[TrendPoint]:
        """Get the raw daily aggregate series in chronological order.

        No smoothing is applied; a later entry for the same date replaces
        the earlier one.
        """
        return [
            TrendPoint(date=score.date, value=self.aggregate(score.sub_metrics).value)
            for score in latest_per_day(scores)
        ]

    def weekly_average(self, scores: Iterable[RecoveryDailyScore]) -> Optional[float]:
        """Mean of the daily aggregates, or None when nothing was logged."""
        trend = self.weekly_trend(scores)
        if not trend:
            return None
        return round_score(float(np.mean([point.value for point in trend])))

    def recommendations(
        self,
        scores: Iterable[RecoveryDailyScore],
        lookback: int = 3,
    ) -> List[RecoveryRecommendation]:
        """Rule-based advice from the most recent ``lookback`` logged days.

        Raw channel averages are compared against fixed thresholds; partial
        days contribute to the channels they have.
        """
        if lookback < 1:
            raise ValueError(f"lookback must be at least 1, got {lookback}")

        recent = latest_per_day(scores)[-lookback:]
        if not recent:
            return []

        def average(channel: str) -> Optional[float]:
            values = [getattr(s.sub_metrics, channel) for s in recent]
            values = [v for v in values if v is not None]
            return float(np.mean(values)) if values else None

        recommendations = []

        sleep = average("sleep")
        if sleep is not None and sleep < 7:
            recommendations.append(RecoveryRecommendation(
                type=RecommendationType.SLEEP,
                priority=Priority.HIGH,
                title="Improve Sleep Quality",
                description="Your sleep quality has been below optimal levels.",
                action_items=(
                    "Aim for 7-9 hours of sleep per night",
                    "Maintain consistent bedtime and wake time",
                    "Create a relaxing bedtime routine",
                    "Avoid screens 1 hour before bed",
                ),
            ))

        stress = average("stress")
        if stress is not None and stress > 6:
            recommendations.append(RecoveryRecommendation(
                type=RecommendationType.STRESS,
                priority=Priority.HIGH,
                title="Manage Stress Levels",
                description="Your stress levels have been elevated recently.",
                action_items=(
                    "Practice deep breathing or meditation",
                    "Consider reducing training intensity",
                    "Schedule relaxation time",
                    "Talk to a coach or counselor if needed",
                ),
            ))

        hydration = average("hydration")
        if hydration is not None and hydration < 7:
            recommendations.append(RecoveryRecommendation(
                type=RecommendationType.HYDRATION,
                priority=Priority.MEDIUM,
                title="Increase Hydration",
                description="Your hydration levels could be improved.",
                action_items=(
                    "Drink water first thing in the morning",
                    "Carry a water bottle throughout the day",
                    "Monitor urine color as hydration indicator",
                    "Increase intake on training days",
                ),
            ))

        nutrition = average("nutrition")
        if nutrition is not None and nutrition < 7:
            recommendations.append(RecoveryRecommendation(
                type=RecommendationType.NUTRITION,
                priority=Priority.MEDIUM,
                title="Optimize Nutrition",
                description="Your nutrition quality could be enhanced.",
                action_items=(
                    "Focus on whole, unprocessed foods",
                    "Ensure adequate protein intake",
                    "Time carbohydrates around training",
                    "Consider consulting a sports nutritionist",
                ),
            ))

        logger.debug(f"Generated {len(recommendations)} recovery recommendations from {len(recent)} days")
        return sorted(recommendations, key=lambda r: r.priority.value, reverse=True)
