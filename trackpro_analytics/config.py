"""Configuration management for the TrackPro analytics tool."""

import os
from typing import Dict
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./trackpro.db")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Compliance
    COMPLIANCE_WINDOW_DAYS: int = int(os.getenv("COMPLIANCE_WINDOW_DAYS", "7"))

    # Goals
    DEADLINE_LOOKAHEAD_DAYS: int = int(os.getenv("DEADLINE_LOOKAHEAD_DAYS", "14"))

    # Recovery recommendations look at the most recent N logged days
    RECOMMENDATION_LOOKBACK_DAYS: int = int(os.getenv("RECOMMENDATION_LOOKBACK_DAYS", "3"))

    # Recovery channel weights (uniform by default)
    RECOVERY_WEIGHTS = {
        "sleep": float(os.getenv("RECOVERY_WEIGHT_SLEEP", "1.0")),
        "hrv": float(os.getenv("RECOVERY_WEIGHT_HRV", "1.0")),
        "resting_hr": float(os.getenv("RECOVERY_WEIGHT_RESTING_HR", "1.0")),
        "stress": float(os.getenv("RECOVERY_WEIGHT_STRESS", "1.0")),
        "hydration": float(os.getenv("RECOVERY_WEIGHT_HYDRATION", "1.0")),
        "nutrition": float(os.getenv("RECOVERY_WEIGHT_NUTRITION", "1.0")),
        "soreness": float(os.getenv("RECOVERY_WEIGHT_SORENESS", "1.0")),
        "energy": float(os.getenv("RECOVERY_WEIGHT_ENERGY", "1.0")),
        "mood": float(os.getenv("RECOVERY_WEIGHT_MOOD", "1.0")),
    }

    @classmethod
    def get_recovery_weights(cls) -> Dict[str, float]:
        """Get a copy of the configured recovery channel weights."""
        return dict(cls.RECOVERY_WEIGHTS)

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values."""
        if cls.COMPLIANCE_WINDOW_DAYS < 0:
            raise ValueError("COMPLIANCE_WINDOW_DAYS must not be negative")
        if cls.DEADLINE_LOOKAHEAD_DAYS < 0:
            raise ValueError("DEADLINE_LOOKAHEAD_DAYS must not be negative")
        if cls.RECOMMENDATION_LOOKBACK_DAYS < 1:
            raise ValueError("RECOMMENDATION_LOOKBACK_DAYS must be at least 1")
        negative = [name for name, weight in cls.RECOVERY_WEIGHTS.items() if weight < 0]
        if negative:
            raise ValueError(f"Recovery weights must not be negative: {', '.join(negative)}")
        return True


config = Config()
