"""
Configuration settings for the Interview Assistant.
All settings can be overridden via environment variables.
"""
import os
from typing import Dict, Optional
from dataclasses import dataclass, field


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    questions_per_difficulty: int = 2

    # Seconds allowed per question, keyed by difficulty value
    time_limits: Dict[str, int] = field(default_factory=lambda: {
        "Easy": 20,
        "Medium": 60,
        "Hard": 120,
    })

    auto_submit_placeholder: str = "No answer provided (time expired)"

    # Period of the background timer source
    timer_interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("TIMER_INTERVAL_SECONDS", "1.0"))
    )

    def time_limit_for(self, difficulty: str) -> int:
        return self.time_limits[str(difficulty)]


@dataclass
class ScoringConfig:
    """Answer scoring configuration."""
    # Half-width of the uniform perturbation added to every score
    random_spread: float = 0.5
    seed: Optional[int] = field(default_factory=lambda: _optional_int("SCORING_SEED"))


@dataclass
class StorageConfig:
    """Local persistence configuration."""
    data_dir: str = field(default_factory=lambda: os.getenv("INTERVIEW_DATA_DIR", "./interview_data"))
    state_key: str = "ai-interview-assistant"
    backup_key: str = "ai-interview-assistant-backup"

    # Assumed quota, 5 MiB typical for browser-style local storage
    quota_bytes: int = 5 * 1024 * 1024
    warning_percentage: float = 80.0


@dataclass
class BackupConfig:
    """Export/import document configuration."""
    schema_version: int = 1
    app_version: str = "1.0.0"
    filename_prefix: str = "interview-data"


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.interview = InterviewConfig()
        self.scoring = ScoringConfig()
        self.storage = StorageConfig()
        self.backup = BackupConfig()
        self.log_level = os.getenv("LOG_LEVEL", "INFO")


# Global config instance
config = Config()
