"""Configuration settings for the progress tracker."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Record settings
WORDS_PER_CHAPTER = 10  # fixed chapter size, never configurable
PRACTICE_MODES = ("normal", "dictation")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'vocabtrack.db'}")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class RecordSettings:
    """Key namespace and defaults for the progress records."""
    key_namespace: str = os.getenv("VOCABTRACK_KEY_NAMESPACE", "")
    default_mode: str = os.getenv("DEFAULT_PRACTICE_MODE", "normal")


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("MONITORING_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("MONITORING_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_record_settings() -> RecordSettings:
    """Get record settings."""
    return RecordSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    records: RecordSettings = field(default_factory=get_record_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not isinstance(logging.getLevelName(self.logging.level.upper()), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {self.logging.level}")

        if self.records.default_mode not in PRACTICE_MODES:
            raise ValueError(f"DEFAULT_PRACTICE_MODE must be one of {PRACTICE_MODES}")

        if self.monitoring.port < 1 or self.monitoring.port > 65535:
            raise ValueError("MONITORING_PORT must be between 1 and 65535")


# Create global settings instance
settings = Settings()
settings.validate()
