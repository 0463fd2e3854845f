"""Agency Timesheets API Configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"  # Ignore extra fields from .env
    )

    DB_PATH: str = "data/timesheets.db"
    TIMEZONE: str = "Europe/Sofia"  # Used to derive the current month key

    # Identity provider (tokens are issued elsewhere, we only verify them)
    JWT_SECRET_KEY: str = "CHANGE_THIS_IN_PRODUCTION_12345678901234567890"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Hourly cost = monthly package / (workday hours * working days)
    WORKING_DAYS_IN_MONTH: int = 20

    # Logging + JSONL metrics
    LOG_LEVEL: str = "INFO"
    LOGS_DIR: str = "logs"
    METRICS_ENABLED: bool = True

    # Create tables on startup (dev/test); production runs Alembic
    AUTO_CREATE_SCHEMA: bool = True


settings = Settings()
