"""Dealer Portal — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./dealer_portal.db"

    # Timezone
    TIMEZONE: str = "America/New_York"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Client-local session storage
    SESSION_STORAGE_PATH: str = "./data/local_storage.json"
    SESSION_STORAGE_KEY: str = "dealership-session"
    BROADCAST_CHANNEL: str = "dealership-requests"

    # Credentials
    GENERATED_PASSWORD_LENGTH: int = 12
    MIN_PASSWORD_LENGTH: int = 6
    AUTH_MAX_ATTEMPTS: int = 0  # 0 disables attempt limiting
    AUTH_LOCKOUT_MINUTES: int = 15

    # Service requests
    REQUEST_NUMBER_PREFIX: str = "REQ-"
    REQUEST_NUMBER_MAX_ATTEMPTS: int = 5

    # Bootstrap
    DEFAULT_DEALERSHIP_NAME: str = "Test Dealership"
    DEFAULT_ADMIN_EMAIL: str = "admin@dealership.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
