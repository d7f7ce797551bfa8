"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Identity (HMAC key for bearer tokens)
    SECRET_KEY: str
    AUTH_TOKEN_TTL_SECONDS: int = 86400  # 24 hours

    # Redis (keyed locks). Empty string disables Redis.
    REDIS_URL: str = "redis://redis:6379/0"
    KEYED_LOCK_TTL_SECONDS: int = 30
    KEYED_LOCK_WAIT_SECONDS: float = 5.0

    # Application
    APP_NAME: str = "Quiz Integrity Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000
    # Peers whose X-Forwarded-For is honoured; empty means use the socket address
    TRUSTED_PROXIES: List[str] = []

    # Quiz Settings
    QUIZ_TOPICS: List[str] = ["topic1", "topic2", "topic3", "topic4"]
    QUIZ_SESSION_DURATION_MINUTES: int = 60
    POINTS_PER_QUESTION: int = 2
    MAX_OPTIONS_PER_QUESTION: int = 4

    # Group assignment
    GROUP_SUBMISSION_CONTENT_TYPE: str = "application/pdf"
    GROUP_SUBMISSION_MAX_BYTES: int = 10 * 1024 * 1024  # 10 MiB
    MAX_GROUP_SCORE: float = 100.0

    # Blob storage
    BLOB_STORAGE_DIR: str = "./storage/group-submissions"
    BLOB_PUBLIC_BASE_URL: str = "/files/group-submissions"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
