"""Application configuration via environment variables."""

import json
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote Task Tracker API
    API_BASE_URL: str = "https://task-tracker-backend-2jqf.onrender.com/api"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Persisted credentials (token, user, tasktracker-subdomain)
    CREDENTIALS_PATH: str = ".tasktracker_credentials.json"
    DEFAULT_SUBDOMAIN: str = "main"

    # Refresh a JWT this many seconds before it expires (0 disables)
    TOKEN_REFRESH_LEEWAY_SECONDS: int = 300

    # Object storage (Supabase Storage REST API)
    STORAGE_URL: str = ""
    STORAGE_BUCKET: str = "tasktracker"
    STORAGE_API_KEY: str = ""
    MAX_DOCUMENT_SIZE_MB: int = 1

    # QR / RFID attendance capture
    QR_SCAN_INTERVAL_SECONDS: float = 2.0
    CAMERA_INDEX: int = 0

    # Polling intervals
    NOTIFICATIONS_POLL_SECONDS: float = 300.0
    COMMENTS_POLL_SECONDS: float = 30.0
    FOOD_REQUESTS_POLL_SECONDS: float = 30.0
    ATTENDANCE_POLL_SECONDS: float = 60.0
    ENABLE_POLLERS: bool = True

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:3000"]'

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
