from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Configuration
    DEBUG: bool = False
    PROJECT_NAME: str = "LeetCode Company Questions Analytics"
    VERSION: str = "1.0.0"

    # CORS and Security
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "testserver", "*"]

    # CSV source (remote first, local copy as fallback)
    CSV_SOURCE_URL: str = "https://raw.githubusercontent.com/AlliterationofA/PublicFiles/main/codedata.csv"
    LOCAL_CSV_PATH: str = "data/codedata.csv"

    # Commit metadata for the CSV file
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_OWNER: str = "AlliterationofA"
    GITHUB_REPO: str = "PublicFiles"
    GITHUB_CSV_PATH: str = "codedata.csv"
    GITHUB_USER_AGENT: str = "LeetCode-Analytics-App"

    # Webhook pushes to this ref trigger a snapshot refresh
    WEBHOOK_REFRESH_REF: str = "refs/heads/main"

    # File Upload
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Canonical links for the dashboard frontend
    SITE_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Initialize settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def validate_settings():
    """
    Validate critical settings are properly configured.
    Called during application startup.
    """
    errors = []

    if not settings.CSV_SOURCE_URL.startswith(("http://", "https://")):
        errors.append("CSV_SOURCE_URL must be an http(s) URL")

    if not Path(settings.LOCAL_CSV_PATH).is_file():
        errors.append(f"LOCAL_CSV_PATH does not point to a file: {settings.LOCAL_CSV_PATH}")

    if not settings.GITHUB_OWNER or not settings.GITHUB_REPO:
        errors.append("GITHUB_OWNER and GITHUB_REPO must both be set")

    if settings.MAX_FILE_SIZE <= 0:
        errors.append("MAX_FILE_SIZE must be positive")

    if errors:
        error_msg = "\n".join([f"  - {error}" for error in errors])
        raise ValueError(f"Configuration errors:\n{error_msg}")

    return True
