"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "FitTrack"
    app_version: str = "1.0.0"
    debug: bool = True

    # Security
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # LLM Provider settings
    llm_provider: str = "gemini"  # "gemini" or "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_timeout_seconds: float = 30.0

    # Legacy key name (still accepted)
    gemini_api_key: Optional[str] = None

    # Assistant prompt limits
    assistant_log_rows: int = 5
    assistant_history_messages: int = 10
    assistant_max_prompt_chars: int = 12000

    # Calorie estimation
    default_weight_kg: float = 70.0
    calorie_unknown_activity_fallback: bool = False

    # Dashboard
    dashboard_default_days: int = 7

    # Health news (GNews)
    gnews_api_key: Optional[str] = None
    gnews_base_url: str = "https://gnews.io/api/v4"
    news_timeout_seconds: float = 10.0

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/fittrack.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses
    log_llm_calls: bool = True  # Log all LLM calls with token usage

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
