"""
Configuration for the Task Tracker API
Settings are read once from environment variables (and an optional .env file)
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide application settings"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    app_name: str = "Task Tracker API"
    environment: str = "production"
    log_level: str = "INFO"
    client_url: str = "http://localhost:3000"
    cors_origins: List[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./tasks.db"
    database_echo: bool = False

    # Identity tokens
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_hours: int = 24

    # Credentials
    bcrypt_rounds: int = 10
    reset_token_ttl_minutes: int = 60

    # Outbound email (password reset)
    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_from_name: str = "Task Manager Pro"

    # Google OAuth
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_callback_url: str = "http://localhost:3000/api/auth/google/callback"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_pass)

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()

