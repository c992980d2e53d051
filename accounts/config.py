"""Configuration settings for the accounts service."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./accounts.db")

    # JWT (verification of caller identity only)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Password policy
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "4"))
    PASSWORD_MAX_LENGTH: int = int(os.getenv("PASSWORD_MAX_LENGTH", "100"))

    # Keys
    RESET_KEY_VALIDITY_HOURS: int = int(os.getenv("RESET_KEY_VALIDITY_HOURS", "24"))
    KEY_BYTES: int = int(os.getenv("KEY_BYTES", "32"))

    # Mail
    BASE_URL: str = os.getenv("BASE_URL", "http://127.0.0.1:8000")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "accounts@localhost")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    MAIL_SEND_ATTEMPTS: int = int(os.getenv("MAIL_SEND_ATTEMPTS", "3"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        if not self.JWT_SECRET_KEY:
            self.jwt_secret_generated = True
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)
        else:
            self.jwt_secret_generated = False

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_HOST)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.jwt_secret_generated:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (bearer tokens cannot be verified)")
        if not self.smtp_enabled:
            errors.append("SMTP_HOST is not set - activation and reset links will be logged instead of mailed")
        if self.PASSWORD_MIN_LENGTH < 1 or self.PASSWORD_MIN_LENGTH > self.PASSWORD_MAX_LENGTH:
            errors.append(
                f"Password bounds [{self.PASSWORD_MIN_LENGTH}, {self.PASSWORD_MAX_LENGTH}] are inconsistent"
            )
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
