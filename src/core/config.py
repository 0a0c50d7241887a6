"""
Application configuration loaded from environment variables (and a local .env file, if present).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings."""

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3001"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/gammonguru.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL: int = int(os.getenv("ACCESS_TOKEN_TTL", "3600"))
    REFRESH_TOKEN_TTL: int = int(os.getenv("REFRESH_TOKEN_TTL", str(7 * 24 * 3600)))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    MIN_PASSWORD_LENGTH: int = 6

    # CORS (empty list falls back to a wildcard)
    CORS_ORIGINS: list[str] = _csv(os.getenv("CORS_ORIGINS", ""))

    # Rate limiting (requests per window, window in seconds)
    LOGIN_RATE_LIMIT: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    LOGIN_RATE_WINDOW: int = int(os.getenv("LOGIN_RATE_WINDOW", str(15 * 60)))
    API_RATE_LIMIT: int = int(os.getenv("API_RATE_LIMIT", "100"))
    API_RATE_WINDOW: int = int(os.getenv("API_RATE_WINDOW", "60"))

    # GNUBG analysis facade. Without a service URL, analyses are templated locally.
    GNUBG_SERVICE_URL: str = os.getenv("GNUBG_SERVICE_URL", "")
    GNUBG_API_KEY: str = os.getenv("GNUBG_API_KEY", "")
    GNUBG_TIMEOUT: float = float(os.getenv("GNUBG_TIMEOUT", "30"))
    FREE_ANALYSIS_QUOTA: int = int(os.getenv("FREE_ANALYSIS_QUOTA", "5"))
    PREMIUM_ANALYSIS_QUOTA: int = int(os.getenv("PREMIUM_ANALYSIS_QUOTA", "1000"))

    # Coach chat (LLM proxy)
    COACH_API_URL: str = os.getenv("COACH_API_URL", "https://api.anthropic.com/v1/messages")
    COACH_API_KEY: str = os.getenv("COACH_API_KEY", "")
    COACH_MODEL: str = os.getenv("COACH_MODEL", "claude-3-sonnet-20240229")
    COACH_MAX_TOKENS: int = int(os.getenv("COACH_MAX_TOKENS", "1000"))
    COACH_TIMEOUT: float = float(os.getenv("COACH_TIMEOUT", "30"))
    FREE_COACH_QUOTA: int = int(os.getenv("FREE_COACH_QUOTA", "10"))

    @classmethod
    def ensure_directories(cls) -> None:
        """Create the directory of a file based SQLite database if it doesn't exist."""
        prefix = "sqlite:///"
        if cls.DATABASE_URL.startswith(prefix) and ":memory:" not in cls.DATABASE_URL:
            Path(cls.DATABASE_URL[len(prefix) :]).parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
