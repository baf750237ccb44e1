"""
Application configuration.

Every setting comes from the environment (or a .env file).
The defaults suit local development only; JWT_ACCESS_SECRET in
particular must be set in any shared deployment.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


def _csv(value: str) -> frozenset[str]:
    return frozenset(part.strip() for part in value.split(",") if part.strip())


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "IT Asset Management"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/itam"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Access tokens
    JWT_ACCESS_SECRET: str = os.getenv("JWT_ACCESS_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_MINUTES: int = int(os.getenv("ACCESS_TOKEN_MINUTES", "15"))

    # Authorization
    # Staff grants may be stale for at most this long on other instances.
    PERMISSION_CACHE_TTL_SECONDS: float = float(
        os.getenv("PERMISSION_CACHE_TTL_SECONDS", "30")
    )

    # Audit trail
    AUDIT_SENSITIVE_KEYS: frozenset[str] = _csv(
        os.getenv("AUDIT_SENSITIVE_KEYS", "password,passwordHash,password_hash")
    )

    # Human-readable identifiers
    EMPLOYEE_ID_PREFIX: str = os.getenv("EMPLOYEE_ID_PREFIX", "EMP")
    EMPLOYEE_ID_WIDTH: int = int(os.getenv("EMPLOYEE_ID_WIDTH", "6"))
    FP_DOC_WIDTH: int = int(os.getenv("FP_DOC_WIDTH", "5"))


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
