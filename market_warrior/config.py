"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Auth provider (JWT signing secret of the identity provider)
    SUPABASE_JWT_SECRET: str
    JWT_AUDIENCE: str = "authenticated"

    # Stripe
    STRIPE_SECRET_KEY: str
    STRIPE_WEBHOOK_SECRET: str
    STRIPE_PRICE_ID: str

    # Email
    RESEND_API_KEY: Optional[str] = None
    FROM_EMAIL: str = "Market Warrior <onboarding@resend.dev>"

    # Application
    APP_NAME: str = "Market Warrior Challenge API"
    APP_VERSION: str = "1.0.0"
    APP_URL: str = "http://localhost:3000"
    API_URL: str = "http://localhost:8000"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000
    TRUST_FORWARDED_FOR: bool = False  # only behind a proxy that sets X-Forwarded-For

    # Challenge Settings
    ACCESS_WINDOW_DAYS: int = 120
    MAX_DEVICES: int = 2

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5MB

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Load settings once; fails at startup when required values are missing"""
    return Settings()
