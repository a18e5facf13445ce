from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # App Configuration
    APP_NAME: str = "Hold a Spot API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    ALLOWED_HOSTS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Database (PostgreSQL via asyncpg in production)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./holdaspot.db")

    # Local calendar used for week boundaries and facility hours
    LOCAL_TIMEZONE: str = "UTC"

    # Shared secrets for the cron job and admin operations
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")
    ADMIN_SECRET: str = os.getenv("ADMIN_SECRET", "")

    # Credits
    WEEKLY_CREDITS: int = 10
    MINUTES_PER_CREDIT: int = 30
    DEFAULT_MAX_BOOKING_HOURS: float = 4.0

    # Facility hours (local time)
    FACILITY_OPEN_HOUR: int = 6
    FACILITY_CLOSE_HOUR: int = 22

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()

# Update allowed hosts for production
if os.getenv("ENVIRONMENT") == "production":
    settings.ALLOWED_HOSTS.extend([
        "https://holdaspot.vercel.app"
    ])
