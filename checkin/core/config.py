# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Centralised settings — read from env vars once."""
import os


class Settings:
    SERVICE_NAME: str = "checkin-service"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Backing store: "sql" or "sheets"
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "sql").strip().lower()

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./checkin.db")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    GOOGLE_SPREADSHEET_ID: str = os.getenv("GOOGLE_SPREADSHEET_ID", "")
    GOOGLE_SERVICE_ACCOUNT_FILE: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", "credentials.json")

    # Admin dashboard
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

    # bcrypt cost factor for stored PINs (4-31)
    PIN_HASH_ROUNDS: int = int(os.getenv("PIN_HASH_ROUNDS", "12"))

    # Check-in rules
    CHECKIN_TIMEZONE: str = os.getenv("CHECKIN_TIMEZONE", "UTC")
    DUPLICATE_WINDOW_SECONDS: int = int(os.getenv("DUPLICATE_WINDOW_SECONDS", "60"))

    # Lookup throttling (per client IP)
    LOOKUP_RATE_LIMIT: int = int(os.getenv("LOOKUP_RATE_LIMIT", "10"))
    LOOKUP_RATE_WINDOW: int = int(os.getenv("LOOKUP_RATE_WINDOW", "60"))

    _raw_origins: str = os.getenv("CORS_ORIGINS", "*")
    CORS_ORIGINS: list = [o.strip() for o in _raw_origins.split(",") if o.strip()]


settings = Settings()
