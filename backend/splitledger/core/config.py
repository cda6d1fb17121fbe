"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union
from decimal import Decimal


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "SplitLedger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./splitledger.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Ledger
    DEFAULT_CURRENCY: str = "USD"
    BALANCE_TOLERANCE: Decimal = Decimal("0.01")  # In major units, applies to every currency
    STRICT_CURRENCY_CHECK: bool = False  # Reject other-currency records instead of skipping them

    @field_validator("DEFAULT_CURRENCY", mode="before")
    @classmethod
    def upper_currency(cls, v):
        """Currency codes are stored upper-case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
