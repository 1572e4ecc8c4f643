"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Nothing here is secret: the sandbox only ever holds synthetic
test accounts, so every field has a working default.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from povy_sandbox.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Povy sandbox API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Povy Sandbox API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # --- Database ---
    # SQLite for local sandboxes; any SQLAlchemy async URL works (e.g. asyncpg)
    DATABASE_URL: str = "sqlite+aiosqlite:///./povy_sandbox.db"

    # --- CORS ---
    # The sandbox is meant to be called from any developer frontend
    ALLOWED_ORIGINS: list[str] = ["*"]

    # --- Account provisioning defaults ---
    DEFAULT_OWNER_NAME: str = "Test user"
    DEFAULT_INITIAL_BALANCE: float = 10000
    DEFAULT_MERCHANT_NAME: str = "Povy Test"

    # --- Balance mutation ---
    # How many times a payment re-reads the account when a compare-and-set
    # write finds the stored balance has moved underneath it
    BALANCE_WRITE_MAX_RETRIES: int = 5

    # --- Ledger ---
    TRANSACTION_HISTORY_LIMIT: int = 50
    LEDGER_MAX_ATTEMPTS: int = 3
    LEDGER_RETRY_DELAY_SECONDS: float = 0.1

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"  # "standard" or "json"


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
