"""Service configuration, read from LEDGER_* environment variables or a .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LEDGER_",
        env_file_encoding="utf-8",
    )

    environment: str = "development"  # development | test | production
    log_level: str = "INFO"

    # Load demo listings on startup so the service is immediately usable
    seed_on_startup: bool = True

    # Header the trusted gateway uses to pass the authenticated caller
    caller_header: str = "X-Caller-Account"


# module-level singleton used by the app
settings = Settings()
