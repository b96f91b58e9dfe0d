from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "TradeStore"
    DEBUG: bool = False

    # Store - SQLite file backing the broker plug-in tables
    # Format: /path/to/Data/tda.db
    # Left empty until the host application supplies a path; reads then
    # degrade to empty results and writes report a failure envelope.
    TRADESTORE_DATABASE_PATH: str = ""

    # =========================================================================
    # Logging
    # =========================================================================
    # Root level for configure_logging() (default: INFO)
    LOG_LEVEL: str = "INFO"

    # =========================================================================
    # Store Access Settings
    # =========================================================================
    # Attempts for a unit of work while SQLite reports the file as locked (default: 3)
    STORE_LOCK_RETRIES: int = 3

    # Driver-level busy timeout in seconds (default: 5)
    STORE_BUSY_TIMEOUT_SECONDS: float = 5.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
