from pydantic_settings import BaseSettings
import os
from pathlib import Path

# Try to load .env file explicitly before creating Settings
try:
    from dotenv import load_dotenv
    import logging
    _logger = logging.getLogger(__name__)

    # Look for .env in api directory (parent of app directory)
    api_dir = Path(__file__).parent.parent.parent
    env_path = api_dir / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
        _logger.info(f"Loaded .env file from: {env_path}")
    else:
        _logger.debug(f".env file not found at {env_path}, relying on environment variables")
except Exception as e:
    import logging
    _logger = logging.getLogger(__name__)
    _logger.warning(f"Error loading .env file: {e}")


CARD_STORE_BACKENDS = ("sheet", "database")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Card store backend: "sheet" (remote web app) or "database" (SQL table)
    card_store_backend: str = "database"

    # Remote sheet web app (Google Apps Script deployment)
    sheet_web_app_url: str = ""
    sheet_request_timeout: float = 10.0

    # Database - Railway style DATABASE_URL, falls back to a local SQLite file
    database_url: str = "sqlite:///./vocab_trainer.db"

    # Scheduling
    review_interval_minutes: int = 90

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Railway and similar hosts export DATABASE_URL uppercase
        if not kwargs.get("database_url") and os.getenv("DATABASE_URL"):
            kwargs["database_url"] = os.getenv("DATABASE_URL")
        super().__init__(**kwargs)

    @property
    def sqlalchemy_database_url(self) -> str:
        """Database URL normalized for SQLAlchemy (postgresql:// instead of postgres://)."""
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url

    def validate_card_store(self) -> None:
        """Raise ValueError if the configured card store cannot be used."""
        backend = self.card_store_backend.lower()
        if backend not in CARD_STORE_BACKENDS:
            raise ValueError(
                f"CARD_STORE_BACKEND must be one of {', '.join(CARD_STORE_BACKENDS)}, got '{self.card_store_backend}'"
            )
        if backend == "sheet" and not self.sheet_web_app_url:
            raise ValueError("SHEET_WEB_APP_URL environment variable is required for the sheet backend")
        if backend == "database" and not self.database_url:
            raise ValueError("DATABASE_URL environment variable is required for the database backend")
        if self.review_interval_minutes <= 0:
            raise ValueError("REVIEW_INTERVAL_MINUTES must be positive")


# Create settings instance
settings = Settings()

# Validate the card store configuration
settings.validate_card_store()
