"""
Dolu Logistics Configuration Management
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from pathlib import Path

# Repo-relative absolute path for the SQLite DB so scripts run from any
# working directory resolve the same file.
_BASE_DIR = Path(__file__).resolve().parents[1]  # backend/
_DEFAULT_DB_PATH = _BASE_DIR / "dolu.db"
_DEFAULT_DB_URI = f"sqlite+aiosqlite:///{_DEFAULT_DB_PATH.as_posix()}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_env: str = Field(default="development", alias="APP_ENV")
    app_name: str = Field(default="Dolu Logistics", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Database (SQLite for local development, PostgreSQL in production)
    database_url: str = Field(default=_DEFAULT_DB_URI, alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Staff console gate
    admin_password: str = Field(default="change-this-password", alias="ADMIN_PASSWORD")

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="change-this-secret-in-production",
        alias="JWT_SECRET_KEY"
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_access_token_expire_minutes: int = Field(
        default=480,
        alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Tracking ids: unique-violation retries before giving up on a booking
    tracking_id_max_attempts: int = Field(default=5, alias="TRACKING_ID_MAX_ATTEMPTS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
