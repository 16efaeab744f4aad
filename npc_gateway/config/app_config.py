from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class AppConfig(BaseSettings):
    """Application configuration settings."""

    # Environment
    app_env: str = Field("development")
    app_debug: bool = Field(False)
    app_host: str = Field("0.0.0.0")
    app_port: int = Field(8501)

    # Logging
    log_level: str = Field("INFO")
    log_file: Optional[str] = Field(None)

    # Access control
    public_cors: str = Field("*", alias="PUBLIC_CORS")
    shared_secret: Optional[str] = Field(None, alias="SHARED_SECRET")

    @field_validator("app_env")
    def validate_app_env(cls, value: str) -> str:
        if value not in ["development", "staging", "production"]:
            raise ValueError("APP_ENV must be development, staging, or production")
        return value

    @field_validator("log_level")
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("LOG_LEVEL must be a valid Loguru level")
        return level

    @property
    def allowed_origins(self) -> list[str]:
        """Origins parsed from the comma separated ``PUBLIC_CORS`` value."""
        return [part.strip() for part in self.public_cors.split(",") if part.strip()]

    @property
    def auth_required(self) -> bool:
        """Whether callers must present the shared secret."""
        return bool(self.shared_secret)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


@lru_cache()
def get_app_config() -> AppConfig:
    """Return a cached application configuration instance."""

    return AppConfig()
