"""Application Configuration"""

from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Billboard Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    # Access tokens (issued by the auth service, verified here)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Billing
    BILL_NUMBER_PREFIX: str = "BILL"
    BILL_NUMBER_MAX_ATTEMPTS: int = 10
    # Return line quantities to stock when a draft bill is deleted
    RESTORE_STOCK_ON_DRAFT_DELETE: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS", "ALLOWED_METHODS")
    @classmethod
    def split_csv(cls, v: str) -> List[str]:
        """Comma-separated env value to a list, blanks dropped"""
        return [part.strip() for part in v.split(",") if part.strip()]

    @field_validator("BILL_NUMBER_PREFIX")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        if not v.strip() or v != v.strip():
            raise ValueError("BILL_NUMBER_PREFIX must be non-empty with no surrounding spaces")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v

    @field_validator("BILL_NUMBER_MAX_ATTEMPTS")
    @classmethod
    def check_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("BILL_NUMBER_MAX_ATTEMPTS must be at least 1")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
