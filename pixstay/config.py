"""
Application configuration management
"""

from typing import Annotated, List, Optional
from pydantic_settings import BaseSettings, NoDecode
from pydantic import field_validator

# Provisional: confirm against the gateway's documented status vocabulary
DEFAULT_PAID_STATUSES = ("paid", "approved", "confirmed", "success", "completed")


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "PixStay"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False  # Default to production-safe
    API_PREFIX: str = "/api/v1"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str  # Must be provided via environment

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 40
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ECHO: bool = False

    # HuraPayments (PIX gateway)
    HURAPAYMENTS_API_URL: str = "https://api.hurapayments.com.br"
    HURAPAYMENTS_PUBLIC_KEY: str = ""
    HURAPAYMENTS_SECRET_KEY: str = ""
    HURAPAYMENTS_TIMEOUT_SECONDS: float = 15.0
    HURAPAYMENTS_POSTBACK_URL: Optional[str] = None
    HURAPAYMENTS_PAID_STATUSES: Annotated[List[str], NoDecode] = list(DEFAULT_PAID_STATUSES)

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Monitoring
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("CORS_ORIGINS", mode="before")
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("HURAPAYMENTS_PAID_STATUSES", mode="before")
    def parse_paid_statuses(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        statuses = [status.strip().lower() for status in v if status.strip()]
        if not statuses:
            raise ValueError("HURAPAYMENTS_PAID_STATUSES must list at least one status")
        return statuses

    @property
    def postback_url(self) -> str:
        if self.HURAPAYMENTS_POSTBACK_URL:
            return self.HURAPAYMENTS_POSTBACK_URL
        base = self.PUBLIC_BASE_URL.rstrip("/")
        return f"{base}{self.API_PREFIX}/payments/hurapayments/postback"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def is_testing(self) -> bool:
        return self.APP_ENV == "testing"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Create global settings instance
settings = Settings()
